"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from leftover_tracker.adapters.file_blob_store import JsonFileBlobStore
from leftover_tracker.adapters.supabase_notification_scheduler import (
    SupabaseNotificationScheduler,
)
from leftover_tracker.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from leftover_tracker.adapters.supabase_snapshot_mirror import SupabaseSnapshotMirror
from leftover_tracker.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from leftover_tracker.config import Settings
from leftover_tracker.services.inventory import InventoryService
from leftover_tracker.services.local_store import LocalInventoryStore
from leftover_tracker.services.notifications import ExpiryNotifier
from leftover_tracker.services.recipes import RecipeService
from leftover_tracker.services.reminders import ReminderService
from leftover_tracker.services.remote_mirror import (
    RemoteMirror,
    UnavailableRemoteMirror,
)
from leftover_tracker.services.sync import SyncService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient | None
    inventory_service: InventoryService
    sync_service: SyncService
    recipe_service: RecipeService
    reminder_service: ReminderService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    local_store = LocalInventoryStore(
        JsonFileBlobStore.create(resolved_settings.data_dir)
    )
    remote_mirror: RemoteMirror = (
        SupabaseSnapshotMirror(supabase_client, scope_id=resolved_settings.device_id)
        if resolved_settings.remote_sync_enabled
        else UnavailableRemoteMirror()
    )
    scheduler = SupabaseNotificationScheduler(
        supabase_client,
        device_id=resolved_settings.device_id,
        enabled=resolved_settings.notifications_enabled,
    )
    notifier = ExpiryNotifier(scheduler)
    sync_service = SyncService(
        local_store=local_store,
        remote_mirror=remote_mirror,
        notifier=notifier,
    )
    inventory_service = InventoryService(
        local_store=local_store,
        remote_mirror=remote_mirror,
        sync_service=sync_service,
        notifier=notifier,
    )
    recipe_service = RecipeService(
        repository=SupabaseRecipeRepository(supabase_client),
        device_id=resolved_settings.device_id,
    )
    telegram_client = (
        HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
        if resolved_settings.telegram_bot_token
        else None
    )
    reminder_service = ReminderService(
        outbox=scheduler,
        telegram_client=telegram_client,
        chat_id=resolved_settings.telegram_chat_id,
    )

    async def close_resources() -> None:
        if telegram_client is not None:
            await telegram_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        inventory_service=inventory_service,
        sync_service=sync_service,
        recipe_service=recipe_service,
        reminder_service=reminder_service,
        close_resources=close_resources,
    )
