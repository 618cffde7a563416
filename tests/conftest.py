"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from leftover_tracker.adapters.telegram_client import TelegramClient
from leftover_tracker.config import Settings
from leftover_tracker.containers import AppContainer
from leftover_tracker.domain.inventory import InventoryItem, InventorySnapshot
from leftover_tracker.domain.notifications import ScheduledNotification
from leftover_tracker.domain.recipes import Recipe, RecipeRating
from leftover_tracker.services.inventory import InventoryService
from leftover_tracker.services.local_store import BlobStore, LocalInventoryStore
from leftover_tracker.services.notifications import (
    ExpiryNotifier,
    NotificationOutbox,
    NotificationScheduler,
)
from leftover_tracker.services.recipes import RecipeRepository, RecipeService
from leftover_tracker.services.reminders import ReminderService
from leftover_tracker.services.remote_mirror import RemoteMirror
from leftover_tracker.services.sync import SyncService

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=UTC)
DEVICE_ID = "device-1"


@dataclass
class FakeClock:
    """Settable clock for deterministic timestamps."""

    now: datetime = NOW

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class InMemoryBlobStore(BlobStore):
    """Dict-backed blob store for tests."""

    values: dict[str, str] = field(default_factory=dict)
    fail_writes: bool = False

    def get_string(self, key: str) -> str | None:
        return self.values.get(key)

    def set_string(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.values[key] = value


@dataclass
class InMemoryRemoteMirror(RemoteMirror):
    """Remote mirror that keeps the snapshot in memory."""

    snapshot: InventorySnapshot | None = None
    available: bool = True
    fail_writes: bool = False
    reads: int = 0
    writes: int = 0

    def is_available(self) -> bool:
        return self.available

    def read(self) -> InventorySnapshot | None:
        self.reads += 1
        return self.snapshot

    def write(self, snapshot: InventorySnapshot) -> bool:
        if self.fail_writes:
            raise RuntimeError("remote down")
        self.writes += 1
        self.snapshot = InventorySnapshot(
            items=list(snapshot.items), last_modified=snapshot.last_modified
        )
        return True


@dataclass
class FakeNotificationScheduler(NotificationScheduler, NotificationOutbox):
    """Scheduler that records alerts in memory."""

    permission: bool = True
    fail_schedule: bool = False
    scheduled: dict[str, ScheduledNotification] = field(default_factory=dict)
    cancelled: list[str] = field(default_factory=list)
    cancel_all_calls: int = 0
    delivered: list[str] = field(default_factory=list)

    def request_permission(self) -> bool:
        return self.permission

    def schedule(
        self, item_id: str, title: str, body: str, fire_at: datetime
    ) -> str | None:
        if self.fail_schedule:
            raise RuntimeError("scheduler unavailable")
        handle = f"notif-{uuid4()}"
        self.scheduled[handle] = ScheduledNotification(
            handle=handle, item_id=item_id, title=title, body=body, fire_at=fire_at
        )
        return handle

    def cancel(self, handle: str) -> None:
        self.cancelled.append(handle)
        self.scheduled.pop(handle, None)

    def cancel_all(self) -> None:
        self.cancel_all_calls += 1
        self.scheduled.clear()

    def list_due(self, now: datetime, limit: int) -> list[ScheduledNotification]:
        due = [
            notification
            for notification in self.scheduled.values()
            if notification.fire_at <= now and notification.handle not in self.delivered
        ]
        return due[:limit]

    def mark_delivered(self, handle: str, delivered_at: datetime) -> None:
        self.delivered.append(handle)


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    recipes: list[Recipe] = field(default_factory=list)
    ratings: list[RecipeRating] = field(default_factory=list)
    fail: bool = False
    calls: int = 0

    def list_recipes(self) -> list[Recipe]:
        self.calls += 1
        if self.fail:
            raise RuntimeError("network error")
        return list(self.recipes)

    def list_ratings(self, device_id: str | None = None) -> list[RecipeRating]:
        self.calls += 1
        if self.fail:
            raise RuntimeError("network error")
        return [r for r in self.ratings if device_id in {None, r.device_id}]

    def find_rating(self, recipe_id: str, device_id: str) -> RecipeRating | None:
        self.calls += 1
        if self.fail:
            raise RuntimeError("network error")
        for rating in self.ratings:
            if rating.recipe_id == recipe_id and rating.device_id == device_id:
                return rating
        return None

    def create_rating(
        self,
        recipe_id: str,
        device_id: str,
        rating: int,
        leftover_items: list[str],
    ) -> None:
        self.ratings.append(
            RecipeRating(
                id=str(uuid4()),
                recipe_id=recipe_id,
                device_id=device_id,
                rating=rating,
                leftover_items=list(leftover_items),
            )
        )

    def update_rating(
        self, rating_id: str, rating: int, leftover_items: list[str]
    ) -> None:
        self.ratings = [
            RecipeRating(
                id=row.id,
                recipe_id=row.recipe_id,
                device_id=row.device_id,
                rating=rating,
                leftover_items=list(leftover_items),
            )
            if row.id == rating_id
            else row
            for row in self.ratings
        ]


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    fail: bool = False

    async def send_message(self, chat_id: int, text: str) -> None:
        if self.fail:
            raise RuntimeError("telegram down")
        self.messages.append((chat_id, text))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands


@dataclass
class InventoryHarness:
    """Inventory stack wired with in-memory collaborators."""

    clock: FakeClock
    blob_store: InMemoryBlobStore
    local_store: LocalInventoryStore
    remote: InMemoryRemoteMirror
    scheduler: FakeNotificationScheduler
    notifier: ExpiryNotifier
    sync_service: SyncService
    inventory_service: InventoryService


def make_item(
    name: str = "Lasagna",
    days_until_expiry: int = 3,
    date_added: datetime = NOW,
    **kwargs: object,
) -> InventoryItem:
    return InventoryItem(
        id=str(kwargs.pop("id", uuid4())),
        name=name,
        date_added=date_added,
        days_until_expiry=days_until_expiry,
        **kwargs,
    )


def build_harness(remote: InMemoryRemoteMirror | None = None) -> InventoryHarness:
    clock = FakeClock()
    blob_store = InMemoryBlobStore()
    local_store = LocalInventoryStore(blob_store)
    resolved_remote = remote or InMemoryRemoteMirror()
    scheduler = FakeNotificationScheduler()
    notifier = ExpiryNotifier(scheduler, clock=clock)
    sync_service = SyncService(
        local_store=local_store,
        remote_mirror=resolved_remote,
        notifier=notifier,
        clock=clock,
    )
    inventory_service = InventoryService(
        local_store=local_store,
        remote_mirror=resolved_remote,
        sync_service=sync_service,
        notifier=notifier,
        clock=clock,
    )
    return InventoryHarness(
        clock=clock,
        blob_store=blob_store,
        local_store=local_store,
        remote=resolved_remote,
        scheduler=scheduler,
        notifier=notifier,
        sync_service=sync_service,
        inventory_service=inventory_service,
    )


@pytest.fixture
def harness() -> InventoryHarness:
    return build_harness()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
        device_id=DEVICE_ID,
        telegram_bot_token="test-token",
        telegram_chat_id=42,
    )


@pytest.fixture
def recipe_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def container(
    settings: Settings,
    harness: InventoryHarness,
    recipe_repository: InMemoryRecipeRepository,
    telegram_client: FakeTelegramClient,
) -> AppContainer:
    reminder_service = ReminderService(
        outbox=harness.scheduler,
        telegram_client=telegram_client,
        chat_id=settings.telegram_chat_id,
        clock=harness.clock,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        inventory_service=harness.inventory_service,
        sync_service=harness.sync_service,
        recipe_service=RecipeService(recipe_repository, device_id=DEVICE_ID),
        reminder_service=reminder_service,
        close_resources=close_resources,
    )
