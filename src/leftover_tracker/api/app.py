"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request, status

from leftover_tracker.api.admin import router as admin_router
from leftover_tracker.api.models import (
    InventoryItemCreate,
    InventoryItemUpdate,
    RecipeRatingRequest,
    TelegramUpdate,
)
from leftover_tracker.app_logging import configure_logging
from leftover_tracker.containers import AppContainer
from leftover_tracker.domain.inventory import InventoryItem
from leftover_tracker.domain.recipes import RecipeSuggestion
from leftover_tracker.services.expiry import (
    expiry_date,
    expiry_label,
    expiry_status,
    item_days_remaining,
    utc_now,
)
from leftover_tracker.services.inventory import InvalidItemError
from leftover_tracker.services.local_store import StorageError
from leftover_tracker.telegram_commands import (
    BotCommand,
    parse_command,
    telegram_commands,
)

TELEGRAM_SUGGESTION_LIMIT = 5


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            outcome = state_container.sync_service.sync_from_remote()
            logger.info("Startup sync finished: %s", outcome.value)
        except Exception:
            logger.exception("Startup sync failed")
        if state_container.telegram_client is not None:
            try:
                await state_container.telegram_client.set_my_commands(
                    telegram_commands()
                )
            except Exception:
                logger.exception("Failed to sync Telegram bot commands")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/inventory")
    async def list_inventory(request: Request) -> dict[str, object]:
        """Return leftovers, soonest to expire first."""
        state_container: AppContainer = request.app.state.container
        items = state_container.inventory_service.list_items()
        now = utc_now()
        return {"items": [_item_view(item, now) for item in items]}

    @app.get("/inventory/{item_id}")
    async def get_inventory_item(item_id: str, request: Request) -> dict[str, object]:
        """Return one leftover."""
        state_container: AppContainer = request.app.state.container
        item = state_container.inventory_service.get_item(item_id)
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _item_view(item, utc_now())

    @app.post("/inventory", status_code=status.HTTP_201_CREATED)
    async def add_inventory_item(
        payload: InventoryItemCreate, request: Request
    ) -> dict[str, object]:
        """Add a leftover and schedule its expiry alert."""
        state_container: AppContainer = request.app.state.container
        try:
            item = state_container.inventory_service.add_item(
                payload.name,
                payload.days_until_expiry,
                date_added=_as_utc(payload.date_added),
                category=payload.category,
                notes=payload.notes,
                image_ref=payload.image_ref,
            )
        except InvalidItemError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        except StorageError as exc:
            raise _storage_unavailable(exc) from exc
        return _item_view(item, utc_now())

    @app.patch("/inventory/{item_id}")
    async def update_inventory_item(
        item_id: str, payload: InventoryItemUpdate, request: Request
    ) -> dict[str, object]:
        """Update the fields sent in the request body."""
        state_container: AppContainer = request.app.state.container
        updates = payload.model_dump(exclude_unset=True)
        if "date_added" in updates:
            updates["date_added"] = _as_utc(updates["date_added"])
        try:
            item = state_container.inventory_service.update_item(item_id, updates)
        except InvalidItemError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        except StorageError as exc:
            raise _storage_unavailable(exc) from exc
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _item_view(item, utc_now())

    @app.delete("/inventory/{item_id}")
    async def delete_inventory_item(item_id: str, request: Request) -> dict[str, str]:
        """Remove a leftover and cancel its alert."""
        state_container: AppContainer = request.app.state.container
        try:
            deleted = state_container.inventory_service.delete_item(item_id)
        except StorageError as exc:
            raise _storage_unavailable(exc) from exc
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "deleted"}

    @app.post("/sync")
    async def manual_sync(request: Request) -> dict[str, object]:
        """Reconcile with the remote copy on demand."""
        state_container: AppContainer = request.app.state.container
        success = state_container.inventory_service.manual_sync()
        return {"success": success, **_sync_status_view(state_container)}

    @app.get("/sync/status")
    async def sync_status(request: Request) -> dict[str, object]:
        """Return the reconciliation engine state."""
        state_container: AppContainer = request.app.state.container
        return _sync_status_view(state_container)

    @app.get("/recipes/suggestions")
    async def recipe_suggestions(request: Request) -> dict[str, object]:
        """Return recipes ranked against the current leftovers."""
        state_container: AppContainer = request.app.state.container
        items = state_container.inventory_service.list_items()
        suggestions = state_container.recipe_service.get_suggestions(items)
        return {"suggestions": [_suggestion_view(s) for s in suggestions]}

    @app.get("/recipes/{recipe_id}/rating")
    async def get_recipe_rating(recipe_id: str, request: Request) -> dict[str, object]:
        """Return this device's rating of a recipe."""
        state_container: AppContainer = request.app.state.container
        return {
            "recipe_id": recipe_id,
            "rating": state_container.recipe_service.get_user_rating(recipe_id),
        }

    @app.post("/recipes/{recipe_id}/rating")
    async def rate_recipe(
        recipe_id: str, payload: RecipeRatingRequest, request: Request
    ) -> dict[str, object]:
        """Rate a recipe, recording which leftovers were on hand."""
        state_container: AppContainer = request.app.state.container
        leftover_items = payload.leftover_items
        if leftover_items is None:
            leftover_items = [
                item.name for item in state_container.inventory_service.list_items()
            ]
        success = state_container.recipe_service.rate_recipe(
            recipe_id, payload.rating, leftover_items
        )
        if not success:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to save rating",
            )
        return {"recipe_id": recipe_id, "rating": payload.rating}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Answer bot commands from the configured Telegram chat."""
        state_container: AppContainer = request.app.state.container
        message = update.message
        telegram_client = state_container.telegram_client
        if message is None or telegram_client is None:
            return {"status": "ok"}
        allowed_chat = state_container.settings.telegram_chat_id
        if allowed_chat is not None and message.chat.id != allowed_chat:
            await telegram_client.send_message(
                chat_id=message.chat.id, text="This bot is private."
            )
            return {"status": "ok"}

        command = parse_command(message.text)
        if command is None:
            return {"status": "ok"}
        if command is BotCommand.LEFTOVERS:
            text = _format_leftovers(state_container.inventory_service.list_items())
        elif command is BotCommand.RECIPES:
            items = state_container.inventory_service.list_items()
            text = _format_suggestions(
                state_container.recipe_service.get_suggestions(items)
            )
        elif command is BotCommand.SYNC:
            if state_container.inventory_service.manual_sync():
                text = "Synced with the cloud copy."
            else:
                text = "Sync failed. Your leftovers are still saved locally."
        elif command is BotCommand.START:
            text = "Welcome to Leftover Tracker!\n" + _format_help()
        else:
            text = _format_help()
        await telegram_client.send_message(chat_id=message.chat.id, text=text)
        return {"status": "ok"}

    return app


def _storage_unavailable(exc: StorageError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
    )


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _item_view(item: InventoryItem, now: datetime) -> dict[str, object]:
    """Return an item with its derived expiry fields."""
    remaining = item_days_remaining(item, now)
    return {
        "id": item.id,
        "name": item.name,
        "date_added": item.date_added.isoformat(),
        "days_until_expiry": item.days_until_expiry,
        "category": item.category,
        "notes": item.notes,
        "image_ref": item.image_ref,
        "has_notification": item.notification_handle is not None,
        "days_remaining": remaining,
        "status": expiry_status(remaining).value,
        "expiry_label": expiry_label(remaining),
        "expiry_date": expiry_date(item.date_added, item.days_until_expiry).isoformat(),
    }


def _suggestion_view(suggestion: RecipeSuggestion) -> dict[str, object]:
    recipe = suggestion.recipe
    return {
        "id": recipe.id,
        "name": recipe.name,
        "description": recipe.description,
        "ingredients": recipe.ingredients,
        "categories": recipe.categories,
        "instructions": recipe.instructions,
        "prep_time_minutes": recipe.prep_time_minutes,
        "difficulty": recipe.difficulty,
        "match_score": suggestion.match_score,
        "matched_categories": suggestion.matched_categories,
        "matched_ingredients": suggestion.matched_ingredients,
        "user_rating": suggestion.user_rating,
        "average_rating": suggestion.average_rating,
        "rating_count": suggestion.rating_count,
    }


def _sync_status_view(container: AppContainer) -> dict[str, object]:
    sync_status = container.sync_service.status()
    return {
        "available": sync_status.available,
        "is_syncing": sync_status.is_syncing,
        "last_outcome": (
            sync_status.last_outcome.value if sync_status.last_outcome else None
        ),
        "last_synced_at": (
            sync_status.last_synced_at.isoformat()
            if sync_status.last_synced_at
            else None
        ),
    }


def _format_leftovers(items: list[InventoryItem]) -> str:
    """Format leftovers for Telegram."""
    if not items:
        return "Your fridge is empty. Add leftovers to start tracking them."
    now = utc_now()
    lines = ["Your leftovers:"]
    for item in items:
        remaining = item_days_remaining(item, now)
        lines.append(f"- {item.name}: {expiry_label(remaining)}")
    return "\n".join(lines)


def _format_suggestions(suggestions: list[RecipeSuggestion]) -> str:
    if not suggestions:
        return "No recipe matches your leftovers yet."
    lines = ["Recipes for your leftovers:"]
    for suggestion in suggestions[:TELEGRAM_SUGGESTION_LIMIT]:
        lines.append(f"- {suggestion.recipe.name} ({suggestion.match_score}% match)")
    return "\n".join(lines)


def _format_help() -> str:
    lines = ["Commands:"]
    lines.extend(
        f"/{entry['command']} - {entry['description']}"
        for entry in telegram_commands()
    )
    return "\n".join(lines)
