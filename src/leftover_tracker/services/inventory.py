"""Inventory lifecycle operations."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from uuid import uuid4

from leftover_tracker.domain.inventory import (
    DEFAULT_EXPIRY_DAYS,
    LEFTOVER_CATEGORIES,
    InventoryItem,
    InventorySnapshot,
)
from leftover_tracker.services.expiry import sort_by_expiry, utc_now
from leftover_tracker.services.local_store import LocalInventoryStore, StorageError
from leftover_tracker.services.notifications import ExpiryNotifier
from leftover_tracker.services.remote_mirror import RemoteMirror
from leftover_tracker.services.snapshots import to_epoch_ms
from leftover_tracker.services.sync import SyncService

UPDATABLE_FIELDS = frozenset(
    {"name", "date_added", "days_until_expiry", "category", "notes", "image_ref"}
)

_logger = logging.getLogger(__name__)


class InvalidItemError(ValueError):
    """Raised when an inventory item fails validation."""


@dataclass
class InventoryService:
    """Adds, updates and removes leftovers, keeping alerts and sync in step."""

    local_store: LocalInventoryStore
    remote_mirror: RemoteMirror
    sync_service: SyncService
    notifier: ExpiryNotifier
    clock: Callable[[], datetime] = utc_now

    def list_items(self) -> list[InventoryItem]:
        """Return items soonest-to-expire first, syncing opportunistically."""
        return sort_by_expiry(self._current_items(), self.clock())

    def get_item(self, item_id: str) -> InventoryItem | None:
        """Return an item by id, if present."""
        for item in self._current_items():
            if item.id == item_id:
                return item
        return None

    def add_item(  # noqa: PLR0913
        self,
        name: str,
        days_until_expiry: int | None = None,
        *,
        date_added: datetime | None = None,
        category: str | None = None,
        notes: str | None = None,
        image_ref: str | None = None,
    ) -> InventoryItem:
        """Validate and store a new item with its expiry alert."""
        cleaned_name = (name or "").strip()
        if not cleaned_name:
            raise InvalidItemError("Please enter a name for the leftover")
        category = category or None
        _validate_category(category)
        if days_until_expiry is None and category:
            days_until_expiry = DEFAULT_EXPIRY_DAYS.get(category)
        _validate_days(days_until_expiry)

        items = self._current_items()
        item = InventoryItem(
            id=str(uuid4()),
            name=cleaned_name,
            date_added=date_added or self.clock(),
            days_until_expiry=int(days_until_expiry),
            category=category,
            notes=(notes or "").strip() or None,
            image_ref=image_ref or None,
        )
        item = replace(item, notification_handle=self.notifier.schedule_for(item))
        items.append(item)
        if not self.save(items):
            self.notifier.cancel(item.notification_handle)
            raise StorageError("Failed to save new leftover")
        return item

    def update_item(
        self, item_id: str, updates: dict[str, object]
    ) -> InventoryItem | None:
        """Apply field updates to an item; None when the id is unknown.

        The replacement alert is scheduled before the old one is cancelled, so
        a failed save leaves the stored item with its original live alert.
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidItemError(f"Unknown fields: {', '.join(sorted(unknown))}")
        if "days_until_expiry" in updates:
            _validate_days(updates["days_until_expiry"])
        if "date_added" in updates and not isinstance(
            updates["date_added"], datetime
        ):
            raise InvalidItemError("Please enter a valid date added")
        if "name" in updates:
            cleaned_name = str(updates["name"] or "").strip()
            if not cleaned_name:
                raise InvalidItemError("Please enter a name for the leftover")
            updates = {**updates, "name": cleaned_name}
        if "category" in updates:
            updates = {**updates, "category": updates["category"] or None}
            _validate_category(updates["category"])

        items = self._current_items()
        index = _find_index(items, item_id)
        if index is None:
            return None

        current = items[index]
        updated = replace(current, notification_handle=None, **updates)
        updated = replace(
            updated, notification_handle=self.notifier.schedule_for(updated)
        )
        items[index] = updated
        if not self.save(items):
            self.notifier.cancel(updated.notification_handle)
            raise StorageError("Failed to save leftover changes")
        self.notifier.cancel(current.notification_handle)
        return updated

    def delete_item(self, item_id: str) -> bool:
        """Remove an item and its alert; False when the id is unknown."""
        items = self._current_items()
        index = _find_index(items, item_id)
        if index is None:
            return False
        removed = items.pop(index)
        if not self.save(items):
            raise StorageError("Failed to delete leftover")
        self.notifier.cancel(removed.notification_handle)
        return True

    def save(self, items: list[InventoryItem]) -> bool:
        """Write the snapshot locally, then best-effort to the remote mirror."""
        snapshot = InventorySnapshot(
            items=list(items), last_modified=to_epoch_ms(self.clock())
        )
        try:
            self.local_store.write(snapshot)
        except StorageError:
            _logger.exception("Failed to save inventory locally")
            return False

        try:
            if self.remote_mirror.is_available() and not self.remote_mirror.write(
                snapshot
            ):
                _logger.warning("Remote mirror rejected inventory snapshot")
        except Exception:
            _logger.exception("Failed to upload inventory snapshot")
        return True

    def manual_sync(self) -> bool:
        """Reconcile with the remote mirror on explicit request."""
        return self.sync_service.manual_sync()

    def _current_items(self) -> list[InventoryItem]:
        try:
            self.sync_service.sync_from_remote()
        except Exception:
            _logger.exception("Opportunistic sync failed")
        return self.local_store.load_items()


def _validate_days(value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidItemError("Please enter valid days until expiry")


def _validate_category(category: object) -> None:
    if category is not None and category not in LEFTOVER_CATEGORIES:
        raise InvalidItemError(
            f"Category must be one of: {', '.join(LEFTOVER_CATEGORIES)}"
        )


def _find_index(items: list[InventoryItem], item_id: str) -> int | None:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None
