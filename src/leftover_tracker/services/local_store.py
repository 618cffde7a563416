"""Local persistence of the inventory snapshot."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from leftover_tracker.domain.inventory import InventoryItem, InventorySnapshot
from leftover_tracker.services.snapshots import items_from_payload, items_to_payload

ITEMS_KEY = "inventory_items"
LAST_MODIFIED_KEY = "inventory_last_modified"

_logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the local snapshot cannot be written."""


class BlobStore(Protocol):
    """Key-value string storage."""

    def get_string(self, key: str) -> str | None:
        """Return the stored value for a key, if any."""

    def set_string(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""


@dataclass
class LocalInventoryStore:
    """Inventory snapshot kept in a blob store with a last-modified marker."""

    blob_store: BlobStore

    def has_snapshot(self) -> bool:
        """Return True when an items document has ever been written."""
        try:
            return self.blob_store.get_string(ITEMS_KEY) is not None
        except OSError:
            _logger.exception("Failed to read local inventory")
            return False

    def load(self) -> InventorySnapshot:
        """Return the local snapshot, empty when unreadable."""
        return InventorySnapshot(
            items=self.load_items(), last_modified=self.load_last_modified()
        )

    def load_items(self) -> list[InventoryItem]:
        """Return stored items, or an empty list on read failure."""
        try:
            raw = self.blob_store.get_string(ITEMS_KEY)
            if raw is None:
                return []
            document = json.loads(raw)
            return items_from_payload(document.get("items"))
        except (OSError, ValueError, KeyError, AttributeError, TypeError):
            _logger.exception("Failed to load local inventory")
            return []

    def load_last_modified(self) -> int:
        """Return the local last-modified marker in epoch ms (0 when unset)."""
        try:
            raw = self.blob_store.get_string(LAST_MODIFIED_KEY)
            return int(raw) if raw else 0
        except (OSError, ValueError):
            _logger.exception("Failed to load local last-modified marker")
            return 0

    def write(self, snapshot: InventorySnapshot) -> None:
        """Persist items and marker; raises StorageError on failure."""
        document = json.dumps({"items": items_to_payload(snapshot.items)})
        try:
            self.blob_store.set_string(ITEMS_KEY, document)
            self.blob_store.set_string(LAST_MODIFIED_KEY, str(snapshot.last_modified))
        except OSError as exc:
            raise StorageError("Failed to write local inventory") from exc
