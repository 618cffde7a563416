"""Remote copy of the inventory snapshot."""

from dataclasses import dataclass
from typing import Protocol

from leftover_tracker.domain.inventory import InventorySnapshot


class RemoteMirror(Protocol):
    """Durable remote snapshot store scoped to one installation."""

    def is_available(self) -> bool:
        """Return True when the remote can be reached from this deployment."""

    def read(self) -> InventorySnapshot | None:
        """Return the remote snapshot, or None if none was stored yet."""

    def write(self, snapshot: InventorySnapshot) -> bool:
        """Replace the remote snapshot and return True on success."""


@dataclass
class UnavailableRemoteMirror(RemoteMirror):
    """Mirror used when no remote backend is configured."""

    def is_available(self) -> bool:
        return False

    def read(self) -> InventorySnapshot | None:
        return None

    def write(self, snapshot: InventorySnapshot) -> bool:
        return False
