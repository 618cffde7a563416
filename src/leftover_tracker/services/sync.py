"""Two-way reconciliation between the local and remote inventory snapshots.

Conflicts are resolved per whole snapshot: whichever side carries the newer
``last_modified`` replaces the other entirely. Equal timestamps mean both sides
already hold the same data and nothing is written.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from leftover_tracker.domain.inventory import InventorySnapshot
from leftover_tracker.services.expiry import utc_now
from leftover_tracker.services.local_store import LocalInventoryStore
from leftover_tracker.services.notifications import ExpiryNotifier
from leftover_tracker.services.remote_mirror import RemoteMirror
from leftover_tracker.services.snapshots import to_epoch_ms

_logger = logging.getLogger(__name__)


class SyncOutcome(str, Enum):
    """Result of one reconciliation pass."""

    SKIPPED = "skipped"
    UNAVAILABLE = "unavailable"
    EMPTY = "empty"
    SEEDED = "seeded"
    PULLED = "pulled"
    PUSHED = "pushed"
    IN_SYNC = "in_sync"


@dataclass(frozen=True)
class SyncStatus:
    """Current state of the reconciliation engine."""

    available: bool
    is_syncing: bool
    last_outcome: SyncOutcome | None
    last_synced_at: datetime | None


@dataclass
class SyncService:
    """Keeps the local store and the remote mirror convergent."""

    local_store: LocalInventoryStore
    remote_mirror: RemoteMirror
    notifier: ExpiryNotifier
    clock: Callable[[], datetime] = utc_now
    last_outcome: SyncOutcome | None = None
    last_synced_at: datetime | None = None
    _in_flight: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    @property
    def is_syncing(self) -> bool:
        return self._in_flight.locked()

    def sync_from_remote(self) -> SyncOutcome:
        """Run one reconciliation pass unless another is already running."""
        if not self._in_flight.acquire(blocking=False):
            _logger.info("Sync already in progress, skipping")
            return SyncOutcome.SKIPPED
        try:
            outcome = self._reconcile()
        finally:
            self._in_flight.release()
        self.last_outcome = outcome
        if outcome is not SyncOutcome.UNAVAILABLE:
            self.last_synced_at = self.clock()
        return outcome

    def manual_sync(self) -> bool:
        """Sync on explicit request and report whether it succeeded."""
        try:
            outcome = self.sync_from_remote()
        except Exception:
            _logger.exception("Manual sync failed")
            return False
        return outcome is not SyncOutcome.UNAVAILABLE

    def status(self) -> SyncStatus:
        return SyncStatus(
            available=self.remote_mirror.is_available(),
            is_syncing=self.is_syncing,
            last_outcome=self.last_outcome,
            last_synced_at=self.last_synced_at,
        )

    def _reconcile(self) -> SyncOutcome:
        if not self.remote_mirror.is_available():
            return SyncOutcome.UNAVAILABLE

        remote = self.remote_mirror.read()
        if remote is None:
            if not self.local_store.has_snapshot():
                return SyncOutcome.EMPTY
            local = self.local_store.load()
            if not local.last_modified:
                local = InventorySnapshot(
                    items=local.items, last_modified=to_epoch_ms(self.clock())
                )
                self.local_store.write(local)
            self._upload(local)
            _logger.info("Seeded remote snapshot: items=%s", len(local.items))
            return SyncOutcome.SEEDED

        local_modified = self.local_store.load_last_modified()
        if remote.last_modified > local_modified:
            items = self.notifier.rebuild(remote.items)
            self.local_store.write(
                InventorySnapshot(items=items, last_modified=remote.last_modified)
            )
            _logger.info(
                "Pulled remote snapshot: items=%s last_modified=%s",
                len(items),
                remote.last_modified,
            )
            return SyncOutcome.PULLED
        if local_modified > remote.last_modified:
            local = self.local_store.load()
            self._upload(local)
            _logger.info(
                "Pushed local snapshot: items=%s last_modified=%s",
                len(local.items),
                local.last_modified,
            )
            return SyncOutcome.PUSHED
        return SyncOutcome.IN_SYNC

    def _upload(self, snapshot: InventorySnapshot) -> None:
        if not self.remote_mirror.write(snapshot):
            raise RuntimeError("Failed to upload inventory snapshot")
