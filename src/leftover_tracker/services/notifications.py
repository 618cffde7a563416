"""Expiry notification scheduling."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from leftover_tracker.domain.inventory import InventoryItem
from leftover_tracker.domain.notifications import ScheduledNotification
from leftover_tracker.services.expiry import expiry_date, utc_now

EXPIRED_TITLE = "🍽️ Leftover Expired!"

_logger = logging.getLogger(__name__)


class NotificationScheduler(Protocol):
    """Platform capability for scheduling local alerts."""

    def request_permission(self) -> bool:
        """Return True when alerts may be scheduled."""

    def schedule(
        self, item_id: str, title: str, body: str, fire_at: datetime
    ) -> str | None:
        """Schedule an alert and return its handle."""

    def cancel(self, handle: str) -> None:
        """Cancel a scheduled alert."""

    def cancel_all(self) -> None:
        """Cancel every scheduled alert."""


class NotificationOutbox(Protocol):
    """Access to scheduled alerts that are due for delivery."""

    def list_due(self, now: datetime, limit: int) -> list[ScheduledNotification]:
        """Return undelivered alerts whose fire time has passed."""

    def mark_delivered(self, handle: str, delivered_at: datetime) -> None:
        """Record that an alert was delivered."""


def expired_body(name: str) -> str:
    return f'"{name}" has expired. Time to toss it out!'


@dataclass
class ExpiryNotifier:
    """Keeps one expiry alert per inventory item."""

    scheduler: NotificationScheduler
    clock: Callable[[], datetime] = utc_now

    def schedule_for(self, item: InventoryItem) -> str | None:
        """Schedule the expiry alert for an item; None when not scheduled."""
        try:
            fire_at = expiry_date(item.date_added, item.days_until_expiry)
            if not self.scheduler.request_permission():
                _logger.info("Notification permission denied for item %s", item.id)
                return None
            if fire_at <= self.clock():
                _logger.info("Item %s already expired, not scheduling", item.id)
                return None
            return self.scheduler.schedule(
                item.id, EXPIRED_TITLE, expired_body(item.name), fire_at
            )
        except Exception:
            _logger.exception("Failed to schedule notification for item %s", item.id)
            return None

    def cancel(self, handle: str | None) -> None:
        """Cancel a handle if present."""
        if not handle:
            return
        try:
            self.scheduler.cancel(handle)
        except Exception:
            _logger.exception("Failed to cancel notification %s", handle)

    def rebuild(self, items: list[InventoryItem]) -> list[InventoryItem]:
        """Cancel all alerts and schedule fresh ones for the given items."""
        try:
            self.scheduler.cancel_all()
        except Exception:
            _logger.exception("Failed to cancel scheduled notifications")
        rebuilt = [
            replace(item, notification_handle=self.schedule_for(item))
            for item in items
        ]
        _logger.info(
            "Rescheduled notifications: items=%s scheduled=%s",
            len(rebuilt),
            sum(1 for item in rebuilt if item.notification_handle),
        )
        return rebuilt
