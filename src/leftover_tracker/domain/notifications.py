"""Domain models for expiry notifications."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ScheduledNotification:
    """Pending expiry alert in the notification outbox."""

    handle: str
    item_id: str
    title: str
    body: str
    fire_at: datetime
    delivered_at: datetime | None = None
