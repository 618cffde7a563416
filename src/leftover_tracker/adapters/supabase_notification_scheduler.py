"""Supabase outbox used as the expiry notification scheduler."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from leftover_tracker.domain.notifications import ScheduledNotification
from leftover_tracker.services.notifications import (
    NotificationOutbox,
    NotificationScheduler,
)


@dataclass
class SupabaseNotificationScheduler(NotificationScheduler, NotificationOutbox):
    """Schedules alerts as rows in ``scheduled_notifications``."""

    client: Client
    device_id: str
    enabled: bool = True

    def request_permission(self) -> bool:
        """Return whether notifications are enabled for this installation."""
        return self.enabled

    def schedule(
        self, item_id: str, title: str, body: str, fire_at: datetime
    ) -> str | None:
        """Insert an outbox row and return its id as the handle."""
        response = (
            self.client.table("scheduled_notifications")
            .insert(
                {
                    "device_id": self.device_id,
                    "item_id": item_id,
                    "title": title,
                    "body": body,
                    "fire_at": fire_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to schedule notification")
        return str(response.data[0]["id"])

    def cancel(self, handle: str) -> None:
        """Delete a pending outbox row."""
        self.client.table("scheduled_notifications").delete().eq(
            "id", handle
        ).execute()

    def cancel_all(self) -> None:
        """Delete every pending row for this installation."""
        self.client.table("scheduled_notifications").delete().eq(
            "device_id", self.device_id
        ).is_("delivered_at", "null").execute()

    def list_due(self, now: datetime, limit: int) -> list[ScheduledNotification]:
        """Return undelivered rows whose fire time has passed."""
        response = (
            self.client.table("scheduled_notifications")
            .select("*")
            .eq("device_id", self.device_id)
            .is_("delivered_at", "null")
            .lte("fire_at", now.isoformat())
            .order("fire_at")
            .limit(limit)
            .execute()
        )
        return [_parse_notification(row) for row in response.data or []]

    def mark_delivered(self, handle: str, delivered_at: datetime) -> None:
        """Stamp the row as delivered."""
        self.client.table("scheduled_notifications").update(
            {"delivered_at": delivered_at.isoformat()}
        ).eq("id", handle).execute()


def _parse_notification(row: dict[str, object]) -> ScheduledNotification:
    delivered_raw = row.get("delivered_at")
    return ScheduledNotification(
        handle=str(row["id"]),
        item_id=str(row.get("item_id", "")),
        title=str(row.get("title", "")),
        body=str(row.get("body", "")),
        fire_at=datetime.fromisoformat(str(row["fire_at"])),
        delivered_at=(
            datetime.fromisoformat(delivered_raw)
            if isinstance(delivered_raw, str) and delivered_raw
            else None
        ),
    )
