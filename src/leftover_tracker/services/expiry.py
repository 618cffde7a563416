"""Expiry date arithmetic for inventory items."""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from leftover_tracker.domain.inventory import ExpiryStatus, InventoryItem

_ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(tz=UTC)


def days_remaining(
    date_added: datetime, days_until_expiry: int, now: datetime | None = None
) -> int:
    """Return whole days left before expiry; partial days never count."""
    current = now if now is not None else utc_now()
    days_passed = (current - date_added) // _ONE_DAY
    return days_until_expiry - days_passed


def expiry_date(date_added: datetime, days_until_expiry: int) -> datetime:
    """Return the moment an item expires."""
    return date_added + timedelta(days=days_until_expiry)


def expiry_status(remaining: int) -> ExpiryStatus:
    """Classify remaining days into a freshness status."""
    if remaining < 0:
        return ExpiryStatus.EXPIRED
    if remaining <= 1:
        return ExpiryStatus.WARNING
    return ExpiryStatus.FRESH


def expiry_label(remaining: int) -> str:
    """Return a human-readable expiry description."""
    if remaining < 0:
        overdue = -remaining
        return f"Expired {overdue} day{'s' if overdue != 1 else ''} ago"
    if remaining == 0:
        return "Expires today"
    if remaining == 1:
        return "1 day left"
    return f"{remaining} days left"


def item_days_remaining(item: InventoryItem, now: datetime | None = None) -> int:
    """Return days remaining for an inventory item."""
    return days_remaining(item.date_added, item.days_until_expiry, now)


def sort_by_expiry(
    items: Iterable[InventoryItem], now: datetime | None = None
) -> list[InventoryItem]:
    """Order items so the soonest to expire come first."""
    current = now if now is not None else utc_now()
    return sorted(items, key=lambda item: item_days_remaining(item, current))
