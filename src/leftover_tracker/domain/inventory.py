"""Domain models for the leftover inventory."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

LEFTOVER_CATEGORIES = (
    "Meat",
    "Vegetables",
    "Dairy",
    "Prepared Meal",
    "Soup/Stew",
    "Dessert",
    "Other",
)

DEFAULT_EXPIRY_DAYS: dict[str, int] = {
    "Meat": 3,
    "Vegetables": 5,
    "Dairy": 7,
    "Prepared Meal": 4,
    "Soup/Stew": 4,
    "Dessert": 5,
    "Other": 3,
}


class ExpiryStatus(str, Enum):
    """Freshness classification of an item."""

    FRESH = "fresh"
    WARNING = "warning"
    EXPIRED = "expired"


@dataclass(frozen=True)
class InventoryItem:
    """A leftover stored in the fridge."""

    id: str
    name: str
    date_added: datetime
    days_until_expiry: int
    category: str | None = None
    notes: str | None = None
    image_ref: str | None = None
    notification_handle: str | None = None


@dataclass(frozen=True)
class InventorySnapshot:
    """Complete set of items with the time it was last modified (epoch ms)."""

    items: list[InventoryItem] = field(default_factory=list)
    last_modified: int = 0
