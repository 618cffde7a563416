"""JSON payload conversion for inventory snapshots."""

from datetime import UTC, datetime

from leftover_tracker.domain.inventory import InventoryItem, InventorySnapshot


def item_to_payload(item: InventoryItem) -> dict[str, object]:
    """Convert an item to a JSON-serializable dict."""
    return {
        "id": item.id,
        "name": item.name,
        "date_added": item.date_added.isoformat(),
        "days_until_expiry": item.days_until_expiry,
        "category": item.category,
        "notes": item.notes,
        "image_ref": item.image_ref,
        "notification_handle": item.notification_handle,
    }


def item_from_payload(payload: dict[str, object]) -> InventoryItem:
    """Parse an item from its stored dict form."""
    return InventoryItem(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        date_added=_parse_datetime(payload.get("date_added")),
        days_until_expiry=int(payload.get("days_until_expiry", 0)),
        category=payload.get("category"),
        notes=payload.get("notes"),
        image_ref=payload.get("image_ref"),
        notification_handle=payload.get("notification_handle"),
    )


def items_to_payload(items: list[InventoryItem]) -> list[dict[str, object]]:
    return [item_to_payload(item) for item in items]


def items_from_payload(raw: object) -> list[InventoryItem]:
    if not isinstance(raw, list):
        return []
    return [item_from_payload(entry) for entry in raw if isinstance(entry, dict)]


def snapshot_to_payload(snapshot: InventorySnapshot) -> dict[str, object]:
    """Return the remote document form of a snapshot."""
    return {
        "items": items_to_payload(snapshot.items),
        "last_modified": snapshot.last_modified,
    }


def snapshot_from_payload(
    payload: dict[str, object], last_modified: int | None = None
) -> InventorySnapshot:
    """Parse a remote document; an explicit timestamp overrides the embedded one."""
    stamp = last_modified if last_modified is not None else payload.get("last_modified")
    return InventorySnapshot(
        items=items_from_payload(payload.get("items")),
        last_modified=int(stamp or 0),
    )


def to_epoch_ms(moment: datetime) -> int:
    """Return wall-clock milliseconds for a datetime."""
    return int(moment.timestamp() * 1000)


def _parse_datetime(raw: object) -> datetime:
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, str) and raw:
        parsed = datetime.fromisoformat(raw)
    else:
        raise ValueError("Inventory item is missing date_added")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
