"""Supabase-backed remote mirror of the inventory snapshot."""

from dataclasses import dataclass

from supabase import Client

from leftover_tracker.domain.inventory import InventorySnapshot
from leftover_tracker.services.remote_mirror import RemoteMirror
from leftover_tracker.services.snapshots import (
    snapshot_from_payload,
    snapshot_to_payload,
)


@dataclass
class SupabaseSnapshotMirror(RemoteMirror):
    """Keeps one snapshot row per installation in ``inventory_snapshots``."""

    client: Client
    scope_id: str

    def is_available(self) -> bool:
        """Return True; the client is only built when Supabase is configured."""
        return True

    def read(self) -> InventorySnapshot | None:
        """Return the stored snapshot for this scope, if any."""
        response = (
            self.client.table("inventory_snapshots")
            .select("payload, last_modified")
            .eq("scope_id", self.scope_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        payload = row.get("payload") or {}
        last_modified = row.get("last_modified")
        return snapshot_from_payload(
            payload if isinstance(payload, dict) else {},
            int(last_modified) if last_modified is not None else None,
        )

    def write(self, snapshot: InventorySnapshot) -> bool:
        """Upsert the snapshot row for this scope."""
        response = (
            self.client.table("inventory_snapshots")
            .upsert(
                {
                    "scope_id": self.scope_id,
                    "payload": snapshot_to_payload(snapshot),
                    "last_modified": snapshot.last_modified,
                },
                on_conflict="scope_id",
            )
            .execute()
        )
        return bool(response.data)
