"""Supabase-backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from drive_slideshow.services.store import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores values as rows in the ``kv_store`` table, one scope per install."""

    client: Client
    scope: str = "default"

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        response = (
            self.client.table("kv_store")
            .select("value")
            .eq("scope", self.scope)
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    async def set_item(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        self.client.table("kv_store").upsert(
            {
                "scope": self.scope,
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="scope,key",
        ).execute()

    async def remove_item(self, key: str) -> None:
        """Delete the row for a key."""
        self.client.table("kv_store").delete().eq("scope", self.scope).eq(
            "key", key
        ).execute()
