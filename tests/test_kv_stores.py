"""Tests for key-value store adapters."""

import asyncio
import json
from dataclasses import dataclass, field

import pytest

from drive_slideshow.adapters.file_kv_store import JsonFileKeyValueStore
from drive_slideshow.adapters.supabase_kv_store import SupabaseKeyValueStore


def test_file_store_round_trip(tmp_path) -> None:
    path = tmp_path / "nested" / "storage.json"
    store = JsonFileKeyValueStore(path=path)

    async def scenario() -> tuple[str | None, str | None]:
        await store.set_item("google_auth_token", "token")
        first = await store.get_item("google_auth_token")
        await store.remove_item("google_auth_token")
        second = await store.get_item("google_auth_token")
        return first, second

    assert asyncio.run(scenario()) == ("token", None)
    assert json.loads(path.read_text()) == {"default": {}}


def test_file_store_survives_restart_and_isolates_scopes(tmp_path) -> None:
    path = tmp_path / "storage.json"
    asyncio.run(JsonFileKeyValueStore(path=path, scope="a").set_item("k", "1"))
    asyncio.run(JsonFileKeyValueStore(path=path, scope="b").set_item("k", "2"))

    assert asyncio.run(JsonFileKeyValueStore(path=path, scope="a").get_item("k")) == "1"
    assert asyncio.run(JsonFileKeyValueStore(path=path, scope="b").get_item("k")) == "2"


def test_file_store_treats_corrupt_file_as_empty(tmp_path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{broken")
    store = JsonFileKeyValueStore(path=path)

    assert asyncio.run(store.get_item("anything")) is None
    asyncio.run(store.remove_item("anything"))
    assert path.read_text() == "{broken"


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    rows: dict[tuple[str, str], str] = field(default_factory=dict)
    last_upsert: dict[str, object] | None = None
    on_conflict: str | None = None
    _action: str = "select"
    _filters: dict[str, object] = field(default_factory=dict)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        self._filters = {}
        return self

    def upsert(self, payload, on_conflict: str = "") -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_upsert = payload
        self.on_conflict = on_conflict
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        self._filters = {}
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._filters[column] = value
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self._action == "upsert":
            payload = self.last_upsert or {}
            self.rows[(str(payload["scope"]), str(payload["key"]))] = str(
                payload["value"]
            )
            return FakeResponse(data=[payload])
        row_key = (str(self._filters.get("scope")), str(self._filters.get("key")))
        if self._action == "delete":
            self.rows.pop(row_key, None)
            return FakeResponse(data=[])
        if row_key in self.rows:
            return FakeResponse(data=[{"value": self.rows[row_key]}])
        return FakeResponse(data=[])


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable())


def test_supabase_store_round_trip() -> None:
    client = FakeSupabaseClient()
    store = SupabaseKeyValueStore(client=client, scope="frame-1")

    async def scenario() -> tuple[str | None, str | None]:
        await store.set_item("selected_folders", '["root"]')
        first = await store.get_item("selected_folders")
        await store.remove_item("selected_folders")
        second = await store.get_item("selected_folders")
        return first, second

    assert asyncio.run(scenario()) == ('["root"]', None)
    table = client.tables["kv_store"]
    assert table.on_conflict == "scope,key"
    assert table.last_upsert["scope"] == "frame-1"
    assert "updated_at" in table.last_upsert


def test_supabase_store_scopes_reads() -> None:
    client = FakeSupabaseClient()
    asyncio.run(SupabaseKeyValueStore(client=client, scope="a").set_item("k", "v"))

    other = SupabaseKeyValueStore(client=client, scope="b")

    assert asyncio.run(other.get_item("k")) is None


def test_file_store_failed_write_keeps_previous_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "storage.json"
    store = JsonFileKeyValueStore(path=path)
    asyncio.run(store.set_item("google_auth_token", "token"))

    def failing_dump(*_args, **_kwargs) -> None:  # type: ignore[no-untyped-def]
        raise OSError("disk full")

    monkeypatch.setattr(json, "dump", failing_dump)

    with pytest.raises(OSError):
        asyncio.run(store.set_item("google_auth_token", "replacement"))

    monkeypatch.undo()
    assert asyncio.run(store.get_item("google_auth_token")) == "token"
    assert [entry.name for entry in tmp_path.iterdir()] == ["storage.json"]
