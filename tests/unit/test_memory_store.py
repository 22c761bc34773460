"""Unit tests for InMemoryKeyValueStore."""

from __future__ import annotations

import pytest

from kv_adapter.adapters.outbound import InMemoryKeyValueStore
from kv_adapter.domain.errors import StoreReadError, StoreWriteError


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    store = InMemoryKeyValueStore()
    store.load()
    return store


@pytest.mark.unit
class TestInMemoryKeyValueStore:
    """Tests for InMemoryKeyValueStore."""

    def test_load_fires_listeners_once(self) -> None:
        store = InMemoryKeyValueStore()
        calls: list[str] = []
        store.on_load(lambda: calls.append("loaded"))

        store.load()
        store.load()

        assert store.is_loaded
        assert calls == ["loaded"]

    def test_listener_after_load_not_called(self, kv_store: InMemoryKeyValueStore) -> None:
        calls: list[str] = []

        kv_store.on_load(lambda: calls.append("late"))

        assert calls == []

    def test_get_missing(self, kv_store: InMemoryKeyValueStore) -> None:
        assert kv_store.get("nope") is None

    def test_set_get(self, kv_store: InMemoryKeyValueStore) -> None:
        kv_store.set("data:Users", [{"id": 1}])

        assert kv_store.get("data:Users") == [{"id": 1}]

    def test_values_are_isolated(self, kv_store: InMemoryKeyValueStore) -> None:
        rows = [{"id": 1}]
        kv_store.set("data:Users", rows)
        rows.append({"id": 2})

        snapshot = kv_store.get("data:Users")
        snapshot[0]["id"] = 99

        assert kv_store.get("data:Users") == [{"id": 1}]

    def test_remove(self, kv_store: InMemoryKeyValueStore) -> None:
        kv_store.set("k", 1)

        kv_store.remove("k")
        kv_store.remove("k")

        assert kv_store.get("k") is None
        assert kv_store.keys() == []

    def test_keys_in_insertion_order(self, kv_store: InMemoryKeyValueStore) -> None:
        kv_store.set("b", 1)
        kv_store.set("a", 2)
        kv_store.set("b", 3)

        assert kv_store.keys() == ["b", "a"]

    def test_closed_store_rejects_use(self, kv_store: InMemoryKeyValueStore) -> None:
        kv_store.set("k", 1)
        kv_store.close()

        with pytest.raises(StoreReadError):
            kv_store.get("k")
        with pytest.raises(StoreWriteError):
            kv_store.set("k", 2)
        with pytest.raises(StoreWriteError):
            kv_store.remove("k")
        with pytest.raises(StoreReadError):
            kv_store.load()
