"""
Contract tests for KeyValueStore implementations.

Runs against both MemoryStore and SqliteStore.
"""

import pytest

from errors import SerializationError
from state_store import MemoryStore, SqliteStore


class KeyValueStoreContract:

    def create_store(self):
        raise NotImplementedError

    def test_set_and_get(self):
        store = self.create_store()
        store.set("a", "1")
        assert store.get("a") == "1"

    def test_unknown_returns_none(self):
        assert self.create_store().get("missing") is None

    def test_overwrite_updates_value(self):
        store = self.create_store()
        store.set("a", "1")
        store.set("a", "2")
        assert store.get("a") == "2"

    def test_remove_missing_key_is_ignored(self):
        store = self.create_store()
        store.remove("nothing-here")
        assert store.get("nothing-here") is None

    def test_keys_by_prefix(self):
        store = self.create_store()
        store.set("flight_cache_a", "1")
        store.set("flight_cache_b", "2")
        store.set("amadeus_api_calls", "3")
        assert sorted(store.keys("flight_cache_")) == ["flight_cache_a", "flight_cache_b"]
        assert len(store.keys()) == 3

    def test_prefix_is_literal_and_case_sensitive(self):
        store = self.create_store()
        store.set("flight_cache_a", "1")
        store.set("flightXcacheYb", "2")
        store.set("FLIGHT_CACHE_c", "3")
        assert store.keys("flight_cache_") == ["flight_cache_a"]

    def test_remove_prefix_leaves_other_keys(self):
        store = self.create_store()
        store.set("flight_cache_a", "1")
        store.set("flight_cache_b", "2")
        store.set("amadeus_api_calls", "3")
        assert store.remove_prefix("flight_cache_") == 2
        assert store.keys("flight_cache_") == []
        assert store.get("amadeus_api_calls") == "3"

    def test_json_round_trip(self):
        store = self.create_store()
        store.set_json("k", {"calls_today": 3, "day_stamp": "2025-06-15"})
        assert store.get_json("k") == {"calls_today": 3, "day_stamp": "2025-06-15"}

    def test_corrupt_json_raises_serialization_error(self):
        store = self.create_store()
        store.set("k", "{not json")
        with pytest.raises(SerializationError):
            store.get_json("k")

    def test_unserializable_value_raises_serialization_error(self):
        store = self.create_store()
        with pytest.raises(SerializationError):
            store.set_json("k", {"when": object()})
        assert store.get("k") is None


class TestMemoryStore(KeyValueStoreContract):

    def create_store(self):
        return MemoryStore()

    def test_isolation_between_instances(self):
        s1 = MemoryStore()
        s2 = MemoryStore()
        s1.set("a", "1")
        assert s2.get("a") is None


class TestSqliteStore(KeyValueStoreContract):

    def create_store(self):
        return SqliteStore(":memory:")

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "state.db"
        first = SqliteStore(path)
        first.set_json("amadeus_api_calls", {"calls_today": 7})
        first.close()

        second = SqliteStore(path)
        assert second.get_json("amadeus_api_calls") == {"calls_today": 7}
        second.close()
