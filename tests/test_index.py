"""Tests for the id-list index and the bundled stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from planner.errors import StoreError
from planner.index import IndexList
from planner.kv import JSONFileKVStore, MemoryKVStore, open_store


class PlainStore:
    """Store without conditional writes."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key):
        return self.data.get(key)

    def put(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class RacingStore(MemoryKVStore):
    """Lets another writer slip in before the first ``conflicts`` conditional writes."""

    def __init__(self, conflicts: int, intruder_id: str = "intruder") -> None:
        super().__init__()
        self.conflicts = conflicts
        self.intruder_id = intruder_id
        self.attempts = 0

    def put_if(self, key, value, expected):
        self.attempts += 1
        if self.attempts <= self.conflicts:
            current = json.loads(self.get(key) or "[]")
            current.append(f"{self.intruder_id}-{self.attempts}")
            self.put(key, json.dumps(current))
        return super().put_if(key, value, expected)


@pytest.fixture(params=["memory", "plain"])
def index(request) -> IndexList:
    store = MemoryKVStore() if request.param == "memory" else PlainStore()
    return IndexList(store)


class TestIndexList:
    def test_absent_key_is_empty(self, index: IndexList):
        assert index.read("missing") == []

    def test_append_keeps_order(self, index: IndexList):
        for item in ["a", "b", "c"]:
            index.append("k", item)
        assert index.read("k") == ["a", "b", "c"]

    def test_remove_first_only(self, index: IndexList):
        for item in ["a", "b", "a"]:
            index.append("k", item)
        assert index.remove_first("k", "a") is True
        assert index.read("k") == ["b", "a"]

    def test_remove_missing(self, index: IndexList):
        index.append("k", "a")
        assert index.remove_first("k", "zzz") is False
        assert index.read("k") == ["a"]

    def test_drop(self, index: IndexList):
        index.append("k", "a")
        index.drop("k")
        assert index.read("k") == []

    def test_malformed_index(self):
        store = MemoryKVStore()
        store.put("k", "{not json")
        with pytest.raises(StoreError):
            IndexList(store).read("k")

    def test_index_must_be_list_of_ids(self):
        store = MemoryKVStore()
        store.put("k", json.dumps({"a": 1}))
        with pytest.raises(StoreError):
            IndexList(store).append("k", "x")


class TestCompareAndSet:
    def test_retry_keeps_concurrent_write(self):
        store = RacingStore(conflicts=2)
        index = IndexList(store, cas_retries=5)
        index.append("k", "mine")
        assert index.read("k") == ["intruder-1", "intruder-2", "mine"]
        assert store.attempts == 3

    def test_gives_up_after_retries(self):
        store = RacingStore(conflicts=10)
        index = IndexList(store, cas_retries=3)
        with pytest.raises(StoreError):
            index.append("k", "mine")
        assert "mine" not in index.read("k")

    def test_plain_store_last_writer_wins(self):
        store = PlainStore()
        first = IndexList(store)
        first.append("k", "a")
        stale = first.read("k")
        first.append("k", "b")
        # A writer working from the stale copy discards "b"
        store.put("k", json.dumps(stale + ["c"]))
        assert first.read("k") == ["a", "c"]


class TestStores:
    def test_memory_put_if(self):
        store = MemoryKVStore()
        assert store.put_if("k", "1", None) is True
        assert store.put_if("k", "2", None) is False
        assert store.put_if("k", "2", "1") is True
        assert store.get("k") == "2"

    def test_file_store_persists(self, tmp_path: Path):
        path = tmp_path / "nested" / "store.json"
        JSONFileKVStore(path).put("k", "v")
        reopened = JSONFileKVStore(path)
        assert reopened.get("k") == "v"
        reopened.delete("k")
        assert JSONFileKVStore(path).get("k") is None

    def test_file_store_put_if(self, tmp_path: Path):
        store = JSONFileKVStore(tmp_path / "store.json")
        assert store.put_if("k", "1", None) is True
        assert store.put_if("k", "2", "stale") is False
        assert store.get("k") == "1"

    def test_file_store_corrupt(self, tmp_path: Path):
        path = tmp_path / "store.json"
        path.write_text("not json", encoding="utf-8")
        with pytest.raises(StoreError):
            JSONFileKVStore(path).get("k")

    def test_open_store(self, tmp_path: Path):
        assert isinstance(open_store("memory"), MemoryKVStore)
        assert isinstance(open_store("file", tmp_path / "s.json"), JSONFileKVStore)
        with pytest.raises(ValueError):
            open_store("redis")
