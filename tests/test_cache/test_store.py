"""Tests for postfetch.cache.store -- disk, memory, and null stores."""

from __future__ import annotations

import time

import pytest

from postfetch.cache import MISSING, DiskStore, KeyValueStore, MemoryStore, NullStore, open_store
from postfetch.exceptions import ConfigError
from postfetch.models import CacheConfig, Post


@pytest.fixture()
def disk_store(tmp_path):
    store = DiskStore(tmp_path / "store", ttl_seconds=300)
    yield store
    store.close()


# ------------------------------------------------------------------ #
# DiskStore
# ------------------------------------------------------------------ #


class TestDiskStore:
    def test_miss_returns_default(self, disk_store: DiskStore) -> None:
        assert disk_store.get("nope") is MISSING
        assert disk_store.get("nope", None) is None

    def test_round_trips_models(self, disk_store: DiskStore) -> None:
        post = Post(id=1, owner_id=2, title="t", body="b")
        disk_store.set("post:1", [post])
        assert disk_store.get("post:1") == [post]

    def test_none_is_a_value(self, disk_store: DiskStore) -> None:
        disk_store.set("k", None)
        assert disk_store.get("k") is None

    def test_persists_across_instances(self, tmp_path) -> None:
        first = DiskStore(tmp_path / "store")
        first.set("k", {"a": 1})
        first.close()
        second = DiskStore(tmp_path / "store")
        try:
            assert second.get("k") == {"a": 1}
        finally:
            second.close()

    def test_entries_expire(self, tmp_path) -> None:
        store = DiskStore(tmp_path / "store", ttl_seconds=1)
        try:
            store.set("k", "v")
            time.sleep(1.2)
            assert store.get("k") is MISSING
        finally:
            store.close()

    def test_zero_ttl_never_expires(self, tmp_path) -> None:
        store = DiskStore(tmp_path / "store", ttl_seconds=0)
        try:
            store.set("k", "v")
            assert store.get("k") == "v"
        finally:
            store.close()

    def test_clear_returns_count(self, disk_store: DiskStore) -> None:
        disk_store.set("a", 1)
        disk_store.set("b", 2)
        assert disk_store.clear() == 2
        assert disk_store.get("a") is MISSING

    def test_stats(self, disk_store: DiskStore, tmp_path) -> None:
        disk_store.set("a", 1)
        stats = disk_store.stats()
        assert stats["backend"] == "disk"
        assert stats["size"] == 1
        assert stats["directory"] == str(tmp_path / "store")
        assert stats["ttl_seconds"] == 300


# ------------------------------------------------------------------ #
# MemoryStore / NullStore
# ------------------------------------------------------------------ #


class TestMemoryStore:
    def test_set_get_clear(self) -> None:
        store = MemoryStore()
        store.set("a", 1)
        assert store.get("a") == 1
        assert store.stats() == {"backend": "memory", "size": 1}
        assert store.clear() == 1
        assert store.get("a") is MISSING

    def test_overwrite(self) -> None:
        store = MemoryStore()
        store.set("a", 1)
        store.set("a", 2)
        assert store.get("a") == 2

    def test_mutating_result_does_not_change_entry(self) -> None:
        store = MemoryStore()
        store.set("posts", [Post(id=1), Post(id=2)])
        result = store.get("posts")
        result.append(Post(id=3))
        result.clear()
        assert [p.id for p in store.get("posts")] == [1, 2]

    def test_mutating_stored_value_does_not_change_entry(self) -> None:
        store = MemoryStore()
        data = {"id": 1}
        store.set("user", data)
        data["id"] = 2
        assert store.get("user") == {"id": 1}


class TestNullStore:
    def test_forgets_everything(self) -> None:
        store = NullStore()
        store.set("a", 1)
        assert store.get("a") is MISSING
        assert store.clear() == 0
        assert store.stats()["backend"] == "none"


@pytest.mark.parametrize("store_cls", [MemoryStore, NullStore])
def test_stores_satisfy_protocol(store_cls) -> None:
    assert isinstance(store_cls(), KeyValueStore)


# ------------------------------------------------------------------ #
# open_store
# ------------------------------------------------------------------ #


class TestOpenStore:
    def test_disabled_gives_null_store(self, tmp_path) -> None:
        store = open_store(CacheConfig(enabled=False), tmp_path)
        assert isinstance(store, NullStore)

    def test_disk_backend(self, tmp_path) -> None:
        store = open_store(CacheConfig(backend="disk", ttl_seconds=60), tmp_path)
        try:
            assert isinstance(store, DiskStore)
            assert store.stats()["directory"] == str(tmp_path / "store")
            assert store.stats()["ttl_seconds"] == 60
        finally:
            store.close()

    def test_memory_backend_case_insensitive(self, tmp_path) -> None:
        assert isinstance(open_store(CacheConfig(backend="Memory"), tmp_path), MemoryStore)

    def test_unknown_backend_raises(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="redis"):
            open_store(CacheConfig(backend="redis"), tmp_path)
