"""Tests for the two-tier result cache and its durable backends."""

from __future__ import annotations

import asyncio
import fnmatch
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from toolrunner.cache import CacheEntry, FileStore, MemoryTier, RedisStore, ResultCache, make_key


class MockRedisClient:
    """In-memory mock of sync Redis client for testing."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[bytes, int]] = {}  # key -> (value, ttl)

    def get(self, key: str) -> bytes | None:
        return self._data[key][0] if key in self._data else None

    def setex(self, name: str, time: int, value: bytes) -> bool:
        self._data[name] = (value, time)
        return True

    def delete(self, *names: str) -> int:
        count = sum(1 for n in names if n in self._data)
        for name in names:
            self._data.pop(name, None)
        return count

    def scan_iter(self, match: str) -> list[bytes]:
        return [k.encode() for k in self._data if fnmatch.fnmatch(k, match)]


class FailingStore:
    """Durable tier where every operation fails."""

    def load(self, key: str) -> CacheEntry | None:
        raise OSError("disk unavailable")

    def save(self, entry: CacheEntry) -> None:
        raise OSError("disk unavailable")

    def delete(self, key: str) -> bool:
        raise OSError("disk unavailable")

    def entries(self) -> list[CacheEntry]:
        raise OSError("disk unavailable")

    def clear(self) -> None:
        raise OSError("disk unavailable")


# ═════════════════════════════════════════════════════════════════════════════
# ResultCache
# ═════════════════════════════════════════════════════════════════════════════


def test_round_trip() -> None:
    """Test set followed by get returns the stored result."""
    cache = ResultCache()
    cache.set("get_weather", {"location": "SF"}, "R", ttl=60)

    assert cache.get("get_weather", {"location": "SF"}) == "R"
    assert cache.get("get_weather", {"location": "NYC"}) is None


def test_expired_entry_is_a_miss_and_removed() -> None:
    cache = ResultCache()
    cache.set("f", {"x": 1}, "R", ttl=0)
    time.sleep(0.01)

    assert cache.get("f", {"x": 1}) is None
    assert make_key("f", {"x": 1}) not in cache.memory


def test_stats_counters() -> None:
    cache = ResultCache()
    cache.set("f", {}, "result", ttl=60)
    cache.get("f", {})
    cache.get("f", {})
    cache.get("g", {})

    stats = cache.stats
    assert (stats.total_requests, stats.cache_hits, stats.cache_misses) == (3, 2, 1)
    assert stats.hit_rate == pytest.approx(2 / 3)
    assert stats.memory_usage == len("result")
    assert cache.memory.values()[0].hit_count == 2


def test_hit_rate_without_requests() -> None:
    assert ResultCache().stats.hit_rate == 0.0


def test_stats_is_a_snapshot() -> None:
    cache = ResultCache()
    before = cache.stats
    cache.get("f", {})
    assert before.total_requests == 0
    assert cache.stats.total_requests == 1


def test_set_rejects_negative_ttl() -> None:
    with pytest.raises(ValueError):
        ResultCache().set("f", {}, "R", ttl=-1)


def test_default_ttl_applies() -> None:
    cache = ResultCache(default_ttl=120)
    entry = cache.set("f", {}, "R")
    assert entry.expires_at - entry.created_at == pytest.approx(120)


def test_invalidate_by_function() -> None:
    """Test invalidate(name) removes only that function's entries."""
    cache = ResultCache()
    cache.set("a", {"q": 1}, "ra1", ttl=60)
    cache.set("a", {"q": 2}, "ra2", ttl=60)
    cache.set("b", {"q": 1}, "rb", ttl=60)

    assert cache.invalidate("a") == 2
    assert cache.get("a", {"q": 1}) is None
    assert cache.get("b", {"q": 1}) == "rb"
    assert cache.stats.evictions == 2


def test_invalidate_all_resets_stats() -> None:
    cache = ResultCache()
    cache.set("a", {}, "ra", ttl=60)
    cache.set("b", {}, "rb", ttl=60)
    cache.get("a", {})

    assert cache.invalidate() == 2
    assert cache.get("a", {}) is None
    stats = cache.stats
    assert stats.total_requests == 1  # the get above, after the reset
    assert stats.cache_hits == 0
    assert stats.evictions == 0


def test_invalidate_all_resets_capacity_evictions() -> None:
    cache = ResultCache(MemoryTier(max_entries=1))
    cache.set("f", {"n": 1}, "one", ttl=60)
    cache.set("f", {"n": 2}, "two", ttl=60)
    assert cache.stats.capacity_evictions == 1

    cache.invalidate()
    assert cache.stats.capacity_evictions == 0
    assert cache.memory.evictions == 0


def test_discard_single_call() -> None:
    cache = ResultCache()
    cache.set("f", {"x": 1}, "one", ttl=60)
    cache.set("f", {"x": 2}, "two", ttl=60)

    assert cache.discard("f", {"x": 1})
    assert not cache.discard("f", {"x": 1})
    assert cache.get("f", {"x": 2}) == "two"


def test_sweep_removes_only_expired(tmp_path: Path) -> None:
    cache = ResultCache(store=FileStore(tmp_path))
    cache.set("f", {"x": 1}, "stale", ttl=0)
    cache.set("f", {"x": 2}, "fresh", ttl=60)
    time.sleep(0.01)

    assert cache.sweep() == 1
    assert cache.stats.evictions == 1
    assert cache.get("f", {"x": 2}) == "fresh"
    assert len(list(FileStore(tmp_path).entries())) == 1


def test_entries_newest_first() -> None:
    cache = ResultCache()
    cache.set("f", {"n": 1}, "first", ttl=60)
    time.sleep(0.01)
    cache.set("f", {"n": 2}, "second", ttl=60)
    cache.set("f", {"n": 3}, "gone", ttl=0)

    assert [e.result for e in cache.entries()] == ["second", "first"]


@pytest.mark.asyncio
async def test_periodic_sweeper() -> None:
    cache = ResultCache()
    cache.set("f", {}, "R", ttl=0)
    cache.start_sweeper(interval=0.01)
    await asyncio.sleep(0.05)
    await cache.stop_sweeper()

    assert cache.memory.size == 0
    assert cache.stats.evictions == 1


# ═════════════════════════════════════════════════════════════════════════════
# Durable Tier
# ═════════════════════════════════════════════════════════════════════════════


def test_durable_hit_is_promoted(tmp_path: Path) -> None:
    """A fresh process reads through to the file store and promotes the hit."""
    ResultCache(store=FileStore(tmp_path)).set("search", {"query": "python"}, "R", ttl=60)

    cache = ResultCache(store=FileStore(tmp_path))
    key = make_key("search", {"query": "python"})
    assert key not in cache.memory

    assert cache.get("search", {"query": "python"}) == "R"
    assert key in cache.memory
    promoted = cache.memory.get(key)
    assert promoted is not None and promoted.hit_count == 1
    assert cache.stats.cache_hits == 1


def test_expired_durable_record_is_deleted(tmp_path: Path) -> None:
    store = FileStore(tmp_path)
    store.save(CacheEntry.create(make_key("f", {}), "f", {}, "old", ttl=10, now=time.time() - 60))

    assert ResultCache(store=store).get("f", {}) is None
    assert store.load(make_key("f", {})) is None


def test_file_store_record_layout(tmp_path: Path) -> None:
    import orjson

    store = FileStore(tmp_path)
    entry = CacheEntry.create("abc", "get_weather", {"location": "SF"}, "sunny", ttl=60)
    store.save(entry)

    record = orjson.loads((tmp_path / "abc.json").read_bytes())
    assert record["functionName"] == "get_weather"
    assert orjson.loads(record["argumentsJSON"]) == {"location": "SF"}
    assert record["sizeBytes"] == 5
    assert {"result", "createdAt", "expiresAt", "hitCount"} <= record.keys()
    assert not list(tmp_path.glob(".tmp-*"))
    assert store.load("abc") == entry


def test_corrupt_record_degrades_to_miss(tmp_path: Path) -> None:
    (tmp_path / f"{make_key('f', {})}.json").write_text("{not json")
    cache = ResultCache(store=FileStore(tmp_path))

    assert cache.get("f", {}) is None
    assert cache.entries() == []


def test_failing_store_never_raises() -> None:
    """Durable failures degrade to misses and skipped writes."""
    cache = ResultCache(store=FailingStore())

    cache.set("f", {}, "R", ttl=60)
    assert cache.get("f", {}) == "R"  # served by memory
    assert cache.get("g", {}) is None
    assert cache.invalidate("f") == 1
    assert cache.sweep() == 0
    assert cache.invalidate() == 0


def test_redis_store_round_trip() -> None:
    client = MockRedisClient()
    cache = ResultCache(store=RedisStore(client, prefix="test:"))
    cache.set("f", {"q": "a"}, "ra", ttl=30.5)
    cache.set("g", {"q": "b"}, "rb", ttl=60)

    name = f"test:{make_key('f', {'q': 'a'})}"
    assert client._data[name][1] == 31

    fresh = ResultCache(store=RedisStore(client, prefix="test:"))
    assert fresh.get("f", {"q": "a"}) == "ra"
    assert fresh.invalidate("g") == 1
    assert len(client._data) == 1
    fresh.invalidate()
    assert client._data == {}


# ═════════════════════════════════════════════════════════════════════════════
# MemoryTier
# ═════════════════════════════════════════════════════════════════════════════


def _entry(key: str, result: str = "xxxx") -> CacheEntry:
    return CacheEntry.create(key, "f", {}, result, ttl=60)


def test_memory_tier_evicts_least_recently_used() -> None:
    tier = MemoryTier(max_entries=2)
    tier.put(_entry("k1"))
    tier.put(_entry("k2"))
    tier.get("k1")
    tier.put(_entry("k3"))

    assert tier.keys() == ["k1", "k3"]
    assert tier.evictions == 1


def test_memory_tier_byte_limit() -> None:
    tier = MemoryTier(max_entries=10, max_bytes=10)
    tier.put(_entry("k1"))
    tier.put(_entry("k2"))
    tier.put(_entry("k3"))

    assert tier.keys() == ["k2", "k3"]
    assert tier.total_bytes == 8
    assert not tier.put(_entry("big", "x" * 11))
    assert "big" not in tier


def test_memory_tier_replace_keeps_byte_count() -> None:
    tier = MemoryTier()
    tier.put(_entry("k", "aa"))
    tier.put(_entry("k", "aaaa"))
    assert tier.size == 1
    assert tier.total_bytes == 4


def test_capacity_eviction_leaves_durable_tier(tmp_path: Path) -> None:
    cache = ResultCache(MemoryTier(max_entries=1), FileStore(tmp_path))
    cache.set("f", {"n": 1}, "one", ttl=60)
    cache.set("f", {"n": 2}, "two", ttl=60)

    assert cache.stats.capacity_evictions == 1
    assert cache.stats.evictions == 0
    assert cache.get("f", {"n": 1}) == "one"  # from the file store


def test_memory_tier_rejects_bad_limits() -> None:
    with pytest.raises(ValueError):
        MemoryTier(max_entries=0)


# ═════════════════════════════════════════════════════════════════════════════
# Durable Usage
# ═════════════════════════════════════════════════════════════════════════════


def test_disk_usage_follows_writes_and_deletes(tmp_path: Path) -> None:
    cache = ResultCache(store=FileStore(tmp_path))
    assert cache.stats.disk_usage == 0

    cache.set("f", {"n": 1}, "aaaa", ttl=60)
    cache.set("f", {"n": 2}, "bb", ttl=60)
    assert cache.stats.disk_usage == 6

    cache.set("f", {"n": 1}, "a", ttl=60)  # replace shrinks the total
    assert cache.stats.disk_usage == 3

    cache.discard("f", {"n": 2})
    assert cache.stats.disk_usage == 1

    cache.invalidate()
    assert cache.stats.disk_usage == 0


def test_disk_usage_seeded_from_existing_records(tmp_path: Path) -> None:
    ResultCache(store=FileStore(tmp_path)).set("f", {}, "hello", ttl=60)

    cache = ResultCache(store=FileStore(tmp_path))
    assert cache.stats.disk_usage == 5
    cache.set("g", {}, "xyz", ttl=60)
    assert cache.stats.disk_usage == 8
    assert cache.invalidate("f") == 1
    assert cache.stats.disk_usage == 3


def test_disk_usage_without_durable_tier() -> None:
    cache = ResultCache()
    cache.set("f", {}, "R", ttl=60)
    assert cache.stats.disk_usage == 0


# ═════════════════════════════════════════════════════════════════════════════
# Async Variants
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_async_round_trip_with_file_store(tmp_path: Path) -> None:
    cache = ResultCache(store=FileStore(tmp_path))
    entry = await cache.aset("search", {"query": "python"}, "R", ttl=60)

    assert entry.key == make_key("search", {"query": "python"})
    assert await cache.aget("search", {"query": "python"}) == "R"
    assert await cache.aget("search", {"query": "rust"}) is None
    assert await ResultCache(store=FileStore(tmp_path)).aget("search", {"query": "python"}) == "R"

    assert await cache.adiscard("search", {"query": "python"})
    assert await cache.aget("search", {"query": "python"}) is None
    stats = cache.stats
    assert (stats.total_requests, stats.cache_hits, stats.cache_misses) == (3, 1, 2)


@pytest.mark.asyncio
async def test_async_invalidate_and_sweep(tmp_path: Path) -> None:
    cache = ResultCache(store=FileStore(tmp_path))
    await cache.aset("a", {}, "ra", ttl=60)
    await cache.aset("b", {}, "rb", ttl=0)
    await asyncio.sleep(0.01)

    assert await cache.asweep() == 1
    assert await cache.ainvalidate("a") == 1
    assert await cache.ainvalidate() == 0
    assert list(FileStore(tmp_path).entries()) == []


@pytest.mark.asyncio
async def test_async_variants_without_durable_tier() -> None:
    cache = ResultCache()
    await cache.aset("f", {}, "R", ttl=60)
    assert await cache.aget("f", {}) == "R"
    assert await cache.ainvalidate() == 1


# ═════════════════════════════════════════════════════════════════════════════
# Concurrency
# ═════════════════════════════════════════════════════════════════════════════


def test_threaded_access_keeps_counters_consistent() -> None:
    """Test concurrent get/set from many threads leaves hits + misses == requests."""
    cache = ResultCache(MemoryTier(max_entries=16))

    def worker(n: int) -> None:
        for i in range(200):
            key = {"k": (n + i) % 32}
            if cache.get("f", key) is None:
                cache.set("f", key, f"r{i}", ttl=60)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(8)))

    stats = cache.stats
    assert stats.total_requests == 8 * 200
    assert stats.total_requests == stats.cache_hits + stats.cache_misses
    assert cache.memory.size <= 16


@pytest.mark.asyncio
async def test_gathered_async_access(tmp_path: Path) -> None:
    cache = ResultCache(store=FileStore(tmp_path))

    async def one(n: int) -> str | None:
        await cache.aset("f", {"n": n % 5}, f"r{n % 5}", ttl=60)
        return await cache.aget("f", {"n": n % 5})

    results = await asyncio.gather(*(one(n) for n in range(40)))

    assert results == [f"r{n % 5}" for n in range(40)]
    stats = cache.stats
    assert (stats.total_requests, stats.cache_hits) == (40, 40)
    assert stats.disk_usage == 5 * 2
