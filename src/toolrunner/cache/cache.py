"""Two-tier function result cache with TTL support.

Lookups check the memory tier first, then the durable tier (promoting hits
into memory). Writes go to both tiers. A periodic sweep removes expired
entries from both tiers. Durable-tier failures never reach the caller: reads
degrade to a miss and writes are skipped.

The async variants (aget, aset, adiscard, ainvalidate, asweep) run durable
I/O in a worker thread so the event loop never blocks on disk or Redis.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Callable, TypeVar

from toolrunner.foundation.errors import JsonDict
from toolrunner.observability import get_logger

from .entry import CacheEntry, CacheStats
from .keys import make_key
from .memory import MemoryTier
from .store import DurableStore, NullStore

if TYPE_CHECKING:
    from pydantic import BaseModel

DEFAULT_TTL: float = 3600.0  # 1 hour
DEFAULT_SWEEP_INTERVAL: float = 300.0  # 5 minutes

T = TypeVar("T")

log = get_logger("toolrunner.cache")


def _as_dict(arguments: BaseModel | Mapping[str, object]) -> JsonDict:
    if hasattr(arguments, "model_dump"):
        return arguments.model_dump(mode="json")  # type: ignore[union-attr]
    return dict(arguments)  # type: ignore[arg-type]


class ResultCache:
    """Memory + durable cache of function results keyed by call content.

    Args:
        memory: Fast tier (default: MemoryTier with default limits)
        store: Durable tier (default: NullStore)
        default_ttl: TTL in seconds used when set() gets none
        sweep_interval: Default period for start_sweeper()

    `stats.disk_usage` is the summed size of durable records this cache
    knows about: seeded by one scan of the store, then kept up to date from
    each save and delete.

    Example:
        >>> cache = ResultCache(store=FileStore("/tmp/fncache"))
        >>> _ = cache.set("get_weather", {"location": "SF"}, '{"temp": 72}', ttl=60)
        >>> cache.get("get_weather", {"location": "SF"})
        '{"temp": 72}'
        >>> cache.stats.hit_rate
        1.0
    """

    __slots__ = (
        "_memory", "_store", "_default_ttl", "_sweep_interval", "_stats", "_lock", "_sweeper",
        "_durable_sizes", "_disk_bytes",
    )

    def __init__(
        self,
        memory: MemoryTier | None = None,
        store: DurableStore | None = None,
        *,
        default_ttl: float = DEFAULT_TTL,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
    ) -> None:
        self._memory = memory if memory is not None else MemoryTier()
        self._store: DurableStore = store if store is not None else NullStore()
        self._default_ttl = default_ttl
        self._sweep_interval = sweep_interval
        self._stats = CacheStats()
        self._lock = threading.RLock()  # guards stats, hit counters and durable sizes
        self._sweeper: asyncio.Task[None] | None = None
        self._durable_sizes: dict[str, int] | None = None  # key -> size, None until first scan
        self._disk_bytes = 0

    @property
    def memory(self) -> MemoryTier:
        return self._memory

    @property
    def store(self) -> DurableStore:
        return self._store

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    @property
    def has_durable_tier(self) -> bool:
        return not isinstance(self._store, NullStore)

    # ─────────────────────────────────────────────────────────────────
    # Core operations
    # ─────────────────────────────────────────────────────────────────

    def get(self, function_name: str, arguments: BaseModel | Mapping[str, object]) -> str | None:
        """Return cached result or None. Every call counts toward total_requests."""
        key = make_key(function_name, arguments)

        entry = self._memory.get(key)
        if entry is not None:
            if not entry.expired:
                with self._lock:
                    entry.hit_count += 1
                    self._stats.total_requests += 1
                    self._stats.cache_hits += 1
                return entry.result
            self._memory.pop(key)

        entry = self._guarded(lambda: self._store.load(key), "load", None, key=key)
        if entry is not None and entry.expired:
            if self._guarded(lambda: self._store.delete(key), "delete", False, key=key):
                self._track(key, None)
            entry = None

        with self._lock:
            self._stats.total_requests += 1
            if entry is None:
                self._stats.cache_misses += 1
                return None
            entry.hit_count += 1
            self._stats.cache_hits += 1
        self._memory.put(entry)
        log.debug("promoted durable entry", function=function_name, key=key)
        return entry.result

    def set(
        self,
        function_name: str,
        arguments: BaseModel | Mapping[str, object],
        result: str,
        ttl: float | None = None,
    ) -> CacheEntry:
        """Store result in both tiers with expiry now + ttl."""
        ttl = self._default_ttl if ttl is None else ttl
        if ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {ttl}")
        entry = CacheEntry.create(make_key(function_name, arguments), function_name, _as_dict(arguments), result, ttl)
        self._memory.put(entry)
        if self.has_durable_tier and self._guarded(lambda: _saved(self._store, entry), "save", False, key=entry.key):
            self._track(entry.key, entry.size)
        return entry

    def discard(self, function_name: str, arguments: BaseModel | Mapping[str, object]) -> bool:
        """Remove a single call's entry from both tiers."""
        key = make_key(function_name, arguments)
        in_memory = self._memory.pop(key) is not None
        on_disk = bool(self._guarded(lambda: self._store.delete(key), "delete", False, key=key))
        if on_disk:
            self._track(key, None)
        return in_memory or on_disk

    def invalidate(self, function_name: str | None = None) -> int:
        """Drop entries for one function (counted as evictions), or everything.

        Clearing everything also resets statistics. Returns entries removed.
        """
        if function_name is None:
            removed = len(set(self._memory.keys()) | {e.key for e in self._durable_entries()})
            self._memory.clear()
            cleared = self._guarded(lambda: _cleared(self._store), "clear", False)
            with self._lock:
                self._stats = CacheStats()
                if cleared:
                    self._durable_sizes, self._disk_bytes = {}, 0
            log.info("cache cleared", removed=removed)
            return removed

        removed = self._remove_where(lambda e: e.function_name == function_name)
        log.info("cache invalidated", function=function_name, removed=removed)
        return removed

    def sweep(self) -> int:
        """Remove expired entries from both tiers. Returns count removed."""
        removed = self._remove_where(lambda e: e.expired)
        if removed:
            log.debug("expired entries swept", removed=removed)
        return removed

    # ─────────────────────────────────────────────────────────────────
    # Async variants
    # ─────────────────────────────────────────────────────────────────

    async def aget(self, function_name: str, arguments: BaseModel | Mapping[str, object]) -> str | None:
        return await self._offload(self.get, function_name, arguments)

    async def aset(
        self,
        function_name: str,
        arguments: BaseModel | Mapping[str, object],
        result: str,
        ttl: float | None = None,
    ) -> CacheEntry:
        return await self._offload(self.set, function_name, arguments, result, ttl)

    async def adiscard(self, function_name: str, arguments: BaseModel | Mapping[str, object]) -> bool:
        return await self._offload(self.discard, function_name, arguments)

    async def ainvalidate(self, function_name: str | None = None) -> int:
        return await self._offload(self.invalidate, function_name)

    async def asweep(self) -> int:
        return await self._offload(self.sweep)

    async def _offload(self, fn: Callable[..., T], *args: object) -> T:
        """Run fn in a worker thread when it may touch the durable tier."""
        if not self.has_durable_tier:
            return fn(*args)
        return await asyncio.to_thread(fn, *args)

    # ─────────────────────────────────────────────────────────────────
    # Introspection
    # ─────────────────────────────────────────────────────────────────

    @property
    def stats(self) -> CacheStats:
        """Snapshot of counters."""
        self._known_sizes()
        with self._lock:
            self._stats.memory_usage = self._memory.total_bytes
            self._stats.capacity_evictions = self._memory.evictions
            self._stats.disk_usage = self._disk_bytes
            return self._stats.snapshot()

    def entries(self) -> list[CacheEntry]:
        """Live entries across both tiers, newest first. Memory copies win (current hit counts)."""
        merged = {e.key: e for e in self._durable_entries()}
        merged.update({e.key: e for e in self._memory.values()})
        return sorted((e for e in merged.values() if not e.expired), key=lambda e: e.created_at, reverse=True)

    # ─────────────────────────────────────────────────────────────────
    # Periodic sweep
    # ─────────────────────────────────────────────────────────────────

    async def run_sweeper(self, interval: float | None = None) -> None:
        """Sweep forever every `interval` seconds (cancel the task to stop)."""
        while True:
            await asyncio.sleep(self._sweep_interval if interval is None else interval)
            await self.asweep()

    def start_sweeper(self, interval: float | None = None) -> asyncio.Task[None]:
        """Start the sweep loop on the running event loop (idempotent)."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self.run_sweeper(interval))
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    # ─────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────

    def _remove_where(self, predicate: Callable[[CacheEntry], bool]) -> int:
        keys = set(self._memory.remove_where(predicate))
        for entry in self._durable_entries():
            if predicate(entry) and self._guarded(lambda k=entry.key: self._store.delete(k), "delete", False, key=entry.key):
                self._track(entry.key, None)
                keys.add(entry.key)
        with self._lock:
            self._stats.evictions += len(keys)
        return len(keys)

    def _durable_entries(self) -> list[CacheEntry]:
        return self._guarded(lambda: list(self._store.entries()), "scan", [])

    def _known_sizes(self) -> None:
        """Seed durable record sizes with one scan of the store on first use."""
        if self._durable_sizes is None:
            sizes = {e.key: e.size for e in self._durable_entries()}
            with self._lock:
                if self._durable_sizes is None:
                    self._durable_sizes, self._disk_bytes = sizes, sum(sizes.values())

    def _track(self, key: str, size: int | None) -> None:
        """Record a durable save (size) or delete (None) in the usage total."""
        self._known_sizes()
        with self._lock:
            if (sizes := self._durable_sizes) is None:
                return
            self._disk_bytes -= sizes.pop(key, 0)
            if size is not None:
                sizes[key] = size
                self._disk_bytes += size

    def _guarded(self, op: Callable[[], T], action: str, fallback: T, **ctx: str) -> T:
        """Run a durable-tier operation; any failure degrades to fallback."""
        try:
            return op()
        except Exception as e:
            log.warning("durable tier failure", action=action, error=f"{type(e).__name__}: {e}", **ctx)
            return fallback


def _saved(store: DurableStore, entry: CacheEntry) -> bool:
    store.save(entry)
    return True


def _cleared(store: DurableStore) -> bool:
    store.clear()
    return True
