"""Fast in-memory cache tier.

Thread-safe LRU bounded by entry count and by total byte cost. Evictions
here are capacity-driven and never touch the durable tier.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .entry import CacheEntry

DEFAULT_MAX_ENTRIES = 100
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class MemoryTier:
    """LRU mapping of cache key -> CacheEntry.

    Args:
        max_entries: Maximum number of entries held
        max_bytes: Maximum summed `CacheEntry.size`

    Example:
        >>> from toolrunner.cache import CacheEntry
        >>> tier = MemoryTier(max_entries=2)
        >>> tier.put(CacheEntry.create("k1", "f", {}, "a", ttl=60))
        True
        >>> tier.get("k1").result
        'a'
    """

    __slots__ = ("_entries", "_max_entries", "_max_bytes", "_bytes", "_evictions", "_lock")

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        if max_entries < 1 or max_bytes < 1:
            raise ValueError("max_entries and max_bytes must be positive")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_entries = max_entries
        self._max_bytes = max_bytes
        self._bytes = 0
        self._evictions = 0
        self._lock = threading.RLock()

    def get(self, key: str) -> CacheEntry | None:
        """Return entry and mark it most recently used. Expiry is the caller's concern."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def put(self, entry: CacheEntry) -> bool:
        """Insert or replace. Returns False if the entry alone exceeds max_bytes."""
        if entry.size > self._max_bytes:
            return False
        with self._lock:
            self._discard_unlocked(entry.key)
            self._entries[entry.key] = entry
            self._bytes += entry.size
            self._enforce_limits_unlocked()
            return True

    def pop(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._discard_unlocked(key)

    def remove_where(self, predicate: Callable[[CacheEntry], bool]) -> list[str]:
        """Remove all entries matching predicate, returning their keys."""
        with self._lock:
            keys = [k for k, e in self._entries.items() if predicate(e)]
            for key in keys:
                self._discard_unlocked(key)
            return keys

    def clear(self) -> None:
        """Drop every entry and zero the eviction counter."""
        with self._lock:
            self._entries.clear()
            self._bytes = 0
            self._evictions = 0

    def values(self) -> list[CacheEntry]:
        with self._lock:
            return list(self._entries.values())

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._bytes

    @property
    def evictions(self) -> int:
        """Entries dropped to honour max_entries / max_bytes."""
        return self._evictions

    def _discard_unlocked(self, key: str) -> CacheEntry | None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._bytes -= entry.size
        return entry

    def _enforce_limits_unlocked(self) -> None:
        """Evict least recently used until both limits hold. Caller must hold lock."""
        while self._entries and (len(self._entries) > self._max_entries or self._bytes > self._max_bytes):
            _, evicted = self._entries.popitem(last=False)
            self._bytes -= evicted.size
            self._evictions += 1
