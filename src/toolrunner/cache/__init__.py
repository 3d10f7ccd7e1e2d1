"""Function result caching with TTL support.

Results are cached under a SHA-256 key derived from the function name and
its sorted arguments, in two tiers:
    - MemoryTier: thread-safe LRU bounded by entry count and bytes
    - Durable tier: FileStore (default), RedisStore (requires toolrunner[redis]), or NullStore

ResultCache ties the tiers together and tracks hit/miss/eviction statistics.
"""

from .cache import DEFAULT_SWEEP_INTERVAL, DEFAULT_TTL, ResultCache
from .entry import CacheEntry, CacheStats
from .keys import canonical_arguments, make_key
from .memory import MemoryTier
from .store import DurableStore, FileStore, NullStore, RedisClient, RedisStore

__all__ = [
    "ResultCache",
    "MemoryTier",
    "DurableStore",
    "FileStore",
    "NullStore",
    "RedisStore",
    "RedisClient",
    "CacheEntry",
    "CacheStats",
    "make_key",
    "canonical_arguments",
    "DEFAULT_TTL",
    "DEFAULT_SWEEP_INTERVAL",
]
