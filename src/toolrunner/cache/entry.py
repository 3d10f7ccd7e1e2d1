"""Cache entry and statistics records."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, replace

import orjson

from toolrunner.foundation.errors import JsonDict


@dataclass(slots=True)
class CacheEntry:
    """A cached function result with expiration tracking.

    `size` is the UTF-8 byte length of `result` and doubles as the entry's
    cost in the memory tier.
    """

    key: str
    function_name: str
    arguments: JsonDict
    result: str
    created_at: float
    expires_at: float
    size: int = 0
    hit_count: int = 0

    @classmethod
    def create(
        cls,
        key: str,
        function_name: str,
        arguments: JsonDict,
        result: str,
        ttl: float,
        *,
        now: float | None = None,
    ) -> CacheEntry:
        created = time.time() if now is None else now
        return cls(
            key=key,
            function_name=function_name,
            arguments=dict(arguments),
            result=result,
            created_at=created,
            expires_at=created + ttl,
            size=len(result.encode()),
        )

    @property
    def expired(self) -> bool:
        return time.time() >= self.expires_at

    @property
    def ttl_remaining(self) -> float:
        return max(0.0, self.expires_at - time.time())

    def to_record(self) -> bytes:
        """Serialize as a durable record (`argumentsJSON` keeps arguments as text)."""
        return orjson.dumps({
            "key": self.key,
            "functionName": self.function_name,
            "argumentsJSON": orjson.dumps(self.arguments, option=orjson.OPT_SORT_KEYS, default=str).decode(),
            "result": self.result,
            "createdAt": self.created_at,
            "expiresAt": self.expires_at,
            "sizeBytes": self.size,
            "hitCount": self.hit_count,
        })

    @classmethod
    def from_record(cls, data: bytes | str) -> CacheEntry:
        """Inverse of to_record. Raises orjson.JSONDecodeError / KeyError / TypeError on bad records."""
        raw = orjson.loads(data)
        return cls(
            key=raw["key"],
            function_name=raw["functionName"],
            arguments=orjson.loads(raw["argumentsJSON"]),
            result=raw["result"],
            created_at=float(raw["createdAt"]),
            expires_at=float(raw["expiresAt"]),
            size=int(raw["sizeBytes"]),
            hit_count=int(raw.get("hitCount", 0)),
        )


@dataclass(slots=True)
class CacheStats:
    """Aggregate cache counters. `hit_rate` is 0.0 until the first request."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    memory_usage: int = 0
    disk_usage: int = 0
    evictions: int = 0
    capacity_evictions: int = 0

    @property
    def hit_rate(self) -> float:
        return self.cache_hits / self.total_requests if self.total_requests else 0.0

    def snapshot(self) -> CacheStats:
        return replace(self)

    def as_dict(self) -> JsonDict:
        return {**asdict(self), "hit_rate": self.hit_rate}
