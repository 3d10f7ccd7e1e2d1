"""Durable cache tier backends.

Backends:
    - FileStore: one orjson record per key under a directory (default)
    - RedisStore: sync redis-py client (requires toolrunner[redis])
    - NullStore: no durable tier

Backends raise their native errors (OSError, redis errors, decode errors);
ResultCache downgrades every store failure to a miss or a skipped write.
"""

from __future__ import annotations

import math
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .entry import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Iterator

_SUFFIX = ".json"


@runtime_checkable
class DurableStore(Protocol):
    """Protocol for durable tiers (enables custom implementations)."""

    def load(self, key: str) -> CacheEntry | None: ...
    def save(self, entry: CacheEntry) -> None: ...
    def delete(self, key: str) -> bool: ...
    def entries(self) -> Iterator[CacheEntry]: ...
    def clear(self) -> None: ...


class NullStore:
    """Durable tier that stores nothing."""

    __slots__ = ()

    def load(self, key: str) -> CacheEntry | None:
        return None

    def save(self, entry: CacheEntry) -> None:
        pass

    def delete(self, key: str) -> bool:
        return False

    def entries(self) -> Iterator[CacheEntry]:
        return iter(())

    def clear(self) -> None:
        pass


class FileStore:
    """File-per-key durable tier.

    Writes go to a temp file in the same directory and are moved into place
    with os.replace, so readers see either the old record or the new one.

    Args:
        directory: Cache directory (created if missing)

    Example:
        >>> store = FileStore(Path("~/.cache/toolrunner").expanduser())
        >>> cache = ResultCache(store=store)
    """

    __slots__ = ("_dir",)

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}{_SUFFIX}"

    def load(self, key: str) -> CacheEntry | None:
        try:
            data = self._path(key).read_bytes()
        except FileNotFoundError:
            return None
        return CacheEntry.from_record(data)

    def save(self, entry: CacheEntry) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(entry.to_record())
            os.replace(tmp, self._path(entry.key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            return False

    def entries(self) -> Iterator[CacheEntry]:
        """Yield every readable record. Unreadable files are skipped."""
        for path in self._dir.glob(f"*{_SUFFIX}"):
            if path.name.startswith(".tmp-"):
                continue
            try:
                yield CacheEntry.from_record(path.read_bytes())
            except (OSError, ValueError, KeyError, TypeError):
                continue

    def clear(self) -> None:
        for path in self._dir.glob(f"*{_SUFFIX}"):
            path.unlink(missing_ok=True)


@runtime_checkable
class RedisClient(Protocol):
    """Protocol for sync Redis client (duck typing)."""
    def get(self, key: str) -> bytes | None: ...
    def setex(self, name: str, time: int, value: bytes) -> bool: ...
    def delete(self, *names: str) -> int: ...
    def scan_iter(self, match: str) -> object: ...


def _import_redis() -> object:
    """Lazy import redis with clear error."""
    try:
        import redis
        return redis
    except ImportError as e:
        raise ImportError(
            "Redis durable tier requires the redis package. "
            "Install with: pip install toolrunner[redis]"
        ) from e


class RedisStore:
    """Redis-backed durable tier for shared deployments.

    Records are written with SETEX so Redis expires them natively as well.

    Args:
        client: Existing sync Redis client
        prefix: Key prefix for namespacing (default: "toolrunner:")

    Example:
        >>> store = RedisStore.from_url("redis://localhost:6379/0")
    """

    __slots__ = ("_client", "_prefix")

    def __init__(self, client: RedisClient, prefix: str = "toolrunner:") -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "toolrunner:", **redis_kwargs: object) -> RedisStore:
        redis = _import_redis()
        client = redis.from_url(url, **redis_kwargs)  # type: ignore[attr-defined]
        return cls(client, prefix)

    def _name(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def load(self, key: str) -> CacheEntry | None:
        val = self._client.get(self._name(key))
        return CacheEntry.from_record(val) if val else None

    def save(self, entry: CacheEntry) -> None:
        ttl = max(1, math.ceil(entry.ttl_remaining))
        self._client.setex(self._name(entry.key), ttl, entry.to_record())

    def delete(self, key: str) -> bool:
        return self._client.delete(self._name(key)) > 0

    def _names(self) -> list[str]:
        return [n.decode() if isinstance(n, bytes) else n for n in self._client.scan_iter(match=f"{self._prefix}*")]  # type: ignore[attr-defined]

    def entries(self) -> Iterator[CacheEntry]:
        for name in self._names():
            if (val := self._client.get(name)) is None:
                continue
            try:
                yield CacheEntry.from_record(val)
            except (ValueError, KeyError, TypeError):
                continue

    def clear(self) -> None:
        if names := self._names():
            self._client.delete(*names)
