"""Cache-aware front end for FunctionExecutor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from toolrunner.cache import CacheEntry, CacheStats, ResultCache
from toolrunner.observability import get_logger

from .executor import FunctionExecutor

log = get_logger("toolrunner.cached")


class CachedExecutor:
    """Serves repeated calls from a ResultCache, executing only on miss.

    Only successful results are stored; error payloads are returned but never
    cached, so a transient failure is retried on the next call. Lookups and
    writes use ResultCache.aget / aset, keeping durable I/O off the loop.

    `last_result`, `cache_used` and `is_executing` describe the most recent
    call for display purposes (e.g. a "served from cache" badge).

    Example:
        >>> cached = CachedExecutor(executor, ResultCache())
        >>> await cached.execute("get_weather", {"location": "SF"}, ttl=3600)
        >>> await cached.execute("get_weather", {"location": "SF"}, ttl=3600)
        >>> cached.cache_used
        True
    """

    __slots__ = ("_executor", "_cache", "last_result", "cache_used", "_in_flight")

    def __init__(self, executor: FunctionExecutor, cache: ResultCache) -> None:
        self._executor = executor
        self._cache = cache
        self.last_result: str | None = None
        self.cache_used = False
        self._in_flight = 0

    @property
    def executor(self) -> FunctionExecutor:
        return self._executor

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def is_executing(self) -> bool:
        return self._in_flight > 0

    async def execute(
        self,
        function_name: str,
        arguments: Mapping[str, Any] | None = None,
        ttl: float | None = None,
        force_refresh: bool = False,
    ) -> str:
        """Return the function's result text, from cache when possible.

        Args:
            function_name: Registered function to run
            arguments: Decoded arguments
            ttl: Cache lifetime in seconds (default: the cache's default TTL)
            force_refresh: Skip the lookup and overwrite any cached value
        """
        arguments = dict(arguments or {})
        self._in_flight += 1
        self.cache_used = False
        try:
            if not force_refresh and (cached := await self._cache.aget(function_name, arguments)) is not None:
                self.cache_used = True
                self.last_result = cached
                log.debug("served from cache", function=function_name)
                return cached

            message = await self._executor.call(function_name, arguments)
            if not message.is_error:
                await self._cache.aset(function_name, arguments, message.content, ttl)
            self.last_result = message.content
            return message.content
        finally:
            self._in_flight -= 1

    # ─────────────────────────────────────────────────────────────────
    # Cache passthroughs
    # ─────────────────────────────────────────────────────────────────

    @property
    def stats(self) -> CacheStats:
        return self._cache.stats

    def entries(self) -> list[CacheEntry]:
        return self._cache.entries()

    def invalidate(self, function_name: str | None = None) -> int:
        return self._cache.invalidate(function_name)
