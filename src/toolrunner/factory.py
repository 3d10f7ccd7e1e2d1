"""Build pipeline components from ToolrunnerSettings.

Every factory takes an optional settings object and falls back to
get_settings(), so an application can wire everything from the environment:

    >>> cached = build_cached_executor()
    >>> await cached.execute("get_weather", {"location": "SF"})
"""

from __future__ import annotations

from toolrunner.cache import FileStore, MemoryTier, NullStore, RedisStore, ResultCache
from toolrunner.cache.store import DurableStore
from toolrunner.foundation.config import ToolrunnerSettings, get_settings
from toolrunner.functions import CachedExecutor, FunctionExecutor, FunctionRegistry, register_builtins
from toolrunner.observability import get_logger

log = get_logger("toolrunner.factory")


def build_store(settings: ToolrunnerSettings | None = None) -> DurableStore:
    """Durable tier selected by cache settings: redis, file, or none."""
    cfg = (settings or get_settings()).cache
    if cfg.redis_url:
        return RedisStore.from_url(cfg.redis_url.get_secret_value())
    if cfg.directory:
        return FileStore(cfg.directory.expanduser())
    return NullStore()


def build_cache(settings: ToolrunnerSettings | None = None) -> ResultCache:
    settings = settings or get_settings()
    cfg = settings.cache
    cache = ResultCache(
        MemoryTier(max_entries=cfg.max_entries, max_bytes=int(cfg.max_bytes)),
        build_store(settings),
        default_ttl=cfg.ttl,
        sweep_interval=cfg.sweep_interval,
    )
    log.debug("cache built", backend=cfg.backend, ttl=cfg.ttl, max_entries=cfg.max_entries)
    return cache


def build_registry(settings: ToolrunnerSettings | None = None) -> FunctionRegistry:
    cfg = (settings or get_settings()).executor
    registry = FunctionRegistry()
    if cfg.register_builtins:
        register_builtins(registry, latency=cfg.simulated_latency)
    return registry


def build_executor(
    settings: ToolrunnerSettings | None = None,
    registry: FunctionRegistry | None = None,
) -> FunctionExecutor:
    """Executor over `registry`, or over a fresh registry built from settings."""
    return FunctionExecutor(registry if registry is not None else build_registry(settings))


def build_cached_executor(settings: ToolrunnerSettings | None = None) -> CachedExecutor:
    settings = settings or get_settings()
    return CachedExecutor(build_executor(settings), build_cache(settings))
