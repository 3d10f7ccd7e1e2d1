"""Configuration management using pydantic-settings."""

from .settings import (
    CacheSettings,
    ExecutorSettings,
    LoggingSettings,
    ToolrunnerSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "CacheSettings",
    "ExecutorSettings",
    "LoggingSettings",
    "ToolrunnerSettings",
    "clear_settings_cache",
    "get_settings",
]
