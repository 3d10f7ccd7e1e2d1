"""Environment-based configuration using pydantic-settings.

Example:
    >>> from toolrunner.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.cache.ttl
    3600.0

    # Or with environment variables:
    # TOOLRUNNER_CACHE_TTL=7200
    # TOOLRUNNER_CACHE_DIRECTORY=/var/cache/toolrunner
    # TOOLRUNNER_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import (
    ByteSize,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    computed_field,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Result cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLRUNNER_CACHE_",
        extra="ignore",
    )

    ttl: PositiveFloat = Field(default=3600.0, description="Default entry TTL in seconds")
    max_entries: PositiveInt = Field(default=100, description="Fast tier entry limit")
    max_bytes: ByteSize = Field(default=ByteSize(10 * 1024 * 1024), description="Fast tier byte limit")
    directory: Path | None = Field(default=None, description="Durable tier directory (file store)")
    redis_url: SecretStr | None = Field(default=None, description="Redis URL for the durable tier")
    sweep_interval: PositiveFloat = Field(default=300.0, description="Expiry sweep period in seconds")

    @computed_field
    @property
    def backend(self) -> Literal["redis", "file", "memory"]:
        """Durable tier backend implied by the configuration."""
        if self.redis_url:
            return "redis"
        return "file" if self.directory else "memory"


class ExecutorSettings(BaseSettings):
    """Function executor configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLRUNNER_EXECUTOR_",
        extra="ignore",
    )

    register_builtins: bool = True
    simulated_latency: NonNegativeFloat = Field(
        default=0.5,
        description="Artificial delay (seconds) for simulated file/network handlers",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLRUNNER_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"


class ToolrunnerSettings(BaseSettings):
    """Root settings, loaded from TOOLRUNNER_* environment variables and .env."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLRUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> ToolrunnerSettings:
    """Get the global settings instance (cached)."""
    return ToolrunnerSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
