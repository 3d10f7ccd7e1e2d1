"""Shared fixtures: silent logging and a built-in registry without latency."""

from __future__ import annotations

import pytest

from toolrunner.foundation.config import clear_settings_cache
from toolrunner.functions import FunctionExecutor, FunctionRegistry, register_builtins
from toolrunner.observability import configure_logging


@pytest.fixture(autouse=True)
def quiet_logging() -> object:
    configure_logging(format="none")
    yield
    clear_settings_cache()


@pytest.fixture
def registry() -> FunctionRegistry:
    return register_builtins(FunctionRegistry(), latency=0)


@pytest.fixture
def executor(registry: FunctionRegistry) -> FunctionExecutor:
    return FunctionExecutor(registry)
