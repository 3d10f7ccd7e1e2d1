"""Built-in function handlers.

Pure handlers (calculate, string_transform, process_data) compute directly.
I/O handlers (file_operation, http_request, get_weather, search) are
simulated with a configurable latency. Each is registered with its
parameter schema, so malformed calls are rejected before the handler runs.
"""

from __future__ import annotations

from ..registry import FunctionRegistry
from .arithmetic import CalculateParams, calculate, compute
from .data import ProcessDataParams, describe, process_data
from .simulated import (
    DEFAULT_LATENCY,
    FileOperationParams,
    HttpRequestParams,
    SearchParams,
    SimulatedServices,
    WeatherParams,
)
from .text import StringTransformParams, string_transform

BUILTIN_NAMES = (
    "calculate", "string_transform", "process_data",
    "file_operation", "http_request", "get_weather", "search",
)


def register_builtins(registry: FunctionRegistry, latency: float = DEFAULT_LATENCY) -> FunctionRegistry:
    """Register every built-in handler on registry. Returns the registry."""
    services = SimulatedServices(latency)
    registry.register("calculate", calculate, CalculateParams)
    registry.register("string_transform", string_transform, StringTransformParams)
    registry.register("process_data", process_data, ProcessDataParams)
    registry.register("file_operation", services.file_operation, FileOperationParams)
    registry.register("http_request", services.http_request, HttpRequestParams)
    registry.register("get_weather", services.get_weather, WeatherParams)
    registry.register("search", services.search, SearchParams)
    return registry


__all__ = [
    "register_builtins", "BUILTIN_NAMES", "DEFAULT_LATENCY", "SimulatedServices",
    "calculate", "compute", "string_transform", "process_data", "describe",
    "CalculateParams", "StringTransformParams", "ProcessDataParams",
    "FileOperationParams", "HttpRequestParams", "WeatherParams", "SearchParams",
]
