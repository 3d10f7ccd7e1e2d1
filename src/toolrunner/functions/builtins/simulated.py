"""Simulated I/O handlers: files, HTTP, weather and search.

These never touch the filesystem or network. Each sleeps for the configured
latency and returns a canned structured payload, which makes them useful for
exercising caching and cancellation.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Literal

import orjson
from pydantic import Field, field_validator

from toolrunner.foundation.errors import HandlerExecutionError, JsonDict

from ..arguments import Arguments
from ..schema import FunctionParams

DEFAULT_LATENCY: float = 0.5

_LISTING = ["file1.txt", "file2.json", "folder/"]


class FileOperationParams(FunctionParams):
    operation: str = Field(..., min_length=1, description="read, write or list")
    path: str = Field(..., min_length=1, max_length=4096)
    content: str | None = None


class HttpRequestParams(FunctionParams):
    url: str = Field(..., pattern=r"^https?://\S+$", max_length=2048)
    method: str = Field(default="GET", min_length=1)


class WeatherParams(FunctionParams):
    location: str = Field(..., min_length=1, max_length=200, description="City and state or country")
    unit: Literal["fahrenheit", "celsius"] = "fahrenheit"

    @field_validator("location")
    @classmethod
    def location_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("location must not be blank")
        return v


class SearchParams(FunctionParams):
    query: str = Field(..., min_length=1, max_length=500)
    limit: int = Field(default=10, ge=0, le=100)


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


def _dumps(payload: JsonDict) -> str:
    return orjson.dumps(payload).decode()


class SimulatedServices:
    """Async handlers sharing one artificial latency (seconds)."""

    __slots__ = ("latency",)

    def __init__(self, latency: float = DEFAULT_LATENCY) -> None:
        if latency < 0:
            raise ValueError(f"latency must be >= 0, got {latency}")
        self.latency = latency

    async def _pause(self, factor: float = 1.0) -> None:
        if self.latency:
            await asyncio.sleep(self.latency * factor)

    async def file_operation(self, args: Arguments) -> str:
        """Arguments: operation (read|write|list), path; write also needs content."""
        operation: str = args.require("operation", str)
        path: str = args.require("path", str)
        await self._pause()

        if operation == "read":
            return _dumps({"path": path, "content": "This is simulated file content", "size": 1024, "modified": _now()})
        if operation == "write":
            content: str = args.require("content", str)
            return _dumps({"path": path, "bytes_written": len(content.encode()), "success": True})
        if operation == "list":
            return _dumps({"path": path, "files": _LISTING, "count": len(_LISTING)})
        raise HandlerExecutionError(f"Unknown file operation: {operation}")

    async def http_request(self, args: Arguments) -> str:
        """Arguments: url, method (default GET)."""
        url: str = args.require("url", str)
        method: str = args.optional("method", str, "GET").upper()
        await self._pause(2.0)
        return _dumps({
            "url": url,
            "method": method,
            "status": 200,
            "headers": {"content-type": "application/json", "content-length": "256"},
            "body": {"message": "Simulated response", "timestamp": _now()},
        })

    async def get_weather(self, args: Arguments) -> str:
        """Arguments: location, unit (fahrenheit|celsius, default fahrenheit)."""
        location: str = args.require("location", str)
        unit: str = args.optional("unit", str, "fahrenheit")
        if unit not in ("fahrenheit", "celsius"):
            raise HandlerExecutionError(f"Unknown unit: {unit}")
        await self._pause()
        temperature = 72 if unit == "fahrenheit" else 22
        return _dumps({"location": location, "temperature": temperature, "unit": unit, "conditions": "Sunny"})

    async def search(self, args: Arguments) -> str:
        """Arguments: query, limit (default 10)."""
        query: str = args.require("query", str)
        limit: int = args.optional("limit", int, 10)
        if limit < 0:
            raise HandlerExecutionError("limit must be >= 0")
        await self._pause()
        results = [{"title": f"Result {i} for '{query}'", "rank": i} for i in range(1, limit + 1)]
        return _dumps({"query": query, "total_results": len(results), "results": results})
