"""JSON type aliases shared across the pipeline."""

from __future__ import annotations

from typing import Any, Union

# Any for the recursive slots to keep Pydantic schema resolution simple
JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]
JsonDict = dict[str, Any]

