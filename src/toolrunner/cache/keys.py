"""Content-derived cache keys.

A key is the SHA-256 of `"{function_name}|k1:v1,k2:v2"` with argument names
sorted and each value rendered as canonical JSON (sorted keys), so logically identical
calls collide regardless of argument insertion order.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from pydantic import BaseModel

_CANONICAL = orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS


def canonical_value(value: object) -> str:
    """Canonical JSON for an argument value. Strings stay quoted so "1" and 1 differ."""
    return orjson.dumps(value, option=_CANONICAL, default=str).decode()


def canonical_arguments(arguments: BaseModel | Mapping[str, object]) -> str:
    params = arguments.model_dump(mode="json") if hasattr(arguments, "model_dump") else arguments
    return ",".join(f"{k}:{canonical_value(params[k])}" for k in sorted(params))  # type: ignore[index,union-attr]


def make_key(function_name: str, arguments: BaseModel | Mapping[str, object]) -> str:
    """Generate the cache key for a function call.

    Example:
        >>> make_key("f", {"b": 2, "a": 1}) == make_key("f", {"a": 1, "b": 2})
        True
    """
    payload = f"{function_name}|{canonical_arguments(arguments)}"
    return hashlib.sha256(payload.encode()).hexdigest()
