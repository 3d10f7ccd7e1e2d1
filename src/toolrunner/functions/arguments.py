"""Read-only view over decoded tool-call arguments.

Accessors come in two flavours:
    - get_* / get_as: return Result[T, FunctionError] (failures as values)
    - require / optional: raise MissingParameterError / InvalidParameterTypeError

Example:
    >>> args = Arguments({"operation": "add", "operands": [1, 2]})
    >>> args.get_str("operation")
    Ok('add')
    >>> args.get_float_list("operands").unwrap()
    [1.0, 2.0]
    >>> args.get_str("missing").is_err()
    True
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from typing import Any, Callable, TypeVar, overload

from toolrunner.foundation.errors import (
    Err,
    FunctionError,
    InvalidParameterTypeError,
    JsonDict,
    MissingParameterError,
    Ok,
    Result,
)

T = TypeVar("T")

_MISMATCH = object()


def _number(v: object) -> object:
    return float(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else _MISMATCH


def _integer(v: object) -> object:
    if isinstance(v, bool):
        return _MISMATCH
    if isinstance(v, int):
        return v
    if isinstance(v, float) and v.is_integer():
        return int(v)
    return _MISMATCH


def _number_list(v: object) -> object:
    if not isinstance(v, list):
        return _MISMATCH
    out = [_number(x) for x in v]
    return _MISMATCH if any(x is _MISMATCH for x in out) else out


# kind -> (expected-type label, converter)
_CONVERTERS: dict[object, tuple[str, Callable[[object], object]]] = {
    str: ("string", lambda v: v if isinstance(v, str) else _MISMATCH),
    float: ("number", _number),
    int: ("integer", _integer),
    bool: ("boolean", lambda v: v if isinstance(v, bool) else _MISMATCH),
    list: ("array", lambda v: v if isinstance(v, list) else _MISMATCH),
    dict: ("object", lambda v: v if isinstance(v, dict) else _MISMATCH),
    "number_list": ("array of numbers", _number_list),
}


class Arguments(Mapping[str, Any]):
    """Immutable mapping of parameter name to JSON value with typed accessors."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: JsonDict = copy.deepcopy(dict(data or {}))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Arguments({self._data!r})"

    def to_dict(self) -> JsonDict:
        """Deep copy of the underlying data."""
        return copy.deepcopy(self._data)

    # ─────────────────────────────────────────────────────────────────
    # Result-returning accessors
    # ─────────────────────────────────────────────────────────────────

    @overload
    def get_as(self, key: str, kind: type[T]) -> Result[T, FunctionError]: ...
    @overload
    def get_as(self, key: str, kind: str) -> Result[Any, FunctionError]: ...

    def get_as(self, key: str, kind: object) -> Result[Any, FunctionError]:
        """Fetch `key` converted to `kind` (str, float, int, bool, list, dict, "number_list")."""
        label, convert = _CONVERTERS[kind]
        if key not in self._data or self._data[key] is None:
            return Err(MissingParameterError(key))
        value = convert(self._data[key])
        return Err(InvalidParameterTypeError(key, label)) if value is _MISMATCH else Ok(value)

    def get_str(self, key: str) -> Result[str, FunctionError]:
        return self.get_as(key, str)

    def get_float(self, key: str) -> Result[float, FunctionError]:
        return self.get_as(key, float)

    def get_int(self, key: str) -> Result[int, FunctionError]:
        return self.get_as(key, int)

    def get_bool(self, key: str) -> Result[bool, FunctionError]:
        return self.get_as(key, bool)

    def get_list(self, key: str) -> Result[list[Any], FunctionError]:
        return self.get_as(key, list)

    def get_dict(self, key: str) -> Result[JsonDict, FunctionError]:
        return self.get_as(key, dict)

    def get_float_list(self, key: str) -> Result[list[float], FunctionError]:
        return self.get_as(key, "number_list")

    # ─────────────────────────────────────────────────────────────────
    # Raising accessors
    # ─────────────────────────────────────────────────────────────────

    def require(self, key: str, kind: object = str) -> Any:
        """Fetch a required parameter or raise the matching FunctionError."""
        return self.get_as(key, kind).unwrap()

    def optional(self, key: str, kind: object, default: T) -> T:
        """Fetch an optional parameter; absent gives default, mistyped still raises."""
        result = self.get_as(key, kind)
        if isinstance(result.err(), MissingParameterError):
            return default
        return result.unwrap()
