"""Declarative parameter schemas checked before a handler runs.

A schema is a pydantic model subclassing FunctionParams. Constraints use
the usual pydantic vocabulary:
    - required: a field without a default
    - type: the annotation (validated strictly, no "1" -> 1 coercion)
    - range: Field(ge=..., le=...)
    - length: Field(min_length=..., max_length=...)
    - pattern: Field(pattern=...)
    - one of: Literal[...]
    - custom: field_validator / model_validator raising ValueError

The first violation maps onto the error taxonomy:
    missing key        -> MissingParameterError
    wrong JSON type    -> InvalidParameterTypeError
    failed constraint  -> InvalidParameterValueError

Example:
    >>> from typing import Literal
    >>> from pydantic import Field
    >>> from toolrunner.functions import Arguments
    >>> class WeatherParams(FunctionParams):
    ...     location: str = Field(min_length=1)
    ...     unit: Literal["celsius", "fahrenheit"] = "fahrenheit"
    >>> validate_arguments(WeatherParams, Arguments({"unit": "kelvin"})).unwrap_err().message
    'Missing required parameter: location'
"""

from __future__ import annotations

import types
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from toolrunner.foundation.errors import (
    Err,
    FunctionError,
    InvalidParameterTypeError,
    InvalidParameterValueError,
    MissingParameterError,
    Ok,
    Result,
)

from .arguments import Arguments

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


class FunctionParams(BaseModel):
    """Base for function parameter schemas. Unknown keys are ignored."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")


_LABELS: dict[object, str] = {
    str: "string",
    float: "number",
    int: "integer",
    bool: "boolean",
    list: "array",
    dict: "object",
}


def _label(annotation: Any) -> str:
    """JSON type name for an annotation, matching Arguments' wording."""
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        inner = [a for a in get_args(annotation) if a is not type(None)]
        return _label(inner[0]) if len(inner) == 1 else "value"
    if origin is list:
        item = next(iter(get_args(annotation)), None)
        return "array of numbers" if item in (float, int) else "array"
    if origin is dict:
        return "object"
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return "object"
    return _LABELS.get(annotation, "value")


def _is_type_error(error: ErrorDetails) -> bool:
    kind = error["type"]
    return kind.endswith(("_type", "_parsing")) or kind in ("int_from_float", "is_instance_of")


@lru_cache(maxsize=256)
def _adapter(schema: type[FunctionParams]) -> TypeAdapter[FunctionParams]:
    return TypeAdapter(schema)


def to_function_error(schema: type[FunctionParams], exc: ValidationError) -> FunctionError:
    """Translate the first pydantic error into the error taxonomy."""
    error = exc.errors(include_url=False)[0]
    param = str(error["loc"][0]) if error["loc"] else "arguments"
    if error["type"] == "missing":
        return MissingParameterError(param)
    if _is_type_error(error) and (fld := schema.model_fields.get(param)) is not None:
        return InvalidParameterTypeError(param, _label(fld.annotation))
    return InvalidParameterValueError(param, error["msg"])


def validate_arguments(schema: type[FunctionParams], arguments: Arguments) -> Result[FunctionParams, FunctionError]:
    """Check arguments against schema. None values count as absent."""
    data = {k: v for k, v in arguments.items() if v is not None}
    try:
        return Ok(_adapter(schema).validate_python(data))
    except ValidationError as e:
        return Err(to_function_error(schema, e))
