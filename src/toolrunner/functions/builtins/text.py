"""`string_transform`: case changes, reversal, trimming, counting, replacement."""

from __future__ import annotations

from collections.abc import Callable

import orjson
from pydantic import Field

from toolrunner.foundation.errors import HandlerExecutionError

from ..arguments import Arguments
from ..schema import FunctionParams


class StringTransformParams(FunctionParams):
    text: str = Field(..., max_length=100_000)
    operation: str = Field(..., min_length=1)
    find: str | None = Field(default=None, min_length=1, description="Substring to replace (replace only)")
    replace: str | None = None


_TRANSFORMS: dict[str, Callable[[str], str]] = {
    "uppercase": str.upper,
    "lowercase": str.lower,
    "capitalize": str.title,
    "reverse": lambda s: s[::-1],
    "trim": str.strip,
}


def string_transform(args: Arguments) -> str:
    """Arguments: text, operation; `replace` also needs find and replace."""
    text: str = args.require("text", str)
    operation: str = args.require("operation", str)

    if operation == "word_count":
        return orjson.dumps({"text": text, "word_count": len(text.split())}).decode()
    if operation == "replace":
        result = text.replace(args.require("find", str), args.require("replace", str))
    elif (transform := _TRANSFORMS.get(operation)) is not None:
        result = transform(text)
    else:
        raise HandlerExecutionError(f"Unknown string operation: {operation}")
    return orjson.dumps({"original": text, "operation": operation, "result": result}).decode()
