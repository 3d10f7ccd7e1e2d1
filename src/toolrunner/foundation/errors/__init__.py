"""Unified error handling for toolrunner.

- ErrorCode: Standard error codes for function-call failures
- FunctionError and subclasses: the execution error taxonomy
- Result/Ok/Err: Monadic error handling for argument accessors and handlers
"""

from .errors import (
    ArgumentParseError,
    ErrorCode,
    ExecutionCancelledError,
    FunctionError,
    HandlerExecutionError,
    InvalidParameterTypeError,
    InvalidParameterValueError,
    MissingParameterError,
    UnknownFunctionError,
    as_function_error,
    error_payload,
)
from .result import Err, Ok, Result, sequence, try_fn
from .types import JsonDict, JsonPrimitive, JsonValue

__all__ = [
    # Taxonomy
    "ErrorCode", "FunctionError", "ArgumentParseError", "UnknownFunctionError",
    "MissingParameterError", "InvalidParameterTypeError", "InvalidParameterValueError", "HandlerExecutionError",
    "ExecutionCancelledError", "as_function_error", "error_payload",
    # Result monad
    "Result", "Ok", "Err", "try_fn", "sequence",
    # JSON aliases
    "JsonDict", "JsonPrimitive", "JsonValue",
]
