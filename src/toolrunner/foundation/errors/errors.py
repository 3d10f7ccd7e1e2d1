"""Error taxonomy for function-call execution.

Every failure a handler or the executor can hit is a FunctionError subclass
carrying an ErrorCode. The executor converts them into the structured JSON
payload that is fed back to the model instead of letting them propagate.
"""

from __future__ import annotations

from enum import StrEnum

import orjson


class ErrorCode(StrEnum):
    """Standard error codes for function-call failures."""
    PARSE_ERROR = "PARSE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    MISSING_PARAM = "MISSING_PARAM"
    INVALID_PARAMS = "INVALID_PARAMS"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


class FunctionError(Exception):
    """Base for all function-call errors. `str(err)` is the user-facing message."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def render(self) -> str:
        """Format as the JSON error payload returned to the model."""
        return error_payload(self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class ArgumentParseError(FunctionError):
    """Tool-call argument payload is not a JSON object."""

    code = ErrorCode.PARSE_ERROR

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid arguments: {reason}")


class UnknownFunctionError(FunctionError):
    """No handler registered under the requested name."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown function: {name}")


class MissingParameterError(FunctionError):
    code = ErrorCode.MISSING_PARAM

    def __init__(self, param: str) -> None:
        self.param = param
        super().__init__(f"Missing required parameter: {param}")


class InvalidParameterTypeError(FunctionError):
    code = ErrorCode.INVALID_PARAMS

    def __init__(self, param: str, expected: str) -> None:
        self.param, self.expected = param, expected
        super().__init__(f"Invalid type for parameter '{param}', expected: {expected}")


class InvalidParameterValueError(FunctionError):
    """Right type, but outside the declared constraints (range, length, pattern, choices)."""

    code = ErrorCode.INVALID_PARAMS

    def __init__(self, param: str, reason: str) -> None:
        self.param, self.reason = param, reason
        super().__init__(f"Invalid value for parameter '{param}': {reason}")


class HandlerExecutionError(FunctionError):
    """Handler-specific failure (division by zero, unknown sub-operation, ...)."""

    code = ErrorCode.EXECUTION_FAILED

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Function execution failed: {reason}")


class ExecutionCancelledError(FunctionError):
    code = ErrorCode.CANCELLED

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Execution cancelled: {name}")


def error_payload(message: str) -> str:
    """Build `{"error": true, "message": ...}` as JSON text."""
    return orjson.dumps({"error": True, "message": message}).decode()


def as_function_error(exc: BaseException) -> FunctionError:
    """Normalize any handler exception into the taxonomy."""
    if isinstance(exc, FunctionError):
        return exc
    return HandlerExecutionError(str(exc) or type(exc).__name__)
