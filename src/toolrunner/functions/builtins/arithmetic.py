"""`calculate`: arithmetic over a named operation and operand list."""

from __future__ import annotations

import math
from collections.abc import Callable
from functools import reduce

import orjson
from pydantic import Field

from toolrunner.foundation.errors import Err, FunctionError, HandlerExecutionError, Ok, Result

from ..arguments import Arguments
from ..schema import FunctionParams


class CalculateParams(FunctionParams):
    operation: str = Field(..., min_length=1, description="add, subtract, multiply, divide, power or sqrt")
    operands: list[float] = Field(..., max_length=10_000, description="Numbers to operate on")


def _divide(operands: list[float]) -> Result[float, FunctionError]:
    if 0.0 in operands[1:]:
        return Err(HandlerExecutionError("Division by zero"))
    return Ok(reduce(lambda a, b: a / b, operands[1:], operands[0]))


def _power(operands: list[float]) -> Result[float, FunctionError]:
    try:
        return Ok(math.pow(operands[0], operands[1]))
    except (ValueError, OverflowError) as e:
        return Err(HandlerExecutionError(f"Invalid power: {e}"))


def _sqrt(operands: list[float]) -> Result[float, FunctionError]:
    if operands[0] < 0:
        return Err(HandlerExecutionError("Cannot take square root of negative number"))
    return Ok(math.sqrt(operands[0]))


_OPERATIONS: dict[str, Callable[[list[float]], Result[float, FunctionError]]] = {
    "add": lambda xs: Ok(math.fsum(xs)),
    "subtract": lambda xs: Ok(xs[0] - math.fsum(xs[1:])),
    "multiply": lambda xs: Ok(math.prod(xs)),
    "divide": _divide,
    "power": _power,
    "sqrt": _sqrt,
}

# sqrt is unary; everything else folds at least two operands
_MIN_OPERANDS = {"sqrt": 1}


def _not_finite() -> Result[float, FunctionError]:
    return Err(HandlerExecutionError("Result is not finite"))


def compute(operation: str, operands: list[float]) -> Result[float, FunctionError]:
    """Apply operation; overflow to inf or nan is an error, never a result."""
    if (op := _OPERATIONS.get(operation)) is None:
        return Err(HandlerExecutionError(f"Unknown operation: {operation}"))
    if len(operands) < (need := _MIN_OPERANDS.get(operation, 2)):
        return Err(HandlerExecutionError(f"At least {need} operand{'s' if need > 1 else ''} required"))
    try:
        result = op(operands)
    except OverflowError:  # math.fsum
        return _not_finite()
    return result.flat_map(lambda v: Ok(v) if math.isfinite(v) else _not_finite())


def calculate(args: Arguments) -> Result[str, FunctionError]:
    """Arguments: operation (add|subtract|multiply|divide|power|sqrt), operands (number[])."""
    operation: str = args.require("operation", str)
    operands: list[float] = args.require("operands", "number_list")
    return compute(operation, operands).map(
        lambda value: orjson.dumps({"operation": operation, "operands": operands, "result": value}).decode()
    )
