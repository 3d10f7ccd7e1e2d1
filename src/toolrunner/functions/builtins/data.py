"""`process_data`: statistics and threshold filtering over number arrays."""

from __future__ import annotations

import operator
import statistics

import orjson
from pydantic import Field

from toolrunner.foundation.errors import HandlerExecutionError

from ..arguments import Arguments
from ..schema import FunctionParams

_CONDITIONS = {
    "greater_than": operator.gt,
    "less_than": operator.lt,
    "equal_to": operator.eq,
}


class ProcessDataParams(FunctionParams):
    data: list[float] = Field(..., max_length=100_000, description="Numbers to analyze")
    operation: str = Field(..., min_length=1, description="statistics or filter")
    condition: str | None = Field(default=None, description="greater_than, less_than or equal_to (filter only)")
    threshold: float = 0.0


def describe(data: list[float]) -> dict[str, float | int]:
    """Summary statistics; std_dev is the population standard deviation."""
    return {
        "count": len(data),
        "mean": statistics.fmean(data),
        "median": float(statistics.median(data)),
        "min": min(data),
        "max": max(data),
        "std_dev": statistics.pstdev(data),
    }


def process_data(args: Arguments) -> str:
    """Arguments: data (number[]), operation (statistics|filter); filter takes condition, threshold."""
    data: list[float] = args.require("data", "number_list")
    operation: str = args.require("operation", str)
    if not data:
        raise HandlerExecutionError("Data array is empty")

    if operation == "statistics":
        return orjson.dumps(describe(data)).decode()
    if operation == "filter":
        condition: str = args.require("condition", str)
        threshold: float = args.optional("threshold", float, 0.0)
        if (compare := _CONDITIONS.get(condition)) is None:
            raise HandlerExecutionError(f"Unknown filter condition: {condition}")
        filtered = [x for x in data if compare(x, threshold)]
        return orjson.dumps({
            "original_count": len(data),
            "filtered_count": len(filtered),
            "filtered_data": filtered,
        }).decode()
    raise HandlerExecutionError(f"Unknown data operation: {operation}")
