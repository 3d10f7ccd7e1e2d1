"""Tests for built-in handlers."""

from __future__ import annotations

import math

import orjson
import pytest

from toolrunner.foundation.errors import HandlerExecutionError, MissingParameterError
from toolrunner.functions import Arguments, FunctionExecutor
from toolrunner.functions.builtins import SimulatedServices, calculate, compute, process_data, string_transform


def _loads(text: str) -> dict[str, object]:
    return orjson.loads(text)


# ═════════════════════════════════════════════════════════════════════════════
# calculate
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(("operation", "operands", "expected"), [
    ("add", [1, 2, 3.5], 6.5),
    ("subtract", [10, 3, 2], 5.0),
    ("multiply", [2, 3, 4], 24.0),
    ("divide", [100, 5, 2], 10.0),
    ("power", [2, 10], 1024.0),
    ("sqrt", [16], 4.0),
])
def test_compute(operation: str, operands: list[float], expected: float) -> None:
    assert compute(operation, [float(x) for x in operands]).unwrap() == pytest.approx(expected)


def test_divide_by_zero_is_explicit() -> None:
    """Test zero divisors fail instead of producing inf/nan."""
    err = compute("divide", [1.0, 2.0, 0.0]).unwrap_err()
    assert err.message == "Function execution failed: Division by zero"
    assert compute("divide", [0.0, 2.0]).unwrap() == 0.0


def test_negative_sqrt_is_explicit() -> None:
    err = compute("sqrt", [-4.0]).unwrap_err()
    assert err.message == "Function execution failed: Cannot take square root of negative number"


def test_compute_validation() -> None:
    assert compute("add", [1.0]).unwrap_err().message == "Function execution failed: At least 2 operands required"
    assert compute("sqrt", []).unwrap_err().message == "Function execution failed: At least 1 operand required"
    assert compute("modulo", [1.0, 2.0]).unwrap_err().message == "Function execution failed: Unknown operation: modulo"
    assert compute("power", [-8.0, 0.5]).is_err()


@pytest.mark.parametrize(("operation", "operands"), [
    ("multiply", [1e308, 10.0]),
    ("divide", [1e308, 1e-308]),
    ("add", [1e308, 1e308]),
    ("subtract", [1e308, -1e308]),
])
def test_overflow_is_an_error(operation: str, operands: list[float]) -> None:
    """Test results that overflow to inf fail rather than serializing as null."""
    err = compute(operation, operands).unwrap_err()
    assert err.message == "Function execution failed: Result is not finite"


def test_calculate_payload() -> None:
    result = calculate(Arguments({"operation": "multiply", "operands": [2, 2.5]}))
    assert _loads(result.unwrap()) == {"operation": "multiply", "operands": [2.0, 2.5], "result": 5.0}


@pytest.mark.asyncio
async def test_calculate_errors_through_executor(executor: FunctionExecutor) -> None:
    msg = await executor.call("calculate", {"operation": "divide", "operands": [1, 0]})
    assert _loads(msg.content) == {"error": True, "message": "Function execution failed: Division by zero"}

    msg = await executor.call("calculate", {"operation": "sqrt", "operands": [-1]})
    assert _loads(msg.content)["message"] == "Function execution failed: Cannot take square root of negative number"

    msg = await executor.call("calculate", {"operation": "multiply", "operands": [1e308, 10]})
    assert _loads(msg.content) == {"error": True, "message": "Function execution failed: Result is not finite"}
    assert executor.log.entries[-1].result is None


# ═════════════════════════════════════════════════════════════════════════════
# string_transform
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(("operation", "expected"), [
    ("uppercase", "  HELLO WORLD "),
    ("lowercase", "  hello world "),
    ("capitalize", "  Hello World "),
    ("reverse", " dlrow olleh  "),
    ("trim", "hello world"),
])
def test_string_transforms(operation: str, expected: str) -> None:
    payload = _loads(string_transform(Arguments({"text": "  hello world ", "operation": operation})))
    assert payload == {"original": "  hello world ", "operation": operation, "result": expected}


def test_word_count_and_replace() -> None:
    counted = _loads(string_transform(Arguments({"text": "one two  three", "operation": "word_count"})))
    assert counted == {"text": "one two  three", "word_count": 3}

    replaced = _loads(string_transform(Arguments({
        "text": "a-b-c", "operation": "replace", "find": "-", "replace": "+",
    })))
    assert replaced["result"] == "a+b+c"

    with pytest.raises(MissingParameterError):
        string_transform(Arguments({"text": "abc", "operation": "replace", "find": "a"}))


def test_unknown_string_operation() -> None:
    with pytest.raises(HandlerExecutionError, match="Unknown string operation: rot13"):
        string_transform(Arguments({"text": "abc", "operation": "rot13"}))


# ═════════════════════════════════════════════════════════════════════════════
# process_data
# ═════════════════════════════════════════════════════════════════════════════


def test_statistics() -> None:
    stats = _loads(process_data(Arguments({"data": [4, 1, 3, 2], "operation": "statistics"})))

    assert stats["count"] == 4
    assert stats["mean"] == pytest.approx(2.5)
    assert stats["median"] == pytest.approx(2.5)
    assert (stats["min"], stats["max"]) == (1.0, 4.0)
    assert stats["std_dev"] == pytest.approx(math.sqrt(1.25))


@pytest.mark.parametrize(("condition", "expected"), [
    ("greater_than", [5.0, 7.0]),
    ("less_than", [1.0]),
    ("equal_to", [3.0]),
])
def test_filter(condition: str, expected: list[float]) -> None:
    payload = _loads(process_data(Arguments({
        "data": [1, 3, 5, 7], "operation": "filter", "condition": condition, "threshold": 3,
    })))
    assert payload == {"original_count": 4, "filtered_count": len(expected), "filtered_data": expected}


def test_filter_threshold_defaults_to_zero() -> None:
    payload = _loads(process_data(Arguments({"data": [-1, 0, 2], "operation": "filter", "condition": "greater_than"})))
    assert payload["filtered_data"] == [2.0]


def test_process_data_errors() -> None:
    with pytest.raises(HandlerExecutionError, match="Data array is empty"):
        process_data(Arguments({"data": [], "operation": "statistics"}))
    with pytest.raises(HandlerExecutionError, match="Unknown filter condition: between"):
        process_data(Arguments({"data": [1], "operation": "filter", "condition": "between"}))
    with pytest.raises(HandlerExecutionError, match="Unknown data operation: sort"):
        process_data(Arguments({"data": [1], "operation": "sort"}))


# ═════════════════════════════════════════════════════════════════════════════
# Simulated I/O
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_file_operations() -> None:
    services = SimulatedServices(latency=0)

    read = _loads(await services.file_operation(Arguments({"operation": "read", "path": "/tmp/a.txt"})))
    assert read["path"] == "/tmp/a.txt" and read["size"] == 1024

    written = _loads(await services.file_operation(Arguments({"operation": "write", "path": "b", "content": "héllo"})))
    assert written == {"path": "b", "bytes_written": 6, "success": True}

    listed = _loads(await services.file_operation(Arguments({"operation": "list", "path": "."})))
    assert listed["count"] == len(listed["files"]) == 3

    with pytest.raises(HandlerExecutionError, match="Unknown file operation: delete"):
        await services.file_operation(Arguments({"operation": "delete", "path": "b"}))


@pytest.mark.asyncio
async def test_http_weather_and_search(executor: FunctionExecutor) -> None:
    http = _loads((await executor.call("http_request", {"url": "https://example.com", "method": "post"})).content)
    assert (http["url"], http["method"], http["status"]) == ("https://example.com", "POST", 200)

    weather = _loads((await executor.call("get_weather", {"location": "SF"})).content)
    assert weather == {"location": "SF", "temperature": 72, "unit": "fahrenheit", "conditions": "Sunny"}

    search = _loads((await executor.call("search", {"query": "python", "limit": 3})).content)
    assert search["total_results"] == 3
    assert search["results"][0]["rank"] == 1


def test_negative_latency_rejected() -> None:
    with pytest.raises(ValueError):
        SimulatedServices(latency=-1)
