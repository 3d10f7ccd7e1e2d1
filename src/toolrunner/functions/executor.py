"""Function executor: tool call in, normalized function message out.

Each invocation walks the same path:

    received -> parse arguments -> resolve handler -> check schema -> invoke -> log

and ends in exactly one ExecutionEntry, whichever branch it takes. Failures
never escape as exceptions; they become the JSON error payload
`{"error": true, "message": "..."}` in the returned message's content, so
callers can feed the message straight back into a chat history.

Cancellation is the one exception: a cancelled invocation records a
`cancelled` entry and re-raises asyncio.CancelledError.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import orjson
from pydantic import ValidationError

from toolrunner.foundation.errors import (
    ArgumentParseError,
    Err,
    ExecutionCancelledError,
    FunctionError,
    JsonDict,
    Ok,
    Result,
    UnknownFunctionError,
    as_function_error,
)
from toolrunner.observability import get_logger

from .arguments import Arguments
from .log import ExecutionLog
from .models import ExecutionEntry, ExecutionStatus, FunctionMessage, ToolCall
from .registry import FunctionRegistry, Handler
from .schema import validate_arguments

logger = get_logger("toolrunner.executor")


def parse_arguments(raw: str) -> Result[Arguments, FunctionError]:
    """Decode a tool call's argument text. Blank text is an empty object."""
    if not raw.strip():
        return Ok(Arguments())
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        return Err(ArgumentParseError(str(e)))
    if not isinstance(data, dict):
        return Err(ArgumentParseError("Arguments must be a JSON object"))
    return Ok(Arguments(data))


def _identify(raw: object) -> tuple[str, str]:
    """Best-effort (name, call id) from a tool call that failed validation."""
    if not isinstance(raw, Mapping):
        return "", ""
    fn = raw.get("function")
    name = fn.get("name") if isinstance(fn, Mapping) else None
    call_id = raw.get("id")
    return (name if isinstance(name, str) else "", call_id if isinstance(call_id, str) else "")


def _describe(exc: ValidationError) -> str:
    return "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors(include_url=False))


async def invoke(handler: Handler, arguments: Arguments) -> str:
    """Run a handler and normalize its output to result text.

    Coroutine functions are awaited; plain callables run in a worker thread.
    Err results are raised as their FunctionError. Non-string outputs are
    encoded as JSON.
    """
    if inspect.iscoroutinefunction(handler):
        out: Any = await handler(arguments)
    else:
        out = await asyncio.to_thread(handler, arguments)
    if inspect.isawaitable(out):
        out = await out
    if isinstance(out, Result):
        out = out.unwrap()
    return out if isinstance(out, str) else orjson.dumps(out).decode()


@dataclass(slots=True)
class _Attempt:
    """Per-invocation bookkeeping from receipt to the logged entry."""

    name: str
    call_id: str
    arguments: JsonDict = field(default_factory=dict)
    received: datetime = field(default_factory=lambda: datetime.now(UTC))
    started: float = field(default_factory=time.perf_counter)

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.started


class FunctionExecutor:
    """Executes tool calls against a FunctionRegistry.

    Args:
        registry: Handlers to dispatch to
        log: Execution log to append to (default: a new ExecutionLog)

    Example:
        >>> executor = FunctionExecutor(registry)
        >>> msg = await executor.execute(ToolCall.create("call_1", "does_not_exist"))
        >>> msg.content
        '{"error":true,"message":"Unknown function: does_not_exist"}'
        >>> len(executor.log)
        1
    """

    __slots__ = ("_registry", "_log", "_in_flight")

    def __init__(self, registry: FunctionRegistry, log: ExecutionLog | None = None) -> None:
        self._registry = registry
        self._log = log if log is not None else ExecutionLog()
        self._in_flight = 0

    @property
    def registry(self) -> FunctionRegistry:
        return self._registry

    @property
    def log(self) -> ExecutionLog:
        return self._log

    @property
    def is_executing(self) -> bool:
        return self._in_flight > 0

    # ─────────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────────

    async def execute(self, tool_call: ToolCall | Mapping[str, Any]) -> FunctionMessage:
        """Execute a tool call, decoding its JSON argument text first."""
        if isinstance(tool_call, ToolCall):
            call = tool_call
        else:
            try:
                call = ToolCall.model_validate(tool_call)
            except ValidationError as e:
                error = ArgumentParseError(f"Malformed tool call: {_describe(e)}")
                return self._finish(_Attempt(*_identify(tool_call)), error)
        attempt = _Attempt(call.function.name, call.id)
        parsed = parse_arguments(call.function.arguments)
        if parsed.is_err():
            return self._finish(attempt, parsed.unwrap_err())
        return await self._dispatch(attempt, parsed.unwrap())

    async def call(self, name: str, arguments: Mapping[str, Any] | None = None, call_id: str = "") -> FunctionMessage:
        """Execute by name with already-decoded arguments."""
        return await self._dispatch(_Attempt(name, call_id), Arguments(arguments))

    # ─────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────

    async def _dispatch(self, attempt: _Attempt, arguments: Arguments) -> FunctionMessage:
        attempt.arguments = arguments.to_dict()
        if (handler := self._registry.resolve(attempt.name)) is None:
            return self._finish(attempt, UnknownFunctionError(attempt.name))
        if (schema := self._registry.schema(attempt.name)) is not None:
            if (checked := validate_arguments(schema, arguments)).is_err():
                return self._finish(attempt, checked.unwrap_err())

        self._in_flight += 1
        try:
            outcome: str | FunctionError = await invoke(handler, arguments)
        except asyncio.CancelledError:
            self._record(attempt, ExecutionStatus.CANCELLED, error=ExecutionCancelledError(attempt.name))
            logger.bind_function(attempt.name, attempt.call_id).warning("execution cancelled")
            raise
        except Exception as e:
            outcome = as_function_error(e)
        finally:
            self._in_flight -= 1
        return self._finish(attempt, outcome)

    def _finish(self, attempt: _Attempt, outcome: str | FunctionError) -> FunctionMessage:
        fn_log = logger.bind_function(attempt.name, attempt.call_id)
        if isinstance(outcome, FunctionError):
            entry = self._record(attempt, ExecutionStatus.FAILED, error=outcome)
            fn_log.warning("execution failed", code=str(outcome.code), error=outcome.message,
                           duration_ms=round(entry.duration * 1000, 2))
            return FunctionMessage(name=attempt.name, tool_call_id=attempt.call_id, content=outcome.render(), is_error=True)

        entry = self._record(attempt, ExecutionStatus.SUCCEEDED, result=outcome)
        fn_log.debug("execution succeeded", duration_ms=round(entry.duration * 1000, 2))
        return FunctionMessage(name=attempt.name, tool_call_id=attempt.call_id, content=outcome)

    def _record(
        self,
        attempt: _Attempt,
        status: ExecutionStatus,
        *,
        result: str | None = None,
        error: FunctionError | None = None,
    ) -> ExecutionEntry:
        entry = ExecutionEntry(
            timestamp=attempt.received,
            function_name=attempt.name,
            arguments=attempt.arguments,
            status=status,
            result=result,
            error=error.message if error else None,
            error_code=str(error.code) if error else None,
            duration=attempt.elapsed,
            call_id=attempt.call_id,
        )
        self._log.append(entry)
        return entry
