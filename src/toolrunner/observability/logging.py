"""Structured event logging for the execution pipeline.

Events are an event name plus key/value context. Loggers are immutable:
`bind()` returns a new logger, so module-level loggers can be specialised
per call (`log.bind_function("calculate", call_id)`) without shared state.

Output goes through a renderer chosen by configure_logging():
    - console: `12:00:01.250 [info] cache cleared removed=3`
    - json: one JSON object per line (orjson)
    - none: discard everything

Example:
    >>> configure_logging(format="json", level="DEBUG")
    >>> log = get_logger("toolrunner.cache")
    >>> log.debug("promoted durable entry", key="ab12")
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, NamedTuple, Protocol, TextIO, runtime_checkable

import orjson

from toolrunner.foundation.errors import JsonDict, JsonValue

if TYPE_CHECKING:
    from toolrunner.foundation.config import LoggingSettings

_scoped: ContextVar[JsonDict] = ContextVar("toolrunner_log_scope", default={})
_active_renderer: ContextVar[LogRenderer | None] = ContextVar("toolrunner_log_renderer", default=None)
_threshold: ContextVar[int] = ContextVar("toolrunner_log_level", default=logging.INFO)


class LogEntry(NamedTuple):
    timestamp: float
    level: str
    event: str
    context: JsonDict


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


# ─────────────────────────────────────────────────────────────────────────────
# Loggers
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class BoundLogger:
    """Logger carrying fixed context.

    `_renderer` and `_level` pin output and threshold for this logger; when
    None they follow configure_logging().
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int | None = None

    def bind(self, **kw: JsonValue) -> BoundLogger:
        return BoundLogger({**self.context, **kw}, self._renderer, self._level)

    def bind_function(self, name: str, call_id: str = "", **kw: JsonValue) -> BoundLogger:
        """Context for one function call; call_id is omitted when empty."""
        if call_id:
            kw["call_id"] = call_id
        return self.bind(function=name, **kw)

    def debug(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.DEBUG, event, kw)

    def info(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.INFO, event, kw)

    def warning(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.WARNING, event, kw)

    def error(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.ERROR, event, kw)

    def exception(self, event: str, **kw: JsonValue) -> None:
        """error() plus the active traceback under `exc_info`."""
        self._emit(logging.ERROR, event, {**kw, "exc_info": traceback.format_exc()})

    def _emit(self, level: int, event: str, kw: JsonDict) -> None:
        if level < (_threshold.get() if self._level is None else self._level):
            return
        entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event, {**_scoped.get(), **self.context, **kw})
        (self._renderer or _current_renderer()).render(entry)


@contextmanager
def log_context(**kw: JsonValue) -> Iterator[JsonDict]:
    """Add context to every event logged inside the block (async-safe)."""
    merged = {**_scoped.get(), **kw}
    token = _scoped.set(merged)
    try:
        yield merged
    finally:
        _scoped.reset(token)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────

_ANSI = {"reset": "\033[0m", "dim": "\033[2m", "bold": "\033[1m", "key": "\033[36m", "err": "\033[31m"}
_LEVEL_ANSI = {"debug": "\033[2m", "info": "\033[32m", "warning": "\033[33m", "error": "\033[31m"}


def _console_value(v: object) -> str:
    if isinstance(v, str):
        return f'"{v}"'
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (dict, list, tuple)):
        return f"<{len(v)} items>"
    return str(v)


@dataclass(slots=True)
class ConsoleRenderer:
    """One human-readable line per event; tracebacks on the following lines."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def _paint(self, text: str, style: str) -> str:
        return f"{style}{text}{_ANSI['reset']}" if self.colors else text

    def render(self, entry: LogEntry) -> None:
        context = dict(entry.context)
        trace = context.pop("exc_info", None)
        head = [self._paint(f"[{entry.level}]", _LEVEL_ANSI.get(entry.level, _ANSI["dim"])),
                self._paint(entry.event, _ANSI["bold"])]
        if self.show_timestamp:
            stamp = datetime.fromtimestamp(entry.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]
            head.insert(0, self._paint(stamp, _ANSI["dim"]))
        pairs = [f"{self._paint(k, _ANSI['key'])}={_console_value(v)}" for k, v in sorted(context.items())]
        print(" ".join(head + pairs), file=self.output)
        if trace:
            print(self._paint(str(trace), _ANSI["err"]), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines with `timestamp` (ISO 8601, UTC), `level` and `event` first."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        record = {
            "timestamp": datetime.fromtimestamp(entry.timestamp, tz=UTC).isoformat(),
            "level": entry.level,
            "event": entry.event,
            **entry.context,
        }
        self.output.write(orjson.dumps(record, option=orjson.OPT_NON_STR_KEYS | orjson.OPT_APPEND_NEWLINE,
                                       default=str).decode())


class NoOpRenderer:
    __slots__ = ()

    def render(self, entry: LogEntry) -> None:
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


def configure_logging(
    format: str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Select the global renderer ("console", "json" or "none") and threshold."""
    renderer: LogRenderer
    if format == "console":
        renderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
    elif format == "json":
        renderer = JsonRenderer(output=output or sys.stdout)
    elif format == "none":
        renderer = NoOpRenderer()
    else:
        raise ValueError(f"Unknown log format {format!r}; expected 'console', 'json' or 'none'")
    _threshold.set(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    _active_renderer.set(renderer)
    return renderer


def configure_from_settings(settings: LoggingSettings) -> LogRenderer:
    return configure_logging(format=settings.format, level=settings.level)


def get_logger(name: str | None = None, **context: JsonValue) -> BoundLogger:
    """Logger with `logger=name` (when given) plus any extra context."""
    if name:
        context["logger"] = name
    return BoundLogger(context)


def _current_renderer() -> LogRenderer:
    renderer = _active_renderer.get()
    if renderer is None:
        renderer = ConsoleRenderer()
        _active_renderer.set(renderer)
    return renderer
