"""Name-to-handler registry for callable functions.

Registration is last-wins: registering a name again replaces the previous
handler (and its parameter schema) without error. Registries are plain
objects passed to executors; there is no process-wide default.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from typing import Union

from toolrunner.foundation.errors import FunctionError, Result
from toolrunner.observability import get_logger

from .arguments import Arguments
from .schema import FunctionParams

HandlerOutput = Union[str, Result[str, FunctionError]]
Handler = Callable[[Arguments], Union[HandlerOutput, Awaitable[HandlerOutput]]]

log = get_logger("toolrunner.registry")


class FunctionRegistry:
    """Registry of function handlers keyed by name.

    Handlers take an Arguments view and return the JSON result text, either
    directly, as a Result, or from a coroutine. Raising a FunctionError (or
    any exception) marks the call as failed. An optional FunctionParams
    schema is checked by the executor before the handler runs.

    Example:
        >>> registry = FunctionRegistry()
        >>> @registry.function()
        ... def echo(args: Arguments) -> str:
        ...     return args.require("text")
        >>> "echo" in registry
        True
    """

    __slots__ = ("_handlers", "_schemas")

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self._schemas: dict[str, type[FunctionParams]] = {}

    def register(self, name: str, handler: Handler, params: type[FunctionParams] | None = None) -> None:
        """Store handler and its optional schema under name, replacing any previous registration."""
        if not name:
            raise ValueError("Function name must be non-empty")
        if name in self._handlers:
            log.debug("handler replaced", function=name)
        self._handlers[name] = handler
        if params is None:
            self._schemas.pop(name, None)
        else:
            self._schemas[name] = params

    def resolve(self, name: str) -> Handler | None:
        return self._handlers.get(name)

    def schema(self, name: str) -> type[FunctionParams] | None:
        return self._schemas.get(name)

    def unregister(self, name: str) -> bool:
        """Remove a handler by name. Returns True if found."""
        self._schemas.pop(name, None)
        return self._handlers.pop(name, None) is not None

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def function(
        self, name: str | None = None, params: type[FunctionParams] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of register(); defaults to the function's __name__."""
        def decorator(handler: Handler) -> Handler:
            self.register(name or handler.__name__, handler, params)
            return handler
        return decorator

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __repr__(self) -> str:
        return f"FunctionRegistry({self.names()!r})"
