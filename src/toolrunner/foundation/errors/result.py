"""Ok / Err result values for failure-as-value code paths.

Argument accessors and handlers return `Result[T, FunctionError]` instead of
raising. Both variants are frozen dataclasses, so they compare by value and
work with structural pattern matching:

    >>> match Arguments({"x": 1}).get_int("x"):
    ...     case Ok(value): print(value)
    ...     case Err(error): print(error.message)
    1
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Callable, Generic, NoReturn, TypeVar

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


class Result(ABC, Generic[T, E]):
    """Common interface of Ok and Err. Not instantiated directly."""

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    @abstractmethod
    def unwrap(self) -> T: ...
    @abstractmethod
    def unwrap_err(self) -> E: ...
    @abstractmethod
    def unwrap_or(self, default: T) -> T: ...
    @abstractmethod
    def unwrap_or_else(self, f: Callable[[E], T]) -> T: ...
    @abstractmethod
    def map(self, f: Callable[[T], U]) -> Result[U, E]: ...
    @abstractmethod
    def map_err(self, f: Callable[[E], F]) -> Result[T, F]: ...
    @abstractmethod
    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]: ...
    @abstractmethod
    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]: ...
    @abstractmethod
    def ok(self) -> T | None: ...
    @abstractmethod
    def err(self) -> E | None: ...

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return self.flat_map(f)


@dataclass(frozen=True, slots=True, repr=False)
class Ok(Result[T, E]):
    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"

    def __iter__(self) -> Iterator[T]:
        yield self.value

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise RuntimeError(f"unwrap_err() on {self!r}")

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        return Ok(self.value)

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return f(self.value)

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        return Ok(self.value)

    def ok(self) -> T:
        return self.value

    def err(self) -> None:
        return None


@dataclass(frozen=True, slots=True, repr=False)
class Err(Result[T, E]):
    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"

    def __iter__(self) -> Iterator[T]:
        return iter(())

    def unwrap(self) -> NoReturn:
        """Raise the error itself when it is an exception, else RuntimeError."""
        if isinstance(self.error, BaseException):
            raise self.error
        raise RuntimeError(f"unwrap() on {self!r}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        return f(self.error)

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        return Err(self.error)

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        return Err(f(self.error))

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return Err(self.error)

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        return f(self.error)

    def ok(self) -> None:
        return None

    def err(self) -> E:
        return self.error


def try_fn(f: Callable[[], T], *catch: type[Exception]) -> Result[T, Exception]:
    """Call f, turning the listed exception types (default: Exception) into Err."""
    try:
        return Ok(f())
    except (catch or (Exception,)) as e:  # type: ignore[misc]
        return Err(e)


def sequence(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Collect Ok values in order; the first Err short-circuits."""
    values: list[T] = []
    for result in results:
        if isinstance(result, Err):
            return Err(result.error)
        values.append(result.unwrap())
    return Ok(values)
