"""Result container used for expected failures instead of raised exceptions."""
from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class UnwrapError(Exception):
    """Raised when unwrapping an Err whose payload is not an exception."""

    def __init__(self, error: Any) -> None:
        super().__init__(f"Called unwrap on Err: {error!r}")
        self.error = error


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success arm. Carries `value` only."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return fn(self.value)

    def map_error(self, fn: Callable[[Any], F]) -> Ok[T]:
        return self

    def match(self, *, ok: Callable[[T], U], err: Callable[[Any], U]) -> U:
        return ok(self.value)

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failure arm. Carries `error` only."""

    error: E

    @property
    def ok(self) -> bool:
        return False

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        return self

    def flat_map(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        return self

    def map_error(self, fn: Callable[[E], F]) -> Err[F]:
        return Err(fn(self.error))

    def match(self, *, ok: Callable[[Any], U], err: Callable[[E], U]) -> U:
        return err(self.error)

    def unwrap(self) -> NoReturn:
        if isinstance(self.error, BaseException):
            raise self.error
        raise UnwrapError(self.error)

    def unwrap_or(self, default: T) -> T:
        return default


Result = Union[Ok[T], Err[E]]


def ok(value: T) -> Ok[T]:
    return Ok(value)


def err(error: E) -> Err[E]:
    return Err(error)


def combine(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Collapse results into one, stopping at the first failure."""
    values: list[T] = []
    for result in results:
        if isinstance(result, Err):
            return result
        values.append(result.value)
    return Ok(values)


async def map_async(result: Result[T, E], fn: Callable[[T], Awaitable[U]]) -> Result[U, E]:
    if isinstance(result, Ok):
        return Ok(await fn(result.value))
    return result


async def flat_map_async(
    result: Result[T, E],
    fn: Callable[[T], Awaitable[Result[U, E]]],
) -> Result[U, E]:
    if isinstance(result, Ok):
        return await fn(result.value)
    return result


def try_catch(
    fn: Callable[[], T],
    error_mapper: Callable[[Exception], E] | None = None,
) -> Result[T, Any]:
    try:
        return Ok(fn())
    except Exception as exc:
        return Err(error_mapper(exc) if error_mapper else exc)


async def try_catch_async(
    fn: Callable[[], Awaitable[T]],
    error_mapper: Callable[[Exception], E] | None = None,
) -> Result[T, Any]:
    try:
        return Ok(await fn())
    except Exception as exc:
        return Err(error_mapper(exc) if error_mapper else exc)
