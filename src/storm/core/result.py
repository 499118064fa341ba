"""
Result envelope for consistent success/failure handling.

Provides a typed ``Result[T]`` (``Ok`` | ``Err``) so multi-stage operations
can record failures as values and keep going. The bootstrap sequence uses
it to run every stage even after an earlier one fails, then report the
first failure.

Examples:
    >>> from storm.core.result import Ok, Err, first_error
    >>> results = [Ok(None), Err(RuntimeError("stage 2")), Err(KeyError("stage 3"))]
    >>> first_error(results)
    RuntimeError('stage 2')

    Pattern matching:

    >>> match try_result(lambda: 1 / 0):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(error):
    ...         print(type(error).__name__)
    ZeroDivisionError

Tags:
    result-pattern, error-handling, storm-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result; ``error`` is the exception object exactly as raised."""

    error: Exception

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T]) -> Result[T]:
    """Call ``f`` and capture its return value or raised ``Exception``."""
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


def first_error(results: list[Result[Any]]) -> Exception | None:
    """Return the error of the first ``Err`` in ``results``, or None."""
    for result in results:
        if isinstance(result, Err):
            return result.error
    return None


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result",
    "first_error",
]
