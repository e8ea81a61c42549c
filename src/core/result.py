#!/usr/bin/env python3
"""
Tagged success/failure values.

Used where a failure is expected and handled locally instead of propagating,
e.g. the per-job session enrichment. A function returning ``Result`` makes
the recovery boundary visible in its signature.
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar('T')
E = TypeVar('E', bound=Exception)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying the error that caused it."""
    error: E

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]


def attempt(func: Callable[[], T], wrap: Callable[[Exception], E]) -> 'Result[T, E]':
    """
    Run ``func`` and capture any exception as an ``Err``.

    Args:
        func: Zero-argument callable producing the value
        wrap: Converts the raised exception into the error type carried by ``Err``
    """
    try:
        return Ok(func())
    except Exception as e:
        return Err(wrap(e))


def recover(result: 'Result[T, E]', fallback: Callable[[E], T]) -> T:
    """Unwrap ``result``, replacing a failure with ``fallback(error)``."""
    if isinstance(result, Ok):
        return result.value
    return fallback(result.error)
