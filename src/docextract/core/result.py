"""Typed Result container for per-document outcomes.

The batch handler processes several uploaded documents per trigger and must
never let one document's failure abort its siblings. Instead of collecting
exceptions in ad-hoc lists it returns one ``Result`` per record:

- ``Ok(value)`` for a document that reached COMPLETED,
- ``Err(error)`` carrying the failure message otherwise.

Example
-------
>>> from docextract.core.result import ok, err
>>> outcomes = [ok("results/a.xlsx"), err("Textract job FAILED")]
>>> [o.is_ok() for o in outcomes]
[True, False]
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar, cast

T = TypeVar("T")
E = TypeVar("E")


class Result(Generic[T, E]):
    """Sum type representing either success (`Ok[T]`) or failure (`Err[E]`)."""

    def is_ok(self) -> bool:
        """Return ``True`` if this is an :class:`Ok` value."""
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` if this is an :class:`Err` value."""
        return isinstance(self, Err)

    def unwrap(self) -> T:
        """Return the success value, raising ``RuntimeError`` on ``Err``."""
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        raise RuntimeError(f"Attempted to unwrap Err: {self!r}")

    def unwrap_err(self) -> E:
        """Return the error value, raising ``RuntimeError`` on ``Ok``."""
        if isinstance(self, Err):
            return cast(Err[T, E], self).error
        raise RuntimeError(f"Attempted to unwrap_err on Ok: {self!r}")


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Successful result wrapping a value of type ``T``."""

    value: T


@dataclass(frozen=True)
class Err(Result[T, E]):
    """Failed result wrapping an error payload of type ``E``."""

    error: E


def partition(results: Iterable[Result[T, E]]) -> tuple[list[T], list[E]]:
    """Split per-document outcomes into (successes, failures), keeping order."""
    successes: list[T] = []
    failures: list[E] = []
    for result in results:
        if isinstance(result, Ok):
            successes.append(result.value)
        else:
            failures.append(cast(Err[T, E], result).error)
    return successes, failures


def ok(value: T) -> Result[T, E]:
    """Construct :class:`Ok` with better type inference at call sites."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Construct :class:`Err` with better type inference at call sites."""
    return Err(error)


__all__ = ["Result", "Ok", "Err", "ok", "err", "partition"]
