"""Unit tests for the Result container used for per-document outcomes."""

from __future__ import annotations

import pytest

from docextract.core.result import Err, Ok, Result, err, ok, partition


def test_ok_and_err_unwrap() -> None:
    """`Ok` unwraps to its value, `Err` to its error."""
    r: Result[int, str] = ok(10)
    assert r.is_ok() and not r.is_err()
    assert r.unwrap() == 10

    failed: Result[int, str] = err("boom")
    assert isinstance(failed, Err) and failed.is_err()
    assert failed.unwrap_err() == "boom"


def test_unwrap_wrong_variant_raises() -> None:
    """Unwrapping the wrong variant should raise RuntimeError."""
    with pytest.raises(RuntimeError):
        err("e").unwrap()
    with pytest.raises(RuntimeError):
        ok(1).unwrap_err()


def test_variants_are_frozen() -> None:
    """Ok/Err are immutable dataclasses."""
    value = Ok(1)
    with pytest.raises(AttributeError):
        value.value = 2  # type: ignore[misc]


def test_partition_keeps_order() -> None:
    """`partition` splits outcomes into successes and failures."""
    results: list[Result[str, str]] = [ok("a"), err("x"), ok("b"), err("y")]
    assert partition(results) == (["a", "b"], ["x", "y"])
    assert partition([]) == ([], [])
