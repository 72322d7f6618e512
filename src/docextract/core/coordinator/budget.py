"""Execution-time budgets.

Two sources are supported: the remaining time of a Lambda invocation, and a
plain monotonic deadline for runs outside Lambda (CLI, API background tasks).
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any


class Deadline:
    """A fixed point on the monotonic clock."""

    __slots__ = ("_deadline", "_clock")

    def __init__(self, deadline: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._deadline = deadline
        self._clock = clock

    @classmethod
    def after(cls, seconds: float, clock: Callable[[], float] = time.monotonic) -> Deadline:
        """Deadline ``seconds`` from now on ``clock``."""
        return cls(clock() + seconds, clock)

    def remaining_seconds(self) -> float:
        return max(0.0, self._deadline - self._clock())


class LambdaContextBudget:
    """Budget read from an AWS Lambda context object."""

    __slots__ = ("_context",)

    def __init__(self, context: Any) -> None:
        self._context = context

    def remaining_seconds(self) -> float:
        return float(self._context.get_remaining_time_in_millis()) / 1000.0


__all__ = ["Deadline", "LambdaContextBudget"]
