"""Analysis job coordination: ports, budgets and the polling state machine."""

from __future__ import annotations

from .budget import Deadline, LambdaContextBudget
from .poller import AnalysisCoordinator, AnalysisRun, JobPhase, requires_async
from .ports import (
    AnalysisEngine,
    AnalysisPage,
    EngineStatus,
    JobStatusStore,
    ObjectStore,
    TimeBudget,
)

__all__ = [
    "AnalysisCoordinator",
    "AnalysisEngine",
    "AnalysisPage",
    "AnalysisRun",
    "Deadline",
    "EngineStatus",
    "JobPhase",
    "JobStatusStore",
    "LambdaContextBudget",
    "ObjectStore",
    "TimeBudget",
    "requires_async",
]
