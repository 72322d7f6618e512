"""
Analysis job coordinator: drive one remote analysis job to completion.

State machine
-------------
::

    SUBMITTED ──(sync call)───────────────────────────► SUCCEEDED
        │                                                  ▲
        └─(submit)─► POLLING ──(SUCCEEDED + page chain)────┘
                        │ ├──(FAILED)────────────────────► FAILED
                        │ └──(unknown status / error)────► FAILED
                        └────(budget < margin)──────────► TIMED_OUT

Polling rules
-------------
- A fixed delay separates two polls; there is no backoff.
- IN_PROGRESS and PARTIAL_SUCCESS both mean "keep polling". Blocks carried by
  a PARTIAL_SUCCESS response are ignored; only the SUCCEEDED page chain is
  trusted.
- On SUCCEEDED the first page's blocks are kept, then every following page is
  fetched with the continuation token and appended in arrival order until no
  token is returned.
- Before each poll the remaining budget is compared with the safety margin;
  running short raises :class:`AnalysisTimedOut`.
- The wait between polls is a ``threading.Event`` wait. A set event aborts
  with :class:`PollingInterrupted`.
- Poll calls are not retried; an engine error propagates.

One coordinator holds no per-job state, so a single instance may serve
several documents as long as each ``run`` call drives its own job.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import StrEnum

from docextract.core.contracts.block import Block
from docextract.core.contracts.job import ObjectLocation
from docextract.core.coordinator.ports import AnalysisEngine, AnalysisPage, EngineStatus, TimeBudget
from docextract.core.errors import (
    AnalysisJobFailed,
    AnalysisTimedOut,
    PollingInterrupted,
    UnexpectedJobStatus,
)
from docextract.core.settings import Settings, get_logger

logger = get_logger(__name__)

_ASYNC_SUFFIXES = (".pdf",)
_KEEP_POLLING = frozenset({EngineStatus.IN_PROGRESS.value, EngineStatus.PARTIAL_SUCCESS.value})


class JobPhase(StrEnum):
    """Coordinator states for one document."""

    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"


TERMINAL_PHASES = frozenset({JobPhase.SUCCEEDED, JobPhase.FAILED, JobPhase.TIMED_OUT})


@dataclass
class AnalysisRun:
    """Observable record of one coordinator run.

    Pass a fresh instance to :meth:`AnalysisCoordinator.run` to inspect the
    phase history even when the run ends in an exception.
    """

    document: ObjectLocation | None = None
    job_id: str | None = None
    phases: list[JobPhase] = field(default_factory=list)
    poll_count: int = 0
    page_count: int = 0
    blocks: list[Block] = field(default_factory=list)

    @property
    def phase(self) -> JobPhase | None:
        return self.phases[-1] if self.phases else None

    def enter(self, phase: JobPhase) -> None:
        if self.phase in TERMINAL_PHASES:
            raise RuntimeError(f"Run already terminated in {self.phase}, cannot enter {phase}")
        self.phases.append(phase)
        logger.info(
            "Analysis phase -> %s (document=%s, job=%s)",
            phase,
            self.document.uri if self.document else "?",
            self.job_id or "-",
        )


def requires_async(document: ObjectLocation) -> bool:
    """PDFs go through the asynchronous job API; images use the sync call."""
    return document.key.lower().endswith(_ASYNC_SUFFIXES)


class AnalysisCoordinator:
    """Submit, poll and page through one analysis job per :meth:`run` call.

    Parameters
    ----------
    engine:
        The analysis engine port.
    poll_interval:
        Seconds to wait before every poll.
    deadline_margin:
        Polling stops once the budget has less than this many seconds left.
    stop_event:
        Optional event; setting it interrupts the wait between polls.
    """

    def __init__(
        self,
        engine: AnalysisEngine,
        *,
        poll_interval: float = 5.0,
        deadline_margin: float = 60.0,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.engine = engine
        self.poll_interval = poll_interval
        self.deadline_margin = deadline_margin
        self._stop = stop_event or threading.Event()

    @classmethod
    def from_settings(
        cls,
        engine: AnalysisEngine,
        settings: Settings,
        stop_event: threading.Event | None = None,
    ) -> AnalysisCoordinator:
        return cls(
            engine,
            poll_interval=settings.poll_interval_seconds,
            deadline_margin=settings.deadline_margin_seconds,
            stop_event=stop_event,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def run(
        self,
        document: ObjectLocation,
        budget: TimeBudget,
        run: AnalysisRun | None = None,
    ) -> AnalysisRun:
        """Analyse ``document`` and return the run with its accumulated blocks.

        Raises
        ------
        AnalysisJobFailed
            The engine reported FAILED.
        AnalysisTimedOut
            The budget fell below the safety margin while still polling.
        UnexpectedJobStatus
            The engine reported a status outside the known set.
        PollingInterrupted
            The stop event was set during a wait.
        EngineError
            An engine call itself failed.
        """
        run = run if run is not None else AnalysisRun()
        run.document = document
        if requires_async(document):
            return self.run_async(document, budget, run)
        return self.run_sync(document, run)

    def run_sync(self, document: ObjectLocation, run: AnalysisRun | None = None) -> AnalysisRun:
        """One blocking engine call; SUBMITTED goes straight to SUCCEEDED."""
        run = run if run is not None else AnalysisRun(document=document)
        run.enter(JobPhase.SUBMITTED)
        try:
            run.blocks = list(self.engine.analyze_sync(document))
        except Exception:
            run.enter(JobPhase.FAILED)
            raise
        run.page_count = 1
        run.enter(JobPhase.SUCCEEDED)
        logger.info("Sync analysis returned %d blocks for %s", len(run.blocks), document.uri)
        return run

    def run_async(
        self,
        document: ObjectLocation,
        budget: TimeBudget,
        run: AnalysisRun | None = None,
    ) -> AnalysisRun:
        """Submit a job, poll it to completion and collect every result page."""
        run = run if run is not None else AnalysisRun(document=document)
        run.enter(JobPhase.SUBMITTED)
        try:
            run.job_id = self.engine.submit(document)
        except Exception:
            run.enter(JobPhase.FAILED)
            raise
        logger.info("Analysis job started: job=%s document=%s", run.job_id, document.uri)

        run.enter(JobPhase.POLLING)
        try:
            first_page = self._poll_until_done(run, budget)
            run.blocks = self._collect_pages(run, first_page)
        except AnalysisTimedOut:
            run.enter(JobPhase.TIMED_OUT)
            raise
        except Exception:
            run.enter(JobPhase.FAILED)
            raise

        run.enter(JobPhase.SUCCEEDED)
        logger.info(
            "Analysis job completed: job=%s blocks=%d pages=%d polls=%d",
            run.job_id,
            len(run.blocks),
            run.page_count,
            run.poll_count,
        )
        return run

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _poll_until_done(self, run: AnalysisRun, budget: TimeBudget) -> AnalysisPage:
        """Poll until SUCCEEDED and return that first result page."""
        job_id = run.job_id or ""
        while True:
            if self._stop.wait(self.poll_interval):
                raise PollingInterrupted(job_id)

            remaining = budget.remaining_seconds()
            if remaining < self.deadline_margin:
                logger.warning(
                    "Budget below margin (%.1fs < %.1fs), abandoning job=%s",
                    remaining,
                    self.deadline_margin,
                    job_id,
                )
                raise AnalysisTimedOut(job_id, remaining)

            page = self.engine.poll(job_id)
            run.poll_count += 1
            logger.info("Poll #%d: job=%s status=%s", run.poll_count, job_id, page.status)

            if page.status == EngineStatus.SUCCEEDED:
                return page
            if page.status == EngineStatus.FAILED:
                raise AnalysisJobFailed(job_id, page.message)
            if page.status not in _KEEP_POLLING:
                raise UnexpectedJobStatus(job_id, page.status)

    def _collect_pages(self, run: AnalysisRun, first_page: AnalysisPage) -> list[Block]:
        """Append the first page and every continuation page, in arrival order."""
        job_id = run.job_id or ""
        blocks: list[Block] = list(first_page.blocks)
        run.page_count = 1
        next_token = first_page.next_token
        while next_token:
            page = self.engine.poll(job_id, next_token=next_token)
            blocks.extend(page.blocks)
            run.page_count += 1
            next_token = page.next_token
        return blocks


__all__ = [
    "JobPhase",
    "TERMINAL_PHASES",
    "AnalysisRun",
    "AnalysisCoordinator",
    "requires_async",
]
