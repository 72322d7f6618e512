"""
Document report pipeline: uploaded document -> stored Excel report.

Flow Overview
-------------
1. Derive the ack id and file name from the upload key
   (``uploads/{ack_id}/{file_name}``).
2. Status -> PROCESSING.
3. The :class:`AnalysisCoordinator` collects the block list (sync call for
   images, submit/poll/page for PDFs).
4. The resolver builds lines, key/values and tables; the writer turns them
   into ``.xlsx`` bytes.
5. The report is stored at ``{results_bucket}/results/{base_name}.xlsx``.
6. Status -> COMPLETED with the result key.

Any failure in steps 3-5 sets status FAILED with the error message truncated
to the configured limit, then re-raises so the caller sees the real outcome.

Status updates are best-effort: a failing status store is logged and
ignored, it never replaces the processing outcome.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from docextract.core.contracts.job import (
    XLSX_CONTENT_TYPE,
    JobStatus,
    ObjectLocation,
    ack_id_from_key,
    build_result_key,
    truncate_message,
)
from docextract.core.contracts.report import ResolvedDocument
from docextract.core.coordinator.poller import AnalysisCoordinator, AnalysisRun
from docextract.core.coordinator.ports import AnalysisEngine, JobStatusStore, ObjectStore, TimeBudget
from docextract.core.graph.resolver import resolve
from docextract.core.settings import Settings, get_logger
from docextract.report.writer import write_report
from docextract.services import Services

logger = get_logger(__name__)


@dataclass
class DocumentOutcome:
    """What happened to one uploaded document."""

    ack_id: str
    file_name: str
    upload: ObjectLocation
    status: JobStatus = JobStatus.PROCESSING
    result: ObjectLocation | None = None
    error: str | None = None
    run: AnalysisRun = field(default_factory=AnalysisRun)
    document: ResolvedDocument | None = None


class DocumentReportPipeline:
    """Run one uploaded document through analysis, resolution and reporting."""

    def __init__(
        self,
        engine: AnalysisEngine,
        objects: ObjectStore,
        jobs: JobStatusStore,
        settings: Settings,
        *,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.objects = objects
        self.jobs = jobs
        self.settings = settings
        self.coordinator = AnalysisCoordinator.from_settings(engine, settings, stop_event)

    @classmethod
    def from_services(
        cls, services: Services, *, stop_event: threading.Event | None = None
    ) -> DocumentReportPipeline:
        return cls(
            services.engine,
            services.objects,
            services.jobs,
            services.settings,
            stop_event=stop_event,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def process(self, upload: ObjectLocation, budget: TimeBudget) -> DocumentOutcome:
        """Process one upload end to end.

        Raises
        ------
        ValueError
            If ``upload.key`` is not an ``uploads/{ack_id}/{file}`` key.
        DocExtractError
            Any fatal analysis or storage error, after status FAILED was recorded.
        """
        ack_id = ack_id_from_key(upload.key)
        if ack_id is None:
            raise ValueError(f"Could not derive ackId from key: {upload.key}")

        outcome = DocumentOutcome(ack_id=ack_id, file_name=upload.file_name, upload=upload)
        logger.info("Processing %s (ack_id=%s)", upload.uri, ack_id)
        self._set_status(ack_id, JobStatus.PROCESSING)

        try:
            self.coordinator.run(upload, budget, outcome.run)
            logger.info("Analysis returned %d blocks for %s", len(outcome.run.blocks), upload.uri)

            outcome.document = resolve(outcome.run.blocks)
            data = write_report(outcome.document, outcome.file_name)

            result = ObjectLocation(self.settings.results_bucket, build_result_key(outcome.file_name))
            self.objects.put(result, data, XLSX_CONTENT_TYPE)
            logger.info("Report stored at %s", result.uri)
        except Exception as exc:
            outcome.status = JobStatus.FAILED
            outcome.error = truncate_message(str(exc), self.settings.error_message_limit)
            logger.error("Processing failed for ack_id=%s key=%s: %s", ack_id, upload.key, exc)
            self._set_status(ack_id, JobStatus.FAILED, error_message=outcome.error)
            raise

        outcome.status = JobStatus.COMPLETED
        outcome.result = result
        self._set_status(ack_id, JobStatus.COMPLETED, result_key=result.key)
        return outcome

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _set_status(
        self,
        ack_id: str,
        status: JobStatus,
        *,
        result_key: str | None = None,
        error_message: str | None = None,
    ) -> None:
        """Push one transition to the status store; failures are logged only."""
        try:
            self.jobs.update(ack_id, status, result_key=result_key, error_message=error_message)
        except Exception:
            logger.exception("Failed to update job status: ack_id=%s status=%s", ack_id, status.value)


__all__ = ["DocumentOutcome", "DocumentReportPipeline"]
