"""
Background task runner for uploaded documents.

Used when ``TRIGGER_MODE=background``: instead of waiting for the object-store
notification to fire the batch handler, the API schedules this function via
FastAPI's ``BackgroundTasks`` right after an upload or reprocess request.
"""

from __future__ import annotations

from docextract.core.contracts.job import ObjectLocation
from docextract.core.coordinator.budget import Deadline
from docextract.core.settings import get_logger
from docextract.pipelines.document_report import DocumentReportPipeline
from docextract.services import Services

logger = get_logger(__name__)


def run_document_task(ack_id: str, services: Services) -> None:
    """
    Process the upload of ``ack_id`` and record the outcome in the job store.

    It never raises to the caller: the pipeline has already marked the job
    FAILED when processing goes wrong, so the error is only logged here.

    Parameters
    ----------
    ack_id:
        Acknowledgment id returned by the upload endpoint.
    services:
        Engine and stores to run against.
    """
    record = services.jobs.get(ack_id)
    if record is None or not record.upload_key:
        logger.warning("No upload registered for ack_id=%s, nothing to process", ack_id)
        return

    settings = services.settings
    upload = ObjectLocation(settings.upload_bucket, record.upload_key)
    pipeline = DocumentReportPipeline.from_services(services)

    try:
        pipeline.process(upload, Deadline.after(settings.default_budget_seconds))
    except Exception as exc:
        logger.error("Background processing failed for ack_id=%s: %s", ack_id, exc)


__all__ = ["run_document_task"]
