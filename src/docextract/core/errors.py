"""Exception taxonomy for document analysis and report generation.

Only *fatal* conditions live here. Inconsistencies inside a block graph
(dangling ids, missing text) are recovered by the resolver and never raised,
and status-store failures are logged and swallowed by the pipeline.

Hierarchy
---------
DocExtractError
├── AnalysisJobFailed     remote engine reported FAILED
├── AnalysisTimedOut      execution budget fell below the safety margin
├── UnexpectedJobStatus   remote engine returned a status we do not know
├── PollingInterrupted    the wait between two polls was interrupted
├── EngineError           SDK / transport failure talking to the engine
├── StorageError          object-store failure
├── ReportReadError       a stored report could not be parsed
└── ConfigurationError    a required setting is missing
"""

from __future__ import annotations


class DocExtractError(Exception):
    """Base class for all DocExtract errors."""


class AnalysisJobFailed(DocExtractError):
    """The analysis engine finished the job with status FAILED."""

    def __init__(self, job_id: str, message: str | None = None) -> None:
        self.job_id = job_id
        self.remote_message = message or ""
        super().__init__(f"Textract job FAILED: {job_id} - {self.remote_message}")


class AnalysisTimedOut(DocExtractError):
    """Polling stopped because the execution budget is nearly exhausted.

    The remote job is most likely still running; resubmitting it is the
    caller's decision.
    """

    def __init__(self, job_id: str, remaining_seconds: float) -> None:
        self.job_id = job_id
        self.remaining_seconds = remaining_seconds
        super().__init__(
            f"Execution budget nearly exhausted ({remaining_seconds:.1f}s left). "
            f"Textract job still IN_PROGRESS: {job_id}"
        )


class UnexpectedJobStatus(DocExtractError):
    """The analysis engine returned a status outside the known set."""

    def __init__(self, job_id: str, status: str | None) -> None:
        self.job_id = job_id
        self.status = status
        super().__init__(f"Unexpected Textract job status: {status} (job {job_id})")


class PollingInterrupted(DocExtractError):
    """The wait between two polls was interrupted by the caller."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Polling interrupted for job {job_id}")


class EngineError(DocExtractError):
    """A call to the analysis engine itself failed (not the job)."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        self.error_code = error_code
        super().__init__(message)


class StorageError(DocExtractError):
    """An object-store operation failed."""

    def __init__(self, message: str, location: str | None = None) -> None:
        self.location = location
        super().__init__(message)


class ReportReadError(DocExtractError):
    """A persisted report could not be read back."""


class ConfigurationError(DocExtractError):
    """A setting required by the requested operation is missing."""


__all__ = [
    "DocExtractError",
    "AnalysisJobFailed",
    "AnalysisTimedOut",
    "UnexpectedJobStatus",
    "PollingInterrupted",
    "EngineError",
    "StorageError",
    "ReportReadError",
    "ConfigurationError",
]
