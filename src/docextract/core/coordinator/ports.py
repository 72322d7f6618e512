"""
Capability interfaces consumed by the coordinator and the document pipeline.

Every external system is passed in explicitly as one of these protocols
instead of being reached through a module-level client. Production code wires
the AWS adapters (:mod:`docextract.adapters`); tests wire scripted fakes and
the in-memory stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, runtime_checkable

from docextract.core.contracts.block import Block
from docextract.core.contracts.job import JobRecord, JobStatus, ObjectLocation


class EngineStatus(StrEnum):
    """Statuses the analysis engine may report for an asynchronous job."""

    IN_PROGRESS = "IN_PROGRESS"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class AnalysisPage:
    """One response of a poll or result-page request."""

    status: str | None
    blocks: list[Block] = field(default_factory=list)
    next_token: str | None = None
    message: str | None = None


@runtime_checkable
class AnalysisEngine(Protocol):
    """Remote document-analysis engine."""

    def submit(self, document: ObjectLocation) -> str:
        """Start an asynchronous analysis job and return its job id."""
        ...

    def poll(self, job_id: str, next_token: str | None = None) -> AnalysisPage:
        """Fetch the job status, or the result page addressed by ``next_token``."""
        ...

    def analyze_sync(self, document: ObjectLocation) -> list[Block]:
        """Analyse a small document in one blocking call."""
        ...


@runtime_checkable
class ObjectStore(Protocol):
    """Blob storage for uploads and generated reports."""

    def put(self, location: ObjectLocation, data: bytes, content_type: str) -> None: ...

    def get(self, location: ObjectLocation) -> bytes: ...

    def exists(self, location: ObjectLocation) -> bool: ...

    def delete(self, location: ObjectLocation) -> None: ...

    def presign(self, location: ObjectLocation, ttl_seconds: int) -> str: ...


@runtime_checkable
class JobStatusStore(Protocol):
    """Key-value store of :class:`JobRecord` entries keyed by ack id."""

    def create(self, ack_id: str, file_name: str, upload_key: str) -> JobRecord: ...

    def get(self, ack_id: str) -> JobRecord | None: ...

    def update(
        self,
        ack_id: str,
        status: JobStatus,
        result_key: str | None = None,
        error_message: str | None = None,
    ) -> None: ...

    def find_by_file_name(self, file_name: str) -> JobRecord | None: ...


@runtime_checkable
class TimeBudget(Protocol):
    """Remaining wall-clock execution budget of the current invocation."""

    def remaining_seconds(self) -> float: ...


__all__ = [
    "EngineStatus",
    "AnalysisPage",
    "AnalysisEngine",
    "ObjectStore",
    "JobStatusStore",
    "TimeBudget",
]
