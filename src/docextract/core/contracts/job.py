"""Job record and object-location contracts.

A ``JobRecord`` is what the status store keeps per submitted document; it is
keyed by the ``ack_id`` handed back to the client at upload time. The
coordinator never reads it, it only pushes status transitions into the store.

Key conventions
---------------
- uploads:  ``uploads/{ack_id}/{file_name}``
- results:  ``results/{file_base_name}.xlsx`` (original extension stripped)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

UPLOAD_PREFIX = "uploads"
RESULT_PREFIX = "results"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_EXTENSION_RE = re.compile(r"\.[^.]+$")


class JobStatus(str, Enum):
    """Lifecycle of a submitted document as seen by clients."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class JobRecord(BaseModel):
    """Status-store entity for one submitted document."""

    ack_id: str = Field(..., description="Client-visible acknowledgment id (UUID4).")
    file_name: str
    upload_key: str | None = None
    result_key: str | None = None
    status: JobStatus = JobStatus.PENDING
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    duplicate: bool = False
    error_message: str | None = None

    @property
    def has_result(self) -> bool:
        return bool(self.result_key and self.result_key.strip())


@dataclass(frozen=True, slots=True)
class ObjectLocation:
    """Bucket + key address of one stored object."""

    bucket: str
    key: str

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    @property
    def file_name(self) -> str:
        return self.key.split("/")[-1]

    @classmethod
    def from_uri(cls, uri: str) -> ObjectLocation:
        """Parse ``s3://bucket/key``.

        Raises
        ------
        ValueError
            If the URI has no ``s3://`` scheme, bucket or key.
        """
        if not uri.startswith("s3://"):
            raise ValueError(f"Not an s3:// URI: {uri!r}")
        bucket, _, key = uri[len("s3://") :].partition("/")
        if not bucket or not key:
            raise ValueError(f"URI must name both a bucket and a key: {uri!r}")
        return cls(bucket=bucket, key=key)


def build_upload_key(ack_id: str, file_name: str) -> str:
    return f"{UPLOAD_PREFIX}/{ack_id}/{file_name}"


def build_result_key(file_name: str) -> str:
    """Result key for ``file_name``; must match between pipeline and API."""
    base_name = _EXTENSION_RE.sub("", file_name)
    return f"{RESULT_PREFIX}/{base_name}.xlsx"


def ack_id_from_key(key: str) -> str | None:
    """Return the ack id of an upload key, or None if it is not one."""
    parts = key.split("/")
    if len(parts) >= 3 and parts[0] == UPLOAD_PREFIX:
        return parts[1]
    return None


def truncate_message(message: str | None, limit: int = 500) -> str | None:
    if message is None:
        return None
    return message if len(message) <= limit else message[:limit]


__all__ = [
    "JobStatus",
    "JobRecord",
    "ObjectLocation",
    "XLSX_CONTENT_TYPE",
    "build_upload_key",
    "build_result_key",
    "ack_id_from_key",
    "truncate_message",
    "utc_now_iso",
]
