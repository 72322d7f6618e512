"""
Response models of the documents API.

Field names are snake_case in Python and camelCase on the wire
(``ackId``, ``hasResult``, ``downloadUrl``), matching what existing
front-end clients of the upload service already consume.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docextract.core.contracts.job import JobRecord, JobStatus


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadResponse(ApiModel):
    ack_id: str
    file_name: str
    status: JobStatus
    duplicate: bool = False
    message: str


class StatusResponse(ApiModel):
    ack_id: str
    file_name: str
    status: JobStatus
    created_at: str
    updated_at: str
    has_result: bool
    error: str | None = None

    @classmethod
    def from_record(cls, record: JobRecord) -> StatusResponse:
        return cls(
            ack_id=record.ack_id,
            file_name=record.file_name,
            status=record.status,
            created_at=record.created_at,
            updated_at=record.updated_at,
            has_result=record.has_result,
            error=record.error_message,
        )


class ResultResponse(ApiModel):
    ack_id: str
    file_name: str
    status: JobStatus
    sheets: dict[str, list[dict[str, str]]] = Field(default_factory=dict)
    download_url: str


class PendingResponse(ApiModel):
    ack_id: str
    status: JobStatus
    message: str


class ReprocessResponse(ApiModel):
    ack_id: str
    status: JobStatus
    message: str


class DownloadResponse(ApiModel):
    ack_id: str
    download_url: str
    expires_in: int


__all__ = [
    "DownloadResponse",
    "PendingResponse",
    "ReprocessResponse",
    "ResultResponse",
    "StatusResponse",
    "UploadResponse",
]
