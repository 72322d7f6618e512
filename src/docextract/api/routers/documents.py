"""
API routes for uploaded documents.

Endpoints
---------
- ``POST /api/documents/upload``: store a document and register an ack id.
- ``GET /api/documents/status/{ack_id}``: poll the processing status.
- ``GET /api/documents/result/{ack_id}``: report sheets + download link.
- ``POST /api/documents/reprocess/{ack_id}``: run the analysis again.
- ``GET /api/documents/download/{ack_id}``: presigned link to the report.

Routes are plain ``def`` functions: the stores make blocking SDK calls, so
FastAPI runs them in its threadpool.

Processing itself is triggered either by the object-created event (batch
handler, ``TRIGGER_MODE=event``) or by a FastAPI background task
(``TRIGGER_MODE=background``).
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from docextract.api.background import run_document_task
from docextract.api.schemas import (
    DownloadResponse,
    PendingResponse,
    ReprocessResponse,
    ResultResponse,
    StatusResponse,
    UploadResponse,
)
from docextract.core.contracts.job import (
    JobRecord,
    JobStatus,
    ObjectLocation,
    build_result_key,
    build_upload_key,
)
from docextract.core.settings import get_logger
from docextract.report.reader import read_sheets
from docextract.services import Services, get_services

logger = get_logger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])

ALLOWED_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png", ".tiff", ".tif", ".webp")

_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    ".webp": "image/webp",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

ServicesDep = Annotated[Services, Depends(get_services)]


def content_type_for(file_name: str) -> str:
    """Content type derived from the file extension (JPEG when unknown)."""
    lower = file_name.lower()
    for extension, content_type in _CONTENT_TYPES.items():
        if lower.endswith(extension):
            return content_type
    return "image/jpeg"


def _require_job(services: Services, ack_id: str) -> JobRecord:
    record = services.jobs.get(ack_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job not found for ackId: {ack_id}",
        )
    return record


def _result_location(services: Services, record: JobRecord) -> ObjectLocation:
    key = record.result_key if record.has_result else build_result_key(record.file_name)
    return ObjectLocation(services.settings.results_bucket, key or "")


def _pending(record: JobRecord) -> JSONResponse:
    body = PendingResponse(
        ack_id=record.ack_id,
        status=record.status,
        message=f"Document is still being processed. Current status: {record.status.value}",
    )
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=body.model_dump(by_alias=True, mode="json"))


@router.post("/upload", response_model=UploadResponse, summary="Upload a document for analysis")
def upload_document(
    services: ServicesDep,
    background_tasks: BackgroundTasks,
    file: Annotated[UploadFile, File()],
) -> UploadResponse:
    """
    Store an uploaded document and register it as PENDING.

    A file whose report already exists and whose latest job is COMPLETED is
    reported as a duplicate with the existing ack id; nothing is stored.
    """
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty")

    file_name = file.filename or "unknown"
    if not file_name.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported file type. Allowed: PDF, JPG, PNG, TIFF, WEBP",
        )

    settings = services.settings
    result = ObjectLocation(settings.results_bucket, build_result_key(file_name))
    if services.objects.exists(result):
        existing = services.jobs.find_by_file_name(file_name)
        if existing is not None and existing.status == JobStatus.COMPLETED:
            logger.info("Duplicate detected for file: %s", file_name)
            return UploadResponse(
                ack_id=existing.ack_id,
                file_name=file_name,
                status=JobStatus.COMPLETED,
                duplicate=True,
                message=(
                    "This document was previously analysed. "
                    "You can view the existing result or reprocess it."
                ),
            )

    ack_id = str(uuid.uuid4())
    upload = ObjectLocation(settings.upload_bucket, build_upload_key(ack_id, file_name))
    services.objects.put(upload, data, content_type_for(file_name))
    services.jobs.create(ack_id, file_name, upload.key)
    logger.info("Document queued for processing: ack_id=%s file=%s", ack_id, file_name)

    if settings.trigger_mode == "background":
        background_tasks.add_task(run_document_task, ack_id, services)

    return UploadResponse(
        ack_id=ack_id,
        file_name=file_name,
        status=JobStatus.PENDING,
        message="Document uploaded successfully. Use the acknowledgment ID to track progress.",
    )


@router.get("/status/{ack_id}", response_model=StatusResponse, summary="Get processing status")
def get_status(ack_id: str, services: ServicesDep) -> StatusResponse:
    return StatusResponse.from_record(_require_job(services, ack_id))


@router.get(
    "/result/{ack_id}",
    response_model=ResultResponse,
    summary="Get the extracted report of a completed job",
    responses={202: {"model": PendingResponse}},
)
def get_result(ack_id: str, services: ServicesDep) -> ResultResponse | JSONResponse:
    record = _require_job(services, ack_id)
    if record.status != JobStatus.COMPLETED:
        return _pending(record)

    location = _result_location(services, record)
    if not services.objects.exists(location):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Result file not found. Processing may have failed.",
        )

    sheets = read_sheets(services.objects.get(location))
    return ResultResponse(
        ack_id=ack_id,
        file_name=record.file_name,
        status=JobStatus.COMPLETED,
        sheets=sheets,
        download_url=services.objects.presign(location, services.settings.presign_ttl_seconds),
    )


@router.post("/reprocess/{ack_id}", response_model=ReprocessResponse, summary="Run the analysis again")
def reprocess(
    ack_id: str,
    services: ServicesDep,
    background_tasks: BackgroundTasks,
) -> ReprocessResponse:
    """
    Re-run processing for an existing upload, replacing the previous report.

    Raises 410 when the original upload is gone.
    """
    record = _require_job(services, ack_id)
    settings = services.settings
    upload = ObjectLocation(settings.upload_bucket, record.upload_key or "")
    if not record.upload_key or not services.objects.exists(upload):
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="Original upload file no longer exists",
        )

    result = ObjectLocation(settings.results_bucket, build_result_key(record.file_name))
    if services.objects.exists(result):
        services.objects.delete(result)
        logger.info("Deleted old result for reprocessing: %s", result.key)

    if settings.trigger_mode == "event":
        services.jobs.update(ack_id, JobStatus.PENDING)
        # Re-putting the object fires the object-created event again.
        services.objects.put(upload, services.objects.get(upload), content_type_for(upload.key))
    else:
        services.jobs.update(ack_id, JobStatus.PENDING)
        background_tasks.add_task(run_document_task, ack_id, services)

    return ReprocessResponse(
        ack_id=ack_id,
        status=JobStatus.PENDING,
        message=f"Reprocessing started. Poll /status/{ack_id} for updates.",
    )


@router.get(
    "/download/{ack_id}",
    response_model=DownloadResponse,
    summary="Get a presigned download URL for the report",
    responses={202: {"model": PendingResponse}},
)
def get_download_url(ack_id: str, services: ServicesDep) -> DownloadResponse | JSONResponse:
    record = _require_job(services, ack_id)
    if record.status != JobStatus.COMPLETED:
        return _pending(record)

    ttl = services.settings.presign_ttl_seconds
    return DownloadResponse(
        ack_id=ack_id,
        download_url=services.objects.presign(_result_location(services, record), ttl),
        expires_in=ttl,
    )


__all__ = ["router", "ALLOWED_EXTENSIONS", "content_type_for"]
