"""
Batch trigger entry point.

The object store fires one event per batch of created objects. Every record
names an uploaded document (``uploads/{ack_id}/{file_name}``); each one is
run through :class:`DocumentReportPipeline` on its own, so a failing document
never stops the rest of the batch.

Deployed as ``docextract.handler.lambda_handler``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import unquote_plus

from docextract.core.contracts.job import ObjectLocation, ack_id_from_key
from docextract.core.coordinator.budget import LambdaContextBudget
from docextract.core.coordinator.ports import TimeBudget
from docextract.core.result import Result, err, ok, partition
from docextract.core.settings import get_logger
from docextract.pipelines.document_report import DocumentOutcome, DocumentReportPipeline
from docextract.services import get_services

logger = get_logger(__name__)


def locations_from_event(event: Mapping[str, Any]) -> list[ObjectLocation]:
    """Extract the object locations named by an object-created event.

    Keys arrive URL-encoded (spaces as ``+``) and are decoded here.
    """
    locations: list[ObjectLocation] = []
    for record in event.get("Records") or []:
        s3 = record.get("s3") or {}
        bucket = (s3.get("bucket") or {}).get("name")
        key = (s3.get("object") or {}).get("key")
        if not bucket or not key:
            logger.warning("Skipping event record without bucket/key")
            continue
        locations.append(ObjectLocation(bucket=bucket, key=unquote_plus(key)))
    return locations


def process_locations(
    pipeline: DocumentReportPipeline,
    locations: Iterable[ObjectLocation],
    budget: TimeBudget,
) -> list[Result[DocumentOutcome, str]]:
    """Run every location through ``pipeline``; one result per location."""
    results: list[Result[DocumentOutcome, str]] = []
    for location in locations:
        if ack_id_from_key(location.key) is None:
            logger.warning("Could not derive ackId from key: %s", location.key)
            results.append(err(f"Could not derive ackId from key: {location.key}"))
            continue
        try:
            results.append(ok(pipeline.process(location, budget)))
        except Exception as exc:
            logger.error("Error processing %s: %s", location.uri, exc)
            results.append(err(str(exc)))
    return results


def lambda_handler(event: Mapping[str, Any], context: Any) -> str:
    """Process every record of an object-created event."""
    pipeline = DocumentReportPipeline.from_services(get_services())
    results = process_locations(pipeline, locations_from_event(event), LambdaContextBudget(context))
    completed, failures = partition(results)
    logger.info("Batch finished: %d completed, %d failed", len(completed), len(failures))
    for failure in failures:
        logger.warning("Failed record: %s", failure)
    return "OK"


__all__ = ["lambda_handler", "locations_from_event", "process_locations"]
