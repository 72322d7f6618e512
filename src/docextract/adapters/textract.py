"""
Analysis engine adapter over AWS Textract.

Mapping onto the :class:`AnalysisEngine` port
---------------------------------------------
``submit``
    ``StartDocumentAnalysis`` with TABLES and FORMS on the S3 object.
``poll``
    ``GetDocumentAnalysis`` with ``MaxResults``; ``next_token`` addresses a
    continuation page of a finished job.
``analyze_sync``
    ``AnalyzeDocument`` with TABLES and FORMS, for single-page images.

Engine-side failures (``ClientError`` / ``BotoCoreError``) become
:class:`EngineError`; the coordinator does not retry them.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from docextract.core.contracts.block import Block, parse_blocks
from docextract.core.contracts.job import ObjectLocation
from docextract.core.coordinator.ports import AnalysisPage
from docextract.core.errors import EngineError
from docextract.core.settings import get_logger

logger = get_logger(__name__)

DEFAULT_FEATURES: tuple[str, ...] = ("TABLES", "FORMS")


def _s3_object(document: ObjectLocation) -> dict[str, Any]:
    return {"S3Object": {"Bucket": document.bucket, "Name": document.key}}


def _engine_error(operation: str, exc: Exception) -> EngineError:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "Unknown")
        request_id = exc.response.get("ResponseMetadata", {}).get("RequestId", "Unknown")
        logger.error(
            "Textract %s failed: %s (request_id=%s)", operation, code, request_id
        )
        return EngineError(f"Textract {operation} error: {error.get('Message', exc)}", code)
    logger.error("Textract %s SDK error: %s", operation, exc)
    return EngineError(f"AWS SDK error during {operation}: {exc}")


class TextractEngine:
    """Textract-backed implementation of the analysis engine port."""

    def __init__(
        self,
        region: str = "us-east-1",
        *,
        max_results: int = 1000,
        feature_types: Sequence[str] = DEFAULT_FEATURES,
        client: Any | None = None,
    ) -> None:
        self.region = region
        self.max_results = max_results
        self.feature_types = list(feature_types)
        self._client = client

    @property
    def client(self) -> Any:
        """Lazily created boto3 Textract client."""
        if self._client is None:
            self._client = boto3.client("textract", region_name=self.region)
        return self._client

    def submit(self, document: ObjectLocation) -> str:
        logger.info("StartDocumentAnalysis for %s", document.uri)
        try:
            response = self.client.start_document_analysis(
                DocumentLocation=_s3_object(document),
                FeatureTypes=self.feature_types,
            )
        except (ClientError, BotoCoreError) as exc:
            raise _engine_error("StartDocumentAnalysis", exc) from exc
        return str(response["JobId"])

    def poll(self, job_id: str, next_token: str | None = None) -> AnalysisPage:
        request: dict[str, Any] = {"JobId": job_id, "MaxResults": self.max_results}
        if next_token:
            request["NextToken"] = next_token
        try:
            response = self.client.get_document_analysis(**request)
        except (ClientError, BotoCoreError) as exc:
            raise _engine_error("GetDocumentAnalysis", exc) from exc

        return AnalysisPage(
            status=response.get("JobStatus"),
            blocks=parse_blocks(response.get("Blocks") or []),
            next_token=response.get("NextToken"),
            message=response.get("StatusMessage"),
        )

    def analyze_sync(self, document: ObjectLocation) -> list[Block]:
        logger.info("AnalyzeDocument (sync) for %s", document.uri)
        try:
            response = self.client.analyze_document(
                Document=_s3_object(document),
                FeatureTypes=self.feature_types,
            )
        except (ClientError, BotoCoreError) as exc:
            raise _engine_error("AnalyzeDocument", exc) from exc
        return parse_blocks(response.get("Blocks") or [])


__all__ = ["TextractEngine", "DEFAULT_FEATURES"]
