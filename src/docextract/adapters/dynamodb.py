"""DynamoDB-backed job status store.

Table layout
------------
- partition key ``ack_id`` (S)
- attributes ``file_name``, ``s3_upload_key``, ``result_s3_key``, ``status``,
  ``created_at``, ``updated_at``, ``duplicate`` (BOOL), ``error_message``
- global secondary index ``FileNameIndex`` on ``file_name``

When no table is configured, :meth:`update` logs a warning and does nothing
(the batch handler can still run), while reads and creates raise
:class:`ConfigurationError`.
"""

from __future__ import annotations

from typing import Any

import boto3

from docextract.core.contracts.job import JobRecord, JobStatus, utc_now_iso
from docextract.core.errors import ConfigurationError
from docextract.core.settings import get_logger

logger = get_logger(__name__)

FILE_NAME_INDEX = "FileNameIndex"


def _attr(value: str | None) -> dict[str, str]:
    return {"S": value if value is not None else ""}


def _str(item: dict[str, Any], key: str) -> str | None:
    value = item.get(key)
    if value is None or "S" not in value:
        return None
    return str(value["S"]) or None


def record_from_item(item: dict[str, Any]) -> JobRecord:
    """Map a raw DynamoDB item onto a :class:`JobRecord`."""
    status = _str(item, "status") or JobStatus.PENDING.value
    return JobRecord(
        ack_id=_str(item, "ack_id") or "",
        file_name=_str(item, "file_name") or "",
        upload_key=_str(item, "s3_upload_key"),
        result_key=_str(item, "result_s3_key"),
        status=JobStatus(status),
        created_at=_str(item, "created_at") or "",
        updated_at=_str(item, "updated_at") or "",
        duplicate=bool(item.get("duplicate", {}).get("BOOL", False)),
        error_message=_str(item, "error_message"),
    )


class DynamoJobStore:
    """Job status store over a DynamoDB table."""

    def __init__(
        self,
        table_name: str | None,
        region: str = "us-east-1",
        client: Any | None = None,
    ) -> None:
        self.table_name = table_name
        self.region = region
        self._client = client

    @property
    def client(self) -> Any:
        """Lazily created boto3 DynamoDB client."""
        if self._client is None:
            self._client = boto3.client("dynamodb", region_name=self.region)
        return self._client

    def _require_table(self) -> str:
        if not self.table_name:
            raise ConfigurationError("DYNAMODB_TABLE is not configured.")
        return self.table_name

    def create(self, ack_id: str, file_name: str, upload_key: str) -> JobRecord:
        table = self._require_table()
        now = utc_now_iso()
        item = {
            "ack_id": _attr(ack_id),
            "file_name": _attr(file_name),
            "s3_upload_key": _attr(upload_key),
            "status": _attr(JobStatus.PENDING.value),
            "created_at": _attr(now),
            "updated_at": _attr(now),
            "duplicate": {"BOOL": False},
        }
        self.client.put_item(TableName=table, Item=item)
        logger.info("Created job record: ack_id=%s file=%s", ack_id, file_name)
        return record_from_item(item)

    def get(self, ack_id: str) -> JobRecord | None:
        table = self._require_table()
        response = self.client.get_item(TableName=table, Key={"ack_id": _attr(ack_id)})
        item = response.get("Item")
        return record_from_item(item) if item else None

    def update(
        self,
        ack_id: str,
        status: JobStatus,
        result_key: str | None = None,
        error_message: str | None = None,
    ) -> None:
        """Set status and ``updated_at``; add result key / error when given."""
        if not self.table_name:
            logger.warning("DYNAMODB_TABLE not set, skipping status update for ack_id=%s", ack_id)
            return

        expression = "SET #st = :status, updated_at = :updatedAt"
        values: dict[str, Any] = {
            ":status": _attr(JobStatus(status).value),
            ":updatedAt": _attr(utc_now_iso()),
        }
        if result_key is not None:
            expression += ", result_s3_key = :resultKey"
            values[":resultKey"] = _attr(result_key)
        if error_message is not None:
            expression += ", error_message = :errMsg"
            values[":errMsg"] = _attr(error_message)

        self.client.update_item(
            TableName=self.table_name,
            Key={"ack_id": _attr(ack_id)},
            UpdateExpression=expression,
            ExpressionAttributeNames={"#st": "status"},
            ExpressionAttributeValues=values,
        )
        logger.info("Job status updated: ack_id=%s status=%s", ack_id, JobStatus(status).value)

    def find_by_file_name(self, file_name: str) -> JobRecord | None:
        table = self._require_table()
        response = self.client.query(
            TableName=table,
            IndexName=FILE_NAME_INDEX,
            KeyConditionExpression="file_name = :fn",
            ExpressionAttributeValues={":fn": _attr(file_name)},
            Limit=1,
        )
        items = response.get("Items") or []
        return record_from_item(items[0]) if items else None


__all__ = ["DynamoJobStore", "FILE_NAME_INDEX", "record_from_item"]
