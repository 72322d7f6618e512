"""
Tests for the object store and job status store adapters.

The in-memory stores are exercised directly; the S3 and DynamoDB stores are
exercised against `MagicMock` boto3 clients so no AWS access is needed.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from docextract.adapters.dynamodb import FILE_NAME_INDEX, DynamoJobStore, record_from_item
from docextract.adapters.memory import InMemoryJobStore, InMemoryObjectStore
from docextract.adapters.s3 import S3ObjectStore
from docextract.core.contracts.job import JobStatus, ObjectLocation
from docextract.core.errors import ConfigurationError, StorageError

LOC = ObjectLocation("results-bucket", "results/invoice.xlsx")


def _client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


# --------------------------------------------------------------------------- #
# In-memory stores
# --------------------------------------------------------------------------- #


def test_memory_object_store_lifecycle() -> None:
    """put/get/exists/delete/presign on the dictionary store."""
    store = InMemoryObjectStore()
    assert not store.exists(LOC)

    store.put(LOC, b"xlsx", "application/octet-stream")
    assert store.exists(LOC)
    assert store.get(LOC) == b"xlsx"
    assert store.content_type(LOC) == "application/octet-stream"
    assert store.presign(LOC, 60) == "memory://results-bucket/results/invoice.xlsx?expires=60"

    store.delete(LOC)
    store.delete(LOC)
    assert not store.exists(LOC)
    with pytest.raises(StorageError):
        store.get(LOC)


def test_memory_job_store_transitions() -> None:
    """create -> update keeps other fields and bumps updated_at."""
    store = InMemoryJobStore()
    created = store.create("ack-1", "scan.pdf", "uploads/ack-1/scan.pdf")
    assert created.status == JobStatus.PENDING

    store.update("ack-1", JobStatus.PROCESSING)
    store.update("ack-1", JobStatus.COMPLETED, result_key="results/scan.xlsx")
    record = store.get("ack-1")
    assert record is not None
    assert record.status == JobStatus.COMPLETED
    assert record.result_key == "results/scan.xlsx"
    assert record.upload_key == "uploads/ack-1/scan.pdf"
    assert record.updated_at >= record.created_at


def test_memory_job_store_ignores_unknown_ids_and_returns_copies() -> None:
    """Updates for unknown ack ids are no-ops; reads are copies."""
    store = InMemoryJobStore()
    store.update("nope", JobStatus.FAILED, error_message="x")
    assert store.get("nope") is None

    store.create("a", "f.pdf", "uploads/a/f.pdf")
    copy = store.get("a")
    assert copy is not None
    copy.status = JobStatus.FAILED
    assert store.get("a").status == JobStatus.PENDING  # type: ignore[union-attr]


def test_memory_find_by_file_name_returns_latest() -> None:
    """The most recently created record for a file name wins."""
    store = InMemoryJobStore()
    store.create("old", "same.pdf", "uploads/old/same.pdf")
    store.create("new", "same.pdf", "uploads/new/same.pdf")
    found = store.find_by_file_name("same.pdf")
    assert found is not None and found.ack_id == "new"
    assert store.find_by_file_name("other.pdf") is None


def test_memory_job_store_singleton() -> None:
    """get_instance returns one shared store."""
    assert InMemoryJobStore.get_instance() is InMemoryJobStore.get_instance()


# --------------------------------------------------------------------------- #
# S3
# --------------------------------------------------------------------------- #


def test_s3_put_get_and_presign() -> None:
    """Calls map onto the S3 client API."""
    client = MagicMock()
    client.get_object.return_value = {"Body": MagicMock(read=MagicMock(return_value=b"data"))}
    client.generate_presigned_url.return_value = "https://signed"
    store = S3ObjectStore(client=client)

    store.put(LOC, b"data", "application/pdf")
    client.put_object.assert_called_once_with(
        Bucket="results-bucket", Key="results/invoice.xlsx", Body=b"data", ContentType="application/pdf"
    )
    assert store.get(LOC) == b"data"
    assert store.presign(LOC, 3600) == "https://signed"
    client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={"Bucket": "results-bucket", "Key": "results/invoice.xlsx"},
        ExpiresIn=3600,
    )


@pytest.mark.parametrize("code", ["404", "NoSuchKey", "403"])  # type: ignore[misc]
def test_s3_exists_is_false_on_client_error(code: str) -> None:
    """Missing (or unreadable) objects do not exist."""
    client = MagicMock()
    client.head_object.side_effect = _client_error(code)
    assert S3ObjectStore(client=client).exists(LOC) is False


def test_s3_errors_become_storage_errors() -> None:
    """SDK failures are wrapped with the object URI."""
    client = MagicMock()
    client.put_object.side_effect = _client_error("AccessDenied", "PutObject")
    with pytest.raises(StorageError) as excinfo:
        S3ObjectStore(client=client).put(LOC, b"", "x")
    assert excinfo.value.location == LOC.uri


def test_s3_delete_tolerates_missing_objects() -> None:
    """Deleting a missing object is not an error; other failures are."""
    client = MagicMock()
    client.delete_object.side_effect = _client_error("NoSuchKey", "DeleteObject")
    S3ObjectStore(client=client).delete(LOC)

    client.delete_object.side_effect = _client_error("AccessDenied", "DeleteObject")
    with pytest.raises(StorageError):
        S3ObjectStore(client=client).delete(LOC)


# --------------------------------------------------------------------------- #
# DynamoDB
# --------------------------------------------------------------------------- #


def test_dynamo_update_builds_expression() -> None:
    """Result key and error message extend the SET expression."""
    client = MagicMock()
    DynamoJobStore("jobs", client=client).update(
        "ack-1", JobStatus.FAILED, result_key="results/a.xlsx", error_message="boom"
    )
    kwargs: dict[str, Any] = client.update_item.call_args.kwargs
    assert kwargs["TableName"] == "jobs"
    assert kwargs["Key"] == {"ack_id": {"S": "ack-1"}}
    assert kwargs["UpdateExpression"] == (
        "SET #st = :status, updated_at = :updatedAt, result_s3_key = :resultKey, error_message = :errMsg"
    )
    assert kwargs["ExpressionAttributeNames"] == {"#st": "status"}
    values = kwargs["ExpressionAttributeValues"]
    assert values[":status"] == {"S": "FAILED"}
    assert values[":errMsg"] == {"S": "boom"}
    assert ":updatedAt" in values


def test_dynamo_update_minimal_expression() -> None:
    """Without optional fields only status and updated_at are set."""
    client = MagicMock()
    DynamoJobStore("jobs", client=client).update("ack-1", JobStatus.PROCESSING)
    kwargs = client.update_item.call_args.kwargs
    assert kwargs["UpdateExpression"] == "SET #st = :status, updated_at = :updatedAt"
    assert set(kwargs["ExpressionAttributeValues"]) == {":status", ":updatedAt"}


def test_dynamo_without_table_skips_updates_but_rejects_reads() -> None:
    """No table configured: updates are skipped, reads raise."""
    client = MagicMock()
    store = DynamoJobStore(None, client=client)
    store.update("ack-1", JobStatus.COMPLETED)
    client.update_item.assert_not_called()
    with pytest.raises(ConfigurationError):
        store.get("ack-1")


def test_dynamo_create_get_and_find() -> None:
    """Items map to JobRecords; find uses the file-name index."""
    client = MagicMock()
    item = {
        "ack_id": {"S": "ack-1"},
        "file_name": {"S": "scan.pdf"},
        "s3_upload_key": {"S": "uploads/ack-1/scan.pdf"},
        "status": {"S": "COMPLETED"},
        "result_s3_key": {"S": "results/scan.xlsx"},
        "created_at": {"S": "2024-01-01T00:00:00+00:00"},
        "updated_at": {"S": "2024-01-01T00:01:00+00:00"},
        "duplicate": {"BOOL": False},
    }
    client.get_item.return_value = {"Item": item}
    client.query.return_value = {"Items": [item]}
    store = DynamoJobStore("jobs", client=client)

    created = store.create("ack-1", "scan.pdf", "uploads/ack-1/scan.pdf")
    assert created.status == JobStatus.PENDING
    put_item = client.put_item.call_args.kwargs["Item"]
    assert put_item["s3_upload_key"] == {"S": "uploads/ack-1/scan.pdf"}

    record = store.get("ack-1")
    assert record is not None and record.has_result
    assert store.find_by_file_name("scan.pdf") == record
    assert client.query.call_args.kwargs["IndexName"] == FILE_NAME_INDEX

    client.get_item.return_value = {}
    assert store.get("missing") is None


def test_record_from_item_tolerates_missing_attributes() -> None:
    """Absent optional attributes become None/defaults."""
    record = record_from_item({"ack_id": {"S": "a"}, "file_name": {"S": "f.png"}})
    assert record.status == JobStatus.PENDING
    assert record.result_key is None and record.error_message is None
    assert record.duplicate is False
