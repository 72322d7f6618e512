"""S3-backed object store.

Thin wrapper over a boto3 S3 client. The client is created lazily so that
constructing the store (e.g. at API start-up) never touches the network.
SDK failures are logged with bucket/key only and re-raised as
:class:`StorageError`; a missing object on ``exists``/``delete`` is not an
error.
"""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from docextract.core.contracts.job import ObjectLocation
from docextract.core.errors import StorageError
from docextract.core.settings import get_logger

logger = get_logger(__name__)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", "Unknown"))


class S3ObjectStore:
    """Object store over Amazon S3."""

    def __init__(self, region: str = "us-east-1", client: Any | None = None) -> None:
        self.region = region
        self._client = client

    @property
    def client(self) -> Any:
        """Lazily created boto3 S3 client."""
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def put(self, location: ObjectLocation, data: bytes, content_type: str) -> None:
        logger.info("Uploading %d bytes to %s", len(data), location.uri)
        try:
            self.client.put_object(
                Bucket=location.bucket,
                Key=location.key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 upload failed for %s: %s", location.uri, exc)
            raise StorageError(f"Failed to upload {location.uri}: {exc}", location.uri) from exc

    def get(self, location: ObjectLocation) -> bytes:
        logger.info("Downloading %s", location.uri)
        try:
            response = self.client.get_object(Bucket=location.bucket, Key=location.key)
            return bytes(response["Body"].read())
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 download failed for %s: %s", location.uri, exc)
            raise StorageError(f"Failed to download {location.uri}: {exc}", location.uri) from exc

    def exists(self, location: ObjectLocation) -> bool:
        try:
            self.client.head_object(Bucket=location.bucket, Key=location.key)
            return True
        except ClientError as exc:
            if _error_code(exc) not in _MISSING_CODES:
                logger.warning("Unexpected error checking %s: %s", location.uri, _error_code(exc))
            return False

    def delete(self, location: ObjectLocation) -> None:
        try:
            self.client.delete_object(Bucket=location.bucket, Key=location.key)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                return
            raise StorageError(f"Failed to delete {location.uri}: {exc}", location.uri) from exc
        logger.info("Deleted %s", location.uri)

    def presign(self, location: ObjectLocation, ttl_seconds: int) -> str:
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": location.bucket, "Key": location.key},
                ExpiresIn=ttl_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to presign {location.uri}: {exc}", location.uri) from exc
        return str(url)


__all__ = ["S3ObjectStore"]
