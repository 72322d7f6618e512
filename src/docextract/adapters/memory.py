"""
In-memory object store and job status store.

These back the API in the ``memory`` storage backend (local development) and
serve as deterministic fakes in tests. They are volatile: everything is lost
when the process exits.

Both stores guard their dictionaries with a lock because FastAPI runs
background tasks on worker threads while request handlers keep reading.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import ClassVar

from docextract.core.contracts.job import JobRecord, JobStatus, ObjectLocation, utc_now_iso
from docextract.core.errors import StorageError


@dataclass(frozen=True, slots=True)
class StoredObject:
    data: bytes
    content_type: str


class InMemoryObjectStore:
    """Dictionary-backed object store keyed by ``(bucket, key)``."""

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str], StoredObject] = {}
        self._lock = threading.Lock()

    def put(self, location: ObjectLocation, data: bytes, content_type: str) -> None:
        with self._lock:
            self._objects[(location.bucket, location.key)] = StoredObject(bytes(data), content_type)

    def get(self, location: ObjectLocation) -> bytes:
        with self._lock:
            stored = self._objects.get((location.bucket, location.key))
        if stored is None:
            raise StorageError(f"No such object: {location.uri}", location=location.uri)
        return stored.data

    def exists(self, location: ObjectLocation) -> bool:
        with self._lock:
            return (location.bucket, location.key) in self._objects

    def delete(self, location: ObjectLocation) -> None:
        with self._lock:
            self._objects.pop((location.bucket, location.key), None)

    def presign(self, location: ObjectLocation, ttl_seconds: int) -> str:
        return f"memory://{location.bucket}/{location.key}?expires={ttl_seconds}"

    def content_type(self, location: ObjectLocation) -> str | None:
        with self._lock:
            stored = self._objects.get((location.bucket, location.key))
        return stored.content_type if stored else None


class InMemoryJobStore:
    """
    A simple dictionary-backed store for JobRecord objects.

    Responsibilities
    ----------------
    - **Create**: register a new ack id in PENDING state.
    - **Read**: look up a record by ack id, or the latest one for a file name.
    - **Update**: apply a status transition with optional result key / error.
    """

    # Singleton instance placeholder (initialized on first access)
    _instance: ClassVar[InMemoryJobStore | None] = None

    def __init__(self) -> None:
        self._jobs: dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> InMemoryJobStore:
        """Accessor for the process-wide instance used by the memory backend."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def create(self, ack_id: str, file_name: str, upload_key: str) -> JobRecord:
        record = JobRecord(ack_id=ack_id, file_name=file_name, upload_key=upload_key)
        with self._lock:
            self._jobs[ack_id] = record
        return record.model_copy()

    def get(self, ack_id: str) -> JobRecord | None:
        """Return a copy of the record, or None if unknown."""
        with self._lock:
            record = self._jobs.get(ack_id)
            return record.model_copy() if record else None

    def update(
        self,
        ack_id: str,
        status: JobStatus,
        result_key: str | None = None,
        error_message: str | None = None,
    ) -> None:
        """Apply a transition. Unknown ack ids are ignored, as with an upsert-less store."""
        with self._lock:
            record = self._jobs.get(ack_id)
            if record is None:
                return
            changes: dict[str, object] = {"status": status, "updated_at": utc_now_iso()}
            if result_key is not None:
                changes["result_key"] = result_key
            if error_message is not None:
                changes["error_message"] = error_message
            self._jobs[ack_id] = record.model_copy(update=changes)

    def find_by_file_name(self, file_name: str) -> JobRecord | None:
        """Most recently created record for ``file_name``."""
        with self._lock:
            matches = [r for r in self._jobs.values() if r.file_name == file_name]
        if not matches:
            return None
        return max(reversed(matches), key=lambda r: r.created_at).model_copy()

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()


__all__ = ["InMemoryObjectStore", "InMemoryJobStore", "StoredObject"]
