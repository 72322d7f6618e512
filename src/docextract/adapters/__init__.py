"""Concrete implementations of the coordinator ports."""

from __future__ import annotations

from .dynamodb import DynamoJobStore
from .memory import InMemoryJobStore, InMemoryObjectStore
from .s3 import S3ObjectStore
from .textract import TextractEngine

__all__ = [
    "DynamoJobStore",
    "InMemoryJobStore",
    "InMemoryObjectStore",
    "S3ObjectStore",
    "TextractEngine",
]
