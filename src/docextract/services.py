"""
Service wiring: pick port implementations from settings.

``aws`` wires S3 + DynamoDB. ``memory`` wires the in-process stores; the
Textract engine reads documents from S3 and cannot see them, so ``memory``
is only accepted together with ``TRIGGER_MODE=event`` (API without local
processing). Tests and scripts that pair the memory stores with a fake
engine build :class:`Services` directly. Creating the engine does not touch
the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from docextract.adapters.dynamodb import DynamoJobStore
from docextract.adapters.memory import InMemoryJobStore, InMemoryObjectStore
from docextract.adapters.s3 import S3ObjectStore
from docextract.adapters.textract import TextractEngine
from docextract.core.coordinator.ports import AnalysisEngine, JobStatusStore, ObjectStore
from docextract.core.errors import ConfigurationError
from docextract.core.settings import Settings, load_settings


@dataclass
class Services:
    """The external capabilities one process works with."""

    settings: Settings
    engine: AnalysisEngine
    objects: ObjectStore
    jobs: JobStatusStore


def build_services(settings: Settings) -> Services:
    if settings.storage_backend == "memory" and settings.trigger_mode == "background":
        raise ConfigurationError(
            "STORAGE_BACKEND=memory cannot run background processing: "
            "Textract only reads documents from S3. Use STORAGE_BACKEND=aws "
            "or TRIGGER_MODE=event."
        )

    engine = TextractEngine(settings.aws_region, max_results=settings.max_results_per_page)
    if settings.storage_backend == "aws":
        return Services(
            settings=settings,
            engine=engine,
            objects=S3ObjectStore(settings.aws_region),
            jobs=DynamoJobStore(settings.dynamodb_table, settings.aws_region),
        )
    return Services(
        settings=settings,
        engine=engine,
        objects=InMemoryObjectStore(),
        jobs=InMemoryJobStore.get_instance(),
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    """Process-wide services built from the current settings."""
    return build_services(load_settings())


__all__ = ["Services", "build_services", "get_services"]
