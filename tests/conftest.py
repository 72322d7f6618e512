"""
Shared fixtures for the DocExtract test-suite.

- ``make_block``: terse factory for engine blocks (CHILD / VALUE ids, cell
  coordinates, entity types).
- ``scripted_engine``: an analysis engine fake that replays a fixed sequence
  of poll pages and records every call.
- ``settings_for_tests`` / ``memory_services``: zero poll interval, in-memory
  stores, no network.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any

import pytest

from docextract.adapters.memory import InMemoryJobStore, InMemoryObjectStore
from docextract.core.contracts.block import Block, RelationshipType
from docextract.core.contracts.job import ObjectLocation
from docextract.core.coordinator.ports import AnalysisPage
from docextract.core.settings import Settings
from docextract.services import Services

BlockFactory = Callable[..., Block]


def _block(
    block_id: str,
    block_type: str,
    *,
    text: str | None = None,
    page: int | None = 1,
    confidence: float | None = None,
    children: Sequence[str] = (),
    values: Sequence[str] = (),
    entity_types: Sequence[str] = (),
    row: int | None = None,
    col: int | None = None,
) -> Block:
    relationships: list[dict[str, Any]] = []
    if children:
        relationships.append({"Type": RelationshipType.CHILD.value, "Ids": list(children)})
    if values:
        relationships.append({"Type": RelationshipType.VALUE.value, "Ids": list(values)})
    return Block.model_validate(
        {
            "Id": block_id,
            "BlockType": block_type,
            "Page": page,
            "Text": text,
            "Confidence": confidence,
            "EntityTypes": list(entity_types),
            "RowIndex": row,
            "ColumnIndex": col,
            "Relationships": relationships,
        }
    )


@pytest.fixture  # type: ignore[misc]
def make_block() -> BlockFactory:
    """Factory building one :class:`Block` from keyword arguments."""
    return _block


class ScriptedEngine:
    """Analysis engine that answers polls from a prepared script.

    ``status_pages`` are returned, in order, for polls without a token;
    ``continuation`` maps a next token to the page returned for it.
    """

    def __init__(
        self,
        status_pages: Sequence[AnalysisPage] = (),
        continuation: dict[str, AnalysisPage] | None = None,
        sync_blocks: Sequence[Block] = (),
        job_id: str = "job-1",
        sync_error: Exception | None = None,
    ) -> None:
        self._status_pages: Iterator[AnalysisPage] = iter(status_pages)
        self.continuation = continuation or {}
        self.sync_blocks = list(sync_blocks)
        self.job_id = job_id
        self.sync_error = sync_error
        self.submitted: list[ObjectLocation] = []
        self.polls: list[tuple[str, str | None]] = []
        self.sync_calls: list[ObjectLocation] = []

    def submit(self, document: ObjectLocation) -> str:
        self.submitted.append(document)
        return self.job_id

    def poll(self, job_id: str, next_token: str | None = None) -> AnalysisPage:
        self.polls.append((job_id, next_token))
        if next_token is not None:
            return self.continuation[next_token]
        return next(self._status_pages)

    def analyze_sync(self, document: ObjectLocation) -> list[Block]:
        self.sync_calls.append(document)
        if self.sync_error is not None:
            raise self.sync_error
        return list(self.sync_blocks)


@pytest.fixture  # type: ignore[misc]
def scripted_engine() -> Callable[..., ScriptedEngine]:
    """Factory for :class:`ScriptedEngine` instances."""
    return ScriptedEngine


@pytest.fixture  # type: ignore[misc]
def settings_for_tests() -> Settings:
    """Settings with no poll delay and in-memory storage."""
    return Settings(
        environment="test",
        poll_interval_seconds=0.0,
        deadline_margin_seconds=60.0,
        storage_backend="memory",
        trigger_mode="background",
        upload_bucket="test-uploads",
        results_bucket="test-results",
    )


@pytest.fixture  # type: ignore[misc]
def memory_services(settings_for_tests: Settings) -> Callable[[Any], Services]:
    """Build in-memory :class:`Services` around a given engine."""

    def _build(engine: Any) -> Services:
        return Services(
            settings=settings_for_tests,
            engine=engine,
            objects=InMemoryObjectStore(),
            jobs=InMemoryJobStore(),
        )

    return _build
