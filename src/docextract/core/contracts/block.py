"""
Block Contract.

This Pydantic model is the unit produced by the external document-analysis
engine. A single analysis result is a *flat* list of Blocks; structure (a LINE
made of WORDs, a TABLE made of CELLs, a KEY pointing at its VALUE) is encoded
as typed relationships holding block ids rather than as nested objects.

The model accepts the engine's native PascalCase payload (``BlockType``,
``Relationships[{"Type", "Ids"}]``...) as well as snake_case field names, so
blocks can be rebuilt both from raw API responses and from our own dumps.

Only the kinds the resolver understands are enumerated in :class:`BlockType`;
any other kind (SELECTION_ELEMENT, SIGNATURE, ...) is kept as a plain string
and simply ignored downstream.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class BlockType(StrEnum):
    """Block kinds consumed by the resolver."""

    PAGE = "PAGE"
    LINE = "LINE"
    WORD = "WORD"
    KEY_VALUE_SET = "KEY_VALUE_SET"
    TABLE = "TABLE"
    CELL = "CELL"


class RelationshipType(StrEnum):
    """Relationship kinds followed by the resolver."""

    CHILD = "CHILD"
    VALUE = "VALUE"


KEY_ENTITY = "KEY"
VALUE_ENTITY = "VALUE"


class Relationship(BaseModel):
    """A typed, ordered reference from one block to others."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = Field(..., validation_alias=AliasChoices("Type", "type"))
    ids: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("Ids", "ids")
    )

    @field_validator("ids", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return () if v is None else v


class Block(BaseModel):
    """An immutable annotated fragment of an analysed document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("Id", "id"))
    type: str = Field(
        ...,
        validation_alias=AliasChoices("BlockType", "block_type", "type"),
        description="Block kind, e.g. 'LINE' or 'TABLE'.",
    )
    page: int = Field(
        default=1, ge=1, validation_alias=AliasChoices("Page", "page"), description="1-indexed."
    )
    text: str | None = Field(default=None, validation_alias=AliasChoices("Text", "text"))
    confidence: float | None = Field(
        default=None, ge=0.0, le=100.0, validation_alias=AliasChoices("Confidence", "confidence")
    )
    entity_types: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("EntityTypes", "entity_types")
    )
    row_index: int | None = Field(
        default=None, validation_alias=AliasChoices("RowIndex", "row_index")
    )
    column_index: int | None = Field(
        default=None, validation_alias=AliasChoices("ColumnIndex", "column_index")
    )
    relationships: tuple[Relationship, ...] = Field(
        default=(), validation_alias=AliasChoices("Relationships", "relationships")
    )

    @field_validator("entity_types", "relationships", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @field_validator("page", mode="before")
    @classmethod
    def _missing_page_is_first(cls, v: Any) -> Any:
        return 1 if v is None else v

    # ----- Convenience -----------------------------------------------------
    @property
    def is_key(self) -> bool:
        """True for a KEY_VALUE_SET block playing the KEY role."""
        return self.type == BlockType.KEY_VALUE_SET and KEY_ENTITY in self.entity_types

    def ids_for(self, kind: str) -> list[str]:
        """Return the ids of every relationship of ``kind``, in listed order."""
        out: list[str] = []
        for rel in self.relationships:
            if rel.type == kind:
                out.extend(rel.ids)
        return out

    def has_relationship(self, kind: str) -> bool:
        """True if at least one relationship of ``kind`` is present."""
        return any(rel.type == kind for rel in self.relationships)


def parse_blocks(raw: Iterable[Mapping[str, Any]]) -> list[Block]:
    """Validate raw engine block dicts into :class:`Block` objects, in order."""
    return [Block.model_validate(item) for item in raw]


def load_blocks(payload: Any) -> list[Block]:
    """Build a block list from a saved engine payload.

    Accepted shapes
    ---------------
    - one response: ``{"Blocks": [...], ...}``
    - paginated responses: ``[{"Blocks": [...]}, {"Blocks": [...]}]``
    - a bare block list: ``[{"Id": ..., "BlockType": ...}, ...]``

    Raises
    ------
    ValueError
        If the payload matches none of the shapes above.
    """
    if isinstance(payload, Mapping):
        if "Blocks" not in payload:
            raise ValueError("Expected an analysis response with a 'Blocks' list.")
        return parse_blocks(payload.get("Blocks") or [])

    if isinstance(payload, Sequence) and not isinstance(payload, str | bytes):
        if all(isinstance(item, Mapping) and "Blocks" in item for item in payload):
            blocks: list[Block] = []
            for page in payload:
                blocks.extend(parse_blocks(page.get("Blocks") or []))
            return blocks
        return parse_blocks(payload)

    raise ValueError(f"Unsupported block payload of type {type(payload).__name__}.")


__all__ = [
    "Block",
    "BlockType",
    "Relationship",
    "RelationshipType",
    "KEY_ENTITY",
    "VALUE_ENTITY",
    "parse_blocks",
    "load_blocks",
]
