"""Resolved views produced from a block graph.

These are the only shapes persisted downstream; the block graph itself is
discarded after resolution. They are frozen dataclasses rather than Pydantic
models because they never cross a validation boundary: the resolver builds
them and the report writer consumes them in the same process.
"""

from __future__ import annotations

from dataclasses import dataclass, field

Grid = list[list[str]]


@dataclass(frozen=True, slots=True)
class LineEntry:
    """One LINE block, in the reading order emitted by the engine."""

    page: int
    text: str
    confidence: float | None = None


@dataclass(frozen=True, slots=True)
class KeyValueEntry:
    """One form field: the text of a KEY block and of its VALUE block."""

    page: int
    key: str
    value: str
    confidence: float | None = None


@dataclass(frozen=True, slots=True)
class ResolvedDocument:
    """The three views of one analysed document.

    Attributes
    ----------
    lines : list[LineEntry]
        LINE blocks in encounter order.
    key_values : list[KeyValueEntry]
        Key blocks in encounter order.
    tables : list[Grid]
        One dense grid per TABLE block, in encounter order. A table without
        cells is an empty list (zero rows), not a missing entry.
    """

    lines: list[LineEntry] = field(default_factory=list)
    key_values: list[KeyValueEntry] = field(default_factory=list)
    tables: list[Grid] = field(default_factory=list)

    def summary(self) -> dict[str, int]:
        """Counts suitable for logs and CLI output (no document content)."""
        return {
            "lines": len(self.lines),
            "key_values": len(self.key_values),
            "tables": len(self.tables),
        }


__all__ = ["Grid", "LineEntry", "KeyValueEntry", "ResolvedDocument"]
