"""
Block graph resolver: flat block list -> lines, key/values and table grids.

The analysis engine emits a *flat* list of blocks whose structure is encoded
as id references (see :mod:`docextract.core.contracts.block`). This module
rebuilds three logical views from it with an explicit ``id -> Block`` index
and relationship traversal; no object graph with back-references is built.

Views
-----
Lines
    Every LINE block, in input order. The engine already emits lines in
    reading order, so nothing is re-sorted here.
Key/values
    Every KEY_VALUE_SET block tagged ``KEY``, in input order. The key text is
    the joined text of its CHILD blocks; the value text is the joined text of
    the CHILD blocks of the first block reachable through its VALUE
    relationship.
Tables
    One dense grid per TABLE block, in input order. Cell coordinates arrive
    1-based and are normalised to 0-based; rows and columns are laid out in
    ascending index order whatever order the cells were listed in.

Degradation rules
-----------------
- A dangling id contributes nothing.
- Missing text yields ``""``, never ``None``.
- Missing relationships mean "no children" / "no value".
- A TABLE without cells yields an empty grid (zero rows).

All functions are pure: the same input always gives the same output.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from docextract.core.contracts.block import Block, BlockType, RelationshipType
from docextract.core.contracts.report import Grid, KeyValueEntry, LineEntry, ResolvedDocument
from docextract.core.settings import get_logger

logger = get_logger(__name__)

BlockIndex = Mapping[str, Block]


# ===========================================================================
# Index & text helpers
# ===========================================================================


def build_index(blocks: Iterable[Block]) -> dict[str, Block]:
    """Map each block id to its block.

    If an id appears twice the first occurrence wins, so a stray duplicate
    later in the stream cannot silently replace the original block.
    """
    index: dict[str, Block] = {}
    for block in blocks:
        index.setdefault(block.id, block)
    return index


def join_child_text(block: Block | None, index: BlockIndex) -> str:
    """Space-join the text of ``block``'s CHILD blocks and trim the result.

    Children are visited in relationship order. Dangling ids and children
    without text are skipped; no children at all gives ``""``.
    """
    if block is None:
        return ""
    parts: list[str] = []
    for child_id in block.ids_for(RelationshipType.CHILD):
        child = index.get(child_id)
        if child is not None and child.text is not None:
            parts.append(child.text)
    return " ".join(parts).strip()


def _value_block(key_block: Block, index: BlockIndex) -> Block | None:
    """First block reachable through the key's VALUE relationship, if any."""
    for value_id in key_block.ids_for(RelationshipType.VALUE):
        value = index.get(value_id)
        if value is not None:
            return value
    return None


# ===========================================================================
# Views
# ===========================================================================


def extract_lines(blocks: Iterable[Block]) -> list[LineEntry]:
    """Return one :class:`LineEntry` per LINE block, preserving input order."""
    return [
        LineEntry(page=block.page, text=block.text or "", confidence=block.confidence)
        for block in blocks
        if block.type == BlockType.LINE
    ]


def extract_key_values(blocks: Iterable[Block], index: BlockIndex) -> list[KeyValueEntry]:
    """Return one :class:`KeyValueEntry` per KEY block, preserving input order.

    VALUE-role KEY_VALUE_SET blocks are not listed on their own; they are only
    reached through a key's VALUE relationship. A key without a resolvable
    value gets an empty value string.
    """
    entries: list[KeyValueEntry] = []
    for block in blocks:
        if not block.is_key:
            continue
        entries.append(
            KeyValueEntry(
                page=block.page,
                key=join_child_text(block, index),
                value=join_child_text(_value_block(block, index), index),
                confidence=block.confidence,
            )
        )
    return entries


def build_grid(table: Block, index: BlockIndex) -> Grid:
    """Assemble the dense grid of one TABLE block.

    Cells are the CELL blocks referenced by the table's CHILD relationships.
    The grid is ``(max_row + 1) x (max_col + 1)`` in normalised coordinates;
    positions no cell refers to hold ``""``. If two cells claim the same
    position the later one wins. Cells without coordinates are skipped.
    """
    cells: dict[tuple[int, int], str] = {}
    for cell_id in table.ids_for(RelationshipType.CHILD):
        cell = index.get(cell_id)
        if cell is None or cell.type != BlockType.CELL:
            continue
        if cell.row_index is None or cell.column_index is None:
            continue
        row, col = cell.row_index - 1, cell.column_index - 1
        if row < 0 or col < 0:
            continue
        cells[(row, col)] = join_child_text(cell, index)

    if not cells:
        return []

    max_row = max(row for row, _ in cells)
    max_col = max(col for _, col in cells)
    return [[cells.get((row, col), "") for col in range(max_col + 1)] for row in range(max_row + 1)]


def extract_tables(blocks: Iterable[Block], index: BlockIndex) -> list[Grid]:
    """Return one grid per TABLE block, in the order tables were encountered."""
    return [build_grid(block, index) for block in blocks if block.type == BlockType.TABLE]


# ===========================================================================
# Entry point
# ===========================================================================


def resolve(blocks: Iterable[Block]) -> ResolvedDocument:
    """Resolve a block collection into its lines, key/values and tables."""
    materialized: Sequence[Block] = blocks if isinstance(blocks, Sequence) else list(blocks)
    index = build_index(materialized)

    document = ResolvedDocument(
        lines=extract_lines(materialized),
        key_values=extract_key_values(materialized, index),
        tables=extract_tables(materialized, index),
    )
    logger.debug("Resolved %d blocks: %s", len(materialized), document.summary())
    return document


__all__ = [
    "BlockIndex",
    "build_index",
    "join_child_text",
    "extract_lines",
    "extract_key_values",
    "build_grid",
    "extract_tables",
    "resolve",
]
