"""Block graph resolution (pure, no I/O)."""

from __future__ import annotations

from .resolver import (
    build_grid,
    build_index,
    extract_key_values,
    extract_lines,
    extract_tables,
    join_child_text,
    resolve,
)

__all__ = [
    "build_grid",
    "build_index",
    "extract_key_values",
    "extract_lines",
    "extract_tables",
    "join_child_text",
    "resolve",
]
