"""Data contracts shared by the resolver, the coordinator and the adapters."""

from __future__ import annotations

from .block import Block, BlockType, Relationship, RelationshipType, load_blocks, parse_blocks
from .job import JobRecord, JobStatus, ObjectLocation
from .report import Grid, KeyValueEntry, LineEntry, ResolvedDocument

__all__ = [
    "Block",
    "BlockType",
    "Relationship",
    "RelationshipType",
    "load_blocks",
    "parse_blocks",
    "JobRecord",
    "JobStatus",
    "ObjectLocation",
    "Grid",
    "KeyValueEntry",
    "LineEntry",
    "ResolvedDocument",
]
