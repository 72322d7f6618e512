"""Core package for DocExtract.

Holds the pieces with no I/O of their own: configuration, contracts, the block
graph resolver and the analysis job coordinator.
"""

from __future__ import annotations

__all__ = ["__doc__"]
