"""Report writer and reader for resolved documents."""

from __future__ import annotations

from .reader import read_sheets
from .writer import build_workbook, write_report

__all__ = ["build_workbook", "read_sheets", "write_report"]
