"""
Excel report reader: ``.xlsx`` bytes -> ``{sheet name: [row mapping, ...]}``.

This is the inverse view used for display. Each sheet's first row is taken as
the header; every later row becomes a ``header -> text`` mapping. Rows whose
values are all blank are dropped, which also removes the gap rows between
tables on the ``Tables`` sheet.
"""

from __future__ import annotations

import zipfile
from io import BytesIO
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from docextract.core.errors import ReportReadError
from docextract.core.settings import get_logger

logger = get_logger(__name__)

SheetRows = list[dict[str, str]]


def cell_text(value: Any) -> str:
    """Render one cell value as display text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return value.strip()
    return str(value)


def _rows_to_mappings(rows: list[tuple[Any, ...]]) -> SheetRows:
    if not rows:
        return []

    header_values = [cell_text(v) for v in rows[0]]
    while header_values and not header_values[-1]:
        header_values.pop()

    out: SheetRows = []
    for raw in rows[1:]:
        mapping: dict[str, str] = {}
        for i, header in enumerate(header_values):
            mapping[header] = cell_text(raw[i]) if i < len(raw) else ""
        if any(v.strip() for v in mapping.values()):
            out.append(mapping)
    return out


def read_sheets(data: bytes) -> dict[str, SheetRows]:
    """Read every sheet of an ``.xlsx`` payload, in workbook order.

    Raises
    ------
    ReportReadError
        If ``data`` is not a readable workbook.
    """
    try:
        wb = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise ReportReadError(f"Failed to read Excel result file: {exc}") from exc

    try:
        sheets: dict[str, SheetRows] = {}
        for ws in wb.worksheets:
            rows = [tuple(r) for r in ws.iter_rows(values_only=True)]
            sheets[ws.title] = _rows_to_mappings(rows)
            logger.debug("Parsed %d data rows from sheet '%s'", len(sheets[ws.title]), ws.title)
        return sheets
    finally:
        wb.close()


__all__ = ["SheetRows", "cell_text", "read_sheets"]
