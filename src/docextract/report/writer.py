"""
Excel report writer: :class:`ResolvedDocument` -> ``.xlsx`` bytes.

Workbook layout
---------------
``Raw Text``
    Header ``[Page, Line Text, Confidence]``, then one row per line.
``Key-Values``
    Header ``[Page, Key, Value, Confidence]``, then one row per key.
``Tables``
    For each table a ``Table N`` label row followed by its grid rows (the
    first grid row styled as a header), then two blank rows. A table without
    cells gets a single explanatory row under its label. With no tables at all
    the sheet holds one explanatory row.

Pages are written as text and confidences as ``"97.25%"`` strings so the
reader can hand every cell back as a plain string.
"""

from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from docextract.core.contracts.report import Grid, ResolvedDocument
from docextract.core.settings import get_logger

logger = get_logger(__name__)

RAW_TEXT_SHEET = "Raw Text"
KEY_VALUES_SHEET = "Key-Values"
TABLES_SHEET = "Tables"

RAW_TEXT_HEADERS = ("Page", "Line Text", "Confidence")
KEY_VALUE_HEADERS = ("Page", "Key", "Value", "Confidence")

NO_TABLES_MESSAGE = "No tables detected in this document."
EMPTY_TABLE_MESSAGE = "Table contains no cells."
TABLE_GAP_ROWS = 2

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="1E3A5F", end_color="1E3A5F", fill_type="solid")
_HEADER_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
_DATA_BORDER = Border(
    left=Side(style="thin", color="C0C0C0"),
    right=Side(style="thin", color="C0C0C0"),
    top=Side(style="thin", color="C0C0C0"),
    bottom=Side(style="thin", color="C0C0C0"),
)
_MAX_COLUMN_WIDTH = 80
_LINE_TEXT_MIN_WIDTH = 58


def format_confidence(confidence: float | None) -> str:
    """``97.254`` -> ``"97.25%"``; a missing score is an empty string."""
    return f"{confidence:.2f}%" if confidence is not None else ""


# ===========================================================================
# Cell helpers
# ===========================================================================


def _write_cell(ws: Worksheet, row: int, column: int, value: str, *, header: bool) -> None:
    cell = ws.cell(row=row, column=column, value=ILLEGAL_CHARACTERS_RE.sub("", value))
    # Literal text, never a formula.
    cell.data_type = "s"
    if header:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.border = _HEADER_BORDER
        cell.alignment = Alignment(horizontal="left", wrap_text=False)
    else:
        cell.border = _DATA_BORDER
        cell.alignment = Alignment(wrap_text=True, vertical="top")


def _write_row(ws: Worksheet, row: int, values: tuple[str, ...] | list[str], *, header: bool) -> None:
    for column, value in enumerate(values, start=1):
        _write_cell(ws, row, column, value, header=header)


def _autosize(ws: Worksheet, num_columns: int) -> None:
    """Size columns to their longest value, capped at a readable width."""
    for column in range(1, num_columns + 1):
        letter = get_column_letter(column)
        longest = max(
            (len(str(cell.value)) for cell in ws[letter] if cell.value is not None),
            default=0,
        )
        ws.column_dimensions[letter].width = min(longest + 2, _MAX_COLUMN_WIDTH)


# ===========================================================================
# Sheets
# ===========================================================================


def _build_raw_text_sheet(wb: Workbook, document: ResolvedDocument) -> None:
    ws = wb.create_sheet(RAW_TEXT_SHEET)
    _write_row(ws, 1, RAW_TEXT_HEADERS, header=True)
    for offset, line in enumerate(document.lines, start=2):
        _write_row(
            ws,
            offset,
            (str(line.page), line.text, format_confidence(line.confidence)),
            header=False,
        )
    _autosize(ws, len(RAW_TEXT_HEADERS))
    width = ws.column_dimensions["B"].width or 0
    ws.column_dimensions["B"].width = max(width, _LINE_TEXT_MIN_WIDTH)
    ws.freeze_panes = "A2"
    logger.info("Raw Text sheet: %d lines", len(document.lines))


def _build_key_value_sheet(wb: Workbook, document: ResolvedDocument) -> None:
    ws = wb.create_sheet(KEY_VALUES_SHEET)
    _write_row(ws, 1, KEY_VALUE_HEADERS, header=True)
    for offset, entry in enumerate(document.key_values, start=2):
        _write_row(
            ws,
            offset,
            (str(entry.page), entry.key, entry.value, format_confidence(entry.confidence)),
            header=False,
        )
    _autosize(ws, len(KEY_VALUE_HEADERS))
    ws.freeze_panes = "A2"
    logger.info("Key-Values sheet: %d pairs", len(document.key_values))


def _write_table(ws: Worksheet, start_row: int, number: int, grid: Grid) -> int:
    """Write one labelled table at ``start_row``; return the next free row."""
    row = start_row
    _write_cell(ws, row, 1, f"Table {number}", header=True)
    row += 1

    if not grid:
        _write_cell(ws, row, 1, EMPTY_TABLE_MESSAGE, header=False)
        row += 1
    else:
        for r, values in enumerate(grid):
            _write_row(ws, row, values, header=(r == 0))
            row += 1

    return row + TABLE_GAP_ROWS


def _build_tables_sheet(wb: Workbook, document: ResolvedDocument) -> None:
    ws = wb.create_sheet(TABLES_SHEET)
    if not document.tables:
        _write_cell(ws, 1, 1, NO_TABLES_MESSAGE, header=False)
        ws.column_dimensions["A"].width = len(NO_TABLES_MESSAGE) + 2
        logger.info("Tables sheet: no tables")
        return

    row = 1
    for number, grid in enumerate(document.tables, start=1):
        row = _write_table(ws, row, number, grid)

    widest = max((len(grid[0]) for grid in document.tables if grid), default=1)
    _autosize(ws, widest)
    logger.info("Tables sheet: %d table(s) written", len(document.tables))


# ===========================================================================
# Entry points
# ===========================================================================


def build_workbook(document: ResolvedDocument) -> Workbook:
    """Build the three-sheet workbook for ``document``."""
    wb = Workbook()
    wb.remove(wb.active)
    _build_raw_text_sheet(wb, document)
    _build_key_value_sheet(wb, document)
    _build_tables_sheet(wb, document)
    return wb


def write_report(document: ResolvedDocument, source_name: str = "") -> bytes:
    """Serialize ``document`` to ``.xlsx`` bytes."""
    buffer = BytesIO()
    build_workbook(document).save(buffer)
    data = buffer.getvalue()
    logger.info(
        "Generated workbook for '%s' (%d bytes): %s",
        source_name or "<unnamed>",
        len(data),
        document.summary(),
    )
    return data


__all__ = [
    "RAW_TEXT_SHEET",
    "KEY_VALUES_SHEET",
    "TABLES_SHEET",
    "RAW_TEXT_HEADERS",
    "KEY_VALUE_HEADERS",
    "NO_TABLES_MESSAGE",
    "EMPTY_TABLE_MESSAGE",
    "TABLE_GAP_ROWS",
    "format_confidence",
    "build_workbook",
    "write_report",
]
