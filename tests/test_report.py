"""
Tests for the Excel report writer and reader.

The writer is checked through openpyxl directly (sheet order, header styling,
row layout of the Tables sheet); the reader is checked against reports built
by the writer and against a hand-made workbook.
"""

from __future__ import annotations

from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from docextract.core.contracts.report import KeyValueEntry, LineEntry, ResolvedDocument
from docextract.core.errors import ReportReadError
from docextract.report import build_workbook, read_sheets, write_report
from docextract.report.reader import cell_text
from docextract.report.writer import (
    EMPTY_TABLE_MESSAGE,
    KEY_VALUE_HEADERS,
    NO_TABLES_MESSAGE,
    RAW_TEXT_HEADERS,
    format_confidence,
)


@pytest.fixture  # type: ignore[misc]
def document() -> ResolvedDocument:
    """A document with two lines, one key/value and two tables."""
    return ResolvedDocument(
        lines=[
            LineEntry(page=1, text="ACME Corp", confidence=99.456),
            LineEntry(page=2, text="Page two", confidence=None),
        ],
        key_values=[KeyValueEntry(page=1, key="Invoice No:", value="INV-7", confidence=87.0)],
        tables=[
            [["Item", "Qty"], ["Bolt", "4"]],
            [["Total"]],
        ],
    )


def test_format_confidence() -> None:
    """Confidences render with two decimals and a percent sign."""
    assert format_confidence(99.456) == "99.46%"
    assert format_confidence(100) == "100.00%"
    assert format_confidence(None) == ""


def test_workbook_sheets_and_headers(document: ResolvedDocument) -> None:
    """Three sheets in order with styled headers."""
    wb = build_workbook(document)
    assert wb.sheetnames == ["Raw Text", "Key-Values", "Tables"]

    raw = wb["Raw Text"]
    assert tuple(c.value for c in raw[1]) == RAW_TEXT_HEADERS
    assert raw["A1"].font.bold
    assert raw["A1"].fill.start_color.rgb.endswith("1E3A5F")
    assert [c.value for c in raw[2]] == ["1", "ACME Corp", "99.46%"]
    assert [c.value for c in raw[3]][:2] == ["2", "Page two"]
    assert raw["C3"].value in ("", None)
    assert raw.freeze_panes == "A2"

    kv = wb["Key-Values"]
    assert tuple(c.value for c in kv[1]) == KEY_VALUE_HEADERS
    assert [c.value for c in kv[2]] == ["1", "Invoice No:", "INV-7", "87.00%"]


def test_tables_sheet_layout(document: ResolvedDocument) -> None:
    """Each table: label row, grid rows, two blank rows."""
    ws = build_workbook(document)["Tables"]
    assert ws["A1"].value == "Table 1"
    assert ws["A1"].font.bold
    assert [ws.cell(row=2, column=c).value for c in (1, 2)] == ["Item", "Qty"]
    assert ws["A2"].font.bold
    assert [ws.cell(row=3, column=c).value for c in (1, 2)] == ["Bolt", "4"]
    assert not ws["A3"].font.bold
    assert ws["A4"].value is None and ws["A5"].value is None
    assert ws["A6"].value == "Table 2"
    assert ws["A7"].value == "Total"


def test_empty_table_renders_placeholder() -> None:
    """A zero-row grid renders its label and an explanatory row."""
    ws = build_workbook(ResolvedDocument(tables=[[], [["x"]]]))["Tables"]
    assert ws["A1"].value == "Table 1"
    assert ws["A2"].value == EMPTY_TABLE_MESSAGE
    assert ws["A5"].value == "Table 2"
    assert ws["A6"].value == "x"


def test_no_tables_renders_single_message() -> None:
    """Without tables the sheet holds one explanatory row."""
    ws = build_workbook(ResolvedDocument())["Tables"]
    assert ws["A1"].value == NO_TABLES_MESSAGE
    assert ws.max_row == 1


def test_write_report_returns_loadable_bytes(document: ResolvedDocument) -> None:
    """The serialized report opens with openpyxl."""
    data = write_report(document, "invoice.pdf")
    assert data[:2] == b"PK"
    assert load_workbook(BytesIO(data)).sheetnames == ["Raw Text", "Key-Values", "Tables"]


def test_reader_maps_rows_by_header(document: ResolvedDocument) -> None:
    """Rows become header -> text mappings; blank gap rows are dropped."""
    sheets = read_sheets(write_report(document))
    assert list(sheets) == ["Raw Text", "Key-Values", "Tables"]
    assert sheets["Raw Text"] == [
        {"Page": "1", "Line Text": "ACME Corp", "Confidence": "99.46%"},
        {"Page": "2", "Line Text": "Page two", "Confidence": ""},
    ]
    assert sheets["Key-Values"][0]["Value"] == "INV-7"
    assert [row["Table 1"] for row in sheets["Tables"]] == ["Item", "Bolt", "Table 2", "Total"]


def test_reader_on_empty_document() -> None:
    """Header-only sheets give no rows; the no-tables message is the header."""
    sheets = read_sheets(write_report(ResolvedDocument()))
    assert sheets == {"Raw Text": [], "Key-Values": [], "Tables": []}


def test_reader_renders_numbers_and_booleans() -> None:
    """Integral numbers lose their decimal part; booleans are lower-case."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Data"
    ws.append(["n", "f", "b", None])
    ws.append([3.0, 2.5, True, None])
    ws.append([None, None, None, None])
    buffer = BytesIO()
    wb.save(buffer)

    assert read_sheets(buffer.getvalue()) == {"Data": [{"n": "3", "f": "2.5", "b": "true"}]}
    assert cell_text("  padded ") == "padded"
    assert cell_text(None) == ""


def test_reader_rejects_garbage() -> None:
    """Bytes that are not a workbook raise ReportReadError."""
    with pytest.raises(ReportReadError):
        read_sheets(b"definitely not a zip file")


def test_formula_like_text_stays_literal() -> None:
    """Text starting with '=' is stored as a string and read back unchanged."""
    document = ResolvedDocument(
        lines=[LineEntry(page=1, text="=SUM(A1:A3)")],
        key_values=[KeyValueEntry(page=1, key="Total", value="=42")],
        tables=[[["=A1", "B"]]],
    )
    wb = build_workbook(document)
    assert wb["Raw Text"]["B2"].data_type == "s"

    sheets = read_sheets(write_report(document))
    assert sheets["Raw Text"][0]["Line Text"] == "=SUM(A1:A3)"
    assert sheets["Key-Values"][0]["Value"] == "=42"
    assert sheets["Tables"][0]["Table 1"] == "=A1"


def test_control_characters_are_stripped() -> None:
    """Characters worksheets cannot hold are dropped instead of failing the report."""
    document = ResolvedDocument(
        lines=[LineEntry(page=1, text="Total\x0bDue")],
        key_values=[KeyValueEntry(page=1, key="Ref\x01", value="A\x1fB")],
    )
    sheets = read_sheets(write_report(document))
    assert sheets["Raw Text"][0]["Line Text"] == "TotalDue"
    assert sheets["Key-Values"][0] == {"Page": "1", "Key": "Ref", "Value": "AB", "Confidence": ""}
