"""
Tests for the DocExtract command-line interface (CLI).

Scope
-----
1.  **Command Registration**: `--help` lists convert/show/analyze.
2.  **Argument Validation**: Typer's `exists=True` checks for input files.
3.  **Offline conversion**: saved JSON -> report on disk -> `show`.
4.  **Live analysis**: `TextractEngine` is patched with a scripted fake.
5.  **Error Handling**: graceful exit code 1 on failures.

We use `typer.testing.CliRunner` to invoke the app in-process.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from docextract.cli import app
from docextract.core.errors import EngineError
from docextract.report import read_sheets

RESPONSE = {
    "JobStatus": "SUCCEEDED",
    "Blocks": [
        {"Id": "l1", "BlockType": "LINE", "Text": "Quarterly Report", "Page": 1, "Confidence": 99.1},
        {
            "Id": "t1",
            "BlockType": "TABLE",
            "Relationships": [{"Type": "CHILD", "Ids": ["c1", "c2"]}],
        },
        {
            "Id": "c1",
            "BlockType": "CELL",
            "RowIndex": 1,
            "ColumnIndex": 1,
            "Relationships": [{"Type": "CHILD", "Ids": ["w1"]}],
        },
        {
            "Id": "c2",
            "BlockType": "CELL",
            "RowIndex": 1,
            "ColumnIndex": 2,
            "Relationships": [{"Type": "CHILD", "Ids": ["w2"]}],
        },
        {"Id": "w1", "BlockType": "WORD", "Text": "Region"},
        {"Id": "w2", "BlockType": "WORD", "Text": "Revenue"},
    ],
}


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    """Create a fresh CliRunner for each test."""
    return CliRunner()


@pytest.fixture  # type: ignore[misc]
def response_file(tmp_path: Path) -> Path:
    """A saved analysis response on disk."""
    path = tmp_path / "response.json"
    path.write_text(json.dumps(RESPONSE), encoding="utf-8")
    return path


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    """Invoking --help should list every command and exit 0."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    for command in ("convert", "show", "analyze"):
        assert command in result.output


def test_convert_fails_on_missing_file(runner: CliRunner) -> None:
    """Typer should enforce `exists=True` for the input file argument."""
    result = runner.invoke(app, ["convert", "ghost.json"])
    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_convert_writes_report(runner: CliRunner, response_file: Path, tmp_path: Path) -> None:
    """convert resolves the saved blocks and writes a three-sheet report."""
    output = tmp_path / "out" / "report.xlsx"
    result = runner.invoke(app, ["convert", str(response_file), "-o", str(output)])
    assert result.exit_code == 0, f"CLI Failed with Output:\n{result.output}"
    assert "Tables:      1" in result.output

    sheets = read_sheets(output.read_bytes())
    assert sheets["Raw Text"][0]["Line Text"] == "Quarterly Report"
    assert sheets["Tables"] == [{"Table 1": "Region"}]


def test_convert_defaults_output_next_to_input(runner: CliRunner, response_file: Path) -> None:
    """Without -o the report lands beside the JSON file."""
    result = runner.invoke(app, ["convert", str(response_file)])
    assert result.exit_code == 0, result.output
    assert response_file.with_suffix(".xlsx").exists()


def test_convert_rejects_invalid_json(runner: CliRunner, tmp_path: Path) -> None:
    """Malformed payloads exit with code 1."""
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"NotBlocks": []}), encoding="utf-8")
    result = runner.invoke(app, ["convert", str(bad)])
    assert result.exit_code == 1
    assert "Convert Error" in result.output


def test_show_renders_sheets(runner: CliRunner, response_file: Path, tmp_path: Path) -> None:
    """show prints the requested sheet as a table."""
    output = tmp_path / "report.xlsx"
    runner.invoke(app, ["convert", str(response_file), "-o", str(output)])

    result = runner.invoke(app, ["show", str(output), "--sheet", "Raw Text"])
    assert result.exit_code == 0, result.output
    assert "Quarterly Report" in result.output
    assert "Key-Values" not in result.output

    missing = runner.invoke(app, ["show", str(output), "--sheet", "Nope"])
    assert missing.exit_code == 1


def test_show_rejects_non_workbook(runner: CliRunner, response_file: Path) -> None:
    """A file that is not a workbook exits with code 1."""
    result = runner.invoke(app, ["show", str(response_file)])
    assert result.exit_code == 1
    assert "Read Error" in result.output


def test_analyze_runs_coordinator(
    runner: CliRunner, tmp_path: Path, make_block: Any, scripted_engine: Callable[..., Any]
) -> None:
    """analyze drives the engine and writes the report locally."""
    engine = scripted_engine(sync_blocks=[make_block("l1", "LINE", text="Scanned")])
    output = tmp_path / "scan.xlsx"
    with patch("docextract.cli.TextractEngine", return_value=engine):
        result = runner.invoke(app, ["analyze", "s3://bucket/uploads/a/scan.png", "-o", str(output)])

    assert result.exit_code == 0, f"CLI Failed with Output:\n{result.output}"
    assert "Complete!" in result.output
    assert [loc.uri for loc in engine.sync_calls] == ["s3://bucket/uploads/a/scan.png"]
    assert read_sheets(output.read_bytes())["Raw Text"][0]["Line Text"] == "Scanned"


def test_analyze_handles_engine_error(runner: CliRunner, scripted_engine: Callable[..., Any]) -> None:
    """Engine failures are reported and exit with code 1."""
    engine = scripted_engine(sync_error=EngineError("AccessDenied"))
    with patch("docextract.cli.TextractEngine", return_value=engine):
        result = runner.invoke(app, ["analyze", "s3://bucket/scan.png"])
    assert result.exit_code == 1
    assert "AccessDenied" in result.output


def test_analyze_rejects_bad_uri(runner: CliRunner) -> None:
    """Only s3:// URIs are accepted."""
    result = runner.invoke(app, ["analyze", "scan.png"])
    assert result.exit_code == 1
