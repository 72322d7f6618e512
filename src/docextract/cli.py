"""
DocExtract Command Line Interface (CLI).

Terminal front-end built on ``typer`` and ``rich``.

Commands
--------
- ``convert``: saved analysis JSON -> Excel report, fully offline.
- ``show``: render the sheets of an Excel report as tables.
- ``analyze``: run a live analysis job on an ``s3://`` document and write
  the report locally.

Usage
-----
    $ docextract convert samples/response.json -o report.xlsx
    $ docextract show report.xlsx --sheet "Raw Text" --limit 20
    $ docextract analyze s3://my-bucket/uploads/abc/invoice.pdf --timeout 600
"""

from __future__ import annotations

import json
import time
import traceback
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from docextract.adapters.textract import TextractEngine
from docextract.core.contracts.block import load_blocks
from docextract.core.contracts.job import ObjectLocation
from docextract.core.contracts.report import ResolvedDocument
from docextract.core.coordinator.budget import Deadline
from docextract.core.coordinator.poller import AnalysisCoordinator
from docextract.core.errors import ReportReadError
from docextract.core.graph.resolver import resolve
from docextract.core.settings import load_settings
from docextract.report.reader import read_sheets
from docextract.report.writer import write_report

load_dotenv()

app = typer.Typer(
    help="DocExtract: turn document analysis results into Excel reports.",
    rich_markup_mode="markdown",
)
console = Console()


# --------------------------------------------------------------------------- #
# Helpers: Rendering & I/O
# --------------------------------------------------------------------------- #


def _render_summary(document: ResolvedDocument, output: Path, block_count: int) -> None:
    counts = document.summary()
    console.print(
        Panel(
            f"Blocks:      {block_count}\n"
            f"Lines:       {counts['lines']}\n"
            f"Key-values:  {counts['key_values']}\n"
            f"Tables:      {counts['tables']}\n\n"
            f"Saved to: [link=file://{output.resolve()}]{output}[/link]",
            title="Report",
            border_style="green",
        )
    )


def _write_output(document: ResolvedDocument, output: Path, source_name: str) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(write_report(document, source_name))


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def convert(
    response: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Saved analysis response JSON (one response, a list of pages, or a bare block list).",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Where to write the .xlsx report."),
    ] = None,
) -> None:
    """
    Build an Excel report from a saved analysis response.

    No network access: blocks are read from disk, resolved and written.
    """
    target = output or response.with_suffix(".xlsx")
    try:
        blocks = load_blocks(json.loads(response.read_text(encoding="utf-8")))
        document = resolve(blocks)
        _write_output(document, target, response.name)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]❌ Convert Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    _render_summary(document, target, len(blocks))


@app.command()  # type: ignore[misc]
def show(
    report: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=True, dir_okay=False, readable=True, help="Excel report."),
    ],
    sheet: Annotated[
        str | None,
        typer.Option("--sheet", "-s", help="Only show this sheet (e.g. 'Key-Values')."),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help="Maximum rows per sheet."),
    ] = 50,
) -> None:
    """Render the sheets of an Excel report in the terminal."""
    try:
        sheets = read_sheets(report.read_bytes())
    except (OSError, ReportReadError) as e:
        console.print(f"[bold red]❌ Read Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    if sheet is not None:
        if sheet not in sheets:
            console.print(f"[bold red]No sheet named {sheet!r}.[/bold red] Available: {', '.join(sheets)}")
            raise typer.Exit(code=1)
        sheets = {sheet: sheets[sheet]}

    for name, rows in sheets.items():
        table = Table(title=f"{name} ({len(rows)} rows)", show_lines=False)
        columns = list(rows[0].keys()) if rows else []
        for column in columns:
            table.add_column(column)
        for row in rows[:limit]:
            table.add_row(*(row.get(column, "") for column in columns))
        console.print(table)
        if len(rows) > limit:
            console.print(f"[dim]... {len(rows) - limit} more row(s)[/dim]")


@app.command()  # type: ignore[misc]
def analyze(
    document: Annotated[str, typer.Argument(help="Document to analyse, as s3://bucket/key.")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Where to write the .xlsx report."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", min=1.0, help="Wall-clock budget in seconds."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show full error tracebacks for debugging."),
    ] = False,
) -> None:
    """
    Run a live analysis job and write the report locally.

    PDFs go through the asynchronous job API (submit, poll, page); images use
    the single synchronous call.
    """
    settings = load_settings()
    try:
        location = ObjectLocation.from_uri(document)
    except ValueError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e

    console.print(
        Panel.fit(
            f"[bold cyan]DocExtract[/bold cyan]\nAnalysing: [u]{location.uri}[/u]",
            border_style="cyan",
        )
    )

    engine = TextractEngine(settings.aws_region, max_results=settings.max_results_per_page)
    coordinator = AnalysisCoordinator.from_settings(engine, settings)
    budget = Deadline.after(timeout or settings.default_budget_seconds)
    target = output or Path(Path(location.file_name).stem + ".xlsx")

    start_time = time.time()
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("[cyan]Waiting for analysis...", total=None)
            run = coordinator.run(location, budget)
        resolved = resolve(run.blocks)
        _write_output(resolved, target, location.file_name)
    except Exception as e:
        console.print(f"\n[bold red]❌ Analysis Error:[/bold red] {e}")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from e

    duration = time.time() - start_time
    console.print(f"\n[bold green]✅ Complete![/bold green] (took {duration:.1f}s, {run.poll_count} poll(s))\n")
    _render_summary(resolved, target, len(run.blocks))


if __name__ == "__main__":
    app()
