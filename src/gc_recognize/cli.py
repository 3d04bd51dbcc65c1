#!/usr/bin/env python3
"""GC log recognizer command line.

Runs the recognition pipeline over a captured JVM GC log and prints:
- run overview (time window, pause totals, CPU totals)
- per-kind event counts
- per-region peak occupancy and capacity
- data quality (unparsed lines, discarded records, dropped statistics)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from gc_recognize import __version__
from gc_recognize.classifier import is_blocking
from gc_recognize.config import ParserSettings
from gc_recognize.models import Region, RunSummary
from gc_recognize.pipeline import GcRun, analyze_file
from gc_recognize.units import bytes_to_kb

# ============================================================
# RICH OUTPUT RENDERING
# ============================================================

GC_RECOGNIZE_THEME = Theme(
    {
        "critical": "bold red",
        "warning": "bold yellow",
        "success": "bold green",
        "info": "cyan",
        "metric": "white",
        "label": "dim white",
        "header": "bold magenta",
    }
)

console = Console(theme=GC_RECOGNIZE_THEME)


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose, markup=False)],
        force=True,
    )


def create_key_value_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """Create a simple two-column key/value table."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="label")
    table.add_column("Value", style="metric")
    for label, value in rows:
        table.add_row(label, value)
    return table


def format_millis(millis: int) -> str:
    """Format milliseconds for human-readable output."""
    seconds = millis / 1000
    if seconds > 60:
        return f"{seconds:.1f}s ({seconds / 60:.1f}m)"
    return f"{seconds:.3f}s"


def format_kb(size_bytes: int) -> str:
    return f"{bytes_to_kb(size_bytes):,}K"


def build_overview_rows(summary: RunSummary) -> list[tuple[str, str]]:
    """Build rows describing the run as a whole."""
    rows = [("Events", str(summary.event_count))]
    if summary.min_timestamp_ms is not None and summary.max_timestamp_ms is not None:
        rows.append(("First timestamp", f"{summary.min_timestamp_ms} ms"))
        rows.append(("Last timestamp", f"{summary.max_timestamp_ms} ms"))
        rows.append(("Run duration", format_millis(summary.run_duration_ms)))
    rows.extend(
        [
            ("Blocking events", str(summary.blocking_event_count)),
            ("Total pause", format_millis(summary.total_pause_us // 1000)),
            ("Max pause", f"{summary.max_pause_us / 1000:.3f} ms"),
            ("Pause time", f"{summary.pause_percentage:.2f}%"),
        ]
    )
    if summary.total_real_centis:
        rows.append(
            (
                "CPU user / sys / real",
                f"{summary.total_user_centis / 100:.2f}s / {summary.total_sys_centis / 100:.2f}s"
                f" / {summary.total_real_centis / 100:.2f}s",
            )
        )
    return rows


def build_data_quality_rows(summary: RunSummary) -> list[tuple[str, str]]:
    return [
        ("Unparsed lines", str(summary.unknown_line_count)),
        ("Discarded incomplete records", str(summary.discarded_fragment_count)),
        ("Dropped statistics lines", str(summary.dropped_statistics_lines)),
    ]


def create_kind_table(summary: RunSummary) -> Table:
    """Per-kind event counts, most frequent first."""
    table = Table(title="Event Kinds", header_style="header")
    table.add_column("Kind", style="label")
    table.add_column("Count", justify="right", style="metric")
    table.add_column("Blocking", justify="center")
    ordered = sorted(summary.kind_counts.items(), key=lambda item: (-item[1], item[0].value))
    for kind, count in ordered:
        table.add_row(kind.value, str(count), "yes" if is_blocking(kind) else "")
    return table


def create_region_table(summary: RunSummary) -> Table:
    """Peak occupancy and capacity per memory region."""
    table = Table(title="Memory Regions", header_style="header")
    table.add_column("Region", style="label")
    table.add_column("Max occupancy", justify="right", style="metric")
    table.add_column("Max capacity", justify="right", style="metric")
    for region in Region:
        if region not in summary.max_occupancy_bytes:
            continue
        table.add_row(
            region.value,
            format_kb(summary.max_occupancy_bytes[region]),
            format_kb(summary.max_capacity_bytes.get(region, 0)),
        )
    return table


def render_unknown_panel(summary: RunSummary) -> Panel:
    """Show a sample of the lines no recognizer matched."""
    if not summary.unknown_line_count:
        return Panel(
            Text(" All lines recognized", style="success"), title="Status", border_style="green"
        )

    text = Text()
    for index, sample in enumerate(summary.unknown_samples):
        line_ending = "\n" if index < len(summary.unknown_samples) - 1 else ""
        text.append(sample + line_ending, style="warning")
    hidden = summary.unknown_line_count - len(summary.unknown_samples)
    if hidden > 0:
        text.append(f"\n... and {hidden} more", style="label")
    return Panel(
        text,
        title=f"[warning]Unparsed Lines ({summary.unknown_line_count})[/warning]",
        border_style="yellow",
        expand=True,
    )


def render_rich_output(run: GcRun, log_file: Path) -> None:
    """Render the run summary using Rich components."""
    summary = run.summary
    console.print()
    console.print(Panel(f"GC log: {log_file.name}", style="header", expand=True))
    console.print()

    console.print(create_key_value_table("Run Overview", build_overview_rows(summary)))
    console.print()

    if summary.kind_counts:
        console.print(create_kind_table(summary))
        console.print()

    if summary.max_occupancy_bytes:
        console.print(create_region_table(summary))
        console.print()

    console.print(create_key_value_table("Data Quality", build_data_quality_rows(summary)))
    console.print()
    console.print(render_unknown_panel(summary))


# ============================================================
# TYPER CLI INTERFACE
# ============================================================

app = typer.Typer(
    name="gc-recognize",
    help="Recognize and summarize JVM garbage collection logs (legacy and unified logging)",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def analyze(
    log_file: Annotated[
        Path,
        typer.Argument(
            help="Path to GC log file to analyze",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    samples: Annotated[
        int,
        typer.Option(
            "--samples",
            "-s",
            help="Number of unparsed lines to show (default: 20)",
            min=0,
        ),
    ] = 20,
    max_fragment_lines: Annotated[
        int,
        typer.Option(
            "--max-fragment-lines",
            help="Discard a multi-line record still open after this many lines (default: 500)",
            min=1,
        ),
    ] = 500,
    keep_statistics: Annotated[
        bool,
        typer.Option(
            "--keep-statistics",
            help="Keep free-list and Shenandoah statistics blocks instead of dropping them",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with detailed parsing information",
        ),
    ] = False,
) -> None:
    """Analyze a JVM GC log file.

    Exit codes: 0 = every line recognized, 1 = unparsed lines or no events.
    """
    configure_logging(verbose)

    try:
        settings = ParserSettings(
            unknown_sample_limit=samples,
            max_fragment_lines=max_fragment_lines,
            drop_statistics=not keep_statistics,
        )

        with Progress(
            SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console
        ) as progress:
            parse_task = progress.add_task("[cyan]Recognizing GC events...", total=None)
            run = analyze_file(log_file, settings)
            progress.update(parse_task, completed=100)

        if verbose:
            console.print(f"[info]Recognized {run.summary.event_count} events[/info]")

        if not run.events:
            console.print("[critical]ERROR: No GC events recognized in log file[/critical]")
            sys.exit(1)

        render_rich_output(run, log_file)

        if run.summary.unknown_line_count:
            sys.exit(1)

    except (OSError, ValueError) as e:
        console.print(f"[critical]ERROR: {e}[/critical]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@app.command()
def version() -> None:
    """Display version."""
    console.print(f"gc-recognize {__version__}")


if __name__ == "__main__":
    app()
