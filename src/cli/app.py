"""Typer application entrypoint."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import List, Optional

import typer
from rich import print as rprint
from rich.table import Table

from batch.config import AuditConfig, BatchConfig, RecompressConfig, get_settings
from batch.engine import BatchReport, bytes_to_human, run_cleanup, run_junk_audit, run_recompress
from logging_config import configure_logging
from region import JunkMode, RegionError, RegionFile, WindowPolicy


app = typer.Typer(help="Clean up and recompress region (.mca) files in place")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides LOG_LEVEL"),
) -> None:
    configure_logging(log_level)


def _print_failures(report: BatchReport) -> None:
    for result in report.failures:
        rprint(f"[red]Error while processing {result.path}: {result.error}[/red]")


def _finish(report: BatchReport) -> None:
    if not report.results:
        typer.echo("No region files found.")
        raise typer.Exit(code=1)
    _print_failures(report)
    if report.failures:
        raise typer.Exit(code=1)


@app.command("cleanup")
def cleanup(
    inputs: List[Path] = typer.Argument(..., help="Region files or folders to process"),
    jobs: int = typer.Option(get_settings().jobs, "--jobs", "-j", min=1, max=256, help="Files processed at once"),
) -> None:
    """Zero stale bytes left after each chunk's payload."""

    report = run_cleanup(BatchConfig(inputs=inputs, jobs=jobs))
    for result in report.results:
        if result.ok:
            typer.echo(f"Processed {result.path}")

    table = Table(title="Cleanup summary")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Files", str(len(report.results)))
    table.add_row("Failed", str(len(report.failures)))
    table.add_row("Bytes zeroed", bytes_to_human(report.total_junk_bytes))
    rprint(table)
    _finish(report)


@app.command("recompress")
def recompress(
    inputs: List[Path] = typer.Argument(..., help="Region files or folders to process"),
    level: int = typer.Option(get_settings().level, "--level", "-l", min=1, max=9, help="1 fastest, 9 best"),
    jobs: int = typer.Option(get_settings().jobs, "--jobs", "-j", min=1, max=256, help="Files processed at once"),
) -> None:
    """Recompress every zlib chunk in place at the given level."""

    report = run_recompress(RecompressConfig(inputs=inputs, jobs=jobs, level=level))
    for result in report.results:
        if result.ok:
            typer.echo(f"Processed {result.path}")

    table = Table(title="Recompression summary")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Files", str(len(report.results)))
    table.add_row("Failed", str(len(report.failures)))
    table.add_row("Before", bytes_to_human(report.total_old_bytes))
    table.add_row("After", bytes_to_human(report.total_new_bytes))
    table.add_row("Saved", bytes_to_human(max(report.total_saved_bytes, 0)))
    rprint(table)
    _finish(report)


@app.command("junk")
def junk(
    inputs: List[Path] = typer.Argument(..., help="Region files or folders to scan"),
    count: bool = typer.Option(False, "--count", help="Count individual non-zero bytes"),
    policy: WindowPolicy = typer.Option(WindowPolicy.SECTOR_COUNT, "--policy", help="Scan window policy"),
    jobs: int = typer.Option(get_settings().jobs, "--jobs", "-j", min=1, max=256, help="Files scanned at once"),
) -> None:
    """Report junk bytes per file without modifying anything."""

    mode = JunkMode.COUNT if count else JunkMode.ALL_OR_NOTHING
    report = run_junk_audit(AuditConfig(inputs=inputs, jobs=jobs, mode=mode, policy=policy))
    for result in report.results:
        if result.ok:
            typer.echo(f"{result.path}: {result.junk_bytes}")
    typer.echo(f"Total junk: {report.total_junk_bytes}")
    _finish(report)


@app.command("info")
def info(path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Region file")) -> None:
    """Summarise one region file."""

    try:
        with RegionFile.open(path) as region:
            chunks = list(region.index.existing())
            tags = Counter(region.get_chunk_compression(x, z) for x, z, _ in chunks)
            junk_total = region.total_junk_bytes()
            junk_count = region.total_junk_bytes(mode=JunkMode.COUNT)
    except (RegionError, OSError) as exc:
        rprint(f"[red]Unable to read {path}: {exc}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=str(path))
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Chunks", str(len(chunks)))
    table.add_row("Allocated", bytes_to_human(sum(record.allocated_bytes for _, _, record in chunks)))
    for tag, amount in sorted(tags.items()):
        table.add_row(f"Compression {tag}", str(amount))
    table.add_row("Junk tail bytes", str(junk_total))
    table.add_row("Non-zero junk bytes", str(junk_count))
    rprint(table)


if __name__ == "__main__":
    app()
