"""Command-line interface for Fossil."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console

from fossil.config import load_config
from fossil.exceptions import FossilError
from fossil.filters import filter_by_age, filter_by_author, filter_by_type
from fossil.history import enrich_markers, open_repository
from fossil.models import DebtReport, FossilSettings
from fossil.reporting import OutputFormat, generate_report
from fossil.scanning import scan_directory

app = typer.Typer(
    name="fossil",
    help="Unearth your technical debt - find TODO/FIXME markers and date them with git blame",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def _stderr_logger(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, it may be swapped after configuration
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str) -> None:
    """Route structlog output to stderr, filtered at ``level``.

    Loggers are not cached, so each one writes to whatever ``sys.stderr``
    is when it is bound.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


@app.command()
def scan(
    path: Path = typer.Argument(Path("."), help="Directory to scan"),
    fmt: OutputFormat = typer.Option(OutputFormat.terminal, "--format", "-f", help="Output format"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report to this file"),
    older_than: Optional[str] = typer.Option(
        None, "--older-than", help="Only markers older than this age (e.g. 30d, 6m, 1y)"
    ),
    author: Optional[str] = typer.Option(None, "--author", help="Only markers by this author"),
    marker_type: Optional[str] = typer.Option(None, "--type", "-t", help="Only markers of this type"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a config file"),
    top: int = typer.Option(10, "--top", help="Show the N oldest markers"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Worker threads for scanning"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Scan a directory for technical debt markers."""
    settings = FossilSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)

    try:
        if verbose:
            err_console.print("[bold green]Fossil - Unearthing technical debt...[/bold green]")
            err_console.print(f"[bold blue]Scanning:[/bold blue] {path}")

        config = load_config(config_path)
        if verbose:
            err_console.print(f"[bold blue]Markers:[/bold blue] {', '.join(config.markers)}")

        markers = scan_directory(path, config, max_workers=workers or settings.max_workers)
        if verbose:
            err_console.print(f"Found {len(markers)} markers before filtering")

        # Type filter first, it saves blame work
        if marker_type:
            markers = filter_by_type(markers, marker_type)
            if verbose:
                err_console.print(f"Markers after type filter ({marker_type}): {len(markers)}")

        repo = open_repository(path)
        if verbose:
            if repo is not None:
                err_console.print("Git repository detected, enriching with blame data...")
            else:
                err_console.print("[dim]No git repository found, skipping blame data[/dim]")

        try:
            enrich_markers(markers, repo, max_workers=settings.blame_workers)
        finally:
            if repo is not None:
                repo.close()

        if older_than:
            markers = filter_by_age(markers, older_than)
            if verbose:
                err_console.print(f"Markers after age filter ({older_than}): {len(markers)}")

        if author:
            markers = filter_by_author(markers, author)
            if verbose:
                err_console.print(f"Markers after author filter ({author}): {len(markers)}")

        report = DebtReport.from_markers(markers, path)
        generate_report(report, fmt, output=output, top_n=top, console=console)

    except FossilError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from fossil import __version__

    console.print(f"[bold]Fossil[/bold] version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
