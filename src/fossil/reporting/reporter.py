"""Report rendering: terminal tables, markdown and JSON."""

from enum import Enum
from io import StringIO
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fossil.models import DebtReport

TOP_AUTHORS = 10
TERMINAL_WIDTH = 100


class OutputFormat(str, Enum):
    """Supported report formats."""

    terminal = "terminal"
    markdown = "markdown"
    json = "json"


def _by_count(counts: Dict[str, int]) -> List[Tuple[str, int]]:
    # Count descending, then name for a stable order
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def format_terminal(report: DebtReport, top_n: int) -> str:
    """Format report as rich tables, rendered to plain text."""
    buffer = StringIO()
    console = Console(file=buffer, width=TERMINAL_WIDTH, color_system=None, force_terminal=False)

    console.print(
        Panel(
            Text(f"Scanned: {report.scan_path}\nTotal Markers: {report.total_count}"),
            title="Fossil - Technical Debt Report",
            expand=True,
        )
    )

    if report.by_type:
        table = Table(title="Summary by Type", show_header=True, header_style="bold cyan")
        table.add_column("Type", style="cyan")
        table.add_column("Count", justify="right")
        for marker_type, count in _by_count(report.by_type):
            table.add_row(Text(marker_type), str(count))
        console.print(table)

    if report.by_author:
        table = Table(title="Summary by Author", show_header=True, header_style="bold cyan")
        table.add_column("Author", style="green")
        table.add_column("Count", justify="right")
        for author, count in _by_count(report.by_author)[:TOP_AUTHORS]:
            table.add_row(Text(author), str(count))
        console.print(table)

    oldest = report.oldest_markers(top_n)
    if oldest:
        table = Table(title=f"Top {len(oldest)} Oldest Markers", show_header=True, header_style="bold cyan")
        table.add_column("Type", style="cyan")
        table.add_column("File", style="yellow")
        table.add_column("Line", justify="right")
        table.add_column("Author", style="green")
        table.add_column("Age", justify="right")
        for marker in oldest:
            table.add_row(
                Text(marker.marker_type),
                Text(str(marker.file_path)),
                str(marker.line_number),
                Text(marker.history_info.author_name),
                marker.history_info.age_display,
            )
        console.print(table)

    return buffer.getvalue()


def format_markdown(report: DebtReport, top_n: int) -> str:
    """Format report as Markdown."""
    lines = [
        "# Fossil - Technical Debt Report",
        "",
        f"**Scanned**: `{report.scan_path}`",
        f"**Total Markers**: {report.total_count}",
        f"**Generated**: {report.scan_time.strftime('%Y-%m-%d %H:%M:%S UTC')}",
        "",
    ]

    if report.by_type:
        lines.append("## Summary by Type")
        lines.append("")
        lines.extend(f"- **{marker_type}**: {count}" for marker_type, count in _by_count(report.by_type))
        lines.append("")

    if report.by_author:
        lines.append(f"## Summary by Author (Top {TOP_AUTHORS})")
        lines.append("")
        lines.extend(
            f"- **{author}**: {count}" for author, count in _by_count(report.by_author)[:TOP_AUTHORS]
        )
        lines.append("")

    oldest = report.oldest_markers(top_n)
    if oldest:
        lines.append(f"## Top {len(oldest)} Oldest Markers")
        lines.append("")
        for idx, marker in enumerate(oldest, start=1):
            info = marker.history_info
            lines.append(f"{idx}. **{marker.marker_type}** in `{marker.file_path}:{marker.line_number}`")
            lines.append(f"   - Author: {info.author_name}")
            lines.append(f"   - Age: {info.age_display} ({info.age_days} days)")
            lines.append(f"   - Commit: {info.revision_id}")
            lines.append(f"   - Line: `{marker.line_content.strip()}`")

            if marker.context_before or marker.context_after:
                lines.append("   - Context:")
                lines.append("```")
                lines.extend(marker.context_before)
                lines.append(f"{marker.line_content} <-- MARKER")
                lines.extend(marker.context_after)
                lines.append("```")
            lines.append("")

    return "\n".join(lines) + "\n"


def format_json(report: DebtReport) -> str:
    """Format report as pretty-printed JSON."""
    return report.model_dump_json(indent=2)


def render_report(report: DebtReport, fmt: OutputFormat, top_n: int = 10) -> str:
    """Render a report in the requested format."""
    if fmt == OutputFormat.markdown:
        return format_markdown(report, top_n)
    if fmt == OutputFormat.json:
        return format_json(report)
    return format_terminal(report, top_n)


def generate_report(
    report: DebtReport,
    fmt: OutputFormat,
    output: Optional[Path] = None,
    top_n: int = 10,
    console: Optional[Console] = None,
) -> None:
    """Render a report and write it to ``output`` or print it.

    Args:
        report: Report to render
        fmt: Output format
        output: Destination file; stdout when None
        top_n: Number of oldest markers to list
        console: Rich console used for printing (optional)
    """
    console = console or Console()
    rendered = render_report(report, fmt, top_n)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            f.write(rendered)
        console.print(f"[bold green]✓[/bold green] Report written to {output}")
    else:
        console.print(rendered, markup=False, highlight=False, emoji=False, soft_wrap=True, end="")
