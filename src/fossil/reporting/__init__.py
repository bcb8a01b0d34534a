"""Report rendering."""

from fossil.reporting.reporter import (
    OutputFormat,
    format_json,
    format_markdown,
    format_terminal,
    generate_report,
    render_report,
)

__all__ = [
    "OutputFormat",
    "format_json",
    "format_markdown",
    "format_terminal",
    "generate_report",
    "render_report",
]
