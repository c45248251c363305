"""Rich Console factory and theme for gardenctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GARDEN_THEME = Theme(
    {
        "garden.ok": "bold green",
        "garden.error": "bold red",
        "garden.warning": "bold yellow",
        "garden.op": "bold cyan",
        "garden.key": "dim",
        "garden.tree": "bold blue",
        "garden.garden": "magenta",
        "garden.path": "dim",
        "garden.value": "bold",
        "garden.status.ok": "green",
        "garden.status.failed": "red",
        "garden.status.error": "bold red",
        "garden.status.skipped": "yellow",
        "garden.status.interrupted": "bold magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=GARDEN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for a tree run status."""
    return f"garden.status.{status}" if status else ""
