"""Rich Console factory and theme for ravenmd output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

RAVEN_THEME = Theme(
    {
        "raven.ok": "bold green",
        "raven.error": "bold red",
        "raven.warning": "bold yellow",
        "raven.op": "bold cyan",
        "raven.key": "dim",
        "raven.id": "bold blue",
        "raven.path": "dim",
        "raven.heading": "bold",
        "raven.trait": "magenta",
        "raven.ref": "cyan",
        "raven.type.section": "dim",
        "raven.type.typed": "green",
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
        theme=RAVEN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_type(object_type: str) -> str:
    """Return the Rich style name for an object type.

    Implicit ``section`` objects are dimmed; declared types stand out.
    """
    return "raven.type.section" if object_type == "section" else "raven.type.typed"
