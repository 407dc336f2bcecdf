"""Rich Console factory and theme for zonectl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ZONE_THEME = Theme(
    {
        "zone.ok": "bold green",
        "zone.error": "bold red",
        "zone.warning": "bold yellow",
        "zone.op": "bold cyan",
        "zone.key": "dim",
        "zone.name": "bold blue",
        "zone.registry": "magenta",
        "zone.kind.update": "green",
        "zone.kind.delete": "yellow",
    }
)

_KIND_STYLES: dict[str, str] = {
    "update": "zone.kind.update",
    "delete": "zone.kind.delete",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=ZONE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for an operation kind."""
    return _KIND_STYLES.get(kind, "")
