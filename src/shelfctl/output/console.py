"""Rich Console factory and theme for shelfctl output.

Consoles render to a StringIO buffer, preserving the
``format_result() -> str`` contract. In non-TTY environments (tests,
pipes) Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

SHELF_THEME = Theme(
    {
        "shelf.ok": "bold green",
        "shelf.error": "bold red",
        "shelf.warning": "bold yellow",
        "shelf.op": "bold cyan",
        "shelf.key": "dim",
        "shelf.id": "bold blue",
        "shelf.title": "bold",
        "shelf.series": "magenta",
        "shelf.media.book": "green",
        "shelf.media.podcast": "yellow",
    }
)

_MEDIA_STYLES: dict[str, str] = {
    "book": "shelf.media.book",
    "podcast": "shelf.media.podcast",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=SHELF_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_media(media_type: str) -> str:
    """Return the Rich style name for a media kind."""
    return _MEDIA_STYLES.get(media_type, "")
