"""Tests for Rich Console factory and theme."""

from io import StringIO

from shelfctl.output.console import SHELF_THEME, create_console, get_output, style_for_media


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        assert isinstance(create_console().file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[bold red]hello[/bold red]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_widths(self) -> None:
        assert create_console(width=80).width == 80
        assert create_console().width == 120

    def test_theme_styles_resolve(self) -> None:
        console = create_console()
        console.print("[shelf.series]The Expanse[/shelf.series]")
        assert "The Expanse" in get_output(console)


class TestGetOutput:
    def test_empty_console(self) -> None:
        assert get_output(create_console()) == ""


class TestStyleForMedia:
    def test_known_media(self) -> None:
        assert style_for_media("book") == "shelf.media.book"
        assert style_for_media("podcast") == "shelf.media.podcast"

    def test_unknown_media(self) -> None:
        assert style_for_media("video") == ""

    def test_theme_defines_media_styles(self) -> None:
        assert "shelf.media.book" in SHELF_THEME.styles
        assert "shelf.media.podcast" in SHELF_THEME.styles
