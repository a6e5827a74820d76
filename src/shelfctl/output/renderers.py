"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from shelfctl.output.console import create_console, get_output, style_for_media

if TYPE_CHECKING:
    from rich.console import Console

    from shelfctl.services.result import ServiceResult

Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: one id per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    entries = result.data.get("items")
    if entries is None:
        entries = result.data.get("series")
    if isinstance(entries, list):
        return "\n".join(str(e["id"]) for e in entries if isinstance(e, dict) and "id" in e)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="shelf.ok")
    op = Text(f"  {result.op}", style="shelf.op")
    console.print(label, op)


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="shelf.key")
    style = "shelf.id" if key == "id" or key.endswith("Id") else ""
    console.print(k, Text(str(value), style=style))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _creator(item: dict[str, Any]) -> str:
    metadata = item.get("media", {}).get("metadata", {})
    return str(metadata.get("authorName") or metadata.get("author") or "")


def _series_cell(item: dict[str, Any]) -> str:
    collapsed = item.get("collapsedSeries")
    if collapsed:
        return f"{collapsed['name']} ({collapsed['numBooks']} books)"
    metadata = item.get("media", {}).get("metadata", {})
    annotated = metadata.get("series")
    if isinstance(annotated, dict):
        seq = annotated.get("sequence")
        return f"{annotated['name']} #{seq}" if seq else str(annotated["name"])
    return str(metadata.get("seriesName") or "")


def _item_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for a list of projected library items."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="shelf.id", no_wrap=True)
    table.add_column("Title", style="shelf.title")
    table.add_column("Author")
    table.add_column("Series", style="shelf.series")
    table.add_column("Media")
    if verbose:
        table.add_column("Added", style="dim")

    for item in items:
        media_type = str(item.get("mediaType", ""))
        row: list[str | Text] = [
            str(item.get("id", "")),
            str(item.get("media", {}).get("metadata", {}).get("title", "")),
            _creator(item),
            _series_cell(item),
            Text(media_type, style=style_for_media(media_type)),
        ]
        if verbose:
            row.append(str(item.get("addedAt", "")))
        table.add_row(*row)

    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="shelf.error")
    op = Text(f"  {result.op}", style="shelf.op")
    console.print(label, op, Text(": "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Catalog renderers ─────────────────────────────────────────────────


def _render_item_shelf(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render item listings and item shelves as a table with a count footer."""
    items = result.data.get("items", [])
    if items:
        console.print(_item_table(items, verbose=verbose))
    count = result.data.get("count", len(items))
    console.print(f"\n{len(items)} of {count} items")
    if verbose:
        _render_meta(console, result)


def _render_series_shelf(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render each series as a heading followed by its books."""
    series = result.data.get("series", [])
    for entry in series:
        heading = Text(f"{entry['name']}", style="shelf.title")
        heading.append(f"  {entry['id']}", style="shelf.id")
        if entry.get("rssFeed"):
            heading.append("  [feed open]", style="shelf.ok")
        console.print(heading)
        books = entry.get("books", [])
        if books:
            console.print(_item_table(books, verbose=verbose))
        else:
            console.print(Text("  (no books)", style="dim"))
        console.print()
    console.print(f"{len(series)} of {result.data.get('count', len(series))} series")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "get_filtered_library_items": _render_item_shelf,
    "get_in_progress": _render_item_shelf,
    "get_most_recently_added": _render_item_shelf,
    "get_continue_series": _render_item_shelf,
    "get_recent_series": _render_series_shelf,
}
