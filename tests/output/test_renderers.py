"""Tests for operation-specific Rich renderers."""

from shelfctl.output.renderers import render_quiet, render_result
from shelfctl.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, meta: dict | None = None, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data), meta=meta)


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


def _book(item_id: str, title: str, **metadata: object) -> dict:
    return {
        "id": item_id,
        "mediaType": "book",
        "addedAt": "2024-01-01T00:00:00Z",
        "media": {"metadata": {"title": title, **metadata}},
    }


# ── Errors ───────────────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("get_library", "LIBRARY_NOT_FOUND", "No library 'x'"))
        assert "ERROR" in output
        assert "get_library" in output
        assert "No library 'x'" in output

    def test_verbose_shows_detail(self) -> None:
        result = _err("get_filtered_library_items", "INVALID_SORT_FIELD", "Bad", field="colour")
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "colour" in output
        assert "detail" not in render_result(result)

    def test_no_error_object(self) -> None:
        assert "Unknown error" in render_result(ServiceResult(ok=False, op="get_library"))


# ── Item shelves ─────────────────────────────────────────────────────


class TestItemShelfRenderer:
    def test_table_and_count(self) -> None:
        items = [
            _book("li_1", "Leviathan Wakes", authorName="James Corey", seriesName="The Expanse #1"),
            _book("li_2", "Dune", authorName="Frank Herbert"),
        ]
        output = render_result(_ok("get_filtered_library_items", count=7, items=items))
        for text in ("li_1", "Leviathan Wakes", "James Corey", "The Expanse #1", "Dune"):
            assert text in output
        assert "2 of 7 items" in output
        assert "Added" not in output

    def test_verbose_adds_added_column(self) -> None:
        output = render_result(
            _ok("get_most_recently_added", count=1, items=[_book("li_1", "Dune")]), verbose=True
        )
        assert "Added" in output
        assert "2024-01-01" in output

    def test_series_position_and_collapsed(self) -> None:
        continued = _book("li_3", "Caliban's War", series={"id": "s1", "name": "Expanse", "sequence": "2"})
        collapsed = {**_book("li_1", "Leviathan"), "collapsedSeries": {"name": "Expanse", "numBooks": 9}}
        output = render_result(_ok("get_continue_series", count=2, items=[continued, collapsed]))
        assert "Expanse #2" in output
        assert "Expanse (9 books)" in output

    def test_podcast_author(self) -> None:
        pod = {
            "id": "li_9",
            "mediaType": "podcast",
            "media": {"metadata": {"title": "History", "author": "Dan Carlin"}},
        }
        output = render_result(_ok("get_in_progress", count=1, items=[pod]))
        assert "Dan Carlin" in output
        assert "podcast" in output

    def test_empty_shelf(self) -> None:
        assert "0 of 0 items" in render_result(_ok("get_in_progress", count=0, items=[]))


# ── Series shelf ─────────────────────────────────────────────────────


class TestSeriesShelfRenderer:
    def test_series_with_and_without_books(self) -> None:
        series = [
            {"id": "s1", "name": "Alpha", "rssFeed": {"id": "f"}, "books": [_book("li_1", "One")]},
            {"id": "s2", "name": "Beta", "books": []},
        ]
        output = render_result(_ok("get_recent_series", count=5, series=series))
        assert "Alpha" in output
        assert "[feed open]" in output
        assert "One" in output
        assert "(no books)" in output
        assert "2 of 5 series" in output


# ── Generic + telemetry ──────────────────────────────────────────────


class TestGenericRenderer:
    def test_key_values(self) -> None:
        output = render_result(_ok("encode_filter", group="genres", value="Sci-Fi"))
        assert "OK" in output
        assert "encode_filter" in output
        assert "group: genres" in output

    def test_nested_values_as_json(self) -> None:
        output = render_result(_ok("decode_filter", spec={"group": "tags"}))
        assert '{"group":"tags"}' in output


class TestTelemetryTree:
    META = {
        "telemetry": {
            "name": "CatalogService.get_filtered_library_items",
            "duration_ms": 3.42,
            "children": [
                {"name": "strategy.apply", "duration_ms": 2.85, "annotations": {"count": 12}},
            ],
        }
    }

    def test_rendered_when_verbose(self) -> None:
        result = _ok("get_filtered_library_items", meta=self.META, count=0, items=[])
        output = render_result(result, verbose=True)
        assert "3.42ms" in output
        assert "strategy.apply" in output
        assert "count=12" in output

    def test_hidden_otherwise(self) -> None:
        result = _ok("get_filtered_library_items", meta=self.META, count=0, items=[])
        assert "strategy.apply" not in render_result(result)


# ── Quiet mode ───────────────────────────────────────────────────────


class TestQuiet:
    def test_item_ids(self) -> None:
        items = [_book("li_1", "A"), _book("li_2", "B")]
        assert render_quiet(_ok("get_in_progress", count=2, items=items)) == "li_1\nli_2"

    def test_series_ids(self) -> None:
        series = [{"id": "s1", "name": "A", "books": []}]
        assert render_quiet(_ok("get_recent_series", count=1, series=series)) == "s1"

    def test_other_ops(self) -> None:
        assert render_quiet(_ok("encode_filter", filter="genres.x")) == "OK: encode_filter"

    def test_error(self) -> None:
        result = _err("get_library", "LIBRARY_NOT_FOUND", "missing")
        assert render_quiet(result) == "ERROR: get_library: missing"
