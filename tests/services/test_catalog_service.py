"""Tests for CatalogService against a seeded catalog."""

from __future__ import annotations

import pytest
from conftest import BOOKS, PODCASTS, CatalogSeeder

from shelfctl.config.models import CatalogConfig, DatabaseConfig
from shelfctl.config.settings import ShelfSettings
from shelfctl.domain.filters import encode_filter_value
from shelfctl.domain.models import LibraryItemsQuery
from shelfctl.domain.types import MediaType
from shelfctl.infrastructure.store import CatalogStore
from shelfctl.services.catalog import CatalogService
from shelfctl.services.telemetry import disable_telemetry, enable_telemetry


async def _seed_books(seed: CatalogSeeder) -> None:
    await seed.series("s1", "The Expanse")
    await seed.book(
        "b1",
        "Leviathan Wakes",
        added_at="2024-01-03T00:00:00Z",
        genres=["Sci-Fi"],
        author_names=["James Corey"],
        in_series=[("s1", "1")],
    )
    await seed.book(
        "b2",
        "Caliban's War",
        added_at="2024-01-02T00:00:00Z",
        genres=["Sci-Fi"],
        in_series=[("s1", "2")],
    )
    await seed.book("b3", "Abaddon's Gate", added_at="2024-01-01T00:00:00Z", genres=["Horror"])


def _query(**kwargs: object) -> LibraryItemsQuery:
    return LibraryItemsQuery(**kwargs)


def _ids(result) -> list[str]:
    return [item["id"] for item in result.data["items"]]


class TestGetLibrary:
    @pytest.mark.asyncio
    async def test_found(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        result = await CatalogService(store).get_library(PODCASTS)
        assert result.ok
        assert result.data == {"id": PODCASTS, "name": PODCASTS, "mediaType": "podcast"}

    @pytest.mark.asyncio
    async def test_missing(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        result = await CatalogService(store).get_library("nope")
        assert not result.ok
        assert result.error.code == "LIBRARY_NOT_FOUND"
        assert result.error.detail == {"library_id": "nope"}


class TestFilteredItems:
    @pytest.mark.asyncio
    async def test_default_sort_is_title(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        await _seed_books(seed)
        result = await CatalogService(store).get_filtered_library_items(BOOKS, None, _query())
        assert result.ok
        assert _ids(result) == ["b3", "b2", "b1"]
        assert result.data["count"] == 3
        assert result.data["sortBy"] == "media.metadata.title"
        assert result.data["mediaType"] == "book"

    @pytest.mark.asyncio
    async def test_configured_default_sort(
        self, db_url: str, engine, seed: CatalogSeeder
    ) -> None:
        await _seed_books(seed)
        settings = ShelfSettings(
            database=DatabaseConfig(url=db_url), catalog=CatalogConfig(default_sort="addedAt")
        )
        service = CatalogService(CatalogStore(settings, engine=engine))
        result = await service.get_filtered_library_items(BOOKS, None, _query(sort_desc=True))
        assert _ids(result) == ["b1", "b2", "b3"]
        assert result.data["sortBy"] == "addedAt"
        assert result.data["sortDesc"] is True

    @pytest.mark.asyncio
    async def test_genre_filter_and_window(
        self, store: CatalogStore, seed: CatalogSeeder
    ) -> None:
        await _seed_books(seed)
        token = f"genres.{encode_filter_value('Sci-Fi')}"
        result = await CatalogService(store).get_filtered_library_items(
            BOOKS, None, _query(filter_by=token, limit=1, offset=1)
        )
        assert result.data["count"] == 2
        assert _ids(result) == ["b1"]
        assert result.data["filterBy"] == token
        assert (result.data["limit"], result.data["offset"]) == (1, 1)

    @pytest.mark.asyncio
    async def test_items_are_projected(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        await _seed_books(seed)
        result = await CatalogService(store).get_filtered_library_items(
            BOOKS, None, _query(sort_by="addedAt", sort_desc=True, limit=1)
        )
        item = result.data["items"][0]
        assert item["libraryId"] == BOOKS
        assert item["media"]["metadata"]["authorName"] == "James Corey"
        assert item["media"]["metadata"]["seriesName"] == "The Expanse #1"

    @pytest.mark.asyncio
    async def test_collapse_series(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        await _seed_books(seed)
        result = await CatalogService(store).get_filtered_library_items(
            BOOKS, None, _query(collapse_series=True)
        )
        assert result.data["count"] == 2
        assert result.data["collapseSeries"] is True
        collapsed = [i for i in result.data["items"] if "collapsedSeries" in i]
        assert len(collapsed) == 1
        assert collapsed[0]["id"] == "b1"
        assert collapsed[0]["collapsedSeries"]["numBooks"] == 2

    @pytest.mark.asyncio
    async def test_include_rss_feed(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        await _seed_books(seed)
        await seed.feed("libraryItem", "b3", "gate")
        result = await CatalogService(store).get_filtered_library_items(
            BOOKS, None, _query(include=["RSSFeed"])
        )
        by_id = {i["id"]: i for i in result.data["items"]}
        assert by_id["b3"]["rssFeed"]["slug"] == "gate"
        assert "rssFeed" not in by_id["b1"] or by_id["b1"]["rssFeed"] is None
        assert result.data["include"] == ["rssfeed"]

    @pytest.mark.asyncio
    async def test_podcast_library(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        await seed.podcast("p1", "Hardcore History", episodes=2)
        result = await CatalogService(store).get_filtered_library_items(
            PODCASTS, None, _query(media_type=MediaType.PODCAST)
        )
        assert _ids(result) == ["p1"]
        assert result.data["items"][0]["mediaType"] == "podcast"


class TestClientErrors:
    @pytest.mark.asyncio
    async def test_bad_token(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        result = await CatalogService(store).get_filtered_library_items(
            BOOKS, None, _query(filter_by="genres.%%%not-base64")
        )
        assert not result.ok
        assert result.error.code == "DECODE_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_sort_field(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        result = await CatalogService(store).get_filtered_library_items(
            BOOKS, None, _query(sort_by="media.metadata.colour")
        )
        assert not result.ok
        assert result.error.code == "INVALID_SORT_FIELD"

    @pytest.mark.asyncio
    async def test_unsupported_podcast_group(
        self, store: CatalogStore, seed: CatalogSeeder
    ) -> None:
        result = await CatalogService(store).get_filtered_library_items(
            PODCASTS,
            None,
            _query(filter_by=f"narrators.{encode_filter_value('x')}", media_type=MediaType.PODCAST),
        )
        assert not result.ok
        assert result.error.code == "UNSUPPORTED_FILTER_GROUP"


class TestTelemetry:
    @pytest.mark.asyncio
    async def test_span_tree_in_meta(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        await _seed_books(seed)
        enable_telemetry()
        try:
            result = await CatalogService(store).get_filtered_library_items(BOOKS, None, _query())
        finally:
            disable_telemetry()
        telemetry = result.meta["telemetry"]
        assert telemetry["name"] == "CatalogService.get_filtered_library_items"
        child = telemetry["children"][0]
        assert child["name"] == "strategy.apply"
        assert child["annotations"] == {"count": 3}

    @pytest.mark.asyncio
    async def test_no_meta_when_disabled(self, store: CatalogStore, seed: CatalogSeeder) -> None:
        result = await CatalogService(store).get_filtered_library_items(BOOKS, None, _query())
        assert not (result.meta or {}).get("telemetry")
