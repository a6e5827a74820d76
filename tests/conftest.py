"""Shared pytest fixtures and test helpers for shelfctl tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from click.testing import CliRunner
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncEngine

from shelfctl.config.models import DatabaseConfig
from shelfctl.config.settings import ShelfSettings
from shelfctl.infrastructure.database.engine import init_database
from shelfctl.infrastructure.database.schema import (
    authors,
    book_authors,
    book_narrators,
    book_series,
    books,
    feeds,
    libraries,
    library_items,
    media_genres,
    media_progresses,
    media_tags,
    podcast_episodes,
    podcasts,
    series,
)
from shelfctl.infrastructure.store import CatalogStore

BOOKS = "lib_books"
PODCASTS = "lib_pods"
STAMP = "2024-01-01T00:00:00Z"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'shelf.db'}"


@pytest_asyncio.fixture
async def engine(db_url: str) -> AsyncIterator[AsyncEngine]:
    """Async engine on a temp-file SQLite store with all tables created."""
    eng = await init_database(db_url)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def settings(db_url: str) -> ShelfSettings:
    return ShelfSettings(database=DatabaseConfig(url=db_url))


@pytest.fixture
def store(settings: ShelfSettings, engine: AsyncEngine) -> CatalogStore:
    """Catalog store sharing the test engine."""
    return CatalogStore(settings, engine=engine)


@pytest_asyncio.fixture
async def seed(engine: AsyncEngine) -> CatalogSeeder:
    """Seeder with one book library and one podcast library already created."""
    seeder = CatalogSeeder(engine)
    await seeder.library(BOOKS, "book")
    await seeder.library(PODCASTS, "podcast")
    return seeder


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def media_id(item_id: str) -> str:
    """Media row id used by the seeder for a library item id."""
    return f"m_{item_id}"


class CatalogSeeder:
    """Writes catalog rows through Core inserts.

    Item ids are chosen by the test; the media row of item ``x`` always has
    id ``m_x`` (see :func:`media_id`).
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    async def _insert(self, table: Any, rows: Iterable[dict[str, Any]]) -> None:
        rows = list(rows)
        if not rows:
            return
        async with self.engine.begin() as conn:
            await conn.execute(insert(table), rows)

    async def library(self, library_id: str, media_type: str) -> None:
        await self._insert(
            libraries,
            [{"id": library_id, "name": library_id, "media_type": media_type, "created_at": STAMP}],
        )

    async def series(
        self,
        series_id: str,
        name: str,
        *,
        library_id: str = BOOKS,
        created_at: str = STAMP,
    ) -> None:
        await self._insert(
            series,
            [
                {
                    "id": series_id,
                    "library_id": library_id,
                    "name": name,
                    "created_at": created_at,
                    "updated_at": created_at,
                }
            ],
        )

    async def book(
        self,
        item_id: str,
        title: str,
        *,
        library_id: str = BOOKS,
        added_at: str = STAMP,
        item_size: int | None = None,
        is_missing: bool = False,
        genres: Iterable[str] = (),
        tags: Iterable[str] = (),
        narrators: Iterable[str] = (),
        author_names: Iterable[str] = (),
        in_series: Iterable[tuple[str, str | None]] = (),
        **fields: Any,
    ) -> str:
        """Insert a book item; returns its media id."""
        mid = media_id(item_id)
        await self._insert(books, [{"id": mid, "title": title, **fields}])
        await self._insert(
            library_items,
            [
                {
                    "id": item_id,
                    "library_id": library_id,
                    "media_type": "book",
                    "media_id": mid,
                    "path": f"/audiobooks/{title}",
                    "size": item_size,
                    "is_missing": int(is_missing),
                    "added_at": added_at,
                    "updated_at": added_at,
                }
            ],
        )
        await self._labels(mid, genres, tags)
        await self._insert(book_narrators, [{"book_id": mid, "name": n} for n in narrators])
        for name in author_names:
            author_id = await self._author(name, library_id)
            await self._insert(
                book_authors, [{"book_id": mid, "author_id": author_id, "created_at": STAMP}]
            )
        await self._insert(
            book_series,
            [
                {"book_id": mid, "series_id": sid, "sequence": seq, "created_at": STAMP}
                for sid, seq in in_series
            ],
        )
        return mid

    async def podcast(
        self,
        item_id: str,
        title: str,
        *,
        library_id: str = PODCASTS,
        added_at: str = STAMP,
        episodes: int = 0,
        genres: Iterable[str] = (),
        tags: Iterable[str] = (),
        **fields: Any,
    ) -> list[str]:
        """Insert a podcast item with *episodes* episodes; returns the episode ids."""
        mid = media_id(item_id)
        await self._insert(podcasts, [{"id": mid, "title": title, **fields}])
        await self._insert(
            library_items,
            [
                {
                    "id": item_id,
                    "library_id": library_id,
                    "media_type": "podcast",
                    "media_id": mid,
                    "path": f"/podcasts/{title}",
                    "added_at": added_at,
                    "updated_at": added_at,
                }
            ],
        )
        await self._labels(mid, genres, tags)
        episode_ids = [f"{mid}_ep{n}" for n in range(1, episodes + 1)]
        await self._insert(
            podcast_episodes,
            [
                {"id": eid, "podcast_id": mid, "title": eid, "created_at": STAMP}
                for eid in episode_ids
            ],
        )
        return episode_ids

    async def progress(
        self,
        user_id: str,
        media_item_id: str,
        *,
        media_item_type: str = "book",
        current_time: float = 0.0,
        ebook_progress: float = 0.0,
        finished: bool = False,
        hidden: bool = False,
        updated_at: str = STAMP,
    ) -> None:
        await self._insert(
            media_progresses,
            [
                {
                    "id": f"p_{user_id}_{media_item_id}",
                    "user_id": user_id,
                    "media_item_id": media_item_id,
                    "media_item_type": media_item_type,
                    "current_time": current_time,
                    "ebook_progress": ebook_progress,
                    "is_finished": int(finished),
                    "hide_from_continue_listening": int(hidden),
                    "created_at": updated_at,
                    "updated_at": updated_at,
                }
            ],
        )

    async def feed(self, entity_type: str, entity_id: str, slug: str) -> None:
        await self._insert(
            feeds,
            [
                {
                    "id": f"feed_{slug}",
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "slug": slug,
                    "title": slug.title(),
                    "feed_url": f"https://example.com/feed/{slug}",
                    "created_at": STAMP,
                }
            ],
        )

    async def _labels(self, mid: str, genres: Iterable[str], tags: Iterable[str]) -> None:
        await self._insert(media_genres, [{"media_id": mid, "genre": g} for g in genres])
        await self._insert(media_tags, [{"media_id": mid, "tag": t} for t in tags])

    async def _author(self, name: str, library_id: str) -> str:
        author_id = "au_" + name.lower().replace(" ", "_")
        async with self.engine.connect() as conn:
            found = (await conn.execute(select(authors.c.id).where(authors.c.id == author_id))).first()
        if found is None:
            await self._insert(
                authors,
                [{"id": author_id, "library_id": library_id, "name": name, "created_at": STAMP}],
            )
        return author_id
