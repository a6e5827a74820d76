"""Async database engine and read-model tables via SQLAlchemy Core."""

from shelfctl.infrastructure.database.engine import create_db_engine, init_database
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
    metadata,
    podcast_episodes,
    podcasts,
    series,
)

__all__ = [
    "authors",
    "book_authors",
    "book_narrators",
    "book_series",
    "books",
    "create_db_engine",
    "feeds",
    "init_database",
    "libraries",
    "library_items",
    "media_genres",
    "media_progresses",
    "media_tags",
    "metadata",
    "podcast_episodes",
    "podcasts",
    "series",
]
