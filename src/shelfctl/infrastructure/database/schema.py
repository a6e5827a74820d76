"""SQLAlchemy Core table descriptions of the library store's read model.

shelfctl does not own this schema: the media server writes it. These
tables describe the columns the catalog engine reads, so queries can be
built with SQLAlchemy Core. :func:`init_database` can still create them
for local stores and tests.

Multi-valued media fields (genres, tags, narrators) live in association
tables keyed by media id, the same shape for books and podcasts.
"""

from __future__ import annotations

from sqlalchemy import (
    REAL,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

libraries = Table(
    "libraries",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("media_type", Text, nullable=False),  # book | podcast
    Column("created_at", Text, nullable=False),
)

library_items = Table(
    "library_items",
    metadata,
    Column("id", Text, primary_key=True),
    Column("library_id", Text, ForeignKey("libraries.id"), nullable=False),
    Column("media_type", Text, nullable=False),
    Column("media_id", Text, nullable=False),
    Column("path", Text, nullable=False),
    Column("size", Integer),
    Column("is_missing", Integer, default=0, server_default="0"),
    Column("is_invalid", Integer, default=0, server_default="0"),
    Column("added_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

books = Table(
    "books",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("title_ignore_prefix", Text),
    Column("subtitle", Text),
    Column("published_year", Text),
    Column("publisher", Text),
    Column("language", Text),
    Column("isbn", Text),
    Column("asin", Text),
    Column("description", Text),
    Column("explicit", Integer, default=0, server_default="0"),
    Column("abridged", Integer, default=0, server_default="0"),
    Column("duration", REAL, default=0.0, server_default="0.0"),
    Column("size", Integer),
    Column("num_tracks", Integer, default=0, server_default="0"),
    Column("ebook_format", Text),  # epub | pdf | ... ; NULL when no ebook
    Column("cover_path", Text),
)

podcasts = Table(
    "podcasts",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("title_ignore_prefix", Text),
    Column("author", Text),
    Column("release_date", Text),
    Column("feed_url", Text),
    Column("image_url", Text),
    Column("itunes_id", Text),
    Column("language", Text),
    Column("description", Text),
    Column("explicit", Integer, default=0, server_default="0"),
    Column("podcast_type", Text),  # episodic | serial
    Column("size", Integer),
    Column("cover_path", Text),
)

podcast_episodes = Table(
    "podcast_episodes",
    metadata,
    Column("id", Text, primary_key=True),
    Column("podcast_id", Text, ForeignKey("podcasts.id"), nullable=False),
    Column("title", Text, nullable=False),
    Column("season", Text),
    Column("episode", Text),
    Column("duration", REAL, default=0.0, server_default="0.0"),
    Column("published_at", Text),
    Column("created_at", Text, nullable=False),
)

media_genres = Table(
    "media_genres",
    metadata,
    Column("media_id", Text, nullable=False),
    Column("genre", Text, nullable=False),
    UniqueConstraint("media_id", "genre"),
)

media_tags = Table(
    "media_tags",
    metadata,
    Column("media_id", Text, nullable=False),
    Column("tag", Text, nullable=False),
    UniqueConstraint("media_id", "tag"),
)

book_narrators = Table(
    "book_narrators",
    metadata,
    Column("book_id", Text, ForeignKey("books.id"), nullable=False),
    Column("name", Text, nullable=False),
    UniqueConstraint("book_id", "name"),
)

authors = Table(
    "authors",
    metadata,
    Column("id", Text, primary_key=True),
    Column("library_id", Text, ForeignKey("libraries.id"), nullable=False),
    Column("name", Text, nullable=False),
    Column("created_at", Text, nullable=False),
)

book_authors = Table(
    "book_authors",
    metadata,
    Column("book_id", Text, ForeignKey("books.id"), nullable=False),
    Column("author_id", Text, ForeignKey("authors.id"), nullable=False),
    Column("created_at", Text, nullable=False),
    UniqueConstraint("book_id", "author_id"),
)

series = Table(
    "series",
    metadata,
    Column("id", Text, primary_key=True),
    Column("library_id", Text, ForeignKey("libraries.id"), nullable=False),
    Column("name", Text, nullable=False),
    Column("name_ignore_prefix", Text),
    Column("description", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

book_series = Table(
    "book_series",
    metadata,
    Column("book_id", Text, ForeignKey("books.id"), nullable=False),
    Column("series_id", Text, ForeignKey("series.id"), nullable=False),
    Column("sequence", Text),
    Column("created_at", Text, nullable=False),
    UniqueConstraint("book_id", "series_id"),
)

media_progresses = Table(
    "media_progresses",
    metadata,
    Column("id", Text, primary_key=True),
    Column("user_id", Text, nullable=False),
    Column("media_item_id", Text, nullable=False),  # book id or podcast episode id
    Column("media_item_type", Text, nullable=False),  # book | podcastEpisode
    Column("duration", REAL, default=0.0, server_default="0.0"),
    Column("current_time", REAL, default=0.0, server_default="0.0"),
    Column("is_finished", Integer, default=0, server_default="0"),
    Column("hide_from_continue_listening", Integer, default=0, server_default="0"),
    Column("ebook_location", Text),
    Column("ebook_progress", REAL, default=0.0, server_default="0.0"),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    Column("finished_at", Text),
    UniqueConstraint("user_id", "media_item_id"),
)

feeds = Table(
    "feeds",
    metadata,
    Column("id", Text, primary_key=True),
    Column("user_id", Text),
    Column("entity_type", Text, nullable=False),  # libraryItem | series | collection
    Column("entity_id", Text, nullable=False),
    Column("slug", Text, nullable=False),
    Column("title", Text),
    Column("description", Text),
    Column("feed_url", Text, nullable=False),
    Column("created_at", Text, nullable=False),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_library_items_library", library_items.c.library_id)
Index("ix_library_items_media", library_items.c.media_id)
Index("ix_media_genres_genre", media_genres.c.genre)
Index("ix_media_tags_tag", media_tags.c.tag)
Index("ix_book_series_series", book_series.c.series_id)
Index("ix_media_progresses_user", media_progresses.c.user_id, media_progresses.c.media_item_id)
Index("ix_feeds_entity", feeds.c.entity_type, feeds.c.entity_id)
