"""View-model projection from storage rows to API payloads.

Strategies return rows in storage vocabulary (snake_case columns plus
hydrated associations). A projector turns them into the camelCase
"minified" shapes clients consume. Projection is pure: no I/O, no
mutation of the input row.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from shelfctl.domain.types import MediaType

Row = dict[str, Any]


class Projector(Protocol):
    """Shapes raw rows into API payloads."""

    def project_item(self, row: Row) -> Row: ...

    def project_series(self, row: Row) -> Row: ...

    def project_feed(self, row: Row) -> Row: ...


def _names(entries: list[Row]) -> str:
    return ", ".join(e["name"] for e in entries)


def _series_label(entries: list[Row]) -> str:
    labels = []
    for e in entries:
        seq = e.get("sequence")
        labels.append(f"{e['name']} #{seq}" if seq else e["name"])
    return ", ".join(labels)


def _book_media(media: Row) -> Row:
    authors = media.get("authors", [])
    narrators = media.get("narrators", [])
    series = media.get("series", [])
    return {
        "id": media.get("id"),
        "metadata": {
            "title": media.get("title"),
            "titleIgnorePrefix": media.get("title_ignore_prefix") or media.get("title"),
            "subtitle": media.get("subtitle"),
            "authorName": _names(authors),
            "narratorName": ", ".join(narrators),
            "seriesName": _series_label(series),
            "genres": list(media.get("genres", [])),
            "publishedYear": media.get("published_year"),
            "publisher": media.get("publisher"),
            "description": media.get("description"),
            "isbn": media.get("isbn"),
            "asin": media.get("asin"),
            "language": media.get("language"),
            "explicit": bool(media.get("explicit")),
            "abridged": bool(media.get("abridged")),
        },
        "coverPath": media.get("cover_path"),
        "tags": list(media.get("tags", [])),
        "numTracks": media.get("num_tracks") or 0,
        "duration": media.get("duration") or 0.0,
        "size": media.get("size"),
        "ebookFormat": media.get("ebook_format"),
    }


def _podcast_media(media: Row) -> Row:
    payload: Row = {
        "id": media.get("id"),
        "metadata": {
            "title": media.get("title"),
            "titleIgnorePrefix": media.get("title_ignore_prefix") or media.get("title"),
            "author": media.get("author"),
            "releaseDate": media.get("release_date"),
            "genres": list(media.get("genres", [])),
            "feedUrl": media.get("feed_url"),
            "imageUrl": media.get("image_url"),
            "itunesId": media.get("itunes_id"),
            "description": media.get("description"),
            "language": media.get("language"),
            "explicit": bool(media.get("explicit")),
            "type": media.get("podcast_type"),
        },
        "coverPath": media.get("cover_path"),
        "tags": list(media.get("tags", [])),
        "numEpisodes": media.get("num_episodes", 0),
        "size": media.get("size"),
    }
    return payload


_MEDIA_PROJECTIONS: dict[MediaType, Callable[[Row], Row]] = {
    MediaType.BOOK: _book_media,
    MediaType.PODCAST: _podcast_media,
}


class MinifiedProjector:
    """Default projector producing the minified camelCase item shape."""

    def project_item(self, row: Row) -> Row:
        media_type = MediaType(row["media_type"])
        media = row.get("media") or {}
        item: Row = {
            "id": str(row["id"]),
            "libraryId": str(row["library_id"]),
            "mediaType": media_type.value,
            "path": row.get("path"),
            "addedAt": row.get("added_at"),
            "updatedAt": row.get("updated_at"),
            "isMissing": bool(row.get("is_missing")),
            "isInvalid": bool(row.get("is_invalid")),
            "media": _MEDIA_PROJECTIONS[media_type](media),
        }
        collapsed = row.get("collapsed_series")
        if collapsed:
            item["collapsedSeries"] = {
                "id": collapsed["id"],
                "name": collapsed["name"],
                "nameIgnorePrefix": collapsed.get("name_ignore_prefix") or collapsed["name"],
                "numBooks": collapsed["num_books"],
                "libraryItemIds": list(collapsed["library_item_ids"]),
            }
        if "num_episodes_incomplete" in media:
            item["numEpisodesIncomplete"] = media["num_episodes_incomplete"]
        return item

    def project_series(self, row: Row) -> Row:
        return {
            "id": str(row["id"]),
            "name": row["name"],
            "nameIgnorePrefix": row.get("name_ignore_prefix") or row["name"],
            "description": row.get("description"),
            "libraryId": row.get("library_id"),
            "addedAt": row.get("created_at"),
            "updatedAt": row.get("updated_at"),
        }

    def project_feed(self, row: Row) -> Row:
        return {
            "id": str(row["id"]),
            "entityType": row["entity_type"],
            "entityId": str(row["entity_id"]),
            "slug": row["slug"],
            "feedUrl": row["feed_url"],
            "meta": {
                "title": row.get("title"),
                "description": row.get("description"),
            },
        }
