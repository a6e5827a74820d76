"""Book library strategy — filter groups, progress states, series collapsing.

Progress predicates are per user: with no user id every progress state
matches nothing. The "continue series" shelf query lives here too because
it is built from the same progress and series vocabulary.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, case, desc, func, or_, select

from shelfctl.domain.models import FilterSpec, Pagination
from shelfctl.domain.sequence import sequence_sort_key
from shelfctl.domain.types import FilterGroup, IncludeFlag, MediaType, ProgressState
from shelfctl.infrastructure.database.schema import (
    authors,
    book_authors,
    book_narrators,
    book_series,
    books,
    library_items,
    media_genres,
    media_progresses,
    media_tags,
    series,
)
from shelfctl.infrastructure.repositories.catalog import (
    CatalogFilterStrategy,
    GroupPredicate,
    ItemPage,
    SeriesCollapsing,
    common_missing,
    has_issues,
    has_label,
    has_no_rows,
    has_open_feed,
    is_blank,
    load_labels,
    missing_predicate,
    never,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncConnection
    from sqlalchemy.sql.expression import Select

logger = logging.getLogger(__name__)

NO_SERIES = "no-series"


def _started() -> ColumnElement[bool]:
    return or_(media_progresses.c.current_time > 0, media_progresses.c.ebook_progress > 0)


def progress_predicate(value: str, user_id: str | None) -> ColumnElement[bool]:
    """Match books by the user's derived progress state."""
    if not user_id:
        return never()
    try:
        state = ProgressState(value)
    except ValueError:
        return never()

    p = media_progresses
    mine = and_(p.c.user_id == user_id, p.c.media_item_id == books.c.id)
    unfinished = p.c.is_finished == 0
    visible = p.c.hide_from_continue_listening == 0

    match state:
        case ProgressState.FINISHED:
            clause = p.c.is_finished == 1
        case ProgressState.IN_PROGRESS:
            clause = and_(unfinished, _started())
        case ProgressState.AUDIO_IN_PROGRESS:
            clause = and_(unfinished, visible, p.c.current_time > 0)
        case ProgressState.EBOOK_IN_PROGRESS:
            clause = and_(unfinished, visible, p.c.ebook_progress > 0)
        case ProgressState.NOT_STARTED:
            return ~select(p.c.id).where(mine, or_(p.c.is_finished == 1, _started())).exists()
    return select(p.c.id).where(mine, clause).exists()


def _author_predicate(value: str, _user_id: str | None) -> ColumnElement[bool]:
    matching = (
        select(book_authors.c.book_id)
        .join(authors, authors.c.id == book_authors.c.author_id)
        .where(or_(authors.c.id == value, authors.c.name == value))
    )
    return books.c.id.in_(matching)


def _series_predicate(value: str, _user_id: str | None) -> ColumnElement[bool]:
    if value == NO_SERIES:
        return has_no_rows(book_series.c.book_id, books.c.id)
    matching = (
        select(book_series.c.book_id)
        .join(series, series.c.id == book_series.c.series_id)
        .where(or_(series.c.id == value, series.c.name == value))
    )
    return books.c.id.in_(matching)


def _tracks_predicate(value: str, _user_id: str | None) -> ColumnElement[bool]:
    tracks = func.coalesce(books.c.num_tracks, 0)
    match value:
        case "none":
            return tracks == 0
        case "single":
            return tracks == 1
        case "multiple":
            return tracks > 1
    return never()


def _ebooks_predicate(value: str, _user_id: str | None) -> ColumnElement[bool]:
    match value:
        case "ebook":
            return ~is_blank(books.c.ebook_format)
        case "no-ebook":
            return is_blank(books.c.ebook_format)
    return never()


_MISSING_FIELDS: dict[str, Callable[[], ColumnElement[bool]]] = {
    **common_missing(books),
    "asin": lambda: is_blank(books.c.asin),
    "isbn": lambda: is_blank(books.c.isbn),
    "subtitle": lambda: is_blank(books.c.subtitle),
    "publishedYear": lambda: is_blank(books.c.published_year),
    "publisher": lambda: is_blank(books.c.publisher),
    "authors": lambda: has_no_rows(book_authors.c.book_id, books.c.id),
    "series": lambda: has_no_rows(book_series.c.book_id, books.c.id),
    "narrators": lambda: has_no_rows(book_narrators.c.book_id, books.c.id),
}


class BookFilterStrategy(SeriesCollapsing, CatalogFilterStrategy):
    """Catalog queries for book libraries."""

    media_type = MediaType.BOOK
    media_table = books

    def group_predicates(self) -> dict[FilterGroup, GroupPredicate]:
        return {
            FilterGroup.GENRES: lambda v, _u: has_label(media_genres, "genre", books.c.id, v),
            FilterGroup.TAGS: lambda v, _u: has_label(media_tags, "tag", books.c.id, v),
            FilterGroup.NARRATORS: lambda v, _u: (
                select(book_narrators.c.book_id)
                .where(book_narrators.c.book_id == books.c.id, book_narrators.c.name == v)
                .exists()
            ),
            FilterGroup.PUBLISHERS: lambda v, _u: books.c.publisher == v,
            FilterGroup.LANGUAGES: lambda v, _u: books.c.language == v,
            FilterGroup.AUTHORS: _author_predicate,
            FilterGroup.SERIES: _series_predicate,
            FilterGroup.PROGRESS: progress_predicate,
            FilterGroup.MISSING: lambda v, _u: missing_predicate(_MISSING_FIELDS, v),
            FilterGroup.TRACKS: _tracks_predicate,
            FilterGroup.EBOOKS: _ebooks_predicate,
        }

    def flag_predicates(self) -> dict[str, Callable[[], ColumnElement[bool]]]:
        return {
            "issues": has_issues,
            "feed-open": has_open_feed,
            "explicit": lambda: books.c.explicit == 1,
            "abridged": lambda: books.c.abridged == 1,
        }

    def sort_expressions(self, user_id: str | None) -> dict[str, ColumnElement[Any]]:
        p = media_progresses
        last_progress = (
            select(p.c.updated_at)
            .where(p.c.user_id == (user_id or ""), p.c.media_item_id == books.c.id)
            .scalar_subquery()
        )
        author_name = (
            select(func.min(authors.c.name))
            .join(book_authors, book_authors.c.author_id == authors.c.id)
            .where(book_authors.c.book_id == books.c.id)
            .scalar_subquery()
        )
        return {
            **super().sort_expressions(user_id),
            "progress": last_progress,
            "media.metadata.authorName": author_name.collate("NOCASE"),
            "media.metadata.publishedYear": books.c.published_year,
            "media.metadata.publisher": books.c.publisher.collate("NOCASE"),
            "media.duration": books.c.duration,
        }

    # ------------------------------------------------------------------
    # Series collapsing
    # ------------------------------------------------------------------

    def can_collapse(self, spec: FilterSpec | None) -> bool:
        # Filtering by one series already narrows to that series' books.
        return spec is None or spec.known_group is not FilterGroup.SERIES

    def collapse_select(self) -> Select[Any]:
        first_series = (
            select(func.min(book_series.c.series_id))
            .where(book_series.c.book_id == books.c.id)
            .scalar_subquery()
        )
        return select(
            library_items.c.id,
            books.c.id.label("book_id"),
            first_series.label("series_id"),
        ).select_from(self._from_clause())

    async def collapse_page(
        self,
        conn: AsyncConnection,
        stmt: Select[Any],
        page: Pagination,
    ) -> tuple[list[str], int, dict[str, dict[str, Any]]]:
        """Merge the books of each series into one entry.

        An item belongs to the series with the lowest id among its
        memberships. The series entry sits where its best-ranked member
        sits in the sorted result; its representative is the member with
        the lowest sequence, then the lowest item id.
        """
        rows = (await conn.execute(stmt)).mappings().all()

        entries: list[tuple[str | None, str]] = []
        members: dict[str, list[tuple[str, str]]] = {}
        for row in rows:
            item_id, series_id = str(row["id"]), row["series_id"]
            if series_id is None:
                entries.append((None, item_id))
                continue
            if series_id not in members:
                members[series_id] = []
                entries.append((series_id, item_id))
            members[series_id].append((item_id, str(row["book_id"])))

        window = page.slice(entries)
        series_ids = [sid for sid, _ in window if sid is not None]
        collapsed: dict[str, dict[str, Any]] = {}
        if series_ids:
            seq_stmt = (
                select(
                    book_series.c.series_id,
                    book_series.c.book_id,
                    book_series.c.sequence,
                    series.c.name,
                    series.c.name_ignore_prefix,
                )
                .join(series, series.c.id == book_series.c.series_id)
                .where(book_series.c.series_id.in_(series_ids))
            )
            sequences: dict[tuple[str, str], str | None] = {}
            names: dict[str, tuple[str, str | None]] = {}
            for r in (await conn.execute(seq_stmt)).mappings().all():
                sequences[(r["series_id"], r["book_id"])] = r["sequence"]
                names[r["series_id"]] = (r["name"], r["name_ignore_prefix"])

            for sid in series_ids:
                ordered = sorted(
                    members[sid],
                    key=lambda m, s=sid: (sequence_sort_key(sequences.get((s, m[1]))), m[0]),
                )
                name, name_ignore_prefix = names.get(sid, ("", None))
                collapsed[ordered[0][0]] = {
                    "id": sid,
                    "name": name,
                    "name_ignore_prefix": name_ignore_prefix,
                    "num_books": len(ordered),
                    "library_item_ids": [item_id for item_id, _ in ordered],
                }

        representatives = {c["id"]: item_id for item_id, c in collapsed.items()}
        item_ids = [representatives[sid] if sid else item_id for sid, item_id in window]
        return item_ids, len(entries), collapsed

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    async def load_media(
        self,
        conn: AsyncConnection,
        media_ids: list[str],
        *,
        user_id: str | None,
        include: frozenset[IncludeFlag],
    ) -> dict[str, dict[str, Any]]:
        if not media_ids:
            return {}

        rows = (await conn.execute(select(books).where(books.c.id.in_(media_ids)))).mappings()
        media = {str(r["id"]): dict(r) for r in rows.all()}

        genres, tags = await self.load_common_labels(conn, media_ids)
        narrators = await load_labels(conn, book_narrators, "book_id", "name", media_ids)

        author_stmt = (
            select(book_authors.c.book_id, authors.c.id, authors.c.name)
            .join(authors, authors.c.id == book_authors.c.author_id)
            .where(book_authors.c.book_id.in_(media_ids))
            .order_by(book_authors.c.book_id, book_authors.c.created_at, authors.c.name)
        )
        book_author_rows: dict[str, list[dict[str, Any]]] = {}
        for r in (await conn.execute(author_stmt)).mappings().all():
            book_author_rows.setdefault(r["book_id"], []).append({"id": r["id"], "name": r["name"]})

        series_stmt = (
            select(book_series.c.book_id, series.c.id, series.c.name, book_series.c.sequence)
            .join(series, series.c.id == book_series.c.series_id)
            .where(book_series.c.book_id.in_(media_ids))
            .order_by(book_series.c.book_id, book_series.c.created_at, series.c.name)
        )
        book_series_rows: dict[str, list[dict[str, Any]]] = {}
        for r in (await conn.execute(series_stmt)).mappings().all():
            book_series_rows.setdefault(r["book_id"], []).append(
                {"id": r["id"], "name": r["name"], "sequence": r["sequence"]}
            )

        return {
            media_id: {
                **row,
                "genres": genres.get(media_id, []),
                "tags": tags.get(media_id, []),
                "narrators": narrators.get(media_id, []),
                "authors": book_author_rows.get(media_id, []),
                "series": book_series_rows.get(media_id, []),
            }
            for media_id, row in media.items()
        }

    # ------------------------------------------------------------------
    # Continue series
    # ------------------------------------------------------------------

    async def continue_series(
        self,
        *,
        library_id: str,
        user_id: str | None,
        include: frozenset[IncludeFlag] = frozenset(),
        limit: int = 0,
    ) -> ItemPage:
        """Next unfinished book of every series the user is working through.

        A series qualifies when the user finished at least one of its books
        and has none in progress. Series are ordered by the user's most
        recent progress update in them.
        """
        if not user_id:
            return ItemPage()

        p = media_progresses
        mine = and_(p.c.user_id == user_id, p.c.media_item_id == book_series.c.book_id)
        finished = func.sum(case((p.c.is_finished == 1, 1), else_=0))
        in_progress = func.sum(case((and_(p.c.is_finished == 0, _started()), 1), else_=0))
        series_stmt = (
            select(series.c.id, func.max(p.c.updated_at).label("last_activity"))
            .select_from(
                series.join(book_series, book_series.c.series_id == series.c.id).join(p, mine)
            )
            .where(series.c.library_id == library_id)
            .group_by(series.c.id)
            .having(finished > 0)
            .having(in_progress == 0)
            .order_by(desc("last_activity"), series.c.id)
        )

        async with self._engine.connect() as conn:
            series_ids = [str(s) for s in (await conn.execute(series_stmt)).scalars().all()]
            if not series_ids:
                return ItemPage()

            member_stmt = (
                select(
                    book_series.c.series_id,
                    book_series.c.sequence,
                    series.c.name,
                    library_items.c.id.label("item_id"),
                    func.coalesce(p.c.is_finished, 0).label("is_finished"),
                )
                .select_from(
                    book_series.join(series, series.c.id == book_series.c.series_id)
                    .join(
                        library_items,
                        and_(
                            library_items.c.media_id == book_series.c.book_id,
                            library_items.c.library_id == library_id,
                        ),
                    )
                    .outerjoin(p, mine)
                )
                .where(book_series.c.series_id.in_(series_ids), library_items.c.is_missing == 0)
            )
            by_series: dict[str, list[dict[str, Any]]] = {}
            for r in (await conn.execute(member_stmt)).mappings().all():
                by_series.setdefault(r["series_id"], []).append(dict(r))

            picks: list[tuple[str, dict[str, Any]]] = []
            for sid in series_ids:
                candidates = sorted(
                    (m for m in by_series.get(sid, []) if not m["is_finished"]),
                    key=lambda m: (sequence_sort_key(m["sequence"]), m["item_id"]),
                )
                if candidates:
                    nxt = candidates[0]
                    picks.append(
                        (
                            nxt["item_id"],
                            {"id": sid, "name": nxt["name"], "sequence": nxt["sequence"]},
                        )
                    )

            window = Pagination(limit=limit).slice(picks)
            rows = await self.load_items(
                conn, [item_id for item_id, _ in window], user_id=user_id, include=include
            )

        annotations = dict(window)
        logger.debug("Continue series: %d of %d series for user %s", len(rows), len(picks), user_id)
        return ItemPage(
            rows=[{**row, "series_sequence": annotations[row["id"]]} for row in rows],
            count=len(picks),
        )
