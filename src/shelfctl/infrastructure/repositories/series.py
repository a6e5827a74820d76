"""Read-side repository for series shelves."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, func, select

from shelfctl.domain.sequence import sequence_sort_key
from shelfctl.infrastructure.database.schema import book_series, library_items, series
from shelfctl.infrastructure.repositories.catalog import load_feeds

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from shelfctl.infrastructure.repositories.book_filters import BookFilterStrategy


class SeriesRepository:
    """Encapsulates SQL for series listings.

    Book rows are hydrated through the book strategy so series books and
    library listings share one item shape.
    """

    def __init__(self, engine: AsyncEngine, books: BookFilterStrategy) -> None:
        self._engine = engine
        self._books = books

    async def recent_series(
        self,
        library_id: str,
        *,
        include_feed: bool = False,
        limit: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """Series of a library, newest first, each with books in sequence order.

        Returns ``(rows, count)`` where *count* is the number of series in
        the library. Each row carries ``books`` (hydrated item rows with a
        ``series_sequence`` annotation) and ``rss_feed`` (or None).
        """
        count_stmt = select(func.count(series.c.id)).where(series.c.library_id == library_id)
        stmt = (
            select(series)
            .where(series.c.library_id == library_id)
            .order_by(series.c.created_at.desc(), series.c.id)
        )
        if limit:
            stmt = stmt.limit(limit)

        async with self._engine.connect() as conn:
            count = int((await conn.execute(count_stmt)).scalar_one() or 0)
            series_rows = [dict(r) for r in (await conn.execute(stmt)).mappings().all()]
            series_ids = [str(s["id"]) for s in series_rows]
            if not series_ids:
                return [], count

            member_stmt = (
                select(
                    book_series.c.series_id,
                    book_series.c.sequence,
                    library_items.c.id.label("item_id"),
                )
                .join(
                    library_items,
                    and_(
                        library_items.c.media_id == book_series.c.book_id,
                        library_items.c.library_id == library_id,
                    ),
                )
                .where(book_series.c.series_id.in_(series_ids))
            )
            members: dict[str, list[dict[str, Any]]] = {}
            for r in (await conn.execute(member_stmt)).mappings().all():
                members.setdefault(r["series_id"], []).append(dict(r))
            for books in members.values():
                books.sort(key=lambda m: (sequence_sort_key(m["sequence"]), m["item_id"]))

            item_ids = [m["item_id"] for sid in series_ids for m in members.get(sid, [])]
            items = {
                row["id"]: row for row in await self._books.load_items(conn, item_ids)
            }
            feeds_by_series = await load_feeds(conn, "series", series_ids) if include_feed else {}

        rows: list[dict[str, Any]] = []
        for s in series_rows:
            sid = str(s["id"])
            books = [
                {
                    **items[m["item_id"]],
                    "series_sequence": {"id": sid, "name": s["name"], "sequence": m["sequence"]},
                }
                for m in members.get(sid, [])
                if m["item_id"] in items
            ]
            rows.append({**s, "books": books, "rss_feed": feeds_by_series.get(sid)})
        return rows, count
