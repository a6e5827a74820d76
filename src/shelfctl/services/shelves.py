"""ShelfService — the home-page shelves of a library.

Each shelf is a fixed query over the catalog strategies:

- in progress: started, unfinished books (audio or ebook), latest first
- recently added: newest items of any media kind
- continue series: next unread book of series the user is working through
- recent series: newest series with their books in reading order

Shelves only exist for the media kinds they make sense for; other kinds
get an empty shelf without touching storage.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from shelfctl.domain.filters import parse_include
from shelfctl.domain.models import FilterSpec, LibraryRef, Pagination, SortSpec
from shelfctl.domain.types import FilterGroup, IncludeFlag, MediaType, ProgressState
from shelfctl.infrastructure.repositories import (
    BookFilterStrategy,
    ItemPage,
    SeriesRepository,
    strategy_for,
)
from shelfctl.services.base import BaseService
from shelfctl.services.contracts import SeriesShelfData, ShelfResultData, dump_validated
from shelfctl.services.enrich import enrich_series
from shelfctl.services.result import ServiceResult
from shelfctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

Include = str | Iterable[str] | None


class ShelfService(BaseService):
    """Builds library shelves for one user."""

    def _limit(self, limit: int | None) -> int:
        return self._store.settings.shelves.default_limit if limit is None else limit

    def _books(self) -> BookFilterStrategy:
        return BookFilterStrategy(self._store.engine, self._store.settings.catalog)

    def _item_shelf(self, op: str, page: ItemPage, *, backfill_size: bool = False) -> ServiceResult:
        data = {
            "count": page.count,
            "items": [self._present_item(row, backfill_size=backfill_size) for row in page.rows],
        }
        return ServiceResult(ok=True, op=op, data=dump_validated(ShelfResultData, data))

    @traced
    async def get_in_progress(
        self,
        library: LibraryRef,
        user_id: str,
        include: Include = None,
        limit: int | None = None,
        *,
        ebook: bool = False,
    ) -> ServiceResult:
        """Books the user has started and not finished, most recently active first.

        Args:
            ebook: Ebook reading progress instead of audio listening progress.
        """
        op = "get_in_progress"
        if library.media_type is not MediaType.BOOK:
            logger.debug("No in-progress shelf for %s library %s", library.media_type, library.id)
            return self._item_shelf(op, ItemPage())

        state = ProgressState.EBOOK_IN_PROGRESS if ebook else ProgressState.AUDIO_IN_PROGRESS
        with trace_span("strategy.apply"):
            page = await self._books().apply(
                library_id=library.id,
                user_id=user_id,
                spec=FilterSpec(group=FilterGroup.PROGRESS.value, value=state.value),
                sort=SortSpec(field="progress", descending=True),
                include=parse_include(include),
                page=Pagination(limit=self._limit(limit)),
            )
        return self._item_shelf(op, page)

    @traced
    async def get_most_recently_added(
        self,
        library: LibraryRef,
        user_id: str | None,
        include: Include = None,
        limit: int | None = None,
    ) -> ServiceResult:
        """Newest items of the library, whatever their media kind."""
        strategy = strategy_for(
            library.media_type, self._store.engine, self._store.settings.catalog
        )
        with trace_span("strategy.apply"):
            page = await strategy.apply(
                library_id=library.id,
                user_id=user_id,
                spec=None,
                sort=SortSpec(field="addedAt", descending=True),
                include=parse_include(include),
                page=Pagination(limit=self._limit(limit)),
            )
        return self._item_shelf("get_most_recently_added", page, backfill_size=True)

    @traced
    async def get_continue_series(
        self,
        library: LibraryRef,
        user_id: str,
        include: Include = None,
        limit: int | None = None,
    ) -> ServiceResult:
        """Next unfinished book of each series the user has been reading."""
        op = "get_continue_series"
        if library.media_type is not MediaType.BOOK:
            return self._item_shelf(op, ItemPage())

        with trace_span("books.continue_series"):
            page = await self._books().continue_series(
                library_id=library.id,
                user_id=user_id,
                include=parse_include(include),
                limit=self._limit(limit),
            )
        return self._item_shelf(op, page)

    @traced
    async def get_recent_series(
        self,
        library: LibraryRef,
        include: Include = None,
        limit: int | None = None,
    ) -> ServiceResult:
        """Newest series of the library, each with its books in sequence order."""
        op = "get_recent_series"
        if library.media_type is not MediaType.BOOK:
            return ServiceResult(
                ok=True,
                op=op,
                data=dump_validated(SeriesShelfData, {"count": 0, "series": []}),
            )

        repo = SeriesRepository(self._store.engine, self._books())
        with trace_span("series.recent"):
            rows, count = await repo.recent_series(
                library.id,
                include_feed=IncludeFlag.RSS_FEED in parse_include(include),
                limit=self._limit(limit),
            )

        entries = []
        for row in rows:
            feed = row.get("rss_feed")
            entries.append(
                {
                    **enrich_series(
                        self._projector.project_series(row),
                        rss_feed=self._projector.project_feed(feed) if feed else None,
                    ),
                    "books": [self._present_item(book) for book in row["books"]],
                }
            )
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(SeriesShelfData, {"count": count, "series": entries}),
        )
