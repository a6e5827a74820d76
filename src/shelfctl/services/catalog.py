"""CatalogService — library lookup and the filtered library-items listing.

Read-only: every query borrows a connection from the store's engine.
Client-input errors (bad filter tokens, unsupported groups, unknown sort
fields) come back as failed results; storage errors propagate.
"""

from __future__ import annotations

from typing import Any

from shelfctl.domain.errors import ShelfError
from shelfctl.domain.filters import parse_filter, parse_include
from shelfctl.domain.models import LibraryItemsQuery, Pagination, SortSpec
from shelfctl.infrastructure.repositories import LibraryRepository, strategy_for
from shelfctl.services.base import BaseService
from shelfctl.services.contracts import LibraryData, LibraryItemsResultData, dump_validated
from shelfctl.services.result import ServiceError, ServiceResult
from shelfctl.services.telemetry import trace_span, traced


class CatalogService(BaseService):
    """Resolves libraries and answers filtered item listings."""

    @traced
    async def get_library(self, library_id: str) -> ServiceResult:
        """Resolve a library id to its name and media kind."""
        library = await LibraryRepository(self._store.engine).get_library(library_id)
        if library is None:
            return ServiceResult(
                ok=False,
                op="get_library",
                error=ServiceError(
                    code="LIBRARY_NOT_FOUND",
                    message=f"No library with id '{library_id}'",
                    detail={"library_id": library_id},
                ),
            )
        data = {"id": library.id, "name": library.name, "mediaType": library.media_type.value}
        return ServiceResult(
            ok=True,
            op="get_library",
            data=dump_validated(LibraryData, data),
        )

    @traced
    async def get_filtered_library_items(
        self,
        library_id: str,
        user_id: str | None,
        query: LibraryItemsQuery,
    ) -> ServiceResult:
        """One page of a library's items, filtered, sorted, and optionally collapsed.

        Args:
            library_id: Library to list.
            user_id: Requesting user; drives progress filters and sorts.
            query: Filter token, sort, collapse flag, include list, and window.

        The returned ``count`` is the number of matches before pagination
        (after collapsing when ``collapse_series`` is set).
        """
        op = "get_filtered_library_items"
        catalog = self._store.settings.catalog
        sort = SortSpec(field=query.sort_by or catalog.default_sort, descending=query.sort_desc)
        include = parse_include(query.include)

        try:
            spec = parse_filter(query.filter_by)
            strategy = strategy_for(query.media_type, self._store.engine, catalog)
            with trace_span("strategy.apply") as span:
                page = await strategy.apply(
                    library_id=library_id,
                    user_id=user_id,
                    spec=spec,
                    sort=sort,
                    collapse_series=query.collapse_series,
                    include=include,
                    page=Pagination(limit=query.limit, offset=query.offset),
                )
                if span:
                    span.annotate("count", page.count)
        except ShelfError as exc:
            return self._client_error(op, exc)

        data: dict[str, Any] = {
            "count": page.count,
            "items": [self._present_item(row) for row in page.rows],
            "limit": query.limit,
            "offset": query.offset,
            "sortBy": sort.field,
            "sortDesc": sort.descending,
            "filterBy": query.filter_by,
            "mediaType": query.media_type.value,
            "collapseSeries": query.collapse_series,
            "include": sorted(flag.value for flag in include),
        }
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(LibraryItemsResultData, data),
        )
