"""BaseService — abstract foundation for all shelfctl services.

Every service receives a :class:`CatalogStore` at construction time, plus
an optional view-model projector. Services are stateless between calls:
each operation borrows connections from the store's engine.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from shelfctl.services.enrich import enrich_item
from shelfctl.services.projection import MinifiedProjector, Projector
from shelfctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from shelfctl.domain.errors import ShelfError
    from shelfctl.infrastructure.store import CatalogStore

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Subclasses implement catalog operations using the store for data
    access and the projector for API shapes.

    Usage::

        class ShelfService(BaseService):
            async def get_in_progress(self, library, user_id, ...) -> ServiceResult:
                page = await BookFilterStrategy(self._store.engine).apply(...)
                ...
    """

    def __init__(self, store: CatalogStore, projector: Projector | None = None) -> None:
        self._store = store
        self._projector = projector or MinifiedProjector()

    def _present_item(self, row: dict[str, Any], *, backfill_size: bool = False) -> dict[str, Any]:
        """Project a raw item row and apply enrichments carried by the row."""
        feed = row.get("rss_feed")
        return enrich_item(
            self._projector.project_item(row),
            rss_feed=self._projector.project_feed(feed) if feed else None,
            size=row.get("size") if backfill_size else None,
            series_sequence=row.get("series_sequence"),
        )

    @staticmethod
    def _client_error(op: str, exc: ShelfError) -> ServiceResult:
        """Convert a client-input error into a failed result."""
        logger.debug("%s rejected: %s (%s)", op, exc.message, exc.code)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError.from_shelf_error(exc),
        )
