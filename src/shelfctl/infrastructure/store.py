"""CatalogStore — the single storage dependency injected into every service.

The store owns the async engine (and so its connection pool) and the
settings the query strategies read. Operations borrow connections from it
and never hold state between calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shelfctl.infrastructure.database.engine import create_db_engine

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from shelfctl.config.settings import ShelfSettings

logger = logging.getLogger(__name__)


class CatalogStore:
    """Read-only access to a library store.

    Args:
        settings: Resolved settings; ``settings.database`` picks the engine.
        engine: Pre-built engine (tests, embedding applications). When
            omitted, one is created from ``settings.database.url``.
    """

    def __init__(self, settings: ShelfSettings, engine: AsyncEngine | None = None) -> None:
        self._settings = settings
        self._engine = engine or create_db_engine(
            settings.database.url, echo=settings.database.echo
        )

    @property
    def settings(self) -> ShelfSettings:
        return self._settings

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def close(self) -> None:
        """Dispose the engine's connection pool."""
        logger.debug("Disposing catalog store engine")
        await self._engine.dispose()
