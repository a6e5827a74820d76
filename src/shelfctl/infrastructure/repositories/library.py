"""Library lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from shelfctl.domain.models import LibraryRef
from shelfctl.infrastructure.database.schema import libraries

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


class LibraryRepository:
    """Resolves library ids to :class:`LibraryRef` handles."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def get_library(self, library_id: str) -> LibraryRef | None:
        """Fetch one library by id."""
        stmt = select(libraries.c.id, libraries.c.name, libraries.c.media_type).where(
            libraries.c.id == library_id
        )
        async with self._engine.connect() as conn:
            row = (await conn.execute(stmt)).mappings().first()
        if row is None:
            return None
        return LibraryRef(id=row["id"], name=row["name"], media_type=row["media_type"])
