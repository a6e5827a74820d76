"""Read-side repositories and the media-type strategy dispatch."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from shelfctl.domain.types import MediaType
from shelfctl.infrastructure.repositories.book_filters import BookFilterStrategy
from shelfctl.infrastructure.repositories.catalog import (
    CatalogFilterStrategy,
    ItemPage,
    SeriesCollapsing,
)
from shelfctl.infrastructure.repositories.library import LibraryRepository
from shelfctl.infrastructure.repositories.podcast_filters import PodcastFilterStrategy
from shelfctl.infrastructure.repositories.series import SeriesRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from shelfctl.config.models import CatalogConfig


def strategy_for(
    media_type: MediaType,
    engine: AsyncEngine,
    config: CatalogConfig | None = None,
) -> CatalogFilterStrategy:
    """Select the query strategy for a media kind."""
    match media_type:
        case MediaType.BOOK:
            return BookFilterStrategy(engine, config)
        case MediaType.PODCAST:
            return PodcastFilterStrategy(engine, config)
        case _:
            assert_never(media_type)


__all__ = [
    "BookFilterStrategy",
    "CatalogFilterStrategy",
    "ItemPage",
    "LibraryRepository",
    "PodcastFilterStrategy",
    "SeriesCollapsing",
    "SeriesRepository",
    "strategy_for",
]
