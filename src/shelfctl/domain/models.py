"""Request-scoped value models for catalog queries.

All models are frozen: a query is described once and never mutated while
it flows through the parser, the strategy, and the enricher.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from shelfctl.domain.types import FilterGroup, MediaType


class FilterSpec(BaseModel):
    """A classified filter: known group + decoded value, or a raw flag."""

    model_config = {"frozen": True}

    group: str
    value: str | None = None

    @property
    def known_group(self) -> FilterGroup | None:
        """The recognised group, or None when ``group`` is a raw flag."""
        if self.value is None:
            return None
        try:
            return FilterGroup(self.group)
        except ValueError:
            return None


class SortSpec(BaseModel):
    """Sort field and direction."""

    model_config = {"frozen": True}

    field: str
    descending: bool = False


class Pagination(BaseModel):
    """Window over an ordered result. ``limit == 0`` means unbounded."""

    model_config = {"frozen": True}

    limit: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)

    def slice(self, items: list[Any]) -> list[Any]:
        """Apply the window to an already ordered list."""
        end = self.offset + self.limit if self.limit else None
        return items[self.offset : end]


class LibraryRef(BaseModel):
    """Handle to a library: its id and the kind of media it holds."""

    model_config = {"frozen": True}

    id: str
    name: str = ""
    media_type: MediaType


class LibraryItemsQuery(BaseModel):
    """Every option accepted by the filtered library-items listing.

    Attributes:
        filter_by: ``"<group>.<token>"`` or a raw flag name.
        sort_by: Sort field; empty uses the configured default.
        sort_desc: Descending order.
        collapse_series: Merge books of one series into one entry (books only).
        include: Extra payloads (``rssfeed``, ``numepisodesincomplete``).
        media_type: Which strategy answers the query.
        limit: Page size, 0 for all.
        offset: Number of entries to skip.
    """

    model_config = {"frozen": True}

    filter_by: str | None = None
    sort_by: str | None = None
    sort_desc: bool = False
    collapse_series: bool = False
    include: list[str] = Field(default_factory=list)
    media_type: MediaType = MediaType.BOOK
    limit: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)
