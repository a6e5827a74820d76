"""Typed payload contracts for service boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``items`` vs ``results`` or
a dropped ``count``) fail fast in tests and during development.

Item and series rows are open models: the projector decides the full
camelCase shape, the contract only pins the keys every consumer relies on.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class CatalogItem(BaseModel):
    """One projected library item."""

    model_config = ConfigDict(extra="allow")

    id: str
    libraryId: str  # noqa: N815
    mediaType: str  # noqa: N815
    media: dict[str, Any]


class LibraryItemsResultData(BaseModel):
    """Payload contract for ``CatalogService.get_filtered_library_items``."""

    model_config = ConfigDict(extra="allow")

    count: int
    items: list[CatalogItem]


class ShelfResultData(BaseModel):
    """Payload contract for item shelves (in progress, recently added, continue)."""

    count: int
    items: list[CatalogItem]


class SeriesEntry(BaseModel):
    """One projected series with its books."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    books: list[CatalogItem]


class SeriesShelfData(BaseModel):
    """Payload contract for ``ShelfService.get_recent_series``."""

    count: int
    series: list[SeriesEntry]


class LibraryData(BaseModel):
    """Payload contract for ``CatalogService.get_library``."""

    id: str
    name: str
    mediaType: str  # noqa: N815
