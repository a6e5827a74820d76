"""Result envelope returned by every catalog and shelf operation.

``CatalogService`` and ``ShelfService`` never raise for bad caller input:
an unknown filter group, an unsortable field, an undecodable filter token
or a missing library comes back as ``ok=False`` with a :class:`ServiceError`
carrying the error's stable code. Database failures still raise. The CLI
renders either shape through ``AppContext.emit``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from shelfctl.domain.errors import ShelfError


class ServiceError(BaseModel):
    """Why a catalog operation rejected its input (``code``, ``message``, ``detail``)."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_shelf_error(cls, exc: ShelfError) -> ServiceError:
        """Copy a raised client-input error into its wire form."""
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Outcome of one catalog operation.

    ``data`` holds the payload validated by the matching model in
    ``services/contracts.py``: ``{items, count}`` for item listings and
    shelves, ``{series, count}`` for the series shelf. ``meta`` carries the
    telemetry span tree when verbose tracing is on.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
