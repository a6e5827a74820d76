"""Client-input errors raised by the catalog engine.

Every error carries a stable ``code`` that the service layer copies into
:class:`~shelfctl.services.result.ServiceError`. Storage errors are not
wrapped here; they propagate as raised by SQLAlchemy.
"""

from __future__ import annotations

from typing import Any


class ShelfError(Exception):
    """Base class for errors caused by caller input."""

    code = "SHELF_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class DecodeError(ShelfError):
    """A filter value token is not valid base64 or not valid UTF-8."""

    code = "DECODE_ERROR"


class UnsupportedFilterGroupError(ShelfError):
    """The filter group or raw flag does not exist for the media kind."""

    code = "UNSUPPORTED_FILTER_GROUP"


class InvalidSortFieldError(ShelfError):
    """The sort field is not sortable for the media kind."""

    code = "INVALID_SORT_FIELD"
