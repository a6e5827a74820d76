"""Read-side catalog query strategy shared by the book and podcast variants.

A strategy turns a (filter, sort, page) triple into one page of raw item
rows plus the total match count. Queries run in two phases so pagination
stays cheap and deterministic:

1. **Select ids**: ``library_items`` joined with the media table, filtered
   by the group predicate, ordered by the sort expression and finally by
   item id, then windowed by limit/offset.
2. **Hydrate**: load item, media, and association rows for exactly the
   ids of the page and assemble them in page order.

Rows are plain dicts in storage vocabulary (snake_case). Shaping them for
API consumers is the projector's job in the service layer.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import false, func, or_, select

from shelfctl.config.models import CatalogConfig
from shelfctl.domain.errors import InvalidSortFieldError, UnsupportedFilterGroupError
from shelfctl.domain.models import FilterSpec, Pagination, SortSpec
from shelfctl.domain.types import FilterGroup, IncludeFlag, MediaType
from shelfctl.infrastructure.database.schema import (
    feeds,
    library_items,
    media_genres,
    media_tags,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Table
    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
    from sqlalchemy.sql.expression import FromClause, Select

logger = logging.getLogger(__name__)

GroupPredicate = Callable[[str, str | None], "ColumnElement[bool]"]


@dataclass(frozen=True)
class ItemPage:
    """One page of hydrated item rows and the pre-pagination match count."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    count: int = 0


# ---------------------------------------------------------------------------
# Predicate helpers shared by both media kinds
# ---------------------------------------------------------------------------


def is_blank(column: ColumnElement[Any]) -> ColumnElement[bool]:
    """NULL or empty-string check."""
    return or_(column.is_(None), column == "")


def has_label(
    table: Table,
    value_column: str,
    media_id: ColumnElement[Any],
    value: str,
) -> ColumnElement[bool]:
    """Media carries *value* in a multi-valued association table."""
    return (
        select(table.c.media_id)
        .where(table.c.media_id == media_id, table.c[value_column] == value)
        .exists()
    )


def has_no_rows(key: ColumnElement[Any], media_id: ColumnElement[Any]) -> ColumnElement[bool]:
    """No association row points at the media."""
    return ~select(key).where(key == media_id).exists()


def has_open_feed() -> ColumnElement[bool]:
    """An RSS feed is open for the library item."""
    return (
        select(feeds.c.id)
        .where(feeds.c.entity_type == "libraryItem", feeds.c.entity_id == library_items.c.id)
        .exists()
    )


def has_issues() -> ColumnElement[bool]:
    """Item is missing on disk or failed to scan."""
    return or_(library_items.c.is_missing == 1, library_items.c.is_invalid == 1)


async def load_labels(
    conn: AsyncConnection,
    table: Table,
    key_column: str,
    value_column: str,
    media_ids: list[str],
) -> dict[str, list[str]]:
    """Fetch multi-valued labels (genres, tags, narrators) keyed by media id."""
    if not media_ids:
        return {}
    key = table.c[key_column]
    value = table.c[value_column]
    stmt = select(key, value).where(key.in_(media_ids)).order_by(key, value)
    result = await conn.execute(stmt)
    labels: dict[str, list[str]] = {}
    for media_id, label in result.all():
        labels.setdefault(str(media_id), []).append(str(label))
    return labels


async def load_feeds(
    conn: AsyncConnection,
    entity_type: str,
    entity_ids: list[str],
) -> dict[str, dict[str, Any]]:
    """Fetch the oldest open feed per entity."""
    if not entity_ids:
        return {}
    stmt = (
        select(feeds)
        .where(feeds.c.entity_type == entity_type, feeds.c.entity_id.in_(entity_ids))
        .order_by(feeds.c.created_at, feeds.c.id)
    )
    rows = (await conn.execute(stmt)).mappings().all()
    found: dict[str, dict[str, Any]] = {}
    for row in rows:
        found.setdefault(str(row["entity_id"]), dict(row))
    return found


# ---------------------------------------------------------------------------
# Series collapsing
# ---------------------------------------------------------------------------


class SeriesCollapsing(ABC):
    """Mixin for media kinds whose pages can fold series into one entry.

    ``CatalogFilterStrategy.apply`` only collapses when the strategy is a
    ``SeriesCollapsing`` and :meth:`can_collapse` accepts the filter.
    """

    @abstractmethod
    def can_collapse(self, spec: FilterSpec | None) -> bool:
        """Whether series collapsing applies to this query."""

    @abstractmethod
    def collapse_select(self) -> Select[Any]:
        """Id-phase select used in place of the plain id select."""

    @abstractmethod
    async def collapse_page(
        self,
        conn: AsyncConnection,
        stmt: Select[Any],
        page: Pagination,
    ) -> tuple[list[str], int, dict[str, dict[str, Any]]]:
        """Collapse ordered ids into series entries: ``(ids, count, collapsed)``."""


# ---------------------------------------------------------------------------
# Strategy base
# ---------------------------------------------------------------------------


class CatalogFilterStrategy(ABC):
    """Filter + sort + paginate library items of one media kind.

    Subclasses declare their media table and vocabularies; the base class
    owns dispatch, ordering, pagination, and hydration.
    """

    media_type: ClassVar[MediaType]
    media_table: ClassVar[Table]
    #: Known groups that are silently skipped for this media kind.
    ignored_groups: ClassVar[frozenset[FilterGroup]] = frozenset()

    def __init__(self, engine: AsyncEngine, config: CatalogConfig | None = None) -> None:
        self._engine = engine
        self._config = config or CatalogConfig()

    # ------------------------------------------------------------------
    # Vocabulary hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def group_predicates(self) -> dict[FilterGroup, GroupPredicate]:
        """Builders for supported groups: ``(value, user_id) -> predicate``."""

    @abstractmethod
    def flag_predicates(self) -> dict[str, Callable[[], ColumnElement[bool]]]:
        """Builders for raw (ungrouped) boolean flags."""

    def sort_expressions(self, user_id: str | None) -> dict[str, ColumnElement[Any]]:
        """Sortable fields common to every media kind."""
        media = self.media_table
        title = media.c.title
        if self._config.sorting_ignore_prefix:
            title = func.coalesce(media.c.title_ignore_prefix, media.c.title)
        return {
            "addedAt": library_items.c.added_at,
            "updatedAt": library_items.c.updated_at,
            "size": library_items.c.size,
            "media.metadata.title": title.collate("NOCASE"),
        }

    @abstractmethod
    async def load_media(
        self,
        conn: AsyncConnection,
        media_ids: list[str],
        *,
        user_id: str | None,
        include: frozenset[IncludeFlag],
    ) -> dict[str, dict[str, Any]]:
        """Load media payloads (with associations) keyed by media id."""

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------

    def _from_clause(self) -> FromClause:
        return library_items.join(
            self.media_table, self.media_table.c.id == library_items.c.media_id
        )

    def _conditions(
        self,
        library_id: str,
        spec: FilterSpec | None,
        user_id: str | None,
    ) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = [
            library_items.c.library_id == library_id,
            library_items.c.media_type == self.media_type.value,
        ]
        predicate = self._filter_predicate(spec, user_id)
        if predicate is not None:
            conditions.append(predicate)
        return conditions

    def _filter_predicate(
        self,
        spec: FilterSpec | None,
        user_id: str | None,
    ) -> ColumnElement[bool] | None:
        if spec is None:
            return None

        group = spec.known_group
        if group is None:
            flag = self.flag_predicates().get(spec.group)
            if flag is None:
                raise UnsupportedFilterGroupError(
                    f"Unknown filter '{spec.group}' for {self.media_type} libraries",
                    group=spec.group,
                    media_type=self.media_type.value,
                )
            return flag()

        if group in self.ignored_groups:
            logger.debug("Ignoring filter group %s for %s libraries", group, self.media_type)
            return None

        builder = self.group_predicates().get(group)
        if builder is None:
            raise UnsupportedFilterGroupError(
                f"Filter group '{group}' is not supported for {self.media_type} libraries",
                group=group.value,
                media_type=self.media_type.value,
            )
        return builder(spec.value or "", user_id)

    def _order_by(self, sort: SortSpec, user_id: str | None) -> list[ColumnElement[Any]]:
        expressions = self.sort_expressions(user_id)
        expr = expressions.get(sort.field)
        if expr is None:
            raise InvalidSortFieldError(
                f"Cannot sort {self.media_type} libraries by '{sort.field}'",
                field=sort.field,
                media_type=self.media_type.value,
                valid=sorted(expressions),
            )
        primary = expr.desc() if sort.descending else expr.asc()
        return [primary.nulls_last(), library_items.c.id.asc()]

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def apply(
        self,
        *,
        library_id: str,
        user_id: str | None,
        spec: FilterSpec | None,
        sort: SortSpec,
        collapse_series: bool = False,
        include: frozenset[IncludeFlag] = frozenset(),
        page: Pagination | None = None,
    ) -> ItemPage:
        """Run filter, sort, and pagination; return hydrated rows and count.

        Raises:
            InvalidSortFieldError: Unknown sort field for this media kind.
            UnsupportedFilterGroupError: Unknown group or flag for this media kind.
        """
        page = page or Pagination()
        order_by = self._order_by(sort, user_id)
        conditions = self._conditions(library_id, spec, user_id)
        collapsed: dict[str, dict[str, Any]] = {}
        async with self._engine.connect() as conn:
            if (
                collapse_series
                and isinstance(self, SeriesCollapsing)
                and self.can_collapse(spec)
            ):
                stmt = self.collapse_select().where(*conditions).order_by(*order_by)
                item_ids, count, collapsed = await self.collapse_page(conn, stmt, page)
            else:
                count_stmt = (
                    select(func.count()).select_from(self._from_clause()).where(*conditions)
                )
                count = int((await conn.execute(count_stmt)).scalar_one() or 0)

                stmt = (
                    select(library_items.c.id)
                    .select_from(self._from_clause())
                    .where(*conditions)
                    .order_by(*order_by)
                    .offset(page.offset)
                )
                if page.limit:
                    stmt = stmt.limit(page.limit)
                item_ids = [str(i) for i in (await conn.execute(stmt)).scalars().all()]

            rows = await self.load_items(conn, item_ids, user_id=user_id, include=include)

        if collapsed:
            rows = [
                {**row, "collapsed_series": collapsed[row["id"]]} if row["id"] in collapsed else row
                for row in rows
            ]

        logger.debug(
            "Loaded %d of %d %s items (library=%s, filter=%s, sort=%s)",
            len(rows),
            count,
            self.media_type,
            library_id,
            spec.group if spec else None,
            sort.field,
        )
        return ItemPage(rows=rows, count=count)

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    async def load_items(
        self,
        conn: AsyncConnection,
        item_ids: list[str],
        *,
        user_id: str | None = None,
        include: frozenset[IncludeFlag] = frozenset(),
    ) -> list[dict[str, Any]]:
        """Load full item rows for *item_ids*, preserving their order."""
        if not item_ids:
            return []

        stmt = select(library_items).where(library_items.c.id.in_(item_ids))
        items = {str(r["id"]): dict(r) for r in (await conn.execute(stmt)).mappings().all()}

        media_ids = [str(item["media_id"]) for item in items.values()]
        media = await self.load_media(conn, media_ids, user_id=user_id, include=include)

        feeds_by_item: dict[str, dict[str, Any]] = {}
        if IncludeFlag.RSS_FEED in include:
            feeds_by_item = await load_feeds(conn, "libraryItem", list(items))

        rows: list[dict[str, Any]] = []
        for item_id in item_ids:
            item = items.get(item_id)
            if item is None:
                continue
            rows.append(
                {
                    **item,
                    "media": media.get(str(item["media_id"]), {}),
                    "rss_feed": feeds_by_item.get(item_id),
                }
            )
        return rows

    async def load_common_labels(
        self,
        conn: AsyncConnection,
        media_ids: list[str],
    ) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
        """Genres and tags for a batch of media ids."""
        genres = await load_labels(conn, media_genres, "media_id", "genre", media_ids)
        tags = await load_labels(conn, media_tags, "media_id", "tag", media_ids)
        return genres, tags


def never() -> ColumnElement[bool]:
    """Predicate matching no rows (unknown value inside a known group)."""
    return false()


def common_missing(media: Table) -> dict[str, Callable[[], ColumnElement[bool]]]:
    """``missing`` predicates available for both media kinds."""
    return {
        "language": lambda: is_blank(media.c.language),
        "description": lambda: is_blank(media.c.description),
        "cover": lambda: is_blank(media.c.cover_path),
        "genres": lambda: has_no_rows(media_genres.c.media_id, media.c.id),
        "tags": lambda: has_no_rows(media_tags.c.media_id, media.c.id),
    }


def missing_predicate(
    fields: dict[str, Callable[[], ColumnElement[bool]]],
    value: str,
) -> ColumnElement[bool]:
    builder = fields.get(value)
    return builder() if builder is not None else never()
