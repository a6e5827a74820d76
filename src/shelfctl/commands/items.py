"""Command group: filtered library item listings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from shelfctl.commands._base import ShelfGroup
from shelfctl.commands._context import with_library
from shelfctl.domain.models import LibraryItemsQuery
from shelfctl.services.catalog import CatalogService

if TYPE_CHECKING:
    from shelfctl.commands._context import AppContext
    from shelfctl.domain.models import LibraryRef
    from shelfctl.infrastructure.store import CatalogStore
    from shelfctl.services.result import ServiceResult

_ITEMS_EXAMPLES = """\
  shelfctl items list lib_1
  shelfctl items list lib_1 --filter genres.RmFudGFzeQ%3D%3D
  shelfctl items list lib_1 --sort addedAt --desc --limit 20
  shelfctl items list lib_1 --collapse-series --user usr_1"""


@click.group(cls=ShelfGroup, examples=_ITEMS_EXAMPLES)
@click.pass_obj
def items(app: AppContext) -> None:
    """List and filter library items."""


@items.command(
    name="list",
    examples="""\
  shelfctl items list lib_1
  shelfctl items list lib_1 --filter progress.ZmluaXNoZWQ%3D --user usr_1
  shelfctl items list lib_1 --filter issues
  shelfctl items list lib_1 --sort media.metadata.authorName --offset 50 --limit 50
  shelfctl items list lib_pod --include rssfeed,numEpisodesIncomplete --user usr_1
  shelfctl --json items list lib_1 --collapse-series""",
)
@click.argument("library_id")
@click.option("--filter", "filter_by", default=None, help="Filter: <group>.<token> or a flag.")
@click.option("--sort", "sort_by", default=None, help="Sort field (default from config).")
@click.option("--desc", "sort_desc", is_flag=True, help="Sort descending.")
@click.option("--collapse-series", is_flag=True, help="One entry per series (books only).")
@click.option("--include", default=None, help="Comma-separated extras: rssfeed, numEpisodesIncomplete.")
@click.option("--user", "user_id", default=None, help="User whose progress applies.")
@click.option("--limit", default=None, type=click.IntRange(min=0), help="Page size, 0 for all.")
@click.option("--offset", default=0, type=click.IntRange(min=0), help="Entries to skip.")
@click.pass_obj
def list_items(
    app: AppContext,
    library_id: str,
    filter_by: str | None,
    sort_by: str | None,
    sort_desc: bool,
    collapse_series: bool,
    include: str | None,
    user_id: str | None,
    limit: int | None,
    offset: int,
) -> None:
    """List the items of a library, one page at a time."""
    page_size = app.settings.catalog.default_limit if limit is None else limit

    async def build(store: CatalogStore, library: LibraryRef) -> ServiceResult:
        query = LibraryItemsQuery(
            filter_by=filter_by,
            sort_by=sort_by,
            sort_desc=sort_desc,
            collapse_series=collapse_series,
            include=include.split(",") if include else [],
            media_type=library.media_type,
            limit=page_size,
            offset=offset,
        )
        return await CatalogService(store).get_filtered_library_items(library.id, user_id, query)

    app.run(with_library(library_id, build))
