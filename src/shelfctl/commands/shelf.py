"""Command group: library home-page shelves."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from shelfctl.commands._base import ShelfGroup
from shelfctl.commands._context import with_library
from shelfctl.services.shelves import ShelfService

if TYPE_CHECKING:
    from shelfctl.commands._context import AppContext
    from shelfctl.domain.models import LibraryRef
    from shelfctl.infrastructure.store import CatalogStore
    from shelfctl.services.result import ServiceResult

_SHELF_EXAMPLES = """\
  shelfctl shelf in-progress lib_1 --user usr_1
  shelfctl shelf recent lib_1
  shelfctl shelf continue-series lib_1 --user usr_1
  shelfctl shelf recent-series lib_1 --include rssfeed"""

_include_option = click.option(
    "--include", default=None, help="Comma-separated extras: rssfeed, numEpisodesIncomplete."
)
_limit_option = click.option(
    "--limit",
    default=None,
    type=click.IntRange(min=0),
    help="Max entries (default from config), 0 for all.",
)


@click.group(cls=ShelfGroup, examples=_SHELF_EXAMPLES)
@click.pass_obj
def shelf(app: AppContext) -> None:
    """Show the personalized shelves of a library."""


@shelf.command(
    name="in-progress",
    examples="""\
  shelfctl shelf in-progress lib_1 --user usr_1
  shelfctl shelf in-progress lib_1 --user usr_1 --ebook
  shelfctl --json shelf in-progress lib_1 --user usr_1 --include rssfeed""",
)
@click.argument("library_id")
@click.option("--user", "user_id", required=True, help="User whose progress applies.")
@click.option("--ebook", is_flag=True, help="Ebook reading instead of audio listening.")
@_include_option
@_limit_option
@click.pass_obj
def in_progress(
    app: AppContext,
    library_id: str,
    user_id: str,
    ebook: bool,
    include: str | None,
    limit: int | None,
) -> None:
    """Books started but not finished, most recently active first."""

    async def build(store: CatalogStore, library: LibraryRef) -> ServiceResult:
        return await ShelfService(store).get_in_progress(
            library, user_id, include, limit, ebook=ebook
        )

    app.run(with_library(library_id, build))


@shelf.command(
    examples="""\
  shelfctl shelf recent lib_1
  shelfctl shelf recent lib_pod --include numEpisodesIncomplete --user usr_1
  shelfctl -q shelf recent lib_1 --limit 5""",
)
@click.argument("library_id")
@click.option("--user", "user_id", default=None, help="Requesting user.")
@_include_option
@_limit_option
@click.pass_obj
def recent(
    app: AppContext,
    library_id: str,
    user_id: str | None,
    include: str | None,
    limit: int | None,
) -> None:
    """Most recently added items."""

    async def build(store: CatalogStore, library: LibraryRef) -> ServiceResult:
        return await ShelfService(store).get_most_recently_added(library, user_id, include, limit)

    app.run(with_library(library_id, build))


@shelf.command(
    name="continue-series",
    examples="""\
  shelfctl shelf continue-series lib_1 --user usr_1
  shelfctl --json shelf continue-series lib_1 --user usr_1 --limit 3""",
)
@click.argument("library_id")
@click.option("--user", "user_id", required=True, help="User whose progress applies.")
@_include_option
@_limit_option
@click.pass_obj
def continue_series(
    app: AppContext,
    library_id: str,
    user_id: str,
    include: str | None,
    limit: int | None,
) -> None:
    """Next unfinished book of each series the user has been reading."""

    async def build(store: CatalogStore, library: LibraryRef) -> ServiceResult:
        return await ShelfService(store).get_continue_series(library, user_id, include, limit)

    app.run(with_library(library_id, build))


@shelf.command(
    name="recent-series",
    examples="""\
  shelfctl shelf recent-series lib_1
  shelfctl shelf recent-series lib_1 --include rssfeed --limit 0""",
)
@click.argument("library_id")
@_include_option
@_limit_option
@click.pass_obj
def recent_series(
    app: AppContext,
    library_id: str,
    include: str | None,
    limit: int | None,
) -> None:
    """Newest series, each with its books in reading order."""

    async def build(store: CatalogStore, library: LibraryRef) -> ServiceResult:
        return await ShelfService(store).get_recent_series(library, include, limit)

    app.run(with_library(library_id, build))
