"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy CatalogStore initialization, an event
loop bridge for the async services, and centralized result emission
(stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import click

from shelfctl.config.logging import configure_logging
from shelfctl.output.formatters import OutputSettings, format_result
from shelfctl.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from shelfctl.config.settings import ShelfSettings
    from shelfctl.domain.models import LibraryRef
    from shelfctl.infrastructure.store import CatalogStore
    from shelfctl.services.result import ServiceResult

Operation = Callable[["CatalogStore"], Awaitable["ServiceResult"]]


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. The store is created
    lazily on first use so ``--help`` and ``--version`` never open the
    database.
    """

    def __init__(self, settings: ShelfSettings) -> None:
        self.settings = settings
        self._store: CatalogStore | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def store(self) -> CatalogStore:
        """The catalog store (created lazily on first access)."""
        if self._store is None:
            from shelfctl.infrastructure.store import CatalogStore

            self._store = CatalogStore(self.settings)
        return self._store

    def run(self, operation: Operation) -> None:
        """Run an async service operation to completion and emit its result.

        The store's engine is disposed before the event loop closes.
        """

        async def _invoke() -> ServiceResult:
            store = self.store
            try:
                return await operation(store)
            finally:
                await store.close()
                self._store = None

        self.emit(asyncio.run(_invoke()))

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)


def with_library(
    library_id: str,
    build: Callable[[CatalogStore, LibraryRef], Awaitable[ServiceResult]],
) -> Operation:
    """Wrap *build* so it runs against a resolved library.

    An unknown library id short-circuits with the lookup's error result.
    """

    async def operation(store: CatalogStore) -> ServiceResult:
        from shelfctl.domain.models import LibraryRef
        from shelfctl.services.catalog import CatalogService

        found = await CatalogService(store).get_library(library_id)
        if not found.ok:
            return found
        library = LibraryRef(
            id=found.data["id"],
            name=found.data["name"],
            media_type=found.data["mediaType"],
        )
        return await build(store, library)

    return operation
