"""Root CLI group for shelfctl with global flags and command registration."""

from __future__ import annotations

from typing import Any

import click

from shelfctl import __version__
from shelfctl.commands import register_commands
from shelfctl.commands._context import AppContext
from shelfctl.config.settings import ShelfSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="shelfctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--db", "db_url", default=None, help="Override the database URL.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    db_url: str | None,
) -> None:
    """shelfctl — browse, filter, and shelve media library catalogs."""
    ctx.ensure_object(dict)
    # Unset flags stay None so env vars and shelfctl.toml still apply.
    flags: dict[str, Any] = {
        "json_output": json_output or None,
        "quiet": quiet or None,
        "verbose": verbose or None,
        "log_json": log_json or None,
        "database": {"url": db_url} if db_url else None,
    }
    settings = ShelfSettings.from_cli(config_path=config_path, **flags)
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
