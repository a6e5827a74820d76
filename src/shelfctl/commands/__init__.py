"""Subcommand modules for shelfctl.

Provides register_commands() which uses deferred imports to keep
``shelfctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from shelfctl.commands.filter import filter_group
    from shelfctl.commands.items import items
    from shelfctl.commands.shelf import shelf

    cli.add_command(items)
    cli.add_command(shelf)
    cli.add_command(filter_group)
