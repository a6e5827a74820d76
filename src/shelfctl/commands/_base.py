"""Click command and group classes shared by the shelfctl command tree.

Every ``items``, ``shelf`` and ``filter`` command is declared with an
``examples`` block of sample invocations. ``--examples`` prints that block
and exits before required options such as ``--library`` or ``--user`` are
checked, so ``--help`` stays short.
"""

from __future__ import annotations

from typing import Any

import click


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Append an eager ``--examples`` flag that prints *examples* and exits."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show sample invocations and exit.",
        )
    )


class ShelfCommand(click.Command):
    """A shelfctl leaf command (``items list``, ``shelf recent``, ``filter encode``...)."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class ShelfGroup(click.Group):
    """A shelfctl command group; its subcommands default to :class:`ShelfCommand`."""

    command_class = ShelfCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)
