"""Command group: build and inspect filter tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from shelfctl.commands._base import ShelfGroup
from shelfctl.domain.errors import DecodeError
from shelfctl.domain.filters import decode_filter_value, encode_filter_value, parse_filter
from shelfctl.domain.types import FilterGroup
from shelfctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from shelfctl.commands._context import AppContext

_FILTER_EXAMPLES = """\
  shelfctl filter encode genres Fantasy
  shelfctl filter encode progress finished
  shelfctl filter decode genres.RmFudGFzeQ%3D%3D
  shelfctl filter decode RmFudGFzeQ%3D%3D"""


@click.group(name="filter", cls=ShelfGroup, examples=_FILTER_EXAMPLES)
@click.pass_obj
def filter_group(app: AppContext) -> None:
    """Encode and decode --filter tokens."""


@filter_group.command(
    examples="""\
  shelfctl filter encode authors au_123
  shelfctl -q filter encode series no-series""",
)
@click.argument("group", type=click.Choice([g.value for g in FilterGroup]))
@click.argument("value")
@click.pass_obj
def encode(app: AppContext, group: str, value: str) -> None:
    """Build the filter token for GROUP and VALUE."""
    token = encode_filter_value(value)
    app.emit(
        ServiceResult(
            ok=True,
            op="encode_filter",
            data={"group": group, "value": value, "filter": f"{group}.{token}"},
        )
    )


@filter_group.command(
    examples="""\
  shelfctl filter decode tags.Y2xhc3NpYw%3D%3D
  shelfctl --json filter decode Y2xhc3NpYw%3D%3D""",
)
@click.argument("token")
@click.pass_obj
def decode(app: AppContext, token: str) -> None:
    """Decode a full filter (``group.token``) or a bare token."""
    try:
        spec = parse_filter(token)
        if spec is not None and spec.value is not None:
            data = {"group": spec.group, "value": spec.value}
        else:
            data = {"group": None, "value": decode_filter_value(token)}
    except DecodeError as exc:
        app.emit(
            ServiceResult(
                ok=False,
                op="decode_filter",
                error=ServiceError.from_shelf_error(exc),
            )
        )
        return
    app.emit(ServiceResult(ok=True, op="decode_filter", data=data))
