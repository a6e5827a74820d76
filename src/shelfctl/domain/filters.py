"""Filter token grammar — value codec and ``filter_by`` classification.

A filter string is either ``"<group>.<token>"`` for one of the known
:class:`FilterGroup` names, or a bare raw flag name. Tokens are the
percent-encoded base64 of the UTF-8 filter value, as produced by the web
client.

Examples:
    >>> encode_filter_value("Fantasy")
    'RmFudGFzeQ%3D%3D'
    >>> parse_filter("genres.RmFudGFzeQ%3D%3D")
    FilterSpec(group='genres', value='Fantasy')
    >>> parse_filter("issues")
    FilterSpec(group='issues', value=None)
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable
from urllib.parse import quote, unquote

from shelfctl.domain.errors import DecodeError
from shelfctl.domain.models import FilterSpec
from shelfctl.domain.types import FilterGroup, IncludeFlag

# URL-safe base64 ("-", "_") maps onto the standard alphabet before decoding.
_URLSAFE_ALPHABET = str.maketrans("-_", "+/")

# Parser precedence follows enum declaration order.
_GROUP_PREFIXES: tuple[tuple[FilterGroup, str], ...] = tuple(
    (group, f"{group.value}.") for group in FilterGroup
)


def encode_filter_value(value: str) -> str:
    """Encode a filter value into its URL-safe token form."""
    raw = base64.b64encode(value.encode("utf-8")).decode("ascii")
    return quote(raw, safe="")


def decode_filter_value(token: str) -> str:
    """Decode a filter value token; standard and URL-safe base64 are both accepted.

    Raises:
        DecodeError: If the token is not base64 or does not decode to UTF-8.
    """
    text = unquote(token).strip().translate(_URLSAFE_ALPHABET)
    text += "=" * (-len(text) % 4)
    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Filter token is not valid base64: {token!r}", token=token) from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Filter token is not valid UTF-8 text: {token!r}", token=token) from exc


def parse_filter(filter_by: str | None) -> FilterSpec | None:
    """Classify a raw ``filter_by`` string into a :class:`FilterSpec`.

    Returns None when there is nothing to filter on.
    """
    if not filter_by:
        return None

    for group, prefix in _GROUP_PREFIXES:
        if filter_by.startswith(prefix):
            return FilterSpec(
                group=group.value,
                value=decode_filter_value(filter_by[len(prefix) :]),
            )
    return FilterSpec(group=filter_by, value=None)


def parse_include(include: str | Iterable[str] | None) -> frozenset[IncludeFlag]:
    """Normalize include flags from a comma-separated string or iterable.

    Matching is case-insensitive; unknown flags are dropped.
    """
    if not include:
        return frozenset()
    raw = include.split(",") if isinstance(include, str) else include
    known = {flag.value: flag for flag in IncludeFlag}
    return frozenset(known[v] for v in (r.strip().lower() for r in raw) if v in known)
