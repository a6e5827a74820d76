"""Series sequence ordering.

Sequences are free-form strings ("1", "2.5", "10", "Book III"). They
compare numerically where digits appear, ignore case and accents, and
sort missing values after everything else.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any

_DIGITS = re.compile(r"(\d+)")


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def sequence_sort_key(sequence: str | None) -> tuple[int, tuple[Any, ...]]:
    """Sort key implementing natural, null-last sequence order.

    ``re.split`` with a capturing group alternates text and digit runs,
    so text always sits at even positions and integers at odd ones and
    two keys never compare a str against an int.

    Examples:
        >>> sorted(["3", "1", "10", None], key=sequence_sort_key)
        ['1', '3', '10', None]
    """
    if sequence is None or not sequence.strip():
        return (1, ())
    parts = _DIGITS.split(_fold(sequence.strip()))
    return (0, tuple(int(p) if i % 2 else p for i, p in enumerate(parts)))


def compare_sequences(a: str | None, b: str | None) -> int:
    """Three-way compare of two sequences: -1, 0, or 1."""
    ka, kb = sequence_sort_key(a), sequence_sort_key(b)
    return (ka > kb) - (ka < kb)
