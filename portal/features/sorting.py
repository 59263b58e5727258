"""Identifier-aware ordering for dotted document identifiers.

"1.2" < "1.10" < "1.10.1" < "2.1": identifiers are split on dots and compared
segment by segment as integers, the shorter one padded with zeros. Segments
are read like a leading-integer parse ("3a" -> 3); segments with no leading
integer count as 0. Identifiers that are numerically equal ("1.1" and "1.01")
fall back to a locale-aware string comparison, so the order is total.
Bylaw numbers are plain integers and degrade to numeric comparison.
"""

import locale
import re
from collections.abc import Callable, Iterable
from functools import cmp_to_key
from typing import TypeVar

from portal.models.documents import DocumentView

T = TypeVar("T")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def identifier_segments(identifier: str | int | None) -> list[int]:
    """Split an identifier into integer segments."""
    text = "" if identifier is None else str(identifier)
    segments = []
    for part in text.split("."):
        match = _LEADING_INT.match(part)
        segments.append(int(match.group(1)) if match else 0)
    return segments


def compare_identifiers(a: str | int | None, b: str | int | None) -> int:
    """Three-way comparison of two identifiers (-1, 0, 1)."""
    parts_a = identifier_segments(a)
    parts_b = identifier_segments(b)

    for i in range(max(len(parts_a), len(parts_b))):
        part_a = parts_a[i] if i < len(parts_a) else 0
        part_b = parts_b[i] if i < len(parts_b) else 0
        if part_a < part_b:
            return -1
        if part_a > part_b:
            return 1

    text_a = "" if a is None else str(a)
    text_b = "" if b is None else str(b)
    tie = locale.strcoll(text_a, text_b)
    return (tie > 0) - (tie < 0)


def sort_by_identifier(
    items: Iterable[T],
    key: Callable[[T], str | int | None],
) -> list[T]:
    """Return items ordered by identifier (stable, never raises)."""
    return sorted(items, key=cmp_to_key(lambda x, y: compare_identifiers(key(x), key(y))))


def sort_documents(documents: Iterable[DocumentView]) -> list[DocumentView]:
    """Order documents by their display identifier."""
    return sort_by_identifier(documents, key=lambda doc: doc.display_id)
