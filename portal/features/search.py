"""Client-side search over already-fetched items.

Case-insensitive literal substring match; no tokenization or ranking. The
match is on the identifier text, so "1.1" matches "1.1.1" and "1.10.1" alike.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from portal.models.documents import DocumentView

T = TypeVar("T")


def matches(query: str, values: Iterable[str | None]) -> bool:
    """True when any value contains the query, ignoring case."""
    if query == "":
        return True
    needle = query.lower()
    return any(needle in (value or "").lower() for value in values)


def filter_items(
    items: Sequence[T],
    query: str,
    fields: Callable[[T], Iterable[str | None]],
) -> list[T]:
    """Keep items whose searchable fields contain the query.

    An empty query returns every item in its original order.
    """
    if query == "":
        return list(items)
    return [item for item in items if matches(query, fields(item))]


def document_search_fields(doc: DocumentView) -> list[str | None]:
    """Searchable text of a document: title, display id and section name."""
    return [doc.title, doc.display_id, doc.section_name]


def filter_documents(documents: Sequence[DocumentView], query: str) -> list[DocumentView]:
    return filter_items(documents, query, document_search_fields)
