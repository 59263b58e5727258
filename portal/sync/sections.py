"""Section aggregation: parallel per-section fetch with a single-list fallback.

Primary path: one request per section (section name passed as a filter),
issued concurrently. If any of them fails, partial results are discarded and
the unfiltered list is fetched once and grouped client-side by each item's own
section; items without a recognized section land in the first one. Either way
items are then filtered by the query and ordered by identifier.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from portal.api.errors import PortalError
from portal.features.search import filter_documents
from portal.features.sorting import sort_documents
from portal.models.common import SECTION_NAMES
from portal.models.documents import DocumentView

logger = logging.getLogger(__name__)

# Fetches approved documents; None means "all sections"
FetchSection = Callable[[str | None], Awaitable[list[DocumentView]]]


@dataclass(frozen=True)
class SectionSpec:
    """One fixed listing section."""

    id: int
    key: str
    title: str


POLICY_SECTIONS: tuple[SectionSpec, ...] = tuple(
    SectionSpec(id=int(key), key=key, title=title) for key, title in SECTION_NAMES.items()
)


@dataclass
class SectionGroup:
    """Filtered, ordered items of one section."""

    spec: SectionSpec
    items: list[DocumentView] = field(default_factory=list)


@dataclass
class AggregationResult:
    """Outcome of one aggregation pass."""

    groups: list[SectionGroup]
    all_ids: set[str]
    used_fallback: bool = False
    failed: bool = False

    @property
    def is_empty(self) -> bool:
        return all(not group.items for group in self.groups)


def _finish(spec: SectionSpec, items: Sequence[DocumentView], query: str) -> SectionGroup:
    return SectionGroup(spec=spec, items=sort_documents(filter_documents(items, query)))


def group_by_section(
    documents: Sequence[DocumentView],
    sections: Sequence[SectionSpec],
) -> dict[str, list[DocumentView]]:
    """Bucket documents by their own section key, defaulting to the first section."""
    buckets: dict[str, list[DocumentView]] = {spec.key: [] for spec in sections}
    first = sections[0]
    for doc in documents:
        spec = next((s for s in sections if s.key == doc.section), first)
        buckets[spec.key].append(doc.model_copy(update={"section": spec.key, "section_name": spec.title}))
    return buckets


async def aggregate_sections(
    fetch: FetchSection,
    query: str = "",
    sections: Sequence[SectionSpec] = POLICY_SECTIONS,
) -> AggregationResult:
    """Fetch, group, filter and order documents for every section.

    Args:
        fetch: Coroutine returning approved documents for a section name
            (or all documents when given None)
        query: Free-text search query
        sections: Fixed sections to render

    Returns:
        AggregationResult; on total failure, empty groups with failed=True
    """
    results = await asyncio.gather(*(fetch(spec.title) for spec in sections), return_exceptions=True)

    errors = [r for r in results if isinstance(r, BaseException)]
    for error in errors:
        if not isinstance(error, PortalError):
            raise error

    if not errors:
        groups = []
        all_ids: set[str] = set()
        for spec, docs in zip(sections, results, strict=True):
            assert isinstance(docs, list)
            relabeled = [d.model_copy(update={"section": spec.key, "section_name": spec.title}) for d in docs]
            all_ids.update(d.nav_key for d in relabeled)
            groups.append(_finish(spec, relabeled, query))
        return AggregationResult(groups=groups, all_ids=all_ids)

    logger.warning(
        "Per-section fetch failed for %d of %d sections, falling back to full list",
        len(errors),
        len(sections),
    )
    try:
        everything = await fetch(None)
    except PortalError as e:
        logger.error("Fallback fetch failed: %s", e.message)
        return AggregationResult(
            groups=[SectionGroup(spec=spec) for spec in sections],
            all_ids=set(),
            used_fallback=True,
            failed=True,
        )

    buckets = group_by_section(everything, sections)
    return AggregationResult(
        groups=[_finish(spec, buckets[spec.key], query) for spec in sections],
        all_ids={d.nav_key for d in everything},
        used_fallback=True,
    )
