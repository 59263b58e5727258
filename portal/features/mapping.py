"""Canonical field mapper: API records (snake_case) -> DocumentView.

The rename happens once, here, at the API boundary. Mapping never raises on
missing or malformed optional fields; defaults are substituted instead.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from portal.models.common import (
    DEFAULT_SECTION,
    DocumentKind,
    DocumentStatus,
    section_key,
    section_name,
)
from portal.models.documents import DocumentView

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


def _text(value: Any) -> str | None:
    """Coerce scalar values to text; anything else counts as missing."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value)
    return text if text != "" else None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when absent or invalid."""
    text = _text(value)
    if text is None:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparsable timestamp %r", text)
        return None


def _status(value: Any) -> DocumentStatus | None:
    try:
        return DocumentStatus(_text(value))
    except ValueError:
        return None


def _common_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": _text(raw.get("id")) or "",
        "status": _status(raw.get("status")),
        "created_at": parse_timestamp(raw.get("created_at")),
        "updated_at": parse_timestamp(raw.get("updated_at")),
        "created_by": _text(raw.get("created_by")),
        "updated_by": _text(raw.get("updated_by")),
    }


def map_policy(raw: Mapping[str, Any]) -> DocumentView:
    """Map a policy record to the canonical view model.

    Args:
        raw: Policy record from the API

    Returns:
        DocumentView with section normalized to its catalog key ('1' when
        missing; unknown values are kept verbatim)
    """
    raw_section = _text(raw.get("section"))
    if raw_section is None:
        section = DEFAULT_SECTION
    else:
        section = section_key(raw_section) or raw_section

    return DocumentView(
        kind=DocumentKind.policy,
        display_id=_text(raw.get("policy_id")) or "",
        title=_text(raw.get("policy_name")) or UNTITLED,
        content=_text(raw.get("policy_content")) or "",
        section=section,
        section_name=section_name(section),
        **_common_fields(raw),
    )


def map_bylaw(raw: Mapping[str, Any]) -> DocumentView:
    """Map a bylaw record to the canonical view model.

    Args:
        raw: Bylaw record from the API

    Returns:
        DocumentView whose display_id is the bylaw number as text
    """
    return DocumentView(
        kind=DocumentKind.bylaw,
        display_id=_text(raw.get("bylaw_number")) or "",
        title=_text(raw.get("bylaw_title")) or UNTITLED,
        content=_text(raw.get("bylaw_content")) or "",
        **_common_fields(raw),
    )


def map_records(raw_records: Any, kind: DocumentKind) -> list[DocumentView]:
    """Map a list response, skipping entries that are not JSON objects."""
    if not isinstance(raw_records, Iterable) or isinstance(raw_records, (str, bytes, Mapping)):
        logger.warning("Expected a list of %s records, got %s", kind.value, type(raw_records).__name__)
        return []
    mapper = map_policy if kind == DocumentKind.policy else map_bylaw
    return [mapper(raw) for raw in raw_records if isinstance(raw, Mapping)]
