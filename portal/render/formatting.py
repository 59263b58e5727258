"""Formatting helpers shared by all HTML fragments."""

import re
from datetime import datetime
from html import escape

__all__ = ["escape", "export_filename", "long_date", "preview", "short_date"]


def long_date(value: datetime | None) -> str | None:
    """'Mar 4, 2025' style date, or None when unknown."""
    if value is None:
        return None
    return f"{value:%b} {value.day}, {value.year}"


def short_date(value: datetime | None, missing: str = "N/A") -> str:
    """'3/4/2025' style date."""
    if value is None:
        return missing
    return f"{value.month}/{value.day}/{value.year}"


def preview(text: str | None, limit: int, empty: str = "No content") -> str:
    """First `limit` characters on one line, with '...' when cut short."""
    if not text:
        return empty
    cut = text[:limit] + ("..." if len(text) > limit else "")
    return cut.replace("\n", " ")


def export_filename(heading: str, title: str, extension: str = "html") -> str:
    """File name for a downloaded detail view.

    >>> export_filename("Policy # 1.2", "Code of Conduct")
    'Policy__1.2_Code_of_Conduct.html'
    """
    stem = re.sub(r"\s+", "_", heading).replace("#", "")
    slug = re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE)[:30]
    return f"{stem}_{slug}.{extension}"
