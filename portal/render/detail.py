"""Detail views and their "other documents" sidebars.

Document content is trusted HTML authored by staff and is inserted as-is;
every other value is escaped.
"""

from collections.abc import Sequence

from portal.features.sorting import sort_documents
from portal.models.common import DEFAULT_SECTION, section_name
from portal.models.documents import DocumentView
from portal.render.formatting import escape, long_date
from portal.render.listing import detail_href

NO_CONTENT = "No content available."
POLICY_NOT_FOUND = "Policy not found"
BYLAW_NOT_FOUND = "Bylaw not found"


def policy_heading(doc: DocumentView) -> str:
    return f"Policy # {doc.display_id}"


def bylaw_heading(doc: DocumentView) -> str:
    return f"Bylaw #{doc.display_id}"


def render_not_found(message: str) -> str:
    return f'<div class="no-results">{escape(message)}</div>'


def render_detail(doc: DocumentView, heading: str) -> str:
    """Main column of a detail page: number, title, last update and content."""
    updated = long_date(doc.updated_at)
    updated_html = f'<div class="policy-updated">Last Updated: {updated}</div>' if updated else ""
    return (
        '<article class="policy-detail">'
        f'<div class="policy-number">{escape(heading)}</div>'
        f'<h1 class="policy-title">{escape(doc.title)}</h1>'
        f"{updated_html}"
        f'<div class="policy-content"><p>{doc.content or NO_CONTENT}</p></div>'
        "</article>"
    )


def render_policy_detail(doc: DocumentView) -> str:
    return render_detail(doc, policy_heading(doc))


def render_bylaw_detail(doc: DocumentView) -> str:
    return render_detail(doc, bylaw_heading(doc))


def render_policy_sidebar(current: DocumentView, approved: Sequence[DocumentView]) -> str:
    """Other approved policies grouped by section key, each group ordered by id.

    Args:
        current: Policy being displayed (excluded by its dotted id)
        approved: All approved policies

    Returns:
        Sidebar HTML
    """
    others = [p for p in approved if p.display_id != current.display_id]
    title = '<h3 class="sidebar-title">Other Policies</h3>'
    if not others:
        return f'{title}<div class="sidebar-section"><p>No other policies available</p></div>'

    by_section: dict[str, list[DocumentView]] = {}
    for policy in others:
        by_section.setdefault(policy.section or DEFAULT_SECTION, []).append(policy)

    parts = [title]
    for key in sorted(by_section):
        parts.append('<div class="sidebar-section">')
        parts.append(f'<h4 class="sidebar-section-title">{escape(section_name(key))}</h4>')
        for policy in sort_documents(by_section[key]):
            parts.append(
                f'<a href="{escape(detail_href(policy))}" target="_self" class="sidebar-link-small">'
                f"{escape(policy.nav_key)} - {escape(policy.title)}</a>"
            )
        parts.append("</div>")
    return "".join(parts)


def render_bylaw_sidebar(current: DocumentView, approved: Sequence[DocumentView]) -> str:
    """Other approved bylaws in number order."""
    others = sort_documents([b for b in approved if b.id != current.id])
    title = '<h3 class="sidebar-title">Other Bylaws</h3>'
    if not others:
        return f'{title}<div class="sidebar-section"><p>No other bylaws available</p></div>'
    links = "".join(
        f'<a href="{escape(detail_href(b))}" target="_self" class="sidebar-link">'
        f"Bylaw #{escape(b.display_id)} - {escape(b.title)}</a>"
        for b in others
    )
    return f'{title}<div class="sidebar-section">{links}</div>'
