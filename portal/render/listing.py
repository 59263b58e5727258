"""HTML for the public listings: collapsible sections, cards and notifications.

Each section is a SectionNode that caches its markup. Toggling a section only
flips that node's open flag; the cards grid is rendered once per data load and
sibling sections keep their cached markup untouched.
"""

from collections.abc import Sequence
from urllib.parse import quote

from portal.models.common import DocumentKind
from portal.models.documents import DocumentView
from portal.render.formatting import escape
from portal.sync.notifications import Notification
from portal.sync.sections import SectionGroup, SectionSpec
from portal.sync.state import ListingState

NO_ITEMS = "No items in this section"
NO_RESULTS = "No results found"

POLICY_DETAIL_PAGE = "policy-detail"
BYLAW_DETAIL_PAGE = "bylaw-detail"


def detail_href(doc: DocumentView) -> str:
    """Link to a document's detail page (dotted id for policies, UUID for bylaws)."""
    page = POLICY_DETAIL_PAGE if doc.kind == DocumentKind.policy else BYLAW_DETAIL_PAGE
    return f"?page={page}&id={quote(doc.nav_key, safe='.')}"


def render_card(doc: DocumentView) -> str:
    return (
        f'<a class="card" href="{escape(detail_href(doc))}" target="_self">'
        f'<div class="card-policy-name">{escape(doc.title)}</div>'
        f'<div class="card-section-name">{escape(doc.section_name or "")}</div>'
        f'<div class="card-policy-id">{escape(doc.display_id)}</div>'
        "</a>"
    )


def render_bylaw_card(doc: DocumentView) -> str:
    return (
        f'<a class="card" href="{escape(detail_href(doc))}" target="_self">'
        f'<div class="card-policy-name">{escape(doc.title)}</div>'
        '<div class="card-section-name">Bylaw</div>'
        f'<div class="card-policy-id">Bylaw #{escape(doc.display_id)}</div>'
        "</a>"
    )


def render_bylaw_grid(bylaws: Sequence[DocumentView]) -> str:
    """Flat bylaw grid, or the no-results message."""
    if not bylaws:
        return f'<div class="no-results">{NO_RESULTS}</div>'
    cards = "".join(render_bylaw_card(doc) for doc in bylaws)
    return f'<div class="cards-grid">{cards}</div>'


class SectionNode:
    """One collapsible section with cached markup."""

    def __init__(self, spec: SectionSpec, items: Sequence[DocumentView], is_open: bool) -> None:
        self.spec = spec
        self.items = list(items)
        self.is_open = is_open
        self._body: str | None = None
        self._html: str | None = None

    @property
    def section_id(self) -> int:
        return self.spec.id

    def set_open(self, is_open: bool) -> None:
        if is_open != self.is_open:
            self.is_open = is_open
            self._html = None

    def body(self) -> str:
        """Cards grid; independent of the open flag."""
        if self._body is None:
            if self.items:
                cards = "".join(render_card(doc) for doc in self.items)
                self._body = f'<div class="cards-grid">{cards}</div>'
            else:
                self._body = f'<div class="no-results">{NO_ITEMS}</div>'
        return self._body

    def render(self) -> str:
        if self._html is None:
            state = " open" if self.is_open else ""
            self._html = (
                f'<div class="section" data-section-id="{self.spec.id}">'
                '<div class="section-header">'
                f'<h2 class="section-title">{escape(self.spec.title)}</h2>'
                f'<span class="section-arrow{state}">▼</span>'
                "</div>"
                f'<div class="section-content{state}">{self.body()}</div>'
                "</div>"
            )
        return self._html


class SectionsView:
    """All sections of a policy listing, or a single no-results message.

    While a query is active, sections without matches are kept in `nodes`
    (so their open state survives) but left out of what is shown.
    """

    def __init__(self, nodes: list[SectionNode], no_results: bool = False, filtering: bool = False) -> None:
        self.nodes = nodes
        self.no_results = no_results
        self.filtering = filtering

    def visible_nodes(self) -> list[SectionNode]:
        if self.no_results:
            return []
        if self.filtering:
            return [node for node in self.nodes if node.items]
        return list(self.nodes)

    def node(self, section_id: int) -> SectionNode | None:
        return next((n for n in self.nodes if n.section_id == section_id), None)

    def render(self) -> str:
        if self.no_results:
            return f'<div class="no-results">{NO_RESULTS}</div>'
        return "".join(node.render() for node in self.visible_nodes())


def build_sections_view(groups: Sequence[SectionGroup], state: ListingState) -> SectionsView:
    """Build section nodes from aggregated groups.

    With an active query, sections without matches are hidden; if no section
    matches at all, the whole listing collapses to a single "No results found"
    message.
    """
    nodes = [SectionNode(g.spec, g.items, state.is_open(g.spec.id)) for g in groups]
    filtering = state.search_term != ""
    no_results = filtering and all(not node.items for node in nodes)
    return SectionsView(nodes, no_results=no_results, filtering=filtering)


def toggle_section(view: SectionsView, state: ListingState, section_id: int) -> SectionNode | None:
    """Flip one section open or closed, touching no other node."""
    is_open = state.toggle(section_id)
    node = view.node(section_id)
    if node is not None:
        node.set_open(is_open)
    return node


def render_notification(notification: Notification) -> str:
    return (
        f'<div class="new-policies-notification {escape(notification.kind)}" '
        f'data-notification-id="{escape(notification.id)}">'
        f"<span>{escape(notification.message)}</span>"
        "</div>"
    )
