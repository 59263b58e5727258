"""Public listing pages: policies by section and the flat bylaw grid.

The policy listing owns its ListingState (query, open sections, last-seen
identifiers) and the change poller that refreshes it. Reloads keep the
current query and open sections.
"""

import logging

from portal.api.bylaws import BylawService
from portal.api.errors import PortalError
from portal.api.policies import PolicyService
from portal.features.search import filter_items
from portal.features.sorting import sort_documents
from portal.models.documents import DocumentView
from portal.render.listing import SectionNode, SectionsView, build_sections_view, render_bylaw_grid, toggle_section
from portal.sync.notifications import NotificationCenter
from portal.sync.poller import ChangeDetectionPoller
from portal.sync.sections import aggregate_sections
from portal.sync.state import ListingState
from portal.utils.metrics import PrometheusPortalMetrics

logger = logging.getLogger(__name__)


class PolicyListingPage:
    """Approved policies grouped into the three fixed sections."""

    def __init__(
        self,
        policies: PolicyService,
        state: ListingState | None = None,
        notifications: NotificationCenter | None = None,
        poll_interval_seconds: float | None = None,
        metrics: PrometheusPortalMetrics | None = None,
    ) -> None:
        self._policies = policies
        self.state = state or ListingState()
        self.notifications = notifications or NotificationCenter()
        self.view: SectionsView | None = None
        self.poller = ChangeDetectionPoller(
            fetch_ids=self._fetch_ids,
            state=self.state,
            on_change=self._on_change,
            notifications=self.notifications,
            interval_seconds=poll_interval_seconds,
            metrics=metrics,
        )

    async def load(self) -> SectionsView:
        """Fetch and render every section for the current query.

        The first successful load also seeds the poller's baseline.
        """
        result = await aggregate_sections(self._policies.list_approved, self.state.search_term)
        if self.state.known_ids is None and not result.failed:
            self.poller.prime(result.all_ids)
        self.view = build_sections_view(result.groups, self.state)
        return self.view

    async def search(self, term: str) -> SectionsView:
        """Apply a query; a non-empty one opens every section."""
        self.state.search_term = term
        if term != "":
            self.state.open_all()
        return await self.load()

    def toggle(self, section_id: int) -> SectionNode | None:
        if self.view is None:
            self.state.toggle(section_id)
            return None
        return toggle_section(self.view, self.state, section_id)

    def render(self) -> str:
        return self.view.render() if self.view is not None else ""

    async def start_polling(self) -> None:
        await self.poller.start()

    async def set_visibility(self, visible: bool) -> None:
        await self.poller.set_visibility(visible)

    async def teardown(self) -> None:
        """Stop background checks when the page goes away."""
        await self.poller.stop()

    async def _fetch_ids(self) -> list[str]:
        docs = await self._policies.list_approved()
        return [doc.nav_key for doc in docs]

    async def _on_change(self, new_count: int) -> None:
        await self.load()


def _bylaw_search_fields(doc: DocumentView) -> list[str | None]:
    return [doc.title, doc.display_id]


class BylawListingPage:
    """Approved bylaws as one grid, filtered on title and number."""

    def __init__(self, bylaws: BylawService) -> None:
        self._bylaws = bylaws
        self.search_term = ""
        self.items: list[DocumentView] = []

    async def load(self) -> str:
        try:
            docs = await self._bylaws.list_approved()
        except PortalError as e:
            logger.error("Failed to load bylaws: %s", e.message)
            docs = []
        self.items = sort_documents(filter_items(docs, self.search_term, _bylaw_search_fields))
        return render_bylaw_grid(self.items)

    async def search(self, term: str) -> str:
        self.search_term = term
        return await self.load()
