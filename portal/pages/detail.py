"""Public detail pages for a single policy or bylaw."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from portal.api.bylaws import BylawService
from portal.api.errors import PortalError
from portal.api.policies import PolicyService
from portal.models.documents import DocumentView
from portal.render.detail import (
    BYLAW_NOT_FOUND,
    POLICY_NOT_FOUND,
    bylaw_heading,
    policy_heading,
    render_bylaw_detail,
    render_bylaw_sidebar,
    render_not_found,
    render_policy_detail,
    render_policy_sidebar,
)
from portal.render.formatting import export_filename

logger = logging.getLogger(__name__)


@dataclass
class DetailView:
    """Rendered detail page."""

    main_html: str
    sidebar_html: str = ""
    document: DocumentView | None = None
    export_name: str | None = None

    @property
    def found(self) -> bool:
        return self.document is not None


async def _approved_or_empty(fetch: Callable[[], Awaitable[list[DocumentView]]], what: str) -> list[DocumentView]:
    try:
        return await fetch()
    except PortalError as e:
        logger.error("Failed to load %s for the sidebar: %s", what, e.message)
        return []


async def load_policy_detail(policies: PolicyService, policy_id: str | None) -> DetailView:
    """Look a policy up by its dotted id and render it with its sidebar.

    A missing id, a 404 or any other failure renders "Policy not found".
    """
    if not policy_id:
        return DetailView(main_html=render_not_found(POLICY_NOT_FOUND))
    try:
        doc = await policies.get(policy_id)
    except PortalError as e:
        logger.info("Policy %s unavailable: %s", policy_id, e.message)
        return DetailView(main_html=render_not_found(POLICY_NOT_FOUND))

    approved = await _approved_or_empty(policies.list_approved, "policies")
    return DetailView(
        main_html=render_policy_detail(doc),
        sidebar_html=render_policy_sidebar(doc, approved),
        document=doc,
        export_name=export_filename(policy_heading(doc), doc.title),
    )


async def load_bylaw_detail(bylaws: BylawService, bylaw_id: str | None) -> DetailView:
    """Look a bylaw up by UUID and render it with its sidebar."""
    if not bylaw_id:
        return DetailView(main_html=render_not_found(BYLAW_NOT_FOUND))
    try:
        doc = await bylaws.get(bylaw_id)
    except PortalError as e:
        logger.info("Bylaw %s unavailable: %s", bylaw_id, e.message)
        return DetailView(main_html=render_not_found(BYLAW_NOT_FOUND))

    approved = await _approved_or_empty(bylaws.list_approved, "bylaws")
    return DetailView(
        main_html=render_bylaw_detail(doc),
        sidebar_html=render_bylaw_sidebar(doc, approved),
        document=doc,
        export_name=export_filename(bylaw_heading(doc), doc.title),
    )
