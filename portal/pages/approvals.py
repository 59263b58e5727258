"""Approvals queue: pending drafts of both kinds, approved or disapproved by admins.

Approving calls PUT .../approve; disapproving deletes the draft. Policies are
addressed by their dotted id, bylaws by UUID. Approve and disapprove handlers
are injected at construction so a view never looks them up globally.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from portal.api.bylaws import BylawService
from portal.api.errors import Forbidden, LoginRequired, PortalError
from portal.api.policies import PolicyService
from portal.features.search import filter_items
from portal.models.common import DocumentKind, DocumentStatus, section_name
from portal.models.documents import DocumentView
from portal.pages.actions import ActionResult, Confirm, run_action
from portal.render.admin import approval_identifier, render_approval_queue, render_error_state
from portal.render.formatting import preview, short_date

logger = logging.getLogger(__name__)

# Performs the approve or disapprove call for one identifier
Handler = Callable[[str], Awaitable[None]]

_NOUNS = {DocumentKind.policy: ("policy", "policies"), DocumentKind.bylaw: ("bylaw", "bylaws")}


@dataclass
class ApprovalQueue:
    """Pending drafts of one kind plus what to show for them."""

    kind: DocumentKind
    items: list[DocumentView] = field(default_factory=list)
    html: str = ""
    error: str | None = None


def approval_search_text(doc: DocumentView) -> list[str | None]:
    """Visible text of an approval item, used by the queue filter."""
    label = doc.display_id if doc.kind == DocumentKind.policy else f"Bylaw #{doc.display_id}"
    return [
        doc.title,
        label,
        section_name(doc.section) if doc.kind == DocumentKind.policy else None,
        f"Submitted: {short_date(doc.created_at)}",
        preview(doc.content, 200),
    ]


class ApprovalsPage:
    """Admin queue of drafts awaiting a decision.

    Args:
        policies: Policy service used to list drafts
        bylaws: Bylaw service used to list drafts
        confirm: Asks the user before approving or disapproving
        approve_handlers: Per-kind approve calls (service defaults)
        disapprove_handlers: Per-kind disapprove calls (service defaults)
    """

    def __init__(
        self,
        policies: PolicyService,
        bylaws: BylawService,
        confirm: Confirm,
        approve_handlers: dict[DocumentKind, Handler] | None = None,
        disapprove_handlers: dict[DocumentKind, Handler] | None = None,
    ) -> None:
        self._listers = {DocumentKind.policy: policies.list_all, DocumentKind.bylaw: bylaws.list_all}
        self._confirm = confirm
        self._approve = approve_handlers or {
            DocumentKind.policy: policies.approve,
            DocumentKind.bylaw: bylaws.approve,
        }
        self._disapprove = disapprove_handlers or {
            DocumentKind.policy: policies.delete,
            DocumentKind.bylaw: bylaws.delete,
        }
        self.queues: dict[DocumentKind, ApprovalQueue] = {}

    async def load(self, kind: DocumentKind, query: str = "") -> ApprovalQueue:
        """Fetch drafts of one kind, keeping only those still in draft.

        Raises:
            LoginRequired: Signed out or session expired
        """
        _, plural = _NOUNS[kind]
        try:
            docs = await self._listers[kind](DocumentStatus.draft)
        except LoginRequired:
            raise
        except Forbidden:
            message = (
                f"You don't have permission to view {plural}. "
                "Please login with an admin or policy_working_group account."
            )
            queue = ApprovalQueue(kind=kind, html=render_error_state(plural, message), error=message)
            self.queues[kind] = queue
            return queue
        except PortalError as e:
            logger.error("Failed to load pending %s: %s", plural, e.message)
            queue = ApprovalQueue(kind=kind, html=render_error_state(plural, e.message), error=e.message)
            self.queues[kind] = queue
            return queue

        drafts = [doc for doc in docs if doc.status == DocumentStatus.draft]
        visible = filter_items(drafts, query, approval_search_text)
        queue = ApprovalQueue(kind=kind, items=visible, html=render_approval_queue(visible, kind))
        self.queues[kind] = queue
        return queue

    async def load_all(self, query: str = "") -> dict[DocumentKind, ApprovalQueue]:
        for kind in (DocumentKind.policy, DocumentKind.bylaw):
            await self.load(kind, query)
        return self.queues

    async def approve(self, doc: DocumentView) -> ActionResult:
        singular, plural = _NOUNS[doc.kind]
        if not self._confirm(f"Are you sure you want to approve this {singular}?"):
            return ActionResult.declined()
        identifier = approval_identifier(doc)
        return await run_action(
            lambda: self._approve[doc.kind](identifier),
            success=f"{singular.capitalize()} approved successfully!",
            failure=f"Failed to approve {singular}.",
            forbidden=f"Only admins can approve {plural}.",
            not_found=f"{singular.capitalize()} not found. It may have already been deleted.",
        )

    async def disapprove(self, doc: DocumentView) -> ActionResult:
        singular, plural = _NOUNS[doc.kind]
        if not self._confirm(
            f"Are you sure you want to disapprove (delete) this {singular}? This action cannot be undone."
        ):
            return ActionResult.declined()
        identifier = approval_identifier(doc)
        return await run_action(
            lambda: self._disapprove[doc.kind](identifier),
            success=f"{singular.capitalize()} has been disapproved and deleted.",
            failure=f"Failed to disapprove {singular}.",
            forbidden=f"Only admins can disapprove {plural}.",
            not_found=f"{singular.capitalize()} not found. It may have already been deleted.",
        )
