"""Staff view of a single policy with its review panel."""

import logging
from dataclasses import dataclass

from portal.api.errors import LoginRequired, PortalError
from portal.api.policies import PolicyService
from portal.api.reviews import ReviewService
from portal.api.session import SessionGate
from portal.models.common import ReviewStance, Role
from portal.models.documents import DocumentView
from portal.models.reviews import ReviewSummary
from portal.pages.actions import ActionResult, Confirm, run_action

logger = logging.getLogger(__name__)

RESET_WARNING = (
    "⚠️ WARNING: Are you sure you want to reset ALL reviews for ALL policies?\n\n"
    "This will delete all confirmed and needs_work reviews for every policy in the system "
    "and cannot be undone."
)


def format_content(content: str) -> str:
    """Staff-side content: HTML passes through, plain text gets <br> line breaks."""
    if not content:
        return ""
    if any(tag in content for tag in ("<p>", "<div>", "<h", "<strong>", "<em>")):
        return content
    return content.replace("\r\n", "<br>").replace("\n", "<br>")


@dataclass
class ReviewPanel:
    summary: ReviewSummary
    my_stance: ReviewStance | None = None


class PolicyReviewPage:
    """One policy as seen by staff, with review submission and admin reset."""

    def __init__(
        self,
        policies: PolicyService,
        reviews: ReviewService,
        gate: SessionGate,
        confirm: Confirm,
    ) -> None:
        self._policies = policies
        self._reviews = reviews
        self._gate = gate
        self._confirm = confirm
        self.policy: DocumentView | None = None

    async def load(self, policy_id: str) -> DocumentView | None:
        """Load the policy by dotted id; None when it cannot be shown.

        Raises:
            LoginRequired: Signed out or session expired
        """
        self._gate.require_token("view policies")
        try:
            self.policy = await self._policies.get(policy_id)
        except PortalError as e:
            logger.warning("Could not load policy %s: %s", policy_id, e.message)
            self.policy = None
        return self.policy

    async def load_reviews(self) -> ReviewPanel:
        """Current review counts and the viewer's own stance, if any."""
        if self.policy is None:
            return ReviewPanel(summary=ReviewSummary())
        email = None
        try:
            email = (await self._gate.current_user()).email
        except LoginRequired:
            raise
        except PortalError as e:
            logger.warning("Could not load the current user: %s", e.message)
        try:
            summary = await self._reviews.get(self.policy.nav_key)
        except LoginRequired:
            raise
        except PortalError as e:
            logger.error("Failed to load reviews: %s", e.message)
            summary = ReviewSummary()
        return ReviewPanel(summary=summary, my_stance=summary.stance_of(email))

    async def submit_review(self, stance: ReviewStance | None) -> ActionResult:
        if self.policy is None:
            return ActionResult.failed("Error: Could not find policy ID.")
        if stance is None:
            return ActionResult.failed("Please select a review option.")
        policy_id = self.policy.nav_key
        return await run_action(
            lambda: self._reviews.submit(policy_id, stance),
            success="Review submitted successfully!",
            failure="Failed to submit review.",
        )

    async def reset_all(self) -> ActionResult:
        """Admin-only: delete every review of every policy."""
        try:
            role = await self._gate.role()
        except LoginRequired as e:
            return ActionResult(ok=False, message=e.message, redirect_to=e.redirect_to)
        except PortalError as e:
            logger.warning("Role lookup failed before reset: %s", e.message)
            return ActionResult.failed("Failed to verify permissions. Please try again.")
        if role != Role.admin:
            return ActionResult.failed("Only admins can reset all reviews.")
        if not self._confirm(RESET_WARNING):
            return ActionResult.declined()
        return await run_action(
            self._reviews.reset_all,
            success=lambda deleted: (
                f"All reviews reset successfully. {deleted} review(s) deleted across all policies."
            ),
            failure="Failed to reset reviews.",
            forbidden="Only admins can reset all reviews.",
        )
