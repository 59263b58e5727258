"""Master dashboard: policy and review totals, review table, user management."""

import asyncio
import logging
from dataclasses import dataclass, field

from portal.api.errors import Forbidden, LoginRequired, PortalError
from portal.api.policies import PolicyService
from portal.api.reviews import ReviewService
from portal.api.session import SessionGate
from portal.api.users import UserService
from portal.models.common import Role
from portal.models.documents import DocumentView
from portal.models.reviews import ReviewSummary
from portal.models.users import User
from portal.pages.actions import ActionResult, Confirm, run_action
from portal.render.admin import initial_password, render_review_table, render_users_table
from portal.render.formatting import escape

logger = logging.getLogger(__name__)

ALL_SECTIONS = "all"


@dataclass
class ReviewTotals:
    reviews: int = 0
    confirmed: int = 0
    needs_work: int = 0


@dataclass
class DashboardView:
    policy_count: int
    rows: list[tuple[DocumentView, ReviewSummary]] = field(default_factory=list)
    totals: ReviewTotals = field(default_factory=ReviewTotals)
    html: str = ""


@dataclass
class UsersView:
    users: list[User] = field(default_factory=list)
    html: str = ""
    error: str | None = None


def collapse_name(name: str) -> str:
    """Full name with runs of whitespace collapsed to single spaces."""
    return " ".join(name.split())


class DashboardPage:
    """Admin overview of policies, reviews and users.

    Args:
        policies: Policy service (all statuses)
        reviews: Review service
        users: User service
        gate: Session gate, used for the viewer's role
        confirm: Asks the user before destructive actions
    """

    def __init__(
        self,
        policies: PolicyService,
        reviews: ReviewService,
        users: UserService,
        gate: SessionGate,
        confirm: Confirm,
    ) -> None:
        self._policies = policies
        self._reviews = reviews
        self._users = users
        self._gate = gate
        self._confirm = confirm

    async def load(self, section_filter: str = ALL_SECTIONS) -> DashboardView:
        """Count policies and tabulate their reviews, optionally for one section.

        Raises:
            LoginRequired: Signed out or session expired
        """
        try:
            policies = await self._policies.list_all()
        except LoginRequired:
            raise
        except PortalError as e:
            logger.error("Failed to load policies for the dashboard: %s", e.message)
            policies = []

        if section_filter == ALL_SECTIONS:
            shown = policies
        else:
            shown = [p for p in policies if str(p.section) == str(section_filter)]

        summaries = await asyncio.gather(*(self._reviews_or_empty(p) for p in shown))
        rows = list(zip(shown, summaries, strict=True))
        totals = ReviewTotals()
        for _, summary in rows:
            totals.confirmed += summary.confirmed.number_of_people
            totals.needs_work += summary.needs_work.number_of_people
        totals.reviews = totals.confirmed + totals.needs_work

        return DashboardView(
            policy_count=len(policies),
            rows=rows,
            totals=totals,
            html=render_review_table(rows),
        )

    async def _reviews_or_empty(self, policy: DocumentView) -> ReviewSummary:
        try:
            return await self._reviews.get(policy.nav_key)
        except PortalError as e:
            logger.error("Failed to load reviews for policy %s: %s", policy.nav_key, e.message)
            return ReviewSummary()

    async def _viewer_role(self) -> Role | None:
        try:
            return await self._gate.role()
        except PortalError as e:
            logger.warning("Could not determine the current role: %s", e.message)
            return None

    async def load_users(self) -> UsersView:
        try:
            users = await self._users.list_users()
        except LoginRequired:
            return UsersView(html='<p class="empty-message">Please login to view users.</p>')
        except Forbidden:
            return UsersView(
                html="<p class=\"empty-message\">You don't have permission to view users.</p>",
                error="forbidden",
            )
        except PortalError as e:
            logger.error("Failed to load users: %s", e.message)
            return UsersView(html=f'<p class="empty-message">Error loading users: {escape(e.message)}</p>', error=e.message)
        role = await self._viewer_role()
        return UsersView(users=users, html=render_users_table(users, role))

    async def add_user(self, name: str, email: str) -> ActionResult:
        """Register a user whose initial password is their lower-cased first name."""
        if await self._viewer_role() != Role.admin:
            return ActionResult.failed("Can't create new user. Only master admin can add new users.")
        full_name = collapse_name(name)
        email = email.strip().lower()
        if not full_name or not email:
            return ActionResult.failed("Please fill in all fields")
        password = initial_password(full_name)
        return await run_action(
            lambda: self._users.register(email, password, full_name),
            success=f"User {full_name} ({email}) has been successfully added!\nPassword: {password}",
            failure="Error adding user.",
        )

    async def change_role(self, user: User, role: Role) -> ActionResult:
        if await self._viewer_role() != Role.admin:
            return ActionResult.failed("Only master admin can change user roles.", refresh=True)
        result = await run_action(
            lambda: self._users.update_role(user.id, role),
            success=f"User role updated to {role.value} successfully.",
            failure="Error updating user role.",
        )
        # Reload even on failure so the select shows the stored role
        return ActionResult(ok=result.ok, message=result.message, refresh=True, redirect_to=result.redirect_to)

    async def delete_user(self, user: User) -> ActionResult:
        if await self._viewer_role() != Role.admin:
            return ActionResult.failed("Only master admin can delete users.")
        if not self._confirm(f'Are you sure you want to delete user "{user.email}"? This action cannot be undone.'):
            return ActionResult.declined()
        return await run_action(
            lambda: self._users.delete_user(user.id),
            success=lambda message: message or f"User {user.email} has been deleted successfully.",
            failure="Error deleting user.",
        )

    async def reset_reviews(self) -> ActionResult:
        if await self._viewer_role() != Role.admin:
            return ActionResult.failed("Only master admin can reset reviews.")
        if not self._confirm("Are you sure you want to reset ALL reviews for ALL policies? This action cannot be undone."):
            return ActionResult.declined()
        return await run_action(
            self._reviews.reset_all,
            success=lambda deleted: f"Successfully reset {deleted} reviews.",
            failure="Error resetting reviews.",
        )
