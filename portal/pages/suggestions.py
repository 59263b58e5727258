"""Suggestions: the public feedback form and the staff review list."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from portal.api.errors import Forbidden, LoginRequired, PortalError, ValidationFailed
from portal.api.policies import PolicyService
from portal.api.suggestions import SuggestionService
from portal.config import get_settings
from portal.features.mapping import parse_timestamp
from portal.features.search import filter_items
from portal.models.common import DEFAULT_SECTION, section_name
from portal.models.documents import DocumentView
from portal.models.suggestions import Suggestion
from portal.pages.actions import ActionResult, Confirm, run_action
from portal.render.admin import reference_text, render_error_state, render_suggestion_list

logger = logging.getLogger(__name__)

THANK_YOU = "Thank you for your suggestion!\n\nYour feedback has been submitted successfully."
SUBMIT_FAILED = "Failed to submit suggestion. Please try again later."


@dataclass(frozen=True)
class PolicyOption:
    value: str
    label: str


def policy_options(policies: list[DocumentView]) -> list[PolicyOption]:
    """Dropdown options grouped by section key, labelled "id - name (section)"."""
    by_section: dict[str, list[DocumentView]] = {}
    for policy in policies:
        by_section.setdefault(policy.section or DEFAULT_SECTION, []).append(policy)
    options = []
    for key in sorted(by_section):
        for policy in by_section[key]:
            options.append(
                PolicyOption(
                    value=policy.display_id,
                    label=f"{policy.nav_key} - {policy.title} ({section_name(key)})",
                )
            )
    return options


def validate_suggestion(email: str, policy_id: str, text: str, email_suffix: str | None = None) -> None:
    """Check the form in order: email present, policy chosen, text present, email domain.

    Raises:
        ValidationFailed: First failing check
    """
    suffix = email_suffix if email_suffix is not None else get_settings().suggestion_email_suffix
    if not email.strip():
        raise ValidationFailed("email", "Please enter your UAlberta email address")
    if not policy_id:
        raise ValidationFailed("policy_id", "Please select a policy to refer to.")
    if not text.strip():
        raise ValidationFailed("suggestion", "Please enter your suggestion.")
    if suffix not in email:
        raise ValidationFailed("email", "Please enter a valid UAlberta email address")


class SuggestionForm:
    """Public suggestion form. The email is checked but never sent."""

    def __init__(self, suggestions: SuggestionService, policies: PolicyService) -> None:
        self._suggestions = suggestions
        self._policies = policies
        self.options: list[PolicyOption] = []

    async def load_options(self) -> list[PolicyOption]:
        try:
            approved = await self._policies.list_approved()
        except PortalError as e:
            logger.error("Failed to load policies for the suggestion form: %s", e.message)
            approved = []
        self.options = policy_options(approved)
        return self.options

    async def submit(self, email: str, policy_id: str, text: str) -> ActionResult:
        try:
            validate_suggestion(email, policy_id, text)
        except ValidationFailed as e:
            return ActionResult.failed(e.message)

        try:
            await self._suggestions.submit(policy_id, text.strip())
        except PortalError as e:
            logger.warning("Suggestion submission failed: %s", e.message)
            return ActionResult.failed(SUBMIT_FAILED)
        return ActionResult.done(THANK_YOU, refresh=False)


def _newest_first_key(suggestion: Suggestion) -> datetime:
    return parse_timestamp(suggestion.created_at) or datetime.fromtimestamp(0, timezone.utc)


def _suggestion_search_text(suggestion: Suggestion) -> list[str | None]:
    return [reference_text(suggestion), suggestion.suggestion]


class SuggestionsAdminPage:
    """Staff list of suggestions, newest first, with filter and delete."""

    def __init__(self, suggestions: SuggestionService, confirm: Confirm) -> None:
        self._suggestions = suggestions
        self._confirm = confirm
        self.items: list[Suggestion] = []
        self.error: str | None = None

    async def load(self) -> list[Suggestion]:
        """Fetch all suggestions.

        Raises:
            LoginRequired: Signed out or session expired
        """
        self.error = None
        try:
            items = await self._suggestions.list_all()
        except LoginRequired:
            raise
        except Forbidden:
            self.error = (
                "You don't have permission to view suggestions. "
                "Please login with an admin or policy_working_group account."
            )
            items = []
        except PortalError as e:
            logger.error("Failed to load suggestions: %s", e.message)
            self.error = e.message
            items = []
        self.items = sorted(items, key=_newest_first_key, reverse=True)
        return self.items

    def visible(self, query: str = "") -> list[Suggestion]:
        return filter_items(self.items, query, _suggestion_search_text)

    def render(self, query: str = "") -> str:
        if self.error is not None:
            return render_error_state("suggestions", self.error)
        return render_suggestion_list(self.visible(query))

    async def delete(self, suggestion: Suggestion) -> ActionResult:
        excerpt = suggestion.suggestion[:50]
        if not self._confirm(
            "⚠️ WARNING: Are you sure you want to delete this student suggestion?\n\n"
            f'Preview: "{excerpt}..."\n\n'
            "This action cannot be undone. The suggestion will be permanently removed from the system."
        ):
            return ActionResult.declined()
        return await run_action(
            lambda: self._suggestions.delete(suggestion.id),
            success="Suggestion deleted successfully.",
            failure="Failed to delete suggestion.",
            forbidden=(
                "You don't have permission to delete suggestions. "
                "Only admin and policy_working_group members can delete suggestions."
            ),
            not_found="Suggestion not found. It may have already been deleted.",
        )
