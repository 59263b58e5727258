"""Create/edit forms for drafts and the admin-only delete action.

Required fields are validated before any network call. New documents are
always created as drafts. In edit mode the display identifier (policy id or
bylaw number) is immutable and is not sent.
"""

import logging
import re
from dataclasses import dataclass

from pydantic import ValidationError

from portal.api.bylaws import BylawService
from portal.api.errors import LoginRequired, PortalError, ValidationFailed
from portal.api.policies import PolicyService
from portal.api.session import SessionGate
from portal.models.common import DocumentKind, Role, section_key
from portal.models.documents import BylawCreate, BylawUpdate, DocumentView, PolicyCreate, PolicyUpdate
from portal.pages.actions import ActionResult, Confirm, run_action

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class PolicyForm:
    policy_id: str = ""
    policy_name: str = ""
    section: str = ""
    policy_content: str = ""


@dataclass
class BylawForm:
    bylaw_number: str = ""
    bylaw_title: str = ""
    bylaw_content: str = ""


def validate_policy_form(form: PolicyForm, edit_mode: bool = False) -> None:
    """Raise ValidationFailed for the first missing field, in form order."""
    if not edit_mode and not form.policy_id.strip():
        raise ValidationFailed("policy_id", "Please enter a Policy ID")
    if not form.policy_name.strip():
        raise ValidationFailed("policy_name", "Please enter a Policy Name")
    if not form.section.strip():
        raise ValidationFailed("section", "Please select a Section")
    if not form.policy_content.strip():
        raise ValidationFailed("policy_content", "Please enter Policy Content")


def parse_bylaw_number(text: str) -> int:
    """Leading integer of the input, like the number field's own parsing."""
    if not text.strip():
        raise ValidationFailed("bylaw_number", "Please enter a Bylaw Number")
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValidationFailed("bylaw_number", "Bylaw Number must be a valid number")
    return int(match.group(1))


def validate_bylaw_form(form: BylawForm, edit_mode: bool = False) -> int | None:
    """Validate a bylaw form; returns the parsed number when creating."""
    number = None if edit_mode else parse_bylaw_number(form.bylaw_number)
    if not form.bylaw_title.strip():
        raise ValidationFailed("bylaw_title", "Please enter a Bylaw Title")
    if not form.bylaw_content.strip():
        raise ValidationFailed("bylaw_content", "Please enter Bylaw Content")
    return number


def _invalid(e: ValidationFailed) -> ActionResult:
    return ActionResult.failed(e.message)


class PolicyEditor:
    """Create a policy draft, or edit an existing policy by its UUID."""

    def __init__(self, policies: PolicyService) -> None:
        self._policies = policies
        self.original: DocumentView | None = None

    @property
    def edit_mode(self) -> bool:
        return self.original is not None

    async def load(self, uuid: str) -> PolicyForm | None:
        """Enter edit mode for the policy with this UUID; None when it is gone.

        Raises:
            LoginRequired: Signed out or session expired
        """
        try:
            docs = await self._policies.list_all()
        except LoginRequired:
            raise
        except PortalError as e:
            logger.error("Failed to load policy %s for editing: %s", uuid, e.message)
            return None
        self.original = next((doc for doc in docs if doc.id == uuid), None)
        if self.original is None:
            return None
        return PolicyForm(
            policy_id=self.original.display_id,
            policy_name=self.original.title,
            section=self.original.section or "",
            policy_content=self.original.content,
        )

    async def save(self, form: PolicyForm) -> ActionResult:
        try:
            validate_policy_form(form, edit_mode=self.edit_mode)
        except ValidationFailed as e:
            return _invalid(e)

        section = section_key(form.section) or form.section.strip()
        try:
            if self.original is not None:
                original_id = self.original.display_id
                update = PolicyUpdate(
                    policy_name=form.policy_name.strip(),
                    section=section,
                    policy_content=form.policy_content,
                )
                return await run_action(
                    lambda: self._policies.update(original_id, update),
                    success="Policy updated successfully",
                    failure="Failed to update policy.",
                )
            create = PolicyCreate(
                policy_id=form.policy_id.strip(),
                policy_name=form.policy_name.strip(),
                section=section,
                policy_content=form.policy_content,
            )
        except ValidationError as e:
            return ActionResult.failed(str(e.errors()[0]["msg"]))
        return await run_action(
            lambda: self._policies.create(create),
            success="Policy created successfully",
            failure="Failed to create policy.",
        )


class BylawEditor:
    """Create a bylaw draft, or edit an existing bylaw by its UUID."""

    def __init__(self, bylaws: BylawService) -> None:
        self._bylaws = bylaws
        self.original: DocumentView | None = None

    @property
    def edit_mode(self) -> bool:
        return self.original is not None

    async def load(self, uuid: str) -> BylawForm | None:
        try:
            docs = await self._bylaws.list_all()
        except LoginRequired:
            raise
        except PortalError as e:
            logger.error("Failed to load bylaw %s for editing: %s", uuid, e.message)
            return None
        self.original = next((doc for doc in docs if doc.id == uuid), None)
        if self.original is None:
            return None
        return BylawForm(
            bylaw_number=self.original.display_id,
            bylaw_title=self.original.title,
            bylaw_content=self.original.content,
        )

    async def save(self, form: BylawForm) -> ActionResult:
        try:
            number = validate_bylaw_form(form, edit_mode=self.edit_mode)
        except ValidationFailed as e:
            return _invalid(e)

        try:
            if self.original is not None:
                bylaw_id = self.original.id
                update = BylawUpdate(bylaw_title=form.bylaw_title.strip(), bylaw_content=form.bylaw_content)
                return await run_action(
                    lambda: self._bylaws.update(bylaw_id, update),
                    success="Bylaw updated successfully",
                    failure="Failed to update bylaw.",
                )
            create = BylawCreate(
                bylaw_number=number,
                bylaw_title=form.bylaw_title.strip(),
                bylaw_content=form.bylaw_content,
            )
        except ValidationError as e:
            return ActionResult.failed(str(e.errors()[0]["msg"]))
        return await run_action(
            lambda: self._bylaws.create(create),
            success="Bylaw created successfully",
            failure="Failed to create bylaw.",
        )


async def delete_document(
    doc: DocumentView,
    gate: SessionGate,
    policies: PolicyService,
    bylaws: BylawService,
    confirm: Confirm,
) -> ActionResult:
    """Admin-only delete: verify the role first, then confirm, then delete.

    Args:
        doc: Document to delete
        gate: Session gate used to look up the current role
        policies: Policy service (delete by dotted id)
        bylaws: Bylaw service (delete by UUID)
        confirm: Asks the user before deleting

    Returns:
        ActionResult describing the outcome
    """
    noun = "policy" if doc.kind == DocumentKind.policy else "bylaw"
    denied = f"Sorry, only admin is allowed to delete {noun}."
    try:
        role = await gate.role()
    except LoginRequired as e:
        return ActionResult(ok=False, message=e.message, redirect_to=e.redirect_to)
    except PortalError as e:
        logger.warning("Role lookup failed before delete: %s", e.message)
        return ActionResult.failed("Failed to verify permissions. Please try again.")

    if role != Role.admin:
        return ActionResult.failed(denied)

    if not confirm(
        f'⚠️ WARNING: Are you sure you want to delete "{doc.title}"?\n\n'
        f"This action cannot be undone. The {noun} will be permanently removed from the system."
    ):
        return ActionResult.declined()

    if doc.kind == DocumentKind.policy:
        target, remove = doc.nav_key, policies.delete
    else:
        target, remove = doc.id, bylaws.delete
    return await run_action(
        lambda: remove(target),
        success=f"{noun.capitalize()} deleted successfully.",
        failure=f"Failed to delete {noun}.",
        forbidden=denied,
        not_found=f"{noun.capitalize()} not found. It may have already been deleted.",
    )
