"""Integration tests for approvals, editors, deletion, reviews and suggestions."""

import json

import pytest

from portal.api.errors import LoginRequired
from portal.models.common import DocumentKind, DocumentStatus, ReviewStance
from portal.pages.actions import always_confirm
from portal.pages.approvals import ApprovalsPage
from portal.pages.editor import BylawEditor, BylawForm, PolicyEditor, PolicyForm, delete_document
from portal.pages.reviews import PolicyReviewPage, format_content
from portal.pages.suggestions import SuggestionsAdminPage


class RecordingConfirm:
    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.questions: list[str] = []

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer


def _approvals(portal, confirm=always_confirm, **kwargs) -> ApprovalsPage:
    return ApprovalsPage(portal.policies, portal.bylaws, confirm, **kwargs)


def _policy(fake_api, policy_id: str) -> dict | None:
    return next((p for p in fake_api.policies if p["policy_id"] == policy_id), None)


# Approvals


@pytest.mark.asyncio
async def test_approval_queues_list_drafts_of_each_kind(admin_portal, fake_api) -> None:
    """Test that both queues show only drafts."""
    queues = await _approvals(admin_portal).load_all()

    assert [d.display_id for d in queues[DocumentKind.policy].items] == ["2.2"]
    assert [d.display_id for d in queues[DocumentKind.bylaw].items] == ["11"]
    assert fake_api.calls("GET", "/api/policies")[0].url.params["status"] == "draft"


@pytest.mark.asyncio
async def test_approval_queue_filter(admin_portal, fake_api) -> None:
    """Test that the queue filter matches visible text."""
    page = _approvals(admin_portal)

    assert len((await page.load(DocumentKind.policy, "referendum")).items) == 1
    assert len((await page.load(DocumentKind.policy, "Submitted: 4/5/2025")).items) == 1
    empty = await page.load(DocumentKind.policy, "zzz")
    assert empty.items == []
    assert "No pending policies" in empty.html


@pytest.mark.asyncio
async def test_approve_policy(admin_portal, fake_api) -> None:
    """Test approving a draft by its dotted id."""
    confirm = RecordingConfirm(True)
    page = _approvals(admin_portal, confirm)
    queue = await page.load(DocumentKind.policy)

    result = await page.approve(queue.items[0])

    assert result.ok
    assert result.message == "Policy approved successfully!"
    assert result.refresh
    assert confirm.questions == ["Are you sure you want to approve this policy?"]
    assert _policy(fake_api, "2.2")["status"] == "approved"
    assert (await page.load(DocumentKind.policy)).items == []


@pytest.mark.asyncio
async def test_declined_approval_sends_nothing(admin_portal, fake_api) -> None:
    """Test that cancelling the confirmation skips the call."""
    page = _approvals(admin_portal, RecordingConfirm(False))
    queue = await page.load(DocumentKind.policy)

    result = await page.approve(queue.items[0])

    assert result.cancelled
    assert fake_api.calls("PUT", "/api/policies/2.2/approve") == []


@pytest.mark.asyncio
async def test_approve_requires_admin(pwg_portal, fake_api) -> None:
    """Test the 403 wording for non-admins."""
    page = _approvals(pwg_portal)
    queue = await page.load(DocumentKind.policy)

    result = await page.approve(queue.items[0])

    assert not result.ok
    assert result.message == "Only admins can approve policies."
    assert _policy(fake_api, "2.2")["status"] == "draft"
    assert pwg_portal.gate.is_authenticated


@pytest.mark.asyncio
async def test_approve_vanished_draft(admin_portal, fake_api) -> None:
    """Test that a draft deleted meanwhile reports not found and refreshes."""
    page = _approvals(admin_portal)
    queue = await page.load(DocumentKind.policy)
    fake_api.policies.remove(_policy(fake_api, "2.2"))

    result = await page.approve(queue.items[0])

    assert result.message == "Policy not found. It may have already been deleted."
    assert result.refresh


@pytest.mark.asyncio
async def test_disapprove_bylaw_deletes_by_uuid(admin_portal, fake_api) -> None:
    """Test that disapproving a bylaw deletes it by UUID."""
    page = _approvals(admin_portal)
    queue = await page.load(DocumentKind.bylaw)

    result = await page.disapprove(queue.items[0])

    assert result.message == "Bylaw has been disapproved and deleted."
    assert len(fake_api.calls("DELETE", "/api/bylaws/b-0004")) == 1
    assert all(b["id"] != "b-0004" for b in fake_api.bylaws)


@pytest.mark.asyncio
async def test_injected_handlers_are_used(admin_portal, fake_api) -> None:
    """Test that approve handlers come from the constructor."""
    approved: list[str] = []

    async def approve(identifier: str) -> None:
        approved.append(identifier)

    page = _approvals(admin_portal, approve_handlers={DocumentKind.policy: approve, DocumentKind.bylaw: approve})
    queue = await page.load(DocumentKind.policy)

    await page.approve(queue.items[0])

    assert approved == ["2.2"]
    assert fake_api.calls("PUT", "/api/policies/2.2/approve") == []


@pytest.mark.asyncio
async def test_approvals_forbidden_and_signed_out(portal, fake_api) -> None:
    """Test the permission message and the login redirect."""
    page = _approvals(portal)
    with pytest.raises(LoginRequired):
        await page.load(DocumentKind.policy)

    portal.gate.start(fake_api.token_for("student@ualberta.ca"))
    fake_api.fail[("GET", "/api/bylaws")] = 403
    queue = await page.load(DocumentKind.bylaw)

    assert queue.error.startswith("You don't have permission to view bylaws.")
    assert "Error loading bylaws" in queue.html


# Editors


@pytest.mark.asyncio
async def test_create_policy_draft(pwg_portal, fake_api) -> None:
    """Test that new policies are created as drafts with a section key."""
    editor = PolicyEditor(pwg_portal.policies)

    result = await editor.save(
        PolicyForm(policy_id=" 4.1 ", policy_name="Travel", section="Governance & Elections", policy_content="Body")
    )

    assert result.message == "Policy created successfully"
    created = _policy(fake_api, "4.1")
    assert created["status"] == "draft"
    assert created["section"] == "2"


@pytest.mark.asyncio
async def test_create_duplicate_policy_shows_server_detail(pwg_portal, fake_api) -> None:
    """Test that a rejected create surfaces the API's message."""
    result = await PolicyEditor(pwg_portal.policies).save(
        PolicyForm(policy_id="1.1", policy_name="Dup", section="1", policy_content="Body")
    )

    assert not result.ok
    assert result.message == "Policy ID already exists"


@pytest.mark.asyncio
async def test_edit_policy_keeps_policy_id(pwg_portal, fake_api) -> None:
    """Test that edits are sent without the immutable policy id."""
    editor = PolicyEditor(pwg_portal.policies)
    form = await editor.load("p-0001")

    assert editor.edit_mode
    assert form.policy_id == "1.1"
    assert form.section == "1"

    form.policy_name = "Mission (revised)"
    form.policy_id = ""
    result = await editor.save(form)

    assert result.message == "Policy updated successfully"
    put = fake_api.calls("PUT", "/api/policies/1.1")[0]
    assert "policy_id" not in json.loads(put.content)
    assert _policy(fake_api, "1.1")["policy_name"] == "Mission (revised)"


@pytest.mark.asyncio
async def test_editor_load_unknown_uuid(pwg_portal, fake_api) -> None:
    """Test that an unknown UUID leaves the editor in create mode."""
    editor = PolicyEditor(pwg_portal.policies)

    assert await editor.load("missing") is None
    assert not editor.edit_mode


@pytest.mark.asyncio
async def test_create_and_edit_bylaw(pwg_portal, fake_api) -> None:
    """Test bylaw creation and editing by UUID."""
    created = await BylawEditor(pwg_portal.bylaws).save(
        BylawForm(bylaw_number="12", bylaw_title="Committees", bylaw_content="Body")
    )
    assert created.message == "Bylaw created successfully"
    post = fake_api.calls("POST", "/api/bylaws")[0]
    assert json.loads(post.content) == {
        "bylaw_number": 12,
        "bylaw_title": "Committees",
        "bylaw_content": "Body",
        "status": "draft",
    }

    editor = BylawEditor(pwg_portal.bylaws)
    form = await editor.load("b-0001")
    assert form.bylaw_number == "2"
    form.bylaw_title = "Membership Rules"
    updated = await editor.save(form)

    assert updated.message == "Bylaw updated successfully"
    assert json.loads(fake_api.calls("PUT", "/api/bylaws/b-0001")[0].content) == {
        "bylaw_title": "Membership Rules",
        "bylaw_content": "All students are members.",
    }


# Delete


@pytest.mark.asyncio
async def test_delete_checks_role_before_confirming(pwg_portal, fake_api) -> None:
    """Test that non-admins are refused without being asked to confirm."""
    confirm = RecordingConfirm(True)
    doc = await pwg_portal.policies.get("1.1")

    result = await delete_document(doc, pwg_portal.gate, pwg_portal.policies, pwg_portal.bylaws, confirm)

    assert result.message == "Sorry, only admin is allowed to delete policy."
    assert confirm.questions == []
    assert fake_api.calls("DELETE", "/api/policies/1.1") == []


@pytest.mark.asyncio
async def test_admin_delete_policy_and_bylaw(admin_portal, fake_api) -> None:
    """Test that admins delete policies by id and bylaws by UUID."""
    policy = await admin_portal.policies.get("1.1")
    bylaw = await admin_portal.bylaws.get("b-0003")
    args = (admin_portal.gate, admin_portal.policies, admin_portal.bylaws)

    declined = await delete_document(policy, *args, RecordingConfirm(False))
    assert declined.cancelled
    assert _policy(fake_api, "1.1") is not None

    deleted = await delete_document(policy, *args, always_confirm)
    assert deleted.message == "Policy deleted successfully."
    assert _policy(fake_api, "1.1") is None

    confirm = RecordingConfirm(True)
    removed = await delete_document(bylaw, *args, confirm)
    assert removed.message == "Bylaw deleted successfully."
    assert '"Amendments"' in confirm.questions[0]
    assert len(fake_api.calls("DELETE", "/api/bylaws/b-0003")) == 1


# Reviews


@pytest.mark.asyncio
async def test_review_panel_shows_own_stance_and_resubmits(pwg_portal, fake_api) -> None:
    """Test that a reviewer sees and changes their stance."""
    page = PolicyReviewPage(pwg_portal.policies, pwg_portal.reviews, pwg_portal.gate, always_confirm)
    await page.load("1.1")

    panel = await page.load_reviews()
    assert panel.summary.total == 1
    assert panel.my_stance == ReviewStance.confirmed

    result = await page.submit_review(ReviewStance.needs_work)
    assert result.message == "Review submitted successfully!"

    panel = await page.load_reviews()
    assert panel.my_stance == ReviewStance.needs_work
    assert panel.summary.total == 1


@pytest.mark.asyncio
async def test_review_panel_without_reviews(pwg_portal, fake_api) -> None:
    """Test that a policy nobody reviewed shows an empty summary."""
    page = PolicyReviewPage(pwg_portal.policies, pwg_portal.reviews, pwg_portal.gate, always_confirm)
    await page.load("1.2")

    panel = await page.load_reviews()

    assert panel.summary.total == 0
    assert panel.my_stance is None
    assert (await page.submit_review(None)).message == "Please select a review option."


@pytest.mark.asyncio
async def test_review_page_requires_login(portal, fake_api) -> None:
    """Test that the staff policy view needs a token."""
    page = PolicyReviewPage(portal.policies, portal.reviews, portal.gate, always_confirm)

    with pytest.raises(LoginRequired, match="Please login to view policies."):
        await page.load("1.1")


@pytest.mark.asyncio
async def test_reset_all_reviews_admin_only(pwg_portal, fake_api) -> None:
    """Test that only admins may reset reviews, after confirming."""
    page = PolicyReviewPage(pwg_portal.policies, pwg_portal.reviews, pwg_portal.gate, always_confirm)
    assert (await page.reset_all()).message == "Only admins can reset all reviews."

    pwg_portal.gate.start(fake_api.token_for("admin@ualberta.ca"))
    result = await page.reset_all()

    assert result.message == "All reviews reset successfully. 1 review(s) deleted across all policies."
    assert fake_api.reviews == {}


def test_format_content_keeps_html_and_breaks_plain_text() -> None:
    """Test staff-side content formatting."""
    assert format_content("<p>Hi</p>\nthere") == "<p>Hi</p>\nthere"
    assert format_content("a\r\nb\nc") == "a<br>b<br>c"
    assert format_content("") == ""


# Suggestions


@pytest.mark.asyncio
async def test_suggestions_newest_first_and_filter(pwg_portal, fake_api) -> None:
    """Test ordering, filtering and rendering of the staff suggestion list."""
    page = SuggestionsAdminPage(pwg_portal.suggestions, always_confirm)

    items = await page.load()

    assert [s.id for s in items] == ["s-0002", "s-0001"]
    assert [s.id for s in page.visible("mission")] == ["s-0001"]
    assert "Policy: 1.1 - Mission Statement" in page.render()
    assert "More study space please." not in page.render("mission")


@pytest.mark.asyncio
async def test_suggestions_with_numeric_ids(pwg_portal, fake_api) -> None:
    """Test that suggestions keyed by integers still load."""
    fake_api.suggestions.append(
        {"id": 7, "suggestion": "Numbers too.", "created_at": "2025-04-01T10:00:00Z", "policy_id": 3}
    )
    page = SuggestionsAdminPage(pwg_portal.suggestions, always_confirm)

    items = await page.load()

    assert [s.id for s in items] == ["7", "s-0002", "s-0001"]
    assert items[0].policy_id == "3"
    assert page.error is None

@pytest.mark.asyncio
async def test_suggestions_forbidden_for_public_role(portal, fake_api) -> None:
    """Test the permission error state for public accounts."""
    portal.gate.start(fake_api.token_for("student@ualberta.ca"))
    page = SuggestionsAdminPage(portal.suggestions, always_confirm)

    assert await page.load() == []
    assert "Error loading suggestions" in page.render()


@pytest.mark.asyncio
async def test_suggestions_signed_out(portal, fake_api) -> None:
    """Test that listing suggestions requires a session."""
    with pytest.raises(LoginRequired):
        await SuggestionsAdminPage(portal.suggestions, always_confirm).load()


@pytest.mark.asyncio
async def test_delete_suggestion_confirms_with_preview(pwg_portal, fake_api) -> None:
    """Test that deletion quotes the suggestion before removing it."""
    confirm = RecordingConfirm(True)
    page = SuggestionsAdminPage(pwg_portal.suggestions, confirm)
    items = await page.load()

    result = await page.delete(items[0])

    assert result.message == "Suggestion deleted successfully."
    assert 'Preview: "More study space please...."' in confirm.questions[0]
    assert [s["id"] for s in fake_api.suggestions] == ["s-0001"]

    again = await page.delete(items[0])
    assert again.message == "Suggestion not found. It may have already been deleted."
