"""HTML fragments for the staff pages: approvals, reviews, users, suggestions."""

from collections.abc import Sequence

from portal.config import get_settings
from portal.features.mapping import parse_timestamp
from portal.models.common import DocumentKind, Role, section_name
from portal.models.documents import DocumentView
from portal.models.reviews import ReviewBucket, ReviewSummary
from portal.models.suggestions import Suggestion
from portal.models.users import User
from portal.render.formatting import escape, preview, short_date


def _empty_state(icon: str, text: str, subtext: str) -> str:
    return (
        '<div class="empty-state">'
        f'<div class="empty-state-icon">{icon}</div>'
        f'<div class="empty-state-text">{escape(text)}</div>'
        f'<div class="empty-state-subtext">{escape(subtext)}</div>'
        "</div>"
    )


def render_error_state(what: str, message: str) -> str:
    return _empty_state("⚠️", f"Error loading {what}", message)


# Approvals


def approval_identifier(doc: DocumentView) -> str:
    """Key used by approve/disapprove: dotted id for policies, UUID for bylaws."""
    return doc.nav_key


def render_approval_item(doc: DocumentView, preview_chars: int | None = None) -> str:
    """One pending draft with its preview and approve/disapprove controls."""
    limit = preview_chars if preview_chars is not None else get_settings().review_preview_chars
    is_policy = doc.kind == DocumentKind.policy
    label = doc.display_id if is_policy else f"Bylaw #{doc.display_id}"
    section_html = (
        f'<span class="approval-item-section">{escape(section_name(doc.section or "N/A"))}</span>'
        if is_policy
        else ""
    )
    return (
        f'<div class="approval-item" data-id="{escape(doc.id)}" '
        f'data-identifier="{escape(approval_identifier(doc))}" data-type="{doc.kind.value}">'
        '<div class="approval-item-header"><div class="approval-item-info">'
        f'<h3 class="approval-item-title">{escape(doc.title)}</h3>'
        '<div class="approval-item-meta">'
        f'<span class="approval-item-id">{escape(label)}</span>'
        f"{section_html}"
        f'<span class="approval-item-date">Submitted: {short_date(doc.created_at)}</span>'
        "</div></div></div>"
        f'<div class="approval-item-content"><p>{escape(preview(doc.content, limit))}</p></div>'
        "</div>"
    )


def render_approval_queue(drafts: Sequence[DocumentView], kind: DocumentKind) -> str:
    noun = "policies" if kind == DocumentKind.policy else "bylaws"
    if not drafts:
        return _empty_state("✅", f"No pending {noun}", f"All {noun} have been reviewed")
    return "".join(render_approval_item(doc) for doc in drafts)


# Reviews


def _reviewer_group(css: str, label: str, bucket: ReviewBucket) -> str:
    emails = ", ".join(f'<span class="reviewer-email">{escape(e)}</span>' for e in bucket.people)
    return (
        f'<div class="reviewer-group {css}">'
        f"<strong>{label} ({bucket.number_of_people}):</strong> {emails}</div>"
    )


def render_reviewers(summary: ReviewSummary) -> str:
    if summary.total == 0:
        return '<span class="no-reviews">No reviews yet</span>'
    groups = []
    if summary.confirmed.number_of_people > 0:
        groups.append(_reviewer_group("confirmed", "Confirmed", summary.confirmed))
    if summary.needs_work.number_of_people > 0:
        groups.append(_reviewer_group("needs-work", "Needs Work", summary.needs_work))
    return f'<div class="reviewers-list">{"".join(groups)}</div>'


def render_review_table(rows: Sequence[tuple[DocumentView, ReviewSummary]]) -> str:
    """Per-policy review counts with reviewer emails."""
    if not rows:
        return '<p class="empty-message">No policies found.</p>'
    body = "".join(
        "<tr>"
        f"<td>{escape(policy.display_id or policy.id)}</td>"
        f'<td><span class="policy-link">{escape(policy.title)}</span></td>'
        f"<td>{escape(section_name(policy.section))}</td>"
        f'<td class="confirmed-count">{summary.confirmed.number_of_people}</td>'
        f'<td class="needs-work-count">{summary.needs_work.number_of_people}</td>'
        f'<td class="reviewers-cell">{render_reviewers(summary)}</td>'
        "</tr>"
        for policy, summary in rows
    )
    return (
        '<table class="review-table"><thead><tr>'
        "<th>Policy ID</th><th>Policy Name</th><th>Section</th>"
        "<th>Confirmed</th><th>Needs Work</th><th>Reviewers</th>"
        f"</tr></thead><tbody>{body}</tbody></table>"
    )


# Users


def initial_password(name: str | None) -> str:
    """Password assigned at registration: the lower-cased first name."""
    parts = (name or "").split()
    return parts[0].lower() if parts else ""


def _role_cell(user: User, editable: bool) -> str:
    if not editable:
        return f'<span class="role-badge {user.role.value}">{user.role.label}</span>'
    options = "".join(
        f'<option value="{role.value}"{" selected" if role == user.role else ""}>{role.label}</option>'
        for role in Role
    )
    return f'<select class="role-select {user.role.value}" data-user-id="{escape(user.id)}">{options}</select>'


def render_users_table(users: Sequence[User], viewer_role: Role | None) -> str:
    """Users with their roles; role selects and delete controls only for admins."""
    if not users:
        return '<p class="empty-message">No users found.</p>'
    is_admin = viewer_role == Role.admin
    actions_header = "<th>Actions</th>" if is_admin else ""
    rows = []
    for user in users:
        actions = (
            f'<td><button class="btn btn-small btn-danger" data-user-id="{escape(user.id)}">Delete</button></td>'
            if is_admin
            else ""
        )
        rows.append(
            "<tr>"
            f"<td>{escape(user.name or '-')}</td>"
            f"<td>{escape(user.email)}</td>"
            f"<td><code>{escape(initial_password(user.name) or 'N/A')}</code></td>"
            f"<td>{_role_cell(user, is_admin)}</td>"
            f"{actions}"
            "</tr>"
        )
    return (
        '<table class="members-table"><thead><tr>'
        f"<th>Name</th><th>Email</th><th>Password</th><th>Role</th>{actions_header}"
        f"</tr></thead><tbody>{''.join(rows)}</tbody></table>"
    )


# Suggestions


def reference_text(suggestion: Suggestion) -> str:
    """What a suggestion refers to, most descriptive form first."""
    if suggestion.policy_id_text and suggestion.policy_name:
        return f"Policy: {suggestion.policy_id_text} - {suggestion.policy_name}"
    if suggestion.bylaw_number is not None and suggestion.bylaw_title:
        return f"Bylaw #{suggestion.bylaw_number}: {suggestion.bylaw_title}"
    if suggestion.policy_id:
        return f"Policy: {suggestion.policy_id[:8]}..."
    if suggestion.bylaw_id:
        return f"Bylaw: {suggestion.bylaw_id[:8]}..."
    return "General"


def render_suggestion_item(suggestion: Suggestion) -> str:
    submitted = short_date(parse_timestamp(suggestion.created_at))
    return (
        f'<div class="suggestion-item" data-id="{escape(suggestion.id)}">'
        '<div class="suggestion-header"><div class="suggestion-meta">'
        f'<div class="suggestion-policy">{escape(reference_text(suggestion))}</div>'
        f'<div class="suggestion-date">{submitted}</div>'
        "</div></div>"
        f'<div class="suggestion-content">{escape(suggestion.suggestion)}</div>'
        "</div>"
    )


def render_suggestion_list(suggestions: Sequence[Suggestion]) -> str:
    if not suggestions:
        return _empty_state("💡", "No suggestions found", "Student suggestions will appear here")
    return "".join(render_suggestion_item(s) for s in suggestions)
