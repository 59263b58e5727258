"""Streamlit UI for the ASA governance portal.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st  # noqa: E402

from portal.api.errors import LoginRequired  # noqa: E402
from portal.config import get_settings  # noqa: E402
from portal.models.common import SECTION_NAMES, DocumentKind, ReviewStance, Role  # noqa: E402
from portal.pages.approvals import ApprovalsPage  # noqa: E402
from portal.pages.dashboard import ALL_SECTIONS, DashboardPage  # noqa: E402
from portal.pages.detail import load_bylaw_detail, load_policy_detail  # noqa: E402
from portal.pages.editor import BylawEditor, BylawForm, PolicyEditor, PolicyForm, delete_document  # noqa: E402
from portal.pages.listing import BylawListingPage, PolicyListingPage  # noqa: E402
from portal.pages.profile import load_profile, login, logout  # noqa: E402
from portal.pages.reviews import PolicyReviewPage, format_content  # noqa: E402
from portal.pages.suggestions import SuggestionForm, SuggestionsAdminPage  # noqa: E402
from portal.render.admin import render_approval_item, render_suggestion_item  # noqa: E402
from portal.render.listing import render_notification  # noqa: E402
from portal.utils.logging import configure_logging  # noqa: E402
from ui.helpers import (  # noqa: E402
    PORTAL_CSS,
    CheckboxConfirm,
    SessionStateTokenStore,
    go_to,
    handle_login_required,
    listing_state,
    notification_center,
    run_portal,
    show_flash,
    show_result,
)

settings = get_settings()
configure_logging(settings.log_level)

PUBLIC_PAGES = {"policies": "📜 Policies", "bylaws": "📘 Bylaws", "suggestions": "💡 Suggestions"}
STAFF_PAGES = {
    "staff-policies": "🗂️ All Policies",
    "approvals": "✅ Approvals",
    "staff-suggestions": "📨 Suggestions Inbox",
    "dashboard": "📊 Dashboard",
    "profile": "👤 Profile",
}

# Page config
st.set_page_config(page_title="ASA Governance Portal", page_icon="📜", layout="wide")
st.markdown(PORTAL_CSS, unsafe_allow_html=True)

# Initialize session state
if "page" not in st.session_state:
    st.session_state.page = st.query_params.get("page", "policies")
if "detail_id" not in st.session_state:
    st.session_state.detail_id = st.query_params.get("id")

signed_in = SessionStateTokenStore().get() is not None

# =============================================================================
# SIDEBAR - NAVIGATION
# =============================================================================
with st.sidebar:
    st.title("📜 ASA Portal")
    for key, label in PUBLIC_PAGES.items():
        if st.button(label, key=f"nav-{key}", use_container_width=True):
            go_to(key)
    st.divider()
    if signed_in:
        for key, label in STAFF_PAGES.items():
            if st.button(label, key=f"nav-{key}", use_container_width=True):
                go_to(key)
    elif st.button("🔐 Staff login", use_container_width=True):
        go_to("login")

page = st.session_state.page
show_flash()


# =============================================================================
# PUBLIC - POLICY LISTING (polls for newly approved policies)
# =============================================================================
@st.fragment(run_every=settings.poll_interval_seconds)
def policy_listing() -> None:
    state = listing_state()
    notifications = notification_center()

    async def refresh(portal):
        listing = PolicyListingPage(portal.policies, state=state, notifications=notifications)
        if state.known_ids is not None:
            await listing.poller.check()
        if listing.view is None:
            await listing.load()
        return listing

    listing = run_portal(refresh)
    for notification in notifications.active():
        st.markdown(render_notification(notification), unsafe_allow_html=True)

    if listing.view is None or listing.view.no_results:
        st.markdown(listing.render(), unsafe_allow_html=True)
        return
    for node in listing.view.visible_nodes():
        arrow = "▼" if node.is_open else "▶"
        if st.button(f"{arrow} {node.spec.title}", key=f"section-{node.section_id}", use_container_width=True):
            listing.toggle(node.section_id)
            st.rerun(scope="fragment")
        st.markdown(node.render(), unsafe_allow_html=True)


if page == "policies":
    st.header("Policies")
    state = listing_state()
    term = st.text_input("Search policies", value=state.search_term, placeholder="Search by name, number or section")
    if term != state.search_term:
        state.search_term = term
        if term != "":
            state.open_all()
    policy_listing()

# =============================================================================
# PUBLIC - DETAIL PAGES
# =============================================================================
elif page in ("policy-detail", "bylaw-detail"):
    doc_id = st.session_state.detail_id
    if page == "policy-detail":
        detail = run_portal(lambda portal: load_policy_detail(portal.policies, doc_id))
    else:
        detail = run_portal(lambda portal: load_bylaw_detail(portal.bylaws, doc_id))

    col_main, col_side = st.columns([3, 1])
    with col_main:
        st.markdown(detail.main_html, unsafe_allow_html=True)
        if detail.found and detail.export_name:
            st.download_button("⬇️ Download", data=detail.main_html, file_name=detail.export_name, mime="text/html")
    with col_side:
        st.markdown(detail.sidebar_html, unsafe_allow_html=True)

# =============================================================================
# PUBLIC - BYLAWS
# =============================================================================
elif page == "bylaws":
    st.header("Bylaws")
    term = st.text_input("Search bylaws", key="bylaw_search")

    async def bylaw_grid(portal):
        listing = BylawListingPage(portal.bylaws)
        return await listing.search(term)

    st.markdown(run_portal(bylaw_grid), unsafe_allow_html=True)

# =============================================================================
# PUBLIC - SUGGESTIONS FORM
# =============================================================================
elif page == "suggestions":
    st.header("Suggest a change")
    options = run_portal(lambda portal: SuggestionForm(portal.suggestions, portal.policies).load_options())
    labels = {"": "Select"} | {option.value: option.label for option in options}

    with st.form("suggestion_form", clear_on_submit=True):
        email = st.text_input("UAlberta email")
        policy_id = st.selectbox("Policy", options=list(labels), format_func=labels.get)
        text = st.text_area("Your suggestion")
        submitted = st.form_submit_button("Submit", type="primary")

    if submitted:
        result = run_portal(
            lambda portal: SuggestionForm(portal.suggestions, portal.policies).submit(email, policy_id, text)
        )
        show_result(result)
        if result.ok:
            st.success(result.message)

# =============================================================================
# STAFF - LOGIN
# =============================================================================
elif page == "login":
    st.header("Staff login")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login", type="primary")
    if submitted:
        result = run_portal(lambda portal: login(portal.users, email, password))
        if result.ok:
            go_to("staff-policies")
        st.error(result.message)

elif not signed_in:
    handle_login_required(LoginRequired("Please login to continue.", settings.login_path))

# =============================================================================
# STAFF - ALL POLICIES (view, review, edit, delete)
# =============================================================================
elif page == "staff-policies":
    st.header("All policies")
    col_new_policy, col_new_bylaw = st.columns(2)
    if col_new_policy.button("➕ New policy"):
        st.session_state.edit_uuid = None
        go_to("edit-policy")
    if col_new_bylaw.button("➕ New bylaw"):
        st.session_state.edit_uuid = None
        go_to("edit-bylaw")

    try:
        docs = run_portal(lambda portal: portal.policies.list_all())
        bylaws = run_portal(lambda portal: portal.bylaws.list_all())
    except LoginRequired as e:
        handle_login_required(e)

    for key, name in SECTION_NAMES.items():
        with st.expander(name, expanded=True):
            for doc in (d for d in docs if d.section == key):
                col_title, col_view, col_edit, col_delete = st.columns([4, 1, 1, 1])
                col_title.markdown(f"**{doc.display_id}** {doc.title} · _{doc.status.value if doc.status else 'n/a'}_")
                if col_view.button("👁️", key=f"view-{doc.id}"):
                    st.session_state.detail_id = doc.nav_key
                    go_to("staff-policy")
                if col_edit.button("✏️", key=f"edit-{doc.id}"):
                    st.session_state.edit_uuid = doc.id
                    go_to("edit-policy")
                if col_delete.button("🗑️", key=f"delete-{doc.id}"):
                    st.session_state.pending_delete = doc

    with st.expander("Bylaws", expanded=True):
        for doc in bylaws:
            col_title, col_edit, col_delete = st.columns([5, 1, 1])
            col_title.markdown(f"**Bylaw #{doc.display_id}** {doc.title} · _{doc.status.value if doc.status else 'n/a'}_")
            if col_edit.button("✏️", key=f"edit-{doc.id}"):
                st.session_state.edit_uuid = doc.id
                go_to("edit-bylaw")
            if col_delete.button("🗑️", key=f"delete-{doc.id}"):
                st.session_state.pending_delete = doc

    if pending := st.session_state.get("pending_delete"):
        st.warning(f'Delete "{pending.title}"?')
        sure = st.checkbox("This action cannot be undone.", key="delete_sure")
        if st.button("Delete permanently", type="primary"):
            confirm = CheckboxConfirm(sure)
            result = run_portal(
                lambda portal: delete_document(pending, portal.gate, portal.policies, portal.bylaws, confirm)
            )
            if not result.cancelled:
                st.session_state.pending_delete = None
            show_result(result, confirm)

elif page == "staff-policy":
    policy_id = st.session_state.detail_id
    sure = st.sidebar.checkbox("Confirm reset of ALL reviews")
    confirm = CheckboxConfirm(sure)

    async def staff_view(portal):
        view = PolicyReviewPage(portal.policies, portal.reviews, portal.gate, confirm)
        policy = await view.load(policy_id)
        return policy, await view.load_reviews()

    try:
        policy, panel = run_portal(staff_view)
    except LoginRequired as e:
        handle_login_required(e)

    if policy is None:
        st.error("Policy not found.")
    else:
        st.header(policy.title)
        st.caption(f"{policy.display_id} · {policy.section_name} · {policy.status.value if policy.status else 'n/a'}")
        st.markdown(format_content(policy.content), unsafe_allow_html=True)
        st.divider()
        st.subheader("Review")
        st.write(
            f"Confirmed: {panel.summary.confirmed.number_of_people} · "
            f"Needs work: {panel.summary.needs_work.number_of_people}"
        )
        stances = list(ReviewStance)
        index = stances.index(panel.my_stance) if panel.my_stance else None
        stance = st.radio("Your review", stances, index=index, format_func=lambda s: s.value.replace("_", " "))
        if st.button("Submit review", type="primary"):

            async def submit(portal):
                view = PolicyReviewPage(portal.policies, portal.reviews, portal.gate, confirm)
                await view.load(policy_id)
                return await view.submit_review(stance)

            show_result(run_portal(submit))
        if st.sidebar.button("Reset all reviews"):

            async def reset(portal):
                view = PolicyReviewPage(portal.policies, portal.reviews, portal.gate, confirm)
                return await view.reset_all()

            show_result(run_portal(reset), confirm)

# =============================================================================
# STAFF - EDITORS
# =============================================================================
elif page == "edit-policy":
    uuid = st.session_state.get("edit_uuid")

    async def load_form(portal):
        return await PolicyEditor(portal.policies).load(uuid) if uuid else PolicyForm()

    form_data = run_portal(load_form)
    if form_data is None:
        st.session_state.flash_error = "Policy not found"
        go_to("staff-policies")
    st.header("Edit policy" if uuid else "New policy")
    with st.form("policy_form"):
        policy_id = st.text_input("Policy ID", value=form_data.policy_id, disabled=bool(uuid))
        name = st.text_input("Policy Name", value=form_data.policy_name)
        keys = [""] + list(SECTION_NAMES)
        section = st.selectbox(
            "Section",
            keys,
            index=keys.index(form_data.section) if form_data.section in keys else 0,
            format_func=lambda k: SECTION_NAMES.get(k, "Select"),
        )
        content = st.text_area("Policy Content", value=form_data.policy_content, height=300)
        submitted = st.form_submit_button("Save", type="primary")
    if submitted:

        async def save(portal):
            editor = PolicyEditor(portal.policies)
            if uuid:
                await editor.load(uuid)
            return await editor.save(PolicyForm(policy_id, name, section, content))

        result = run_portal(save)
        if result.ok:
            st.session_state.flash = result.message
            go_to("staff-policies")
        show_result(result)

elif page == "edit-bylaw":
    uuid = st.session_state.get("edit_uuid")

    async def load_bylaw_form(portal):
        return await BylawEditor(portal.bylaws).load(uuid) if uuid else BylawForm()

    form_data = run_portal(load_bylaw_form)
    if form_data is None:
        st.session_state.flash_error = "Bylaw not found"
        go_to("staff-policies")
    st.header("Edit bylaw" if uuid else "New bylaw")
    with st.form("bylaw_form"):
        number = st.text_input("Bylaw Number", value=form_data.bylaw_number, disabled=bool(uuid))
        title = st.text_input("Bylaw Title", value=form_data.bylaw_title)
        content = st.text_area("Bylaw Content", value=form_data.bylaw_content, height=300)
        submitted = st.form_submit_button("Save", type="primary")
    if submitted:

        async def save_bylaw(portal):
            editor = BylawEditor(portal.bylaws)
            if uuid:
                await editor.load(uuid)
            return await editor.save(BylawForm(number, title, content))

        result = run_portal(save_bylaw)
        if result.ok:
            st.session_state.flash = result.message
            go_to("staff-policies")
        show_result(result)

# =============================================================================
# STAFF - APPROVALS
# =============================================================================
elif page == "approvals":
    st.header("Pending approvals")
    query = st.text_input("Filter", key="approval_filter")
    sure = st.checkbox("I confirm the approve / disapprove action", key="approval_sure")
    confirm = CheckboxConfirm(sure)

    async def load_queues(portal):
        return await ApprovalsPage(portal.policies, portal.bylaws, confirm).load_all(query)

    try:
        queues = run_portal(load_queues)
    except LoginRequired as e:
        handle_login_required(e)

    tab_policies, tab_bylaws = st.tabs(["Policies", "Bylaws"])
    for tab, kind in ((tab_policies, DocumentKind.policy), (tab_bylaws, DocumentKind.bylaw)):
        with tab:
            queue = queues[kind]
            if queue.error or not queue.items:
                st.markdown(queue.html, unsafe_allow_html=True)
                continue
            for doc in queue.items:
                st.markdown(render_approval_item(doc), unsafe_allow_html=True)
                col_approve, col_disapprove = st.columns(2)
                if col_approve.button("✓ Approve", key=f"approve-{doc.id}"):
                    result = run_portal(lambda portal, d=doc: ApprovalsPage(portal.policies, portal.bylaws, confirm).approve(d))
                    show_result(result, confirm)
                if col_disapprove.button("✗ Disapprove", key=f"disapprove-{doc.id}"):
                    result = run_portal(
                        lambda portal, d=doc: ApprovalsPage(portal.policies, portal.bylaws, confirm).disapprove(d)
                    )
                    show_result(result, confirm)

# =============================================================================
# STAFF - SUGGESTIONS INBOX
# =============================================================================
elif page == "staff-suggestions":
    st.header("Suggestions")
    query = st.text_input("Filter", key="suggestion_filter")
    sure = st.checkbox("I confirm deleting the selected suggestion", key="suggestion_sure")
    confirm = CheckboxConfirm(sure)

    async def load_inbox(portal):
        inbox = SuggestionsAdminPage(portal.suggestions, confirm)
        await inbox.load()
        return inbox

    try:
        inbox = run_portal(load_inbox)
    except LoginRequired as e:
        handle_login_required(e)

    if inbox.error is not None:
        st.markdown(inbox.render(), unsafe_allow_html=True)
    for suggestion in inbox.visible(query):
        st.markdown(render_suggestion_item(suggestion), unsafe_allow_html=True)
        if st.button("Delete", key=f"delete-{suggestion.id}"):
            result = run_portal(lambda portal, s=suggestion: SuggestionsAdminPage(portal.suggestions, confirm).delete(s))
            show_result(result, confirm)

# =============================================================================
# STAFF - DASHBOARD
# =============================================================================
elif page == "dashboard":
    st.header("Master dashboard")
    section_filter = st.selectbox(
        "Section",
        [ALL_SECTIONS, *SECTION_NAMES],
        format_func=lambda k: "All sections" if k == ALL_SECTIONS else SECTION_NAMES[k],
    )
    sure = st.sidebar.checkbox("Confirm destructive dashboard actions")
    confirm = CheckboxConfirm(sure)

    async def load_dashboard(portal):
        dashboard = DashboardPage(portal.policies, portal.reviews, portal.users, portal.gate, confirm)
        return await dashboard.load(section_filter), await dashboard.load_users(), await portal.gate.affordances()

    try:
        overview, users_view, affordances = run_portal(load_dashboard)
    except LoginRequired as e:
        handle_login_required(e)

    col_total, col_reviews, col_confirmed, col_needs_work = st.columns(4)
    col_total.metric("Policies", overview.policy_count)
    col_reviews.metric("Reviews", overview.totals.reviews)
    col_confirmed.metric("Confirmed", overview.totals.confirmed)
    col_needs_work.metric("Needs work", overview.totals.needs_work)
    st.markdown(overview.html, unsafe_allow_html=True)

    def dashboard_action(call):
        async def _run(portal):
            dashboard = DashboardPage(portal.policies, portal.reviews, portal.users, portal.gate, confirm)
            return await call(dashboard)

        show_result(run_portal(_run), confirm)

    if affordances.can_reset_reviews and st.button("Reset all reviews"):
        dashboard_action(lambda d: d.reset_reviews())

    st.subheader("Users")
    st.markdown(users_view.html, unsafe_allow_html=True)
    if affordances.can_manage_users:
        for user in users_view.users:
            col_name, col_role, col_delete = st.columns([3, 2, 1])
            col_name.write(user.email)
            roles = list(Role)
            new_role = col_role.selectbox(
                "Role", roles, index=roles.index(user.role), key=f"role-{user.id}", format_func=lambda r: r.label
            )
            if new_role != user.role:
                dashboard_action(lambda d, u=user, r=new_role: d.change_role(u, r))
            if col_delete.button("Delete", key=f"delete-user-{user.id}"):
                dashboard_action(lambda d, u=user: d.delete_user(u))

        with st.form("add_user", clear_on_submit=True):
            st.markdown("**Add New User**")
            name = st.text_input("Full name")
            email = st.text_input("Email")
            if st.form_submit_button("Add user"):
                dashboard_action(lambda d: d.add_user(name, email))

# =============================================================================
# STAFF - PROFILE
# =============================================================================
elif page == "profile":
    st.header("Profile")
    profile = run_portal(lambda portal: load_profile(portal.gate))
    st.write(f"**Name:** {profile.name}")
    st.write(f"**Email:** {profile.email}")
    sure = st.checkbox("Are you sure you want to logout?")
    if st.button("Logout"):
        confirm = CheckboxConfirm(sure)

        async def sign_out(portal):
            return logout(portal.gate, confirm)

        show_result(run_portal(sign_out), confirm)
