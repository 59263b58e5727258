"""Helper functions for the UI - session-backed token store, async bridge, results."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import streamlit as st

from portal.api.errors import LoginRequired
from portal.models.common import TOKEN_STORAGE_KEY
from portal.pages.actions import ActionResult
from portal.pages.context import PortalContext
from portal.sync.notifications import NotificationCenter
from portal.sync.state import ListingState

T = TypeVar("T")

PORTAL_CSS = """
<style>
.cards-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(220px, 1fr)); gap: 12px; }
.card { display: block; padding: 12px; border: 1px solid #ddd; border-radius: 8px; text-decoration: none; color: inherit; }
.card-policy-name { font-weight: 700; }
.card-section-name, .card-policy-id { color: #666; font-size: 0.9em; }
.section-content { display: none; }
.section-content.open { display: block; }
.section-header { display: none; }
.no-results, .empty-state, .empty-message { color: #666; padding: 12px; }
.new-policies-notification { background: #4CAF50; color: white; padding: 12px 20px; border-radius: 8px; }
.approval-item, .suggestion-item { border: 1px solid #eee; border-radius: 8px; padding: 8px 12px; margin-bottom: 4px; }
.approval-item-meta span { margin-right: 12px; color: #666; font-size: 0.9em; }
</style>
"""


class SessionStateTokenStore:
    """Token store kept in the Streamlit session under the usual storage key."""

    def get(self) -> str | None:
        return st.session_state.get(TOKEN_STORAGE_KEY)

    def set(self, token: str) -> None:
        st.session_state[TOKEN_STORAGE_KEY] = token

    def clear(self) -> None:
        st.session_state.pop(TOKEN_STORAGE_KEY, None)


def run_portal(fn: Callable[[PortalContext], Awaitable[T]]) -> T:
    """Run one coroutine against a fresh portal context.

    Each Streamlit rerun gets its own event loop, so the HTTP client is
    created and closed inside it.
    """

    async def _main() -> T:
        async with PortalContext(store=SessionStateTokenStore()) as portal:
            return await fn(portal)

    return asyncio.run(_main())


def go_to(page: str) -> None:
    st.session_state.page = page
    st.rerun()


def handle_login_required(error: LoginRequired) -> None:
    """Show the message and switch to the login page."""
    st.session_state.flash = error.message
    go_to("login")


class CheckboxConfirm:
    """Confirmation backed by a checkbox ticked before the action button."""

    def __init__(self, acknowledged: bool) -> None:
        self.acknowledged = acknowledged
        self.question: str | None = None

    def __call__(self, question: str) -> bool:
        self.question = question
        return self.acknowledged


def show_result(result: ActionResult, confirm: CheckboxConfirm | None = None) -> None:
    """Display an action outcome and follow its redirect or refresh."""
    if result.cancelled:
        if confirm is not None and confirm.question:
            st.warning(f"Tick the confirmation box first.\n\n{confirm.question}")
        return
    if result.redirect_to:
        if result.message:
            st.session_state.flash = result.message
        go_to("login" if result.redirect_to.endswith("login") else result.redirect_to)
    if result.ok:
        if result.message:
            st.session_state.flash = result.message
        if result.refresh:
            st.rerun()
    elif result.message:
        if result.refresh:
            st.session_state.flash_error = result.message
            st.rerun()
        st.error(result.message)


def show_flash() -> None:
    if message := st.session_state.pop("flash", None):
        st.success(message)
    if message := st.session_state.pop("flash_error", None):
        st.error(message)


def listing_state() -> ListingState:
    if "listing_state" not in st.session_state:
        st.session_state.listing_state = ListingState()
    return st.session_state.listing_state


def notification_center() -> NotificationCenter:
    if "notifications" not in st.session_state:
        st.session_state.notifications = NotificationCenter()
    return st.session_state.notifications
