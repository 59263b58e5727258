"""Login, profile and logout."""

import logging
from dataclasses import dataclass

from portal.api.errors import PortalError
from portal.api.session import SessionGate
from portal.api.users import UserService
from portal.pages.actions import ActionResult, Confirm

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed. Check credentials."
POST_LOGIN_PAGE = "policies"


@dataclass(frozen=True)
class Profile:
    name: str = "-"
    email: str = "-"


async def login(users: UserService, email: str, password: str) -> ActionResult:
    """Exchange credentials for a token; on success go to the staff policy list."""
    try:
        response = await users.login(email.strip(), password)
    except PortalError as e:
        logger.info("Login rejected: %s", e.message)
        return ActionResult.failed(LOGIN_FAILED)
    logger.info("Signed in as %s (%s)", response.user.email, response.user.role.value)
    return ActionResult(ok=True, redirect_to=POST_LOGIN_PAGE)


async def load_profile(gate: SessionGate) -> Profile:
    """Name and email of the signed-in user; dashes when unavailable."""
    if not gate.is_authenticated:
        return Profile()
    try:
        user = await gate.current_user()
    except PortalError as e:
        logger.warning("Could not load profile: %s", e.message)
        return Profile()
    return Profile(name=user.name or "-", email=user.email or "-")


def logout(gate: SessionGate, confirm: Confirm) -> ActionResult:
    if not confirm("Are you sure you want to logout?"):
        return ActionResult.declined()
    gate.end()
    return ActionResult(ok=True, redirect_to=gate.login_path)
