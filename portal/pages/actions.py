"""User-triggered actions and the result values shown back to the user."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from portal.api.errors import Forbidden, LoginRequired, NotFound, PortalError, RequestFailed

logger = logging.getLogger(__name__)

# Asks the user a yes/no question; True means proceed
Confirm = Callable[[str], bool]


def always_confirm(_message: str) -> bool:
    return True


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an action, ready to be shown to the user.

    Attributes:
        ok: Whether the action took effect
        message: Text for the user ("" when there is nothing to say)
        refresh: Whether the current view should be reloaded
        cancelled: The user declined the confirmation
        redirect_to: Page to switch to (login after an expired session)
    """

    ok: bool
    message: str = ""
    refresh: bool = False
    cancelled: bool = False
    redirect_to: str | None = None

    @classmethod
    def done(cls, message: str, refresh: bool = True) -> "ActionResult":
        return cls(ok=True, message=message, refresh=refresh)

    @classmethod
    def failed(cls, message: str, refresh: bool = False) -> "ActionResult":
        return cls(ok=False, message=message, refresh=refresh)

    @classmethod
    def declined(cls) -> "ActionResult":
        return cls(ok=False, cancelled=True)


async def run_action(
    action: Callable[[], Awaitable[Any]],
    *,
    success: str | Callable[[Any], str],
    failure: str,
    forbidden: str | None = None,
    not_found: str | None = None,
) -> ActionResult:
    """Run an API action and translate its errors into an ActionResult.

    Args:
        action: Coroutine factory performing the call
        success: Message on success, or a function of the call's result
        failure: Lead-in for unexpected errors ("Failed to approve policy.")
        forbidden: Message for 403 (server message when omitted)
        not_found: Message for 404; the view is still refreshed

    Returns:
        ActionResult; never raises PortalError
    """
    try:
        result = await action()
    except LoginRequired as e:
        return ActionResult(ok=False, message=e.message, redirect_to=e.redirect_to)
    except Forbidden as e:
        return ActionResult.failed(forbidden or e.message)
    except NotFound as e:
        if not_found is not None:
            return ActionResult.failed(not_found, refresh=True)
        return ActionResult.failed(f"{failure} Please try again.\n\nError: {e.message}")
    except RequestFailed as e:
        return ActionResult.failed(e.message)
    except PortalError as e:
        logger.warning("%s %s", failure, e.message)
        return ActionResult.failed(f"{failure} Please try again.\n\nError: {e.message}")
    return ActionResult.done(success(result) if callable(success) else success)
