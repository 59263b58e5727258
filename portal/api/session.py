"""Client-held session: bearer token storage and the role gate.

The token lives under TOKEN_STORAGE_KEY in a TokenStore. A 401 from any
authenticated call is the only expiry signal: the token is discarded and the
caller is sent to the login page. A 403 keeps the token (the role, not the
session, is insufficient). Role-based affordances are a display convenience;
the API enforces authorization on its own.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, TypeVar

from portal.api.client import ApiClient, parse_record
from portal.api.errors import SESSION_EXPIRED, LoginRequired, Unauthorized
from portal.config import get_settings
from portal.models.common import TOKEN_STORAGE_KEY, Role
from portal.models.users import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TokenStore(Protocol):
    """Storage for the single bearer token."""

    def get(self) -> str | None: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Token store kept in process memory."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Token store persisted as a small JSON document on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = (path or get_settings().token_file).expanduser()

    def get(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable token file %s, ignoring it", self.path)
            return None
        token = data.get(TOKEN_STORAGE_KEY) if isinstance(data, dict) else None
        return token or None

    def set(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({TOKEN_STORAGE_KEY: token}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


@dataclass(frozen=True)
class Affordances:
    """Which privileged controls to show for a role."""

    can_edit: bool = False
    can_review: bool = False
    can_approve: bool = False
    can_delete: bool = False
    can_reset_reviews: bool = False
    can_manage_users: bool = False

    @classmethod
    def for_role(cls, role: Role | None) -> "Affordances":
        if role == Role.admin:
            return cls(
                can_edit=True,
                can_review=True,
                can_approve=True,
                can_delete=True,
                can_reset_reviews=True,
                can_manage_users=True,
            )
        if role == Role.policy_working_group:
            return cls(can_edit=True, can_review=True)
        return cls()


class SessionGate:
    """Brackets every authenticated action with token and expiry handling."""

    def __init__(
        self,
        api: ApiClient,
        store: TokenStore,
        login_path: str | None = None,
    ) -> None:
        self._api = api
        self._store = store
        self.login_path = login_path or get_settings().login_path
        self._user: User | None = None

    @property
    def token(self) -> str | None:
        return self._store.get()

    @property
    def is_authenticated(self) -> bool:
        return self._store.get() is not None

    def require_token(self, purpose: str = "continue") -> str:
        """Return the stored token or raise LoginRequired."""
        token = self._store.get()
        if not token:
            raise LoginRequired(f"Please login to {purpose}.", self.login_path)
        return token

    def start(self, token: str, user: User | None = None) -> None:
        """Store a freshly issued token."""
        self._store.set(token)
        self._user = user

    def end(self) -> None:
        """Discard the token and cached user."""
        self._store.clear()
        self._user = None

    async def run(self, action: Callable[[str], Awaitable[T]], purpose: str = "continue") -> T:
        """Run an authenticated call, expiring the session on 401.

        Raises:
            LoginRequired: No token, or the API rejected it with 401
        """
        token = self.require_token(purpose)
        try:
            return await action(token)
        except Unauthorized as e:
            logger.info("Session expired, discarding token")
            self.end()
            raise LoginRequired(SESSION_EXPIRED, self.login_path) from e

    async def current_user(self) -> User:
        """Fetch (once) the signed-in user from /api/auth/me."""
        if self._user is None:
            data = await self.run(lambda token: self._api.get("/api/auth/me", token=token))
            self._user = parse_record(User, data)
        return self._user

    async def role(self) -> Role:
        user = await self.current_user()
        return user.role

    async def affordances(self) -> Affordances:
        """Affordances for the current role; none when signed out."""
        if not self.is_authenticated:
            return Affordances()
        return Affordances.for_role(await self.role())
