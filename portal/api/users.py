"""Authentication and user-management endpoints."""

from portal.api.client import ApiClient, parse_record, parse_records
from portal.api.session import SessionGate
from portal.models.common import Role
from portal.models.users import LoginResponse, User


class UserService:
    """Typed access to /api/auth."""

    def __init__(self, api: ApiClient, gate: SessionGate) -> None:
        self._api = api
        self._gate = gate

    async def login(self, email: str, password: str) -> LoginResponse:
        """Exchange credentials for a token and start the session."""
        data = await self._api.post("/api/auth/login", json={"email": email, "password": password})
        response = parse_record(LoginResponse, data)
        self._gate.start(response.access_token, response.user)
        return response

    async def me(self) -> User:
        return await self._gate.current_user()

    async def list_users(self) -> list[User]:
        data = await self._gate.run(
            lambda token: self._api.get("/api/auth/users", token=token),
            purpose="view users",
        )
        return parse_records(User, data)

    async def register(self, email: str, password: str, name: str) -> None:
        await self._gate.run(
            lambda token: self._api.post(
                "/api/auth/register",
                json={"email": email, "password": password, "name": name},
                token=token,
            ),
            purpose="add users",
        )

    async def update_role(self, user_id: str, role: Role) -> None:
        await self._gate.run(
            lambda token: self._api.put(
                f"/api/auth/users/{user_id}/role", json={"role": role.value}, token=token
            ),
            purpose="change user roles",
        )

    async def delete_user(self, user_id: str) -> str | None:
        """Delete a user; returns the server's confirmation message, if any."""
        data = await self._gate.run(
            lambda token: self._api.delete(f"/api/auth/users/{user_id}", token=token),
            purpose="delete users",
        )
        return (data or {}).get("message")
