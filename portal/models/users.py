"""User and authentication models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from portal.models.common import Role


class User(BaseModel):
    """Portal user as returned by the auth endpoints."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str
    name: str | None = None
    role: Role = Role.public

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        """Accept numeric ids from the user table."""
        return str(v) if isinstance(v, int) else v

    @field_validator("role", mode="before")
    @classmethod
    def unknown_role_is_public(cls, v: Any) -> Any:
        """Roles this client does not know get no staff affordances."""
        if not isinstance(v, str) or v not in {role.value for role in Role}:
            return Role.public
        return v


class LoginResponse(BaseModel):
    """Response of POST /api/auth/login."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str = "bearer"
    user: User
