"""Policy endpoints. Policies are addressed by their dotted policy_id."""

from urllib.parse import quote

from portal.api.client import ApiClient
from portal.api.session import SessionGate
from portal.features.mapping import map_policy, map_records
from portal.models.common import DocumentKind, DocumentStatus
from portal.models.documents import DocumentView, PolicyCreate, PolicyUpdate


def policy_path(policy_id: str) -> str:
    return f"/api/policies/{quote(policy_id, safe='')}"


class PolicyService:
    """Typed access to /api/policies."""

    def __init__(self, api: ApiClient, gate: SessionGate) -> None:
        self._api = api
        self._gate = gate

    async def list_approved(self, section_name: str | None = None) -> list[DocumentView]:
        """Approved policies, optionally limited to one section (full name)."""
        params = {"section": section_name} if section_name else None
        data = await self._api.get("/api/policies/approved", params=params)
        return map_records(data, DocumentKind.policy)

    async def get(self, policy_id: str) -> DocumentView:
        """Single policy by dotted identifier."""
        data = await self._api.get(policy_path(policy_id))
        return map_policy(data)

    async def list_all(self, status: DocumentStatus | None = None) -> list[DocumentView]:
        """All policies regardless of status (authenticated)."""
        params = {"status": status.value} if status else None
        data = await self._gate.run(
            lambda token: self._api.get("/api/policies", params=params, token=token),
            purpose="view policies",
        )
        return map_records(data, DocumentKind.policy)

    async def create(self, payload: PolicyCreate) -> DocumentView:
        data = await self._gate.run(
            lambda token: self._api.post("/api/policies", json=payload.model_dump(), token=token),
            purpose="create policies",
        )
        return map_policy(data or {})

    async def update(self, policy_id: str, payload: PolicyUpdate) -> DocumentView:
        data = await self._gate.run(
            lambda token: self._api.put(policy_path(policy_id), json=payload.model_dump(), token=token),
            purpose="update policies",
        )
        return map_policy(data or {})

    async def delete(self, policy_id: str) -> None:
        """Remove a policy; also how a draft is disapproved (admin only)."""
        await self._gate.run(
            lambda token: self._api.delete(policy_path(policy_id), token=token),
            purpose="delete policies",
        )

    async def approve(self, policy_id: str) -> None:
        """Transition a draft to approved (admin only)."""
        await self._gate.run(
            lambda token: self._api.put(f"{policy_path(policy_id)}/approve", token=token),
            purpose="approve policies",
        )
