"""Suggestion endpoints. Submitting is public; listing and deleting are not."""

from portal.api.client import ApiClient, parse_records
from portal.api.session import SessionGate
from portal.models.suggestions import Suggestion


class SuggestionService:
    """Typed access to /api/suggestions."""

    def __init__(self, api: ApiClient, gate: SessionGate) -> None:
        self._api = api
        self._gate = gate

    async def submit(self, policy_id: str | None, text: str) -> None:
        body = {"policy_id": policy_id, "suggestion": text, "status": "pending"}
        await self._api.post("/api/suggestions", json=body)

    async def list_all(self) -> list[Suggestion]:
        data = await self._gate.run(
            lambda token: self._api.get("/api/suggestions", token=token),
            purpose="view suggestions",
        )
        return parse_records(Suggestion, data)

    async def delete(self, suggestion_id: str) -> None:
        await self._gate.run(
            lambda token: self._api.delete(f"/api/suggestions/{suggestion_id}", token=token),
            purpose="delete suggestions",
        )
