"""Bylaw endpoints. Unlike policies, bylaws are addressed by UUID everywhere."""

from portal.api.client import ApiClient
from portal.api.session import SessionGate
from portal.features.mapping import map_bylaw, map_records
from portal.models.common import DocumentKind, DocumentStatus
from portal.models.documents import BylawCreate, BylawUpdate, DocumentView


class BylawService:
    """Typed access to /api/bylaws."""

    def __init__(self, api: ApiClient, gate: SessionGate) -> None:
        self._api = api
        self._gate = gate

    async def list_approved(self) -> list[DocumentView]:
        data = await self._api.get("/api/bylaws/approved")
        return map_records(data, DocumentKind.bylaw)

    async def get(self, bylaw_id: str) -> DocumentView:
        data = await self._api.get(f"/api/bylaws/{bylaw_id}")
        return map_bylaw(data)

    async def list_all(self, status: DocumentStatus | None = None) -> list[DocumentView]:
        params = {"status": status.value} if status else None
        data = await self._gate.run(
            lambda token: self._api.get("/api/bylaws", params=params, token=token),
            purpose="view bylaws",
        )
        return map_records(data, DocumentKind.bylaw)

    async def create(self, payload: BylawCreate) -> DocumentView:
        data = await self._gate.run(
            lambda token: self._api.post("/api/bylaws", json=payload.model_dump(), token=token),
            purpose="create bylaws",
        )
        return map_bylaw(data or {})

    async def update(self, bylaw_id: str, payload: BylawUpdate) -> DocumentView:
        data = await self._gate.run(
            lambda token: self._api.put(f"/api/bylaws/{bylaw_id}", json=payload.model_dump(), token=token),
            purpose="update bylaws",
        )
        return map_bylaw(data or {})

    async def delete(self, bylaw_id: str) -> None:
        await self._gate.run(
            lambda token: self._api.delete(f"/api/bylaws/{bylaw_id}", token=token),
            purpose="delete bylaws",
        )

    async def approve(self, bylaw_id: str) -> None:
        await self._gate.run(
            lambda token: self._api.put(f"/api/bylaws/{bylaw_id}/approve", token=token),
            purpose="approve bylaws",
        )
