"""Wiring of one portal session: a shared API client, session gate and services."""

import httpx

from portal.api.bylaws import BylawService
from portal.api.client import ApiClient
from portal.api.policies import PolicyService
from portal.api.reviews import ReviewService
from portal.api.session import MemoryTokenStore, SessionGate, TokenStore
from portal.api.suggestions import SuggestionService
from portal.api.users import UserService
from portal.sync.notifications import NotificationCenter
from portal.utils.metrics import PrometheusPortalMetrics


class PortalContext:
    """Everything a page controller needs, built around one ApiClient.

    Args:
        store: Token storage (in memory when omitted)
        client: Optional httpx.AsyncClient to inject (tests use MockTransport)
        base_url: API base URL override
        metrics: Metrics sink shared by the client and pollers
    """

    def __init__(
        self,
        store: TokenStore | None = None,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        metrics: PrometheusPortalMetrics | None = None,
    ) -> None:
        self.metrics = metrics or PrometheusPortalMetrics()
        self.api = ApiClient(base_url=base_url, client=client, metrics=self.metrics)
        self.gate = SessionGate(self.api, store or MemoryTokenStore())
        self.policies = PolicyService(self.api, self.gate)
        self.bylaws = BylawService(self.api, self.gate)
        self.reviews = ReviewService(self.api, self.gate)
        self.suggestions = SuggestionService(self.api, self.gate)
        self.users = UserService(self.api, self.gate)
        self.notifications = NotificationCenter()

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "PortalContext":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
