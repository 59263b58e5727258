"""Shared async API client for the remote policy API.

Every page controller and service receives one ApiClient. It attaches
`Content-Type: application/json`, an optional bearer token, and maps
HTTP failures onto the portal error taxonomy:

- 404 -> NotFound
- 401 -> Unauthorized
- 403 -> Forbidden
- 5xx -> ServerError (generic, retry later)
- other non-2xx -> RequestFailed with the server's `detail`/`message`
- 2xx with a non-JSON body -> RequestFailed("Invalid response from server")
- transport failure -> NetworkError
- 204 -> None

No retries are performed.
"""

import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from portal.api.errors import (
    GENERIC_REQUEST_FAILED,
    INVALID_RESPONSE,
    Forbidden,
    NetworkError,
    NotFound,
    RequestFailed,
    ServerError,
    Unauthorized,
)
from portal.config import get_settings
from portal.utils.logging import StructuredRequestLogger
from portal.utils.metrics import PrometheusPortalMetrics

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_error_message(response: httpx.Response, default: str = GENERIC_REQUEST_FAILED) -> str:
    """Pull a human-readable message out of a JSON error body.

    FastAPI-style validation errors carry a list under `detail`; their `msg`
    entries are joined.
    """
    try:
        body = response.json()
    except ValueError:
        return default

    if not isinstance(body, dict):
        return default

    detail = body.get("detail") or body.get("message")
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list):
        messages = [str(item.get("msg")) for item in detail if isinstance(item, dict) and item.get("msg")]
        if messages:
            return "; ".join(messages)
    return default


def parse_record(model: type[ModelT], data: Any) -> ModelT:
    """Validate one JSON record, reporting a malformed one as a failed request."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RequestFailed(200, INVALID_RESPONSE) from e


def parse_records(model: type[ModelT], data: Any) -> list[ModelT]:
    return [parse_record(model, item) for item in data or []]

class ApiClient:
    """Thin wrapper over httpx.AsyncClient bound to a base URL."""

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        metrics: PrometheusPortalMetrics | None = None,
        request_logger: StructuredRequestLogger | None = None,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: API base URL (defaults to settings.api_base_url)
            client: Optional httpx client (for testing with mocks)
            timeout: Request timeout in seconds (defaults to settings)
            metrics: Metrics sink (defaults to Prometheus)
            request_logger: Structured request logger
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.request_timeout_s
        )
        self._metrics = metrics or PrometheusPortalMetrics()
        self._log = request_logger or StructuredRequestLogger()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        token: str | None = None,
    ) -> Any:
        """Perform one API call and return the parsed JSON body.

        Args:
            endpoint: Path starting with "/" (e.g. "/api/policies/approved")
            method: HTTP method
            json: Optional JSON body
            params: Optional query parameters
            headers: Extra headers, merged over the defaults
            token: Bearer token for authenticated endpoints

        Returns:
            Parsed JSON, or None for 204 / empty bodies

        Raises:
            NotFound, Unauthorized, Forbidden, ServerError, RequestFailed,
            NetworkError
        """
        url = f"{self.base_url}{endpoint}"
        request_headers = {"Content-Type": "application/json"}
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        if headers:
            request_headers.update(headers)

        start = time.perf_counter()
        try:
            response = await self._client.request(
                method, url, json=json, params=params, headers=request_headers
            )
        except httpx.TransportError as e:
            self._record(method, endpoint, "network_error", start, error_reason=type(e).__name__)
            raise NetworkError() from e

        status = response.status_code
        if status == 404:
            self._record(method, endpoint, "not_found", start, status)
            raise NotFound()
        if status == 401:
            self._record(method, endpoint, "unauthorized", start, status)
            raise Unauthorized()
        if status == 403:
            self._record(method, endpoint, "forbidden", start, status)
            raise Forbidden(extract_error_message(response, Forbidden().message))
        if status >= 500:
            self._record(method, endpoint, "server_error", start, status)
            raise ServerError(status)
        if not response.is_success:
            message = extract_error_message(response)
            self._record(method, endpoint, "request_failed", start, status, error_reason=message)
            raise RequestFailed(status, message)

        if status == 204 or not response.content:
            self._record(method, endpoint, "success", start, status)
            return None
        try:
            body = response.json()
        except ValueError as e:
            self._record(method, endpoint, "invalid_body", start, status, error_reason=type(e).__name__)
            raise RequestFailed(status, INVALID_RESPONSE) from e
        self._record(method, endpoint, "success", start, status)
        return body

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request(endpoint, "GET", **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request(endpoint, "POST", **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request(endpoint, "PUT", **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request(endpoint, "DELETE", **kwargs)

    def _record(
        self,
        method: str,
        endpoint: str,
        outcome: str,
        start: float,
        status_code: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_request(method, outcome, latency_ms)
        self._log.log_request(
            method, endpoint, outcome, latency_ms, status_code=status_code, error_reason=error_reason
        )
