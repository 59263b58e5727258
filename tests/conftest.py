"""Shared pytest fixtures for all test suites.

FakePortalApi is an in-memory stand-in for the remote API, served through
httpx.MockTransport. It answers with the same status codes as the real API
(401 without a valid token, 403 for insufficient role, 404 for unknown ids).
"""

import copy
import itertools
import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio

from portal.models.common import SECTION_NAMES
from portal.pages.context import PortalContext

BASE_URL = "http://portal.test"

LONG_CONTENT = "Referendum questions must be submitted in writing.\n" + "x" * 250

SEED_POLICIES: list[dict[str, Any]] = [
    {
        "id": "p-0001",
        "policy_id": "1.1",
        "policy_name": "Mission Statement",
        "section": "1",
        "policy_content": "<strong>Serve</strong> students.",
        "status": "approved",
        "created_at": "2025-01-10T12:00:00Z",
        "updated_at": "2025-03-04T09:30:00Z",
    },
    {
        "id": "p-0002",
        "policy_id": "1.10",
        "policy_name": "Code of Conduct",
        "section": "Organizational Identity & Values",
        "policy_content": "Be kind.",
        "status": "approved",
        "created_at": "2025-01-11T12:00:00Z",
        "updated_at": "2025-01-11T12:00:00Z",
    },
    {
        "id": "p-0003",
        "policy_id": "1.2",
        "policy_name": "Equity",
        "section": "1",
        "policy_content": "Equity for all.",
        "status": "approved",
        "created_at": "2025-01-12T12:00:00Z",
        "updated_at": None,
    },
    {
        "id": "p-0004",
        "policy_id": "2.1",
        "policy_name": "Elections Procedure",
        "section": "2",
        "policy_content": "Elections happen in March.",
        "status": "approved",
        "created_at": "2025-01-13T12:00:00Z",
        "updated_at": "2025-02-01T08:00:00Z",
    },
    {
        "id": "p-0005",
        "policy_id": "3.1.1",
        "policy_name": "Budget Process",
        "section": "3",
        "policy_content": "Budgets are approved yearly.",
        "status": "approved",
        "created_at": "2025-01-14T12:00:00Z",
        "updated_at": "2025-01-14T12:00:00Z",
    },
    {
        "id": "p-0006",
        "policy_id": "2.2",
        "policy_name": "Referendum Rules",
        "section": "2",
        "policy_content": LONG_CONTENT,
        "status": "draft",
        "created_at": "2025-04-05T10:00:00Z",
        "updated_at": "2025-04-05T10:00:00Z",
    },
]

SEED_BYLAWS: list[dict[str, Any]] = [
    {
        "id": "b-0001",
        "bylaw_number": 2,
        "bylaw_title": "Membership",
        "bylaw_content": "All students are members.",
        "status": "approved",
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-01T00:00:00Z",
    },
    {
        "id": "b-0002",
        "bylaw_number": 1,
        "bylaw_title": "Name",
        "bylaw_content": "The association is called the ASA.",
        "status": "approved",
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-06-15T00:00:00Z",
    },
    {
        "id": "b-0003",
        "bylaw_number": 10,
        "bylaw_title": "Amendments",
        "bylaw_content": "Amendments need two thirds.",
        "status": "approved",
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-01T00:00:00Z",
    },
    {
        "id": "b-0004",
        "bylaw_number": 11,
        "bylaw_title": "Dissolution",
        "bylaw_content": "Draft text.",
        "status": "draft",
        "created_at": "2025-05-02T00:00:00Z",
        "updated_at": "2025-05-02T00:00:00Z",
    },
]

SEED_USERS: list[dict[str, Any]] = [
    {"id": "u-admin", "email": "admin@ualberta.ca", "name": "Ada Admin", "role": "admin", "password": "ada"},
    {"id": "u-pwg", "email": "pwg@ualberta.ca", "name": "Pat Group", "role": "policy_working_group", "password": "pat"},
    {"id": "u-public", "email": "student@ualberta.ca", "name": "Sam Student", "role": "public", "password": "sam"},
]

SEED_SUGGESTIONS: list[dict[str, Any]] = [
    {
        "id": "s-0001",
        "suggestion": "Clarify the mission.",
        "status": "pending",
        "created_at": "2025-02-01T10:00:00Z",
        "policy_id": "p-0001",
        "policy_id_text": "1.1",
        "policy_name": "Mission Statement",
    },
    {
        "id": "s-0002",
        "suggestion": "More study space please.",
        "status": "pending",
        "created_at": "2025-03-01T10:00:00Z",
    },
]


def _json(status: int, body: Any = None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, json=body)


class FakePortalApi:
    """In-memory remote API.

    Attributes:
        requests: Every request received, in order
        fail: Forced responses keyed by (method, path), e.g. {("GET", "/api/policies/approved"): 500}
        fail_sections: Section names whose filtered listing answers 500
        network_down: When True every request raises httpx.ConnectError
        html_paths: Paths that answer 200 with an HTML page instead of JSON
    """

    def __init__(self) -> None:
        self.policies = copy.deepcopy(SEED_POLICIES)
        self.bylaws = copy.deepcopy(SEED_BYLAWS)
        self.users = copy.deepcopy(SEED_USERS)
        self.suggestions = copy.deepcopy(SEED_SUGGESTIONS)
        self.reviews: dict[str, dict[str, list[str]]] = {
            "1.1": {"confirmed": ["pwg@ualberta.ca"], "needs_work": []},
        }
        self.tokens: dict[str, str] = {f"token-{u['id']}": u["email"] for u in self.users}
        self.requests: list[httpx.Request] = []
        self.fail: dict[tuple[str, str], int] = {}
        self.fail_sections: set[str] = set()
        self.network_down = False
        self.html_paths: set[str] = set()
        self._ids = itertools.count(100)

    # Helpers for tests

    def token_for(self, email: str) -> str:
        return next(token for token, owner in self.tokens.items() if owner == email)

    def approve_new_policy(self, policy_id: str, name: str, section: str = "1") -> None:
        self.policies.append(
            {
                "id": f"p-{next(self._ids)}",
                "policy_id": policy_id,
                "policy_name": name,
                "section": section,
                "policy_content": "",
                "status": "approved",
                "created_at": "2025-06-01T00:00:00Z",
                "updated_at": "2025-06-01T00:00:00Z",
            }
        )

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    # Transport

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.network_down:
            raise httpx.ConnectError("connection refused", request=request)
        forced = self.fail.get((request.method, request.url.path))
        if forced is not None:
            return _json(forced, {"detail": f"Forced failure {forced}"})
        if request.url.path in self.html_paths:
            return httpx.Response(200, text="<html>Down for maintenance</html>")

        parts = request.url.path.strip("/").split("/")
        if parts[:2] == ["api", "policies"]:
            return self._policies(request, parts[2:])
        if parts[:2] == ["api", "bylaws"]:
            return self._bylaws(request, parts[2:])
        if parts[:2] == ["api", "suggestions"]:
            return self._suggestions(request, parts[2:])
        if parts[:2] == ["api", "auth"]:
            return self._auth(request, parts[2:])
        return _json(404, {"detail": "Not Found"})

    def _user(self, request: httpx.Request) -> dict[str, Any] | None:
        header = request.headers.get("Authorization", "")
        token = header.removeprefix("Bearer ").strip()
        email = self.tokens.get(token)
        return next((u for u in self.users if u["email"] == email), None)

    def _body(self, request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content) if request.content else {}

    def _policies(self, request: httpx.Request, rest: list[str]) -> httpx.Response:
        method = request.method
        if rest == ["approved"] and method == "GET":
            section = request.url.params.get("section")
            if section is not None and section in self.fail_sections:
                return _json(500, {"detail": "boom"})
            items = [p for p in self.policies if p["status"] == "approved"]
            if section is not None:
                items = [p for p in items if SECTION_NAMES.get(str(p["section"]), p["section"]) == section]
            return _json(200, items)

        if rest == [] and method == "GET":
            if self._user(request) is None:
                return _json(401, {"detail": "Could not validate credentials"})
            status = request.url.params.get("status")
            return _json(200, [p for p in self.policies if status is None or p["status"] == status])

        user = self._user(request)
        if rest == [] and method == "POST":
            if user is None:
                return _json(401, {"detail": "Could not validate credentials"})
            body = self._body(request)
            if any(p["policy_id"] == body["policy_id"] for p in self.policies):
                return _json(400, {"detail": "Policy ID already exists"})
            record = {"id": f"p-{next(self._ids)}", "created_at": "2025-07-01T00:00:00Z", **body}
            self.policies.append(record)
            return _json(201, record)

        if rest == ["reviews", "reset-all"] and method == "DELETE":
            if user is None:
                return _json(401, {"detail": "Could not validate credentials"})
            if user["role"] != "admin":
                return _json(403, {"detail": "Admin only"})
            count = sum(len(v["confirmed"]) + len(v["needs_work"]) for v in self.reviews.values())
            self.reviews.clear()
            return _json(200, {"deleted_count": count})

        policy = next((p for p in self.policies if p["policy_id"] == rest[0]), None)
        tail = rest[1:]

        if tail == [] and method == "GET":
            return _json(200, policy) if policy else _json(404, {"detail": "Policy not found"})

        if user is None:
            return _json(401, {"detail": "Could not validate credentials"})

        if tail == ["reviews"]:
            if policy is None:
                return _json(404, {"detail": "Policy not found"})
            bucket = self.reviews.get(rest[0])
            if method == "GET":
                if bucket is None:
                    return _json(404, {"detail": "No reviews"})
                return _json(
                    200,
                    {
                        "confirmed": {"numberOfPeople": len(bucket["confirmed"]), "people": bucket["confirmed"]},
                        "needs_work": {"numberOfPeople": len(bucket["needs_work"]), "people": bucket["needs_work"]},
                    },
                )
            stance = self._body(request)["review_status"]
            bucket = self.reviews.setdefault(rest[0], {"confirmed": [], "needs_work": []})
            for emails in bucket.values():
                if user["email"] in emails:
                    emails.remove(user["email"])
            bucket[stance].append(user["email"])
            return _json(201, {"review_status": stance})

        if policy is None:
            return _json(404, {"detail": "Policy not found"})
        if tail == ["approve"] and method == "PUT":
            if user["role"] != "admin":
                return _json(403, {"detail": "Only admins can approve"})
            policy["status"] = "approved"
            return _json(200, policy)
        if tail == [] and method == "PUT":
            policy.update(self._body(request))
            return _json(200, policy)
        if tail == [] and method == "DELETE":
            if user["role"] != "admin":
                return _json(403, {"detail": "Only admins can delete"})
            self.policies.remove(policy)
            return _json(204)
        return _json(405, {"detail": "Method Not Allowed"})

    def _bylaws(self, request: httpx.Request, rest: list[str]) -> httpx.Response:
        method = request.method
        if rest == ["approved"] and method == "GET":
            return _json(200, [b for b in self.bylaws if b["status"] == "approved"])

        bylaw = next((b for b in self.bylaws if rest and b["id"] == rest[0]), None)
        if len(rest) == 1 and method == "GET":
            return _json(200, bylaw) if bylaw else _json(404, {"detail": "Bylaw not found"})

        user = self._user(request)
        if user is None:
            return _json(401, {"detail": "Could not validate credentials"})
        if rest == [] and method == "GET":
            status = request.url.params.get("status")
            return _json(200, [b for b in self.bylaws if status is None or b["status"] == status])
        if rest == [] and method == "POST":
            record = {"id": f"b-{next(self._ids)}", **self._body(request)}
            self.bylaws.append(record)
            return _json(201, record)
        if bylaw is None:
            return _json(404, {"detail": "Bylaw not found"})
        if rest[1:] == ["approve"] and method == "PUT":
            if user["role"] != "admin":
                return _json(403, {"detail": "Only admins can approve"})
            bylaw["status"] = "approved"
            return _json(200, bylaw)
        if len(rest) == 1 and method == "PUT":
            bylaw.update(self._body(request))
            return _json(200, bylaw)
        if len(rest) == 1 and method == "DELETE":
            if user["role"] != "admin":
                return _json(403, {"detail": "Only admins can delete"})
            self.bylaws.remove(bylaw)
            return _json(204)
        return _json(405, {"detail": "Method Not Allowed"})

    def _suggestions(self, request: httpx.Request, rest: list[str]) -> httpx.Response:
        method = request.method
        if rest == [] and method == "POST":
            body = self._body(request)
            record = {"id": f"s-{next(self._ids)}", "created_at": "2025-07-01T00:00:00Z", **body}
            self.suggestions.append(record)
            return _json(201, record)
        user = self._user(request)
        if user is None:
            return _json(401, {"detail": "Could not validate credentials"})
        if user["role"] == "public":
            return _json(403, {"detail": "Not enough permissions"})
        if rest == [] and method == "GET":
            return _json(200, self.suggestions)
        suggestion = next((s for s in self.suggestions if s["id"] == rest[0]), None)
        if suggestion is None:
            return _json(404, {"detail": "Suggestion not found"})
        self.suggestions.remove(suggestion)
        return _json(204)

    def _auth(self, request: httpx.Request, rest: list[str]) -> httpx.Response:
        method = request.method
        if rest == ["login"] and method == "POST":
            body = self._body(request)
            user = next(
                (u for u in self.users if u["email"] == body.get("email") and u["password"] == body.get("password")),
                None,
            )
            if user is None:
                return _json(401, {"detail": "Incorrect email or password"})
            return _json(
                200,
                {
                    "access_token": self.token_for(user["email"]),
                    "token_type": "bearer",
                    "user": {k: v for k, v in user.items() if k != "password"},
                },
            )

        user = self._user(request)
        if user is None:
            return _json(401, {"detail": "Could not validate credentials"})
        public_user = {k: v for k, v in user.items() if k != "password"}
        if rest == ["me"]:
            return _json(200, public_user)
        if user["role"] != "admin":
            return _json(403, {"detail": "Admin only"})
        if rest == ["users"] and method == "GET":
            return _json(200, [{k: v for k, v in u.items() if k != "password"} for u in self.users])
        if rest == ["register"] and method == "POST":
            body = self._body(request)
            record = {"id": f"u-{next(self._ids)}", "role": "public", **body}
            self.users.append(record)
            self.tokens[f"token-{record['id']}"] = record["email"]
            return _json(201, {k: v for k, v in record.items() if k != "password"})
        target = next((u for u in self.users if len(rest) > 1 and u["id"] == rest[1]), None)
        if target is None:
            return _json(404, {"detail": "User not found"})
        if rest[2:] == ["role"] and method == "PUT":
            target["role"] = self._body(request)["role"]
            return _json(200, {k: v for k, v in target.items() if k != "password"})
        if len(rest) == 2 and method == "DELETE":
            self.users.remove(target)
            return _json(200, {"message": f"User {target['email']} deleted"})
        return _json(405, {"detail": "Method Not Allowed"})


class RecordingMetrics:
    """Metrics sink that keeps what it was given."""

    def __init__(self) -> None:
        self.requests: list[tuple[str, str]] = []
        self.poll_checks: list[str] = []

    def record_request(self, method: str, outcome: str, latency_ms: float) -> None:
        self.requests.append((method, outcome))

    def inc_poll_check(self, outcome: str) -> None:
        self.poll_checks.append(outcome)


@pytest.fixture
def fake_api() -> FakePortalApi:
    return FakePortalApi()


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest_asyncio.fixture
async def portal(fake_api: FakePortalApi, metrics: RecordingMetrics) -> AsyncGenerator[PortalContext, None]:
    """Portal wired to the fake API, signed out."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    context = PortalContext(client=client, base_url=BASE_URL, metrics=metrics)
    yield context
    await client.aclose()


@pytest_asyncio.fixture
async def admin_portal(portal: PortalContext, fake_api: FakePortalApi) -> PortalContext:
    portal.gate.start(fake_api.token_for("admin@ualberta.ca"))
    return portal


@pytest_asyncio.fixture
async def pwg_portal(portal: PortalContext, fake_api: FakePortalApi) -> PortalContext:
    portal.gate.start(fake_api.token_for("pwg@ualberta.ca"))
    return portal
