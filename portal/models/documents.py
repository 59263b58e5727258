"""Document models: the canonical view model and API request payloads."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from portal.models.common import DocumentKind, DocumentStatus


# API and legacy key names accepted by DocumentView lookups, per kind
_SOURCE_KEYS: dict[DocumentKind, dict[str, str]] = {
    DocumentKind.policy: {
        "policy_id": "display_id",
        "policyId": "display_id",
        "policy_name": "title",
        "policyName": "title",
        "name": "title",
        "policy_content": "content",
        "policyContent": "content",
    },
    DocumentKind.bylaw: {
        "bylaw_number": "display_id",
        "bylawNumber": "display_id",
        "number": "display_id",
        "bylaw_title": "title",
        "bylawTitle": "title",
        "bylaw_content": "content",
        "bylawContent": "content",
    },
}


class DocumentView(BaseModel):
    """Canonical internal shape of a policy or bylaw.

    Attributes are snake_case; `model_dump(by_alias=True)` yields camelCase.
    Item lookup (`view["policyId"]`) also resolves the API and legacy key
    names so older consumers read the same underlying value.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    kind: DocumentKind
    display_id: str = ""
    title: str = "Untitled"
    content: str = ""
    section: str | None = None
    section_name: str | None = None
    status: DocumentStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None

    def __getitem__(self, key: str) -> Any:
        field_name = self._resolve(key)
        if field_name is None:
            raise KeyError(key)
        return getattr(self, field_name)

    def get(self, key: str, default: Any = None) -> Any:
        """Dict-style lookup with a default."""
        try:
            return self[key]
        except KeyError:
            return default

    def _resolve(self, key: str) -> str | None:
        if key in type(self).model_fields:
            return key
        for name, info in type(self).model_fields.items():
            if info.alias == key:
                return name
        return _SOURCE_KEYS[self.kind].get(key)

    @property
    def nav_key(self) -> str:
        """Identifier used in links: dotted id for policies, UUID for bylaws."""
        if self.kind == DocumentKind.policy:
            return self.display_id or self.id
        return self.id

    @property
    def number(self) -> int | None:
        """Bylaw sequence number, when the display id is an integer."""
        try:
            return int(self.display_id)
        except ValueError:
            return None

    @property
    def is_draft(self) -> bool:
        return self.status == DocumentStatus.draft


class PolicyCreate(BaseModel):
    """Body of POST /api/policies. New policies always start as drafts."""

    policy_id: str = Field(..., min_length=1)
    policy_name: str = Field(..., min_length=1)
    section: str = Field(..., min_length=1)
    policy_content: str = Field(..., min_length=1)
    status: Literal["draft"] = "draft"


class PolicyUpdate(BaseModel):
    """Body of PUT /api/policies/{policy_id}; the policy_id itself is immutable."""

    policy_name: str = Field(..., min_length=1)
    section: str = Field(..., min_length=1)
    policy_content: str = Field(..., min_length=1)


class BylawCreate(BaseModel):
    """Body of POST /api/bylaws."""

    bylaw_number: int = Field(..., ge=1)
    bylaw_title: str = Field(..., min_length=1)
    bylaw_content: str = Field(..., min_length=1)
    status: Literal["draft"] = "draft"


class BylawUpdate(BaseModel):
    """Body of PUT /api/bylaws/{id}; the bylaw number is immutable."""

    bylaw_title: str = Field(..., min_length=1)
    bylaw_content: str = Field(..., min_length=1)
