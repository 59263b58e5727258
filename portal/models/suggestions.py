"""Suggestion models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Suggestion(BaseModel):
    """Free-text feedback, optionally tied to a policy or bylaw.

    The listing endpoint joins the referenced document's display fields
    (`policy_id_text`, `policy_name`, `bylaw_number`, `bylaw_title`).
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    suggestion: str = ""
    status: str = "pending"
    created_at: str | None = None
    policy_id: str | None = None
    bylaw_id: str | None = None
    policy_id_text: str | None = None
    policy_name: str | None = None
    bylaw_number: int | str | None = None
    bylaw_title: str | None = None

    @field_validator("id", "policy_id", "bylaw_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v
