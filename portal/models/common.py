"""Common types, enums and fixed catalogs shared across all models."""

from enum import Enum

# Client-side storage key for the bearer token
TOKEN_STORAGE_KEY = "accessToken"

# Fixed policy sections, in display order
SECTION_NAMES: dict[str, str] = {
    "1": "Organizational Identity & Values",
    "2": "Governance & Elections",
    "3": "Operations, Staff & Finance",
}
DEFAULT_SECTION = "1"


class DocumentKind(str, Enum):
    """Kind of governance document."""

    policy = "policy"
    bylaw = "bylaw"


class DocumentStatus(str, Enum):
    """Lifecycle state of a document."""

    draft = "draft"
    approved = "approved"


class Role(str, Enum):
    """Role of a signed-in user."""

    public = "public"
    admin = "admin"
    policy_working_group = "policy_working_group"

    @property
    def label(self) -> str:
        """Human-readable role name."""
        return {
            Role.public: "Public",
            Role.admin: "Admin",
            Role.policy_working_group: "Policy Working Group",
        }[self]


class ReviewStance(str, Enum):
    """A reviewer's stance on a policy."""

    confirmed = "confirmed"
    needs_work = "needs_work"


def section_name(section: str | int | None) -> str:
    """Get the display name of a section key.

    Full section names are returned unchanged so that records carrying either
    shape render the same way.
    """
    key = str(section) if section is not None else ""
    if key in SECTION_NAMES:
        return SECTION_NAMES[key]
    if key in SECTION_NAMES.values():
        return key
    return f"Section {key}"


def section_key(section: str | int | None) -> str | None:
    """Normalize a section key or full section name to its key.

    Returns None for values outside the catalog.
    """
    if section is None or section == "":
        return None
    value = str(section).strip()
    if value in SECTION_NAMES:
        return value
    for key, name in SECTION_NAMES.items():
        if name == value:
            return key
    return None
