"""Models package - re-exports for convenience."""

from portal.models.common import (
    DEFAULT_SECTION,
    SECTION_NAMES,
    TOKEN_STORAGE_KEY,
    DocumentKind,
    DocumentStatus,
    ReviewStance,
    Role,
    section_key,
    section_name,
)
from portal.models.documents import (
    BylawCreate,
    BylawUpdate,
    DocumentView,
    PolicyCreate,
    PolicyUpdate,
)
from portal.models.reviews import ReviewBucket, ReviewSummary
from portal.models.suggestions import Suggestion
from portal.models.users import LoginResponse, User

__all__ = [
    # Common
    "DEFAULT_SECTION",
    "SECTION_NAMES",
    "TOKEN_STORAGE_KEY",
    "DocumentKind",
    "DocumentStatus",
    "ReviewStance",
    "Role",
    "section_key",
    "section_name",
    # Documents
    "BylawCreate",
    "BylawUpdate",
    "DocumentView",
    "PolicyCreate",
    "PolicyUpdate",
    # Reviews
    "ReviewBucket",
    "ReviewSummary",
    # Suggestions
    "Suggestion",
    # Users
    "LoginResponse",
    "User",
]
