"""Policy review endpoints (keyed by the dotted policy_id)."""

import logging

from portal.api.client import ApiClient, parse_record
from portal.api.errors import NotFound
from portal.api.policies import policy_path
from portal.api.session import SessionGate
from portal.models.common import ReviewStance
from portal.models.reviews import ReviewSummary

logger = logging.getLogger(__name__)


class ReviewService:
    """Typed access to policy reviews."""

    def __init__(self, api: ApiClient, gate: SessionGate) -> None:
        self._api = api
        self._gate = gate

    async def get(self, policy_id: str) -> ReviewSummary:
        """Aggregated reviews; a 404 means nobody has reviewed yet."""
        try:
            data = await self._gate.run(
                lambda token: self._api.get(f"{policy_path(policy_id)}/reviews", token=token),
                purpose="view reviews",
            )
        except NotFound:
            return ReviewSummary()
        return parse_record(ReviewSummary, data or {})

    async def submit(self, policy_id: str, stance: ReviewStance) -> None:
        await self._gate.run(
            lambda token: self._api.post(
                f"{policy_path(policy_id)}/reviews",
                json={"review_status": stance.value},
                token=token,
            ),
            purpose="review policies",
        )

    async def reset_all(self) -> int:
        """Delete every review of every policy (admin only).

        Returns:
            Number of reviews deleted
        """
        data = await self._gate.run(
            lambda token: self._api.delete("/api/policies/reviews/reset-all", token=token),
            purpose="reset reviews",
        )
        deleted = (data or {}).get("deleted_count", 0)
        logger.info("Reset all reviews, %s deleted", deleted)
        return int(deleted or 0)
