"""Transient, self-dismissing notifications."""

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from portal.config import get_settings

logger = logging.getLogger(__name__)


def new_items_message(count: int, singular: str = "policy", plural: str = "policies") -> str:
    """Text announcing newly approved items, e.g. "✨ 1 new policy has been approved!"."""
    if count == 1:
        return f"✨ 1 new {singular} has been approved!"
    return f"✨ {count} new {plural} have been approved!"


@dataclass
class Notification:
    id: str
    message: str
    kind: str
    tag: str | None
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationCenter:
    """Holds the notifications currently on screen.

    A notification shown with a tag replaces any earlier one carrying the same
    tag, so repeated change checks never stack duplicate banners.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = timedelta(
            seconds=ttl_seconds if ttl_seconds is not None else get_settings().notification_ttl_seconds
        )
        self._clock = clock
        self._items: list[Notification] = []
        self._ids = itertools.count(1)

    def show(self, message: str, kind: str = "success", tag: str | None = None) -> Notification:
        now = self._clock()
        if tag is not None:
            self._items = [n for n in self._items if n.tag != tag]
        notification = Notification(
            id=f"notification-{next(self._ids)}",
            message=message,
            kind=kind,
            tag=tag,
            created_at=now,
            expires_at=now + self.ttl,
        )
        self._items.append(notification)
        logger.debug("Notification shown: %s", message)
        return notification

    def dismiss(self, notification_id: str) -> bool:
        """Remove a notification early; False when it is already gone."""
        before = len(self._items)
        self._items = [n for n in self._items if n.id != notification_id]
        return len(self._items) != before

    def active(self, now: datetime | None = None) -> list[Notification]:
        """Notifications still on screen, pruning the expired ones."""
        now = now or self._clock()
        self._items = [n for n in self._items if not n.is_expired(now)]
        return list(self._items)
