"""Background change detection for approved-document listings.

State machine:

    IDLE --start--> POLLING --hidden--> PAUSED --visible--> POLLING
    any  --stop---> IDLE (terminal)

Each check fetches the current identifier set and compares its size with the
set seen by the previous check. A strictly larger set means new items were
approved: a notification is shown and the listing is refreshed. Removals and
same-size replacements are not reported. Failed checks are logged and skipped;
the schedule continues.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum

from portal.api.errors import PortalError
from portal.config import get_settings
from portal.sync.notifications import NotificationCenter, new_items_message
from portal.sync.state import ListingState
from portal.utils.metrics import PrometheusPortalMetrics

logger = logging.getLogger(__name__)

NEW_ITEMS_TAG = "new-items"


class PollerStatus(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    PAUSED = "paused"


class ChangeDetectionPoller:
    """Periodically detects newly approved documents.

    Args:
        fetch_ids: Coroutine returning identifiers of all approved documents
        state: Listing state holding the last-seen identifier set
        on_change: Awaited with the number of new items (usually a reload)
        notifications: Where the "new items" message is shown
        interval_seconds: Time between checks (settings default)
        noun: Singular and plural item names used in the message
        metrics: Check outcome counter
    """

    def __init__(
        self,
        fetch_ids: Callable[[], Awaitable[Iterable[str]]],
        state: ListingState | None = None,
        on_change: Callable[[int], Awaitable[None]] | None = None,
        notifications: NotificationCenter | None = None,
        interval_seconds: float | None = None,
        noun: tuple[str, str] = ("policy", "policies"),
        metrics: PrometheusPortalMetrics | None = None,
    ) -> None:
        self._fetch_ids = fetch_ids
        self.state = state or ListingState()
        self._on_change = on_change
        self.notifications = notifications
        self.interval = interval_seconds if interval_seconds is not None else get_settings().poll_interval_seconds
        self._noun = noun
        self._metrics = metrics or PrometheusPortalMetrics()
        self._status = PollerStatus.IDLE
        self._stopped = False
        self._task: asyncio.Task[None] | None = None

    @property
    def status(self) -> PollerStatus:
        return self._status

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def prime(self, ids: Iterable[str]) -> None:
        """Seed the last-seen set so the next check has a baseline."""
        self.state.known_ids = set(ids)

    async def check(self) -> int:
        """Run one change check.

        Returns:
            Number of new items detected (0 on failure or first check)
        """
        try:
            current = set(await self._fetch_ids())
        except PortalError as e:
            logger.warning("Change check failed: %s", e.message, exc_info=True)
            self._metrics.inc_poll_check("failed")
            return 0

        previous = self.state.known_ids
        self.state.known_ids = current

        if previous is None or len(current) <= len(previous):
            self._metrics.inc_poll_check("unchanged")
            return 0

        new_count = len(current) - len(previous)
        self._metrics.inc_poll_check("changed")
        logger.info("Detected %d newly approved %s", new_count, self._noun[0] if new_count == 1 else self._noun[1])

        if self.notifications is not None:
            self.notifications.show(new_items_message(new_count, *self._noun), tag=NEW_ITEMS_TAG)
        if self._on_change is not None:
            try:
                await self._on_change(new_count)
            except PortalError as e:
                logger.warning("Refresh after change failed: %s", e.message)
        return new_count

    async def start(self) -> None:
        """Check immediately, then keep checking every interval."""
        if self._stopped or self._status != PollerStatus.IDLE:
            return
        self._status = PollerStatus.POLLING
        await self.check()
        if self._status == PollerStatus.POLLING:
            self._schedule()

    async def set_visibility(self, visible: bool) -> None:
        """Pause while hidden; on becoming visible, check at once and resume."""
        if self._stopped:
            return
        if not visible and self._status == PollerStatus.POLLING:
            self._cancel_timer()
            self._status = PollerStatus.PAUSED
            logger.debug("Polling paused")
        elif visible and self._status == PollerStatus.PAUSED:
            self._status = PollerStatus.POLLING
            logger.debug("Polling resumed")
            await self.check()
            if self._status == PollerStatus.POLLING:
                self._schedule()

    async def stop(self) -> None:
        """Cancel the schedule for good (page teardown)."""
        self._stopped = True
        self._status = PollerStatus.IDLE
        task = self._task
        self._cancel_timer()
        if task is not None and task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _schedule(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    def _cancel_timer(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.check()
