"""Watch the portal for newly approved policies and print notifications.

Run with: python -m scripts.watch_policies [--interval SECONDS] [--base-url URL]
"""

import argparse
import asyncio
import logging

from portal.config import get_settings
from portal.pages.context import PortalContext
from portal.sync.notifications import NotificationCenter
from portal.sync.poller import ChangeDetectionPoller
from portal.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--interval", type=float, default=settings.poll_interval_seconds, help="Seconds between checks")
    parser.add_argument("--base-url", default=settings.api_base_url, help="API base URL")
    return parser.parse_args(argv)


async def watch(interval: float, base_url: str) -> None:
    """Poll until cancelled, printing a line for every batch of new policies."""
    async with PortalContext(base_url=base_url) as portal:

        async def fetch_ids() -> list[str]:
            return [doc.nav_key for doc in await portal.policies.list_approved()]

        async def announce(new_count: int) -> None:
            for notification in notifications.active():
                print(notification.message)

        notifications = NotificationCenter()
        poller = ChangeDetectionPoller(
            fetch_ids=fetch_ids,
            on_change=announce,
            notifications=notifications,
            interval_seconds=interval,
            metrics=portal.metrics,
        )
        await poller.start()
        print(f"Watching {base_url} every {interval:g}s ({len(poller.state.known_ids or ())} approved policies)")
        try:
            await asyncio.Event().wait()
        finally:
            await poller.stop()


def main() -> None:
    args = parse_args()
    configure_logging(get_settings().log_level)
    try:
        asyncio.run(watch(args.interval, args.base_url))
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
