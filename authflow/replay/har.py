"""HAR-based network replay for browser contexts.

The interaction steps never know whether responses are live or replayed;
routing is attached to the context before the test case opens its page.
"""

from __future__ import annotations

import logging
from pathlib import Path

from playwright.async_api import BrowserContext
from playwright.async_api import Error as PlaywrightError

from authflow.models.config import ReplayMode

logger = logging.getLogger(__name__)


async def setup_har_routing(context: BrowserContext, har_path: Path, mode: ReplayMode) -> str:
    """Attach HAR routing to ``context`` and return the effective mode.

    ``record`` (re)captures traffic into ``har_path`` (written when the
    context closes). ``replay`` serves matching recorded entries and falls
    back to the network for everything else. A missing or unreadable HAR
    means live traffic.
    """
    if mode == ReplayMode.OFF:
        return "live"

    if mode == ReplayMode.RECORD:
        har_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            await context.route_from_har(
                har_path, update=True, update_content="embed", update_mode="minimal",
            )
            logger.debug("Recording network traffic to %s", har_path)
            return "record"
        except PlaywrightError as e:
            logger.warning("Could not record HAR %s, using live network: %s", har_path, e)
            return "live"

    if not har_path.exists():
        logger.debug("No HAR at %s, using live network", har_path)
        return "live"
    try:
        await context.route_from_har(har_path, not_found="fallback")
        logger.debug("Replaying network traffic from %s", har_path)
        return "replay"
    except PlaywrightError as e:
        logger.warning("HAR file not available, using live network: %s", e)
        return "live"
