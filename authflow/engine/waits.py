"""Bounded waits over the Playwright page.

Every helper here takes an explicit timeout; nothing waits unbounded.
Timeouts surface as ``False``/``""``/``None`` so callers can fold them into
pre- and post-condition verdicts.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

logger = logging.getLogger(__name__)


async def visible_within(locator: Locator, timeout_ms: int) -> bool:
    """True if the first match of ``locator`` becomes visible within the bound."""
    try:
        await locator.first.wait_for(state="visible", timeout=timeout_ms)
        return True
    except PlaywrightError:
        return False


async def url_reached(page: Page, pattern: re.Pattern, timeout_ms: int) -> bool:
    """True if the page URL matches ``pattern`` within the bound."""
    try:
        await page.wait_for_url(pattern, timeout=timeout_ms)
        return True
    except PlaywrightError:
        return False


async def input_value_within(locator: Locator, timeout_ms: int) -> str:
    """Current value of an input control, or ``""`` when it cannot be read in time."""
    try:
        return await locator.input_value(timeout=timeout_ms)
    except PlaywrightError:
        return ""


@dataclass(frozen=True)
class Signal:
    """One terminal condition taking part in a race.

    ``wait`` blocks until the condition holds (raising on timeout) and
    ``check`` probes it once without waiting.
    """

    label: str
    wait: Callable[[int], Awaitable[object]]
    check: Callable[[], Awaitable[bool]]


def url_signal(page: Page, pattern: re.Pattern, label: str = "") -> Signal:
    async def _check() -> bool:
        return bool(pattern.search(page.url))

    return Signal(
        label=label or f"url {pattern.pattern}",
        wait=lambda timeout: page.wait_for_url(pattern, timeout=timeout),
        check=_check,
    )


def visible_signal(locator: Locator, label: str) -> Signal:
    return Signal(
        label=label,
        wait=lambda timeout: locator.first.wait_for(state="visible", timeout=timeout),
        check=lambda: locator.first.is_visible(),
    )


async def first_signal(signals: Sequence[Signal], timeout_ms: int) -> Optional[str]:
    """Race ``signals`` under one shared deadline.

    The first wait that completes successfully wins and the remaining waits
    are cancelled and drained, so none of them can raise after the race is
    decided. If the deadline passes with no winner, each signal's direct
    check runs once, in order. Returns the winning label or ``None``.
    """
    if not signals:
        return None

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_ms / 1000
    tasks = {asyncio.ensure_future(s.wait(timeout_ms)): s for s in signals}
    pending = set(tasks)
    winner: Optional[str] = None

    try:
        while pending and winner is None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            done, pending = await asyncio.wait(
                pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED,
            )
            for task in done:
                if task.cancelled():
                    continue
                # Retrieve every outcome so failed waits are not reported later
                error = task.exception()
                if error is not None:
                    logger.debug("Race signal '%s' gave up: %s", tasks[task].label, error)
                elif winner is None:
                    winner = tasks[task].label
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    if winner is not None:
        logger.debug("Race settled by '%s'", winner)
        return winner

    for signal in signals:
        try:
            if await signal.check():
                logger.debug("Race deadline passed; '%s' holds on re-check", signal.label)
                return signal.label
        except PlaywrightError as e:
            logger.debug("Re-check of '%s' failed: %s", signal.label, e)
    return None
