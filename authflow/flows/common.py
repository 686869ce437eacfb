"""Step builders shared by the login and registration catalogues.

Each builder returns an :class:`InteractionStep` following one fixed recipe
(navigate, fill, submit, verify success, verify error). Flow modules only
supply names, locators, URL patterns and the error texts they expect.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from authflow.engine.step import InteractionStep, create_interaction
from authflow.engine.text_match import contains_message, strip_trailing_period
from authflow.engine.waits import (
    Signal,
    first_signal,
    input_value_within,
    url_reached,
    visible_signal,
    visible_within,
)
from authflow.models.config import TimeoutConfig

logger = logging.getLogger(__name__)

LocatorFactory = Callable[[Page], Locator]
SignalFactory = Callable[[Page], Sequence[Signal]]

# Markup used for alert widgets: a custom <alert> element or an ARIA role.
ALERT_SELECTORS = ("alert", '[role="alert"]')
ANY_ALERT = ", ".join(ALERT_SELECTORS)


def textbox(name: str, exact: bool = False) -> LocatorFactory:
    return lambda page: page.get_by_role("textbox", name=name, exact=exact)


def button(name: str) -> LocatorFactory:
    return lambda page: page.get_by_role("button", name=name)


def link(name: str) -> LocatorFactory:
    return lambda page: page.get_by_role("link", name=name)


def text(value: str | re.Pattern) -> LocatorFactory:
    return lambda page: page.get_by_text(value, exact=False)


def view_pattern(path: str) -> re.Pattern:
    """URL pattern matching a view by its path segment, e.g. ``/login``."""
    return re.compile(re.escape("/" + path.strip("/")))


def navigate_step(
    name: str,
    url: str,
    view: re.Pattern,
    primary_field: LocatorFactory,
    timeouts: TimeoutConfig,
) -> InteractionStep:
    """Load ``url`` unless already there; done when the primary input shows."""

    async def precondition(page: Page) -> bool:
        return not view.search(page.url)

    async def action(page: Page) -> None:
        # domcontentloaded rather than networkidle: the form is usable long before
        await page.goto(url, wait_until="domcontentloaded", timeout=timeouts.page_load)

    async def postcondition(page: Page) -> bool:
        if not view.search(page.url):
            return False
        return await visible_within(primary_field(page), timeouts.visibility)

    return create_interaction(name, precondition, action, postcondition)


def fill_step(
    name: str,
    field: LocatorFactory,
    value: str,
    timeouts: TimeoutConfig,
) -> InteractionStep:
    """Clear a control and type ``value``; an empty value leaves it cleared."""

    async def precondition(page: Page) -> bool:
        return await visible_within(field(page), timeouts.visibility)

    async def action(page: Page) -> None:
        control = field(page)
        await control.clear()
        if value:
            await control.fill(value)

    async def postcondition(page: Page) -> bool:
        current = await input_value_within(field(page), timeouts.value_read)
        return current == (value or "")

    return create_interaction(name, precondition, action, postcondition)


def submit_step(
    name: str,
    control: LocatorFactory,
    settle_signals: SignalFactory,
    timeouts: TimeoutConfig,
) -> InteractionStep:
    """Click ``control`` and wait for the page to settle.

    The postcondition only waits for any terminal signal (success navigation,
    a known error text, an alert) and holds even when none shows up in time.
    Whether the outcome is the expected one is left to the verify steps.
    """

    async def precondition(page: Page) -> bool:
        return await visible_within(control(page), timeouts.visibility)

    async def action(page: Page) -> None:
        # No explicit timeout: the context's default action timeout applies
        await control(page).click()

    async def postcondition(page: Page) -> bool:
        settled_by = await first_signal(settle_signals(page), timeouts.settle)
        if settled_by is None:
            logger.debug("[%s] no terminal signal within %dms, deferring to verification",
                         name, timeouts.settle)
        return True

    return create_interaction(name, precondition, action, postcondition)


def verify_success_step(
    name: str,
    success_view: re.Pattern,
    success_elements: Sequence[LocatorFactory],
    timeouts: TimeoutConfig,
) -> InteractionStep:
    """Success holds when the URL matches and every success-only element is visible."""

    async def precondition(page: Page) -> bool:
        # Best effort: the postcondition re-checks the URL itself
        await url_reached(page, success_view, timeouts.success_navigation)
        return True

    async def postcondition(page: Page) -> bool:
        if not success_view.search(page.url):
            return False
        for element in success_elements:
            if not await visible_within(element(page), timeouts.visibility):
                return False
        return True

    return create_interaction(name, precondition=precondition, postcondition=postcondition)


def verify_error_step(
    name: str,
    expected: str,
    form_view: re.Pattern,
    timeouts: TimeoutConfig,
) -> InteractionStep:
    """Check that ``expected`` is shown while the page stays on the form.

    Rendering differs between inline text and alert widgets, and trailing
    punctuation drifts, so the text is looked for in order: literal text,
    text without its trailing period, alert elements, the whole body. The
    last two also accept text holding every meaningful word of the message.
    """
    if not expected or not expected.strip():
        raise ValueError("verify_error_step requires a non-empty expected message")
    stripped = strip_trailing_period(expected)

    async def precondition(page: Page) -> bool:
        # Best effort only; a timeout here is not a failure
        await first_signal(
            [
                visible_signal(page.get_by_text(expected, exact=False), "error text"),
                visible_signal(page.locator(ANY_ALERT), "alert"),
            ],
            timeouts.error_appear,
        )
        return True

    async def postcondition(page: Page) -> bool:
        if not form_view.search(page.url):
            return False

        if await visible_within(page.get_by_text(expected, exact=False), timeouts.text_check):
            return True

        if stripped != expected.strip() and await visible_within(
            page.get_by_text(stripped, exact=False), timeouts.text_check,
        ):
            return True

        for selector in ALERT_SELECTORS:
            try:
                alerts = page.locator(selector)
                for i in range(await alerts.count()):
                    content = await alerts.nth(i).text_content(timeout=timeouts.text_check)
                    if contains_message(content or "", expected):
                        return True
            except PlaywrightError as e:
                logger.debug("[%s] could not read %s elements: %s", name, selector, e)

        try:
            body = await page.text_content("body", timeout=timeouts.text_check)
        except PlaywrightError as e:
            logger.debug("[%s] could not read page body: %s", name, e)
            return False
        return contains_message(body or "", expected)

    return create_interaction(name, precondition=precondition, postcondition=postcondition)
