"""Browser launch and context helpers."""

from __future__ import annotations

from playwright.async_api import Browser, BrowserContext, Playwright

from authflow.models.config import HarnessConfig


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch Chromium for a test run."""
    return await playwright.chromium.launch(headless=headless)


async def create_context(browser: Browser, config: HarnessConfig) -> BrowserContext:
    """Create an isolated context carrying the run's default timeouts.

    Clicks and fills without an explicit timeout inherit ``timeouts.action``;
    navigations without one inherit ``timeouts.navigation``.
    """
    context = await browser.new_context(
        viewport={"width": config.viewport_width, "height": config.viewport_height},
        ignore_https_errors=False,
    )
    context.set_default_timeout(config.timeouts.action)
    context.set_default_navigation_timeout(config.timeouts.navigation)
    return context
