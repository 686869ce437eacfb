"""Record HAR files by driving each flow through its cases once."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from playwright.async_api import Browser

from authflow.flows.composer import execute_flow
from authflow.flows.definition import FlowDefinition
from authflow.models.config import TimeoutConfig
from authflow.models.test_case import FlowTestCase

logger = logging.getLogger(__name__)


async def record_flow_har(
    browser: Browser,
    flow: FlowDefinition,
    cases: Sequence[FlowTestCase],
    har_path: Path,
    base_url: str,
    timeouts: TimeoutConfig,
) -> list[str]:
    """Run every case in one recording context and save the traffic to ``har_path``.

    Returns the ids of cases that did not reach their expected outcome while
    recording; the HAR is written either way.
    """
    har_path.parent.mkdir(parents=True, exist_ok=True)
    context = await browser.new_context(
        record_har_path=str(har_path), record_har_mode="minimal",
    )
    context.set_default_timeout(timeouts.action)
    context.set_default_navigation_timeout(timeouts.navigation)
    failed: list[str] = []
    try:
        for case in cases:
            logger.info("Recording %s flow: %s", flow.name, case.title)
            page = await context.new_page()
            try:
                outcome = await execute_flow(page, flow, case, base_url, timeouts)
            finally:
                await page.close()
            if not outcome.passed:
                logger.warning("  %s did not pass while recording: %s", case.id, outcome.failure)
                failed.append(case.id)
    finally:
        await context.close()
    logger.info("%s HAR file recorded: %s", flow.name.capitalize(), har_path)
    return failed
