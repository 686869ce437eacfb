"""Test executor — runs flow test cases against a browser using Playwright."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Optional, Sequence

from playwright.async_api import BrowserContext, async_playwright

from authflow.data.loader import load_test_cases
from authflow.flows.composer import execute_flow
from authflow.flows.definition import FlowDefinition
from authflow.flows.registry import get_flow
from authflow.models.config import HarnessConfig, ReplayMode
from authflow.models.test_case import FlowTestCase
from authflow.models.test_result import RunResult, TestResult
from authflow.replay.har import setup_har_routing
from authflow.utils.browser import create_context, launch_browser

from .evidence_collector import EvidenceCollector

logger = logging.getLogger(__name__)


def har_path_for(har_dir: Path, flow: FlowDefinition, case: FlowTestCase, mode: ReplayMode) -> Path:
    """HAR file used by one case.

    Every case records into its own file so concurrent contexts never write
    the same HAR. Replay prefers that file and otherwise uses the flow-wide
    recording made by ``authflow record-har``.
    """
    case_har = har_dir / flow.name / f"{case.id}.har"
    if mode == ReplayMode.RECORD or case_har.exists():
        return case_har
    return har_dir / flow.har_file


class Executor:
    """Executes flow test cases, each in its own browser context."""

    def __init__(self, config: HarnessConfig, runs_dir: Path):
        self.config = config
        self.run_id = f"run_{uuid.uuid4().hex[:8]}"
        self.run_dir = runs_dir / self.run_id
        self.run_dir.mkdir(parents=True, exist_ok=True)

    def load_cases(self, flow_names: Sequence[str]) -> list[tuple[FlowDefinition, FlowTestCase]]:
        """Load every flow's records from the test data directory, in file order."""
        data_dir = Path(self.config.test_data_dir)
        cases = []
        for name in flow_names:
            flow = get_flow(name)
            for case in load_test_cases(data_dir / flow.data_file, flow.case_model):
                flow.validate_case(case)
                cases.append((flow, case))
        return cases

    async def execute(self, flow_names: Optional[Sequence[str]] = None) -> RunResult:
        """Run all cases of the selected flows and return aggregated results.

        Cases run concurrently up to ``max_parallel_contexts``; each gets its
        own context, page and machine instance so nothing is shared.
        """
        started_at = time.strftime("%Y-%m-%dT%H:%M:%SZ")
        start_time = time.time()
        cases = self.load_cases(flow_names or self.config.flows)
        total = len(cases)
        logger.info("Starting run %s (%d test cases, replay mode: %s)",
                    self.run_id, total, self.config.replay_mode.value)

        async with async_playwright() as p:
            logger.debug("Launching Chromium (headless=%s)...", self.config.headless)
            browser = await launch_browser(p, headless=self.config.headless)
            semaphore = asyncio.Semaphore(self.config.max_parallel_contexts)

            async def _run_one(index: int, flow: FlowDefinition, case: FlowTestCase) -> TestResult:
                async with semaphore:
                    logger.info("Running test [%d/%d]: %s %s", index + 1, total, flow.name, case.title)
                    context = await create_context(browser, self.config)
                    try:
                        har = har_path_for(Path(self.config.har_dir), flow, case,
                                           self.config.replay_mode)
                        network = await setup_har_routing(context, har, self.config.replay_mode)
                        logger.debug("  %s network: %s (%s)", case.id, network, har)
                        result = await self._run_test(context, flow, case)
                        logger.info("[%s] %s %s (%.1fs)", result.result.upper(), flow.name,
                                    case.title, result.duration_seconds)
                        return result
                    finally:
                        await context.close()

            test_results = list(await asyncio.gather(
                *(_run_one(i, flow, case) for i, (flow, case) in enumerate(cases))
            ))
            await browser.close()

        duration = time.time() - start_time
        run_result = RunResult(
            run_id=self.run_id,
            started_at=started_at,
            completed_at=time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            base_url=self.config.base_url,
            replay_mode=self.config.replay_mode.value,
            total_tests=len(test_results),
            passed=sum(1 for r in test_results if r.result == "pass"),
            failed=sum(1 for r in test_results if r.result == "fail"),
            errors=sum(1 for r in test_results if r.result == "error"),
            duration_seconds=round(duration, 2),
            test_results=test_results,
        )
        logger.info("Run complete: %d passed, %d failed, %d errors (%.1fs)",
                    run_result.passed, run_result.failed, run_result.errors, duration)
        return run_result

    async def _run_test(
        self, context: BrowserContext, flow: FlowDefinition, case: FlowTestCase,
    ) -> TestResult:
        """Run one case under the whole-test timeout and record the outcome."""
        test_start = time.time()
        timeouts = self.config.timeouts
        collector = EvidenceCollector(self.run_dir / "evidence" / flow.name, case.id)
        run = flow.create_machine().start()
        result = TestResult(
            test_id=case.id,
            test_name=case.name,
            flow=flow.name,
            expected_state=case.expected_state,
            result="error",
        )

        page = await context.new_page()
        collector.setup_listeners(page)
        try:
            outcome = await asyncio.wait_for(
                execute_flow(page, flow, case, self.config.base_url, timeouts, run),
                timeout=timeouts.test / 1000,
            )
            result.result = "pass" if outcome.passed else "fail"
            result.failure_reason = outcome.failure
            result.step_results = outcome.step_results
            result.final_url = outcome.final_url
        except asyncio.TimeoutError:
            logger.error("Test %s %s timed out after %dms", flow.name, case.id, timeouts.test)
            result.failure_reason = f"Test timed out after {timeouts.test}ms"
            result.final_url = page.url
        except Exception as e:
            logger.error("Test %s %s crashed: %s", flow.name, case.id, e)
            result.failure_reason = str(e)
            result.final_url = page.url
        finally:
            if result.result != "pass" and self.config.capture_screenshots:
                await collector.take_screenshot(page, "failure")
            collector.save_logs()
            await page.close()

        result.final_state = run.state
        result.duration_seconds = round(time.time() - test_start, 2)
        result.screenshots = collector.screenshots
        result.console_logs = collector.console_logs
        return result
