"""Flow composer — runs one test case through its flow's step catalogue."""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass, field
from typing import Optional

from playwright.async_api import Page

from authflow.engine.runner import run_step
from authflow.engine.step import InteractionStep
from authflow.engine.waits import visible_within
from authflow.machines.machine import MachineRun
from authflow.models.config import TimeoutConfig
from authflow.models.test_case import FlowTestCase
from authflow.models.test_result import StepResult

from .definition import FlowDefinition

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class FlowAssertionError(AssertionError):
    """A flow did not reach the outcome its test case expects."""


def unique_value(prefix: str = "newuser") -> str:
    """``prefix`` + epoch milliseconds + 7 random base36 characters."""
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=7))
    return f"{prefix}{int(time.time() * 1000)}{suffix}"


def bind_inputs(flow: FlowDefinition, case: FlowTestCase) -> dict[str, str]:
    """Input values for ``case``; the flow's happy-path case gets a fresh identity."""
    inputs = case.inputs()
    if (
        flow.unique_field
        and case.id == flow.happy_path_id
        and case.expected_state == flow.success_state
    ):
        inputs[flow.unique_field] = unique_value()
        logger.debug("%s: using generated %s '%s'", case.id, flow.unique_field,
                     inputs[flow.unique_field])
    return inputs


@dataclass
class FlowOutcome:
    """What happened when one case ran through its flow."""

    flow: str
    case_id: str
    inputs: dict[str, str] = field(default_factory=dict)
    step_results: list[StepResult] = field(default_factory=list)
    failure: Optional[str] = None
    final_url: str = ""
    final_state: str = ""

    @property
    def passed(self) -> bool:
        return self.failure is None

    def assert_passed(self) -> None:
        if self.failure is not None:
            raise FlowAssertionError(f"{self.failure} (current URL: {self.final_url})")


async def _run(page: Page, step: InteractionStep, outcome: FlowOutcome) -> bool:
    start = time.time()
    result = await run_step(page, step)
    outcome.step_results.append(StepResult(
        step_index=len(outcome.step_results),
        name=step.name,
        status="pass" if result.ok else "fail",
        error_message=result.error,
        duration_seconds=round(time.time() - start, 3),
    ))
    if not result.ok:
        outcome.failure = result.error
        logger.debug("  %s: FAILED: %s", step.name, result.error)
    else:
        logger.debug("  %s: ok", step.name)
    return result.ok


async def execute_flow(
    page: Page,
    flow: FlowDefinition,
    case: FlowTestCase,
    base_url: str,
    timeouts: Optional[TimeoutConfig] = None,
    run: Optional[MachineRun] = None,
) -> FlowOutcome:
    """Navigate, fill every field, submit, then verify the expected outcome.

    Steps run strictly one after another and the first failed step ends the
    case. ``run`` (a fresh machine instance when omitted) follows the states
    the page was observed to pass through; it never decides which step runs.
    """
    timeouts = timeouts or TimeoutConfig()
    flow.validate_case(case)
    run = run or flow.create_machine().start()
    steps = flow.build_steps(base_url, timeouts)
    inputs = bind_inputs(flow, case)
    outcome = FlowOutcome(flow=flow.name, case_id=case.id, inputs=inputs)

    try:
        if not await _run(page, steps.navigate, outcome):
            return outcome
        run.send(flow.navigate_event)

        for name, make_step in steps.fills:
            if not await _run(page, make_step(inputs[name]), outcome):
                return outcome

        if not await _run(page, steps.submit, outcome):
            return outcome

        if case.expected_state == flow.success_state:
            if not await _run(page, steps.verify_success, outcome):
                logger.error("Verification failed: %s", outcome.failure)
                logger.error("Current URL: %s", page.url)
                return outcome
            if case.expected_message:
                shown = await visible_within(
                    page.get_by_text(case.expected_message, exact=False),
                    timeouts.message_check,
                )
                if not shown:
                    # Navigation already proved success; the flash message is optional
                    logger.info("%s: message '%s' not shown", case.id, case.expected_message)
        elif case.expected_state == flow.error_state:
            if not case.expected_error:
                # Nothing observed after submit, so the run stays at the form
                logger.info("%s: no expected error, outcome not verified", case.id)
                return outcome
            if not await _run(page, steps.verify_error(case.expected_error), outcome):
                return outcome
        else:
            outcome.failure = f"Unexpected target state '{case.expected_state}'"
            return outcome

        _record_submission(run, flow, case, inputs)
        return outcome
    finally:
        outcome.final_url = page.url
        outcome.final_state = run.state


def _record_submission(
    run: MachineRun, flow: FlowDefinition, case: FlowTestCase, inputs: dict[str, str],
) -> None:
    message = case.expected_error if case.expected_state == flow.error_state else None
    events = run.machine.events_to(case.expected_state, message=message)
    if not events:
        logger.warning("%s: no %s event leads to %s with message %r",
                       case.id, run.machine.id, case.expected_state, message)
        return
    run.send(events[0], **inputs)
