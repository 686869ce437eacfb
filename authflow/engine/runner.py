"""Step runner — executes one interaction step under Guard -> Action -> Verify."""

from __future__ import annotations

import logging

from playwright.async_api import Page

from .result import Result
from .step import InteractionStep

logger = logging.getLogger(__name__)


def _precondition_failed(name: str) -> str:
    return f"[{name}] Pre-condition failed: UI state invalid."


def _action_failed(name: str, message: str) -> str:
    return f"[{name}] Action failed: {message}"


def _postcondition_failed(name: str) -> str:
    return f"[{name}] Post-condition failed: Expected state not reached."


async def run_step(page: Page, step: InteractionStep) -> Result[None]:
    """Run a single step against the page and report the outcome as a Result.

    The action is attempted at most once and only after the precondition
    holds; the postcondition is only evaluated after the action completed.
    Exceptions raised by any phase are converted into a failed Result and
    never propagate to the caller. There are no retries at this level.
    """
    logger.debug("Step '%s': checking precondition", step.name)
    try:
        ready = await step.precondition(page)
    except Exception as e:
        logger.warning("[%s] Pre-condition error: %s", step.name, e)
        ready = False
    if not ready:
        return Result.fail(_precondition_failed(step.name))

    logger.debug("Step '%s': running action", step.name)
    try:
        await step.action(page)
    except Exception as e:
        logger.warning("[%s] Action error: %s", step.name, e)
        return Result.fail(_action_failed(step.name, _error_message(e)))

    logger.debug("Step '%s': verifying postcondition", step.name)
    try:
        reached = await step.postcondition(page)
    except Exception as e:
        logger.warning("[%s] Post-condition error: %s", step.name, e)
        reached = False
    if not reached:
        return Result.fail(_postcondition_failed(step.name))

    return Result.success()


def _error_message(error: Exception) -> str:
    # Playwright errors expose the bare message; fall back to str() otherwise
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or type(error).__name__
