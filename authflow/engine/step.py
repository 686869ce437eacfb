"""Interaction step — an atomic Guard -> Action -> Verify description."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from playwright.async_api import Page

Condition = Callable[[Page], Awaitable[bool]]
Mutation = Callable[[Page], Awaitable[None]]


@dataclass(frozen=True)
class InteractionStep:
    """A named (precondition, action, postcondition) triple.

    Building a step has no side effect. The page handle is only touched when
    :func:`authflow.engine.runner.run_step` invokes the callables, and it is
    passed in on every call rather than captured.

    Attributes:
        name: Identifier used in diagnostics and logs.
        precondition: Guard; may wait, must not mutate the page.
        action: The only member allowed to mutate the page.
        postcondition: Verification; may wait, must not mutate the page.
    """

    name: str
    precondition: Condition
    action: Mutation
    postcondition: Condition


async def always_ready(page: Page) -> bool:
    return True


async def no_action(page: Page) -> None:
    return None


def create_interaction(
    name: str,
    precondition: Condition = always_ready,
    action: Mutation = no_action,
    postcondition: Condition = always_ready,
) -> InteractionStep:
    """Build an :class:`InteractionStep`; omitted phases are no-ops."""
    if not name:
        raise ValueError("Interaction steps require a name")
    return InteractionStep(
        name=name,
        precondition=precondition,
        action=action,
        postcondition=postcondition,
    )
