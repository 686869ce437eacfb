"""Flow definitions tie a step catalogue to its machine and test data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from authflow.engine.step import InteractionStep
from authflow.machines.machine import FlowMachine
from authflow.models.config import TimeoutConfig
from authflow.models.test_case import FlowTestCase

FieldStep = Callable[[str], InteractionStep]


@dataclass(frozen=True)
class FlowSteps:
    """The ordered step catalogue of one flow, bound to a base URL and timeouts."""

    navigate: InteractionStep
    fills: tuple[tuple[str, FieldStep], ...]  # (input field, step factory), in fill order
    submit: InteractionStep
    verify_success: InteractionStep
    verify_error: FieldStep


@dataclass(frozen=True)
class FlowDefinition:
    name: str
    case_model: type[FlowTestCase]
    data_file: str
    har_file: str
    create_machine: Callable[[], FlowMachine]
    navigate_event: str
    success_state: str
    error_state: str
    build_steps: Callable[[str, TimeoutConfig], FlowSteps]
    # The one case whose ``unique_field`` gets a fresh value on every run
    happy_path_id: Optional[str] = None
    unique_field: Optional[str] = None

    def validate_case(self, case: FlowTestCase) -> None:
        """Reject records whose inputs or expected state do not fit this flow."""
        if not isinstance(case, self.case_model):
            raise TypeError(
                f"{self.name} flow expects {self.case_model.__name__}, got {type(case).__name__}"
            )
        machine = self.create_machine()
        if case.expected_state not in machine.terminal_states:
            raise ValueError(
                f"Case {case.id}: '{case.expected_state}' is not a terminal state of {machine.id}"
            )
