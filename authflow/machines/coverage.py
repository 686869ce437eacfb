"""Map test-case data onto machine states and events."""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, Field

from authflow.models.test_case import FlowTestCase

from .machine import FlowMachine


class MachineCoverage(BaseModel):
    machine_id: str
    terminal_states: dict[str, list[str]] = Field(default_factory=dict)  # state -> case ids
    events: dict[str, list[str]] = Field(default_factory=dict)  # event -> case ids
    unknown_states: list[str] = Field(default_factory=list)  # case ids

    @property
    def uncovered_states(self) -> list[str]:
        return [s for s, ids in self.terminal_states.items() if not ids]

    @property
    def uncovered_events(self) -> list[str]:
        return [e for e, ids in self.events.items() if not ids]


def coverage_for(machine: FlowMachine, cases: Sequence[FlowTestCase]) -> MachineCoverage:
    """Which terminal states and events the given cases exercise.

    A case exercises every event leading into its expected state that carries
    its expected error. Cases that share an error message (e.g. missing
    username vs. missing password) therefore count towards each such event.
    """
    report = MachineCoverage(
        machine_id=machine.id,
        terminal_states={s: [] for s in machine.terminal_states},
        events={e: [] for e in machine.events},
    )
    for case in cases:
        if case.expected_state not in report.terminal_states:
            report.unknown_states.append(case.id)
            continue
        report.terminal_states[case.expected_state].append(case.id)
        for event in machine.events_to(case.expected_state, message=case.expected_error):
            report.events[event].append(case.id)
        # Navigation precedes every submission
        for path in machine.paths():
            if path and path[-1] in report.events and case.id in report.events[path[-1]]:
                for event in path[:-1]:
                    if case.id not in report.events[event]:
                        report.events[event].append(case.id)
    return report
