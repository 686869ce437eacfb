"""Finite-state machine definitions describing the legal states of a UI flow.

Machines are descriptive only: they enumerate which states and
transitions a flow may legally pass through. Interaction steps do the work;
a machine never gates their execution.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator

logger = logging.getLogger(__name__)


class Transition(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: str
    target: str
    error_message: Optional[str] = None  # assigned to the run context when fired


class StateNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    terminal: bool = False
    transitions: tuple[Transition, ...] = ()


class FlowMachine(BaseModel):
    """A deterministic state machine: one initial state, terminal states accept no events."""

    model_config = ConfigDict(frozen=True)

    id: str
    initial: str
    states: dict[str, StateNode]
    context_fields: tuple[str, ...] = ()

    @model_validator(mode="after")
    def check_definition(self) -> "FlowMachine":
        if self.initial not in self.states:
            raise ValueError(f"Initial state '{self.initial}' is not defined")
        for key, node in self.states.items():
            if key != node.name:
                raise ValueError(f"State key '{key}' does not match node name '{node.name}'")
            if node.terminal and node.transitions:
                raise ValueError(f"Terminal state '{key}' cannot declare events")
            if not node.terminal and not node.transitions:
                raise ValueError(f"Non-terminal state '{key}' declares no events")
            events = [t.event for t in node.transitions]
            if len(events) != len(set(events)):
                raise ValueError(f"State '{key}' declares an event more than once")
            for t in node.transitions:
                if t.target not in self.states:
                    raise ValueError(
                        f"Event '{t.event}' in state '{key}' targets unknown state '{t.target}'"
                    )
        return self

    @property
    def terminal_states(self) -> list[str]:
        return [name for name, node in self.states.items() if node.terminal]

    @property
    def events(self) -> list[str]:
        return [t.event for node in self.states.values() for t in node.transitions]

    def events_from(self, state: str) -> list[str]:
        return [t.event for t in self.states[state].transitions]

    def find_transition(self, state: str, event: str) -> Optional[Transition]:
        node = self.states.get(state)
        if node is None:
            return None
        for t in node.transitions:
            if t.event == event:
                return t
        return None

    def transition(self, state: str, event: str) -> Optional[str]:
        """Target of ``event`` from ``state``; ``None`` when the event is illegal there."""
        t = self.find_transition(state, event)
        return t.target if t else None

    def events_to(self, state: str, message: Optional[str] = None) -> list[str]:
        """Events leading into ``state``, optionally only those carrying ``message``."""
        found = []
        for node in self.states.values():
            for t in node.transitions:
                if t.target != state:
                    continue
                if message is not None and t.error_message != message:
                    continue
                found.append(t.event)
        return found

    def paths(self) -> list[list[str]]:
        """Every event sequence leading from the initial state to a terminal state."""
        found: list[list[str]] = []

        def _walk(state: str, trail: list[str], seen: frozenset[str]) -> None:
            node = self.states[state]
            if node.terminal:
                found.append(trail)
                return
            for t in node.transitions:
                if t.target in seen:
                    continue
                _walk(t.target, trail + [t.event], seen | {t.target})

        _walk(self.initial, [], frozenset({self.initial}))
        return found

    def start(self, **context: Any) -> "MachineRun":
        return MachineRun(self, context)


class MachineRun:
    """A single execution of a machine. Never share one between concurrent runs."""

    def __init__(self, machine: FlowMachine, context: Optional[dict[str, Any]] = None):
        self.machine = machine
        self.state = machine.initial
        self.context: dict[str, Any] = {name: "" for name in machine.context_fields}
        self.context.update(context or {})
        self.history: list[str] = []

    @property
    def done(self) -> bool:
        return self.machine.states[self.state].terminal

    def can(self, event: str) -> bool:
        return self.machine.find_transition(self.state, event) is not None

    def send(self, event: str, **payload: Any) -> bool:
        """Fire ``event``; illegal events leave the state untouched and return False."""
        t = self.machine.find_transition(self.state, event)
        if t is None:
            logger.warning("%s: event %s is not accepted in state %s",
                           self.machine.id, event, self.state)
            return False
        for name, value in payload.items():
            if name in self.machine.context_fields:
                self.context[name] = value
        if t.error_message is not None:
            self.context["error_message"] = t.error_message
        logger.debug("%s: %s --%s--> %s", self.machine.id, self.state, event, t.target)
        self.state = t.target
        self.history.append(event)
        return True
