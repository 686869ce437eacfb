"""Render machine definitions for documentation."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .machine import FlowMachine


def _state_id(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "_", name)


def to_mermaid(machine: FlowMachine) -> str:
    """Mermaid ``stateDiagram-v2`` source for ``machine``."""
    lines = ["stateDiagram-v2", f"    [*] --> {_state_id(machine.initial)}"]
    for node in machine.states.values():
        src = _state_id(node.name)
        for t in node.transitions:
            label = t.event
            if t.error_message:
                label += f" / {t.error_message}"
            lines.append(f"    {src} --> {_state_id(t.target)}: {label}")
    for name in machine.terminal_states:
        lines.append(f"    {_state_id(name)} --> [*]")
    return "\n".join(lines) + "\n"


def to_dict(machine: FlowMachine) -> dict[str, Any]:
    data = machine.model_dump(mode="json")
    data["terminal_states"] = machine.terminal_states
    data["paths"] = machine.paths()
    return data
