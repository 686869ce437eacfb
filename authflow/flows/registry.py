"""Lookup of the flows the harness knows how to run."""

from __future__ import annotations

from .definition import FlowDefinition
from .login import LOGIN_FLOW
from .register import REGISTER_FLOW

FLOWS: dict[str, FlowDefinition] = {
    LOGIN_FLOW.name: LOGIN_FLOW,
    REGISTER_FLOW.name: REGISTER_FLOW,
}


def get_flow(name: str) -> FlowDefinition:
    try:
        return FLOWS[name]
    except KeyError:
        raise ValueError(
            f"Unknown flow '{name}' (known: {', '.join(sorted(FLOWS))})"
        ) from None
