"""State machine for the login flow."""

from __future__ import annotations

from .machine import FlowMachine, StateNode, Transition

NAVIGATE_TO_LOGIN = "NAVIGATE_TO_LOGIN"
SUBMIT_VALID_CREDENTIALS = "SUBMIT_VALID_CREDENTIALS"
SUBMIT_INVALID_USERNAME = "SUBMIT_INVALID_USERNAME"
SUBMIT_INVALID_PASSWORD = "SUBMIT_INVALID_PASSWORD"

SUCCESS_STATE = "securePage"
ERROR_STATE = "loginPageWithError"


def create_login_machine() -> FlowMachine:
    """Build a fresh login machine; call once per execution context."""
    return FlowMachine(
        id="loginMachine",
        initial="initial",
        context_fields=("username", "password"),
        states={
            "initial": StateNode(
                name="initial",
                transitions=(Transition(event=NAVIGATE_TO_LOGIN, target="loginPage"),),
            ),
            "loginPage": StateNode(
                name="loginPage",
                transitions=(
                    Transition(event=SUBMIT_VALID_CREDENTIALS, target=SUCCESS_STATE),
                    Transition(event=SUBMIT_INVALID_USERNAME, target=ERROR_STATE,
                               error_message="Invalid username."),
                    Transition(event=SUBMIT_INVALID_PASSWORD, target=ERROR_STATE,
                               error_message="Invalid password."),
                ),
            ),
            SUCCESS_STATE: StateNode(name=SUCCESS_STATE, terminal=True),
            ERROR_STATE: StateNode(name=ERROR_STATE, terminal=True),
        },
    )
