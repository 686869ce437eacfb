"""State machine for the registration flow."""

from __future__ import annotations

from .machine import FlowMachine, StateNode, Transition

NAVIGATE_TO_REGISTER = "NAVIGATE_TO_REGISTER"
SUBMIT_VALID_REGISTRATION = "SUBMIT_VALID_REGISTRATION"
SUBMIT_MISSING_USERNAME = "SUBMIT_MISSING_USERNAME"
SUBMIT_MISSING_PASSWORD = "SUBMIT_MISSING_PASSWORD"
SUBMIT_NON_MATCHING_PASSWORDS = "SUBMIT_NON_MATCHING_PASSWORDS"

SUCCESS_STATE = "loginPage"
ERROR_STATE = "registerPageWithError"

ALL_FIELDS_REQUIRED = "All fields are required."
PASSWORDS_DO_NOT_MATCH = "Passwords do not match."


def create_register_machine() -> FlowMachine:
    """Build a fresh registration machine; call once per execution context."""
    return FlowMachine(
        id="registerMachine",
        initial="initial",
        context_fields=("username", "password", "confirm_password"),
        states={
            "initial": StateNode(
                name="initial",
                transitions=(Transition(event=NAVIGATE_TO_REGISTER, target="registerPage"),),
            ),
            "registerPage": StateNode(
                name="registerPage",
                transitions=(
                    Transition(event=SUBMIT_VALID_REGISTRATION, target=SUCCESS_STATE),
                    Transition(event=SUBMIT_MISSING_USERNAME, target=ERROR_STATE,
                               error_message=ALL_FIELDS_REQUIRED),
                    Transition(event=SUBMIT_MISSING_PASSWORD, target=ERROR_STATE,
                               error_message=ALL_FIELDS_REQUIRED),
                    Transition(event=SUBMIT_NON_MATCHING_PASSWORDS, target=ERROR_STATE,
                               error_message=PASSWORDS_DO_NOT_MATCH),
                ),
            ),
            SUCCESS_STATE: StateNode(name=SUCCESS_STATE, terminal=True),
            ERROR_STATE: StateNode(name=ERROR_STATE, terminal=True),
        },
    )
