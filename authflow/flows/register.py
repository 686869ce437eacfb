"""Interaction steps for the registration flow."""

from __future__ import annotations

import re
from typing import Optional

from authflow.engine.step import InteractionStep
from authflow.engine.waits import url_signal, visible_signal
from authflow.machines import register as machine
from authflow.models.config import TimeoutConfig
from authflow.models.test_case import RegisterTestCase

from .common import (
    ANY_ALERT,
    button,
    fill_step,
    navigate_step,
    submit_step,
    textbox,
    verify_error_step,
    verify_success_step,
    view_pattern,
)
from .definition import FlowDefinition, FlowSteps

DEFAULT_BASE_URL = "https://practice.expandtesting.com"

REGISTER_VIEW = view_pattern("register")
LOGIN_VIEW = view_pattern("login")
REGISTER_ERROR_RE = re.compile(r"(All fields are required|Passwords do not match)\.")
GENERIC_ERROR_RE = re.compile(r"error occurred", re.IGNORECASE)

username_field = textbox("Username")
# exact: "Password" would otherwise also match "Confirm Password"
password_field = textbox("Password", exact=True)
confirm_password_field = textbox("Confirm Password")
register_button = button("Register")


def navigate_to_register(
    base_url: str = DEFAULT_BASE_URL, timeouts: Optional[TimeoutConfig] = None,
) -> InteractionStep:
    return navigate_step(
        "Navigate to Register Page",
        f"{base_url.rstrip('/')}/register",
        REGISTER_VIEW,
        username_field,
        timeouts or TimeoutConfig(),
    )


def fill_register_username(
    username: str, timeouts: Optional[TimeoutConfig] = None,
) -> InteractionStep:
    return fill_step(f"Fill Register Username: {username}", username_field, username,
                     timeouts or TimeoutConfig())


def fill_register_password(
    password: str, timeouts: Optional[TimeoutConfig] = None,
) -> InteractionStep:
    return fill_step("Fill Register Password", password_field, password,
                     timeouts or TimeoutConfig())


def fill_confirm_password(
    confirm_password: str, timeouts: Optional[TimeoutConfig] = None,
) -> InteractionStep:
    return fill_step("Fill Confirm Password", confirm_password_field, confirm_password,
                     timeouts or TimeoutConfig())


def click_register(timeouts: Optional[TimeoutConfig] = None) -> InteractionStep:
    return submit_step(
        "Click Register Button",
        register_button,
        lambda page: [
            url_signal(page, LOGIN_VIEW, "login page"),
            visible_signal(page.get_by_text(REGISTER_ERROR_RE, exact=False), "registration error"),
            visible_signal(page.get_by_text(GENERIC_ERROR_RE, exact=False), "generic error"),
            visible_signal(page.locator(ANY_ALERT), "alert"),
        ],
        timeouts or TimeoutConfig(),
    )


def verify_registration_success(timeouts: Optional[TimeoutConfig] = None) -> InteractionStep:
    # Landing on the login form is the success signal; the flash message is optional
    return verify_success_step(
        "Verify Registration Success",
        LOGIN_VIEW,
        [username_field],
        timeouts or TimeoutConfig(),
    )


def verify_registration_error(
    error_message: str, timeouts: Optional[TimeoutConfig] = None,
) -> InteractionStep:
    return verify_error_step(
        f"Verify Registration Error: {error_message}",
        error_message,
        REGISTER_VIEW,
        timeouts or TimeoutConfig(),
    )


def register_steps(base_url: str, timeouts: TimeoutConfig) -> FlowSteps:
    return FlowSteps(
        navigate=navigate_to_register(base_url, timeouts),
        fills=(
            ("username", lambda value: fill_register_username(value, timeouts)),
            ("password", lambda value: fill_register_password(value, timeouts)),
            ("confirm_password", lambda value: fill_confirm_password(value, timeouts)),
        ),
        submit=click_register(timeouts),
        verify_success=verify_registration_success(timeouts),
        verify_error=lambda message: verify_registration_error(message, timeouts),
    )


REGISTER_FLOW = FlowDefinition(
    name="register",
    case_model=RegisterTestCase,
    data_file="register-test-data.json",
    har_file="register.har",
    create_machine=machine.create_register_machine,
    navigate_event=machine.NAVIGATE_TO_REGISTER,
    success_state=machine.SUCCESS_STATE,
    error_state=machine.ERROR_STATE,
    build_steps=register_steps,
    happy_path_id="TC1",
    unique_field="username",
)
