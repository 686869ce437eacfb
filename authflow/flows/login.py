"""Interaction steps for the login flow."""

from __future__ import annotations

import re
from typing import Optional

from authflow.engine.step import InteractionStep
from authflow.engine.waits import url_signal, visible_signal
from authflow.machines import login as machine
from authflow.models.config import TimeoutConfig
from authflow.models.test_case import LoginTestCase

from .common import (
    ANY_ALERT,
    button,
    fill_step,
    link,
    navigate_step,
    submit_step,
    text,
    textbox,
    verify_error_step,
    verify_success_step,
    view_pattern,
)
from .definition import FlowDefinition, FlowSteps

DEFAULT_BASE_URL = "https://practice.expandtesting.com"

LOGIN_VIEW = view_pattern("login")
SECURE_VIEW = view_pattern("secure")
LOGIN_ERROR_RE = re.compile(r"Invalid (username|password)\.")
SUCCESS_TEXT = "You logged into a secure area!"

username_field = textbox("Username")
password_field = textbox("Password")
login_button = button("Login")
logout_link = link("Logout")


def navigate_to_login(
    base_url: str = DEFAULT_BASE_URL, timeouts: Optional[TimeoutConfig] = None,
) -> InteractionStep:
    return navigate_step(
        "Navigate to Login Page",
        f"{base_url.rstrip('/')}/login",
        LOGIN_VIEW,
        username_field,
        timeouts or TimeoutConfig(),
    )


def fill_username(username: str, timeouts: Optional[TimeoutConfig] = None) -> InteractionStep:
    return fill_step(f"Fill Username: {username}", username_field, username,
                     timeouts or TimeoutConfig())


def fill_password(password: str, timeouts: Optional[TimeoutConfig] = None) -> InteractionStep:
    return fill_step("Fill Password", password_field, password, timeouts or TimeoutConfig())


def click_login(timeouts: Optional[TimeoutConfig] = None) -> InteractionStep:
    return submit_step(
        "Click Login Button",
        login_button,
        lambda page: [
            url_signal(page, SECURE_VIEW, "secure area"),
            visible_signal(page.get_by_text(LOGIN_ERROR_RE, exact=False), "login error"),
            visible_signal(page.locator(ANY_ALERT), "alert"),
        ],
        timeouts or TimeoutConfig(),
    )


def verify_secure_page(timeouts: Optional[TimeoutConfig] = None) -> InteractionStep:
    return verify_success_step(
        "Verify Secure Page",
        SECURE_VIEW,
        [text(SUCCESS_TEXT), logout_link],
        timeouts or TimeoutConfig(),
    )


def verify_login_error(
    error_message: str, timeouts: Optional[TimeoutConfig] = None,
) -> InteractionStep:
    return verify_error_step(
        f"Verify Login Error: {error_message}",
        error_message,
        LOGIN_VIEW,
        timeouts or TimeoutConfig(),
    )


def login_steps(base_url: str, timeouts: TimeoutConfig) -> FlowSteps:
    return FlowSteps(
        navigate=navigate_to_login(base_url, timeouts),
        fills=(
            ("username", lambda value: fill_username(value, timeouts)),
            ("password", lambda value: fill_password(value, timeouts)),
        ),
        submit=click_login(timeouts),
        verify_success=verify_secure_page(timeouts),
        verify_error=lambda message: verify_login_error(message, timeouts),
    )


LOGIN_FLOW = FlowDefinition(
    name="login",
    case_model=LoginTestCase,
    data_file="login-test-data.json",
    har_file="login.har",
    create_machine=machine.create_login_machine,
    navigate_event=machine.NAVIGATE_TO_LOGIN,
    success_state=machine.SUCCESS_STATE,
    error_state=machine.ERROR_STATE,
    build_steps=login_steps,
)
