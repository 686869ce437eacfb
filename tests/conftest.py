"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from playwright.async_api import Browser, BrowserContext, Page

from authflow.models.config import HarnessConfig, ReplayMode, TimeoutConfig
from authflow.models.test_case import LoginTestCase, RegisterTestCase
from authflow.models.test_result import RunResult, StepResult, TestResult

from fake_site import FakePage, PracticeSite

SITE_URL = "https://practice.expandtesting.com"


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def fast_timeouts() -> TimeoutConfig:
    """Short bounds so waits against the fake site finish quickly."""
    return TimeoutConfig(
        test=3000,
        action=500,
        navigation=500,
        page_load=500,
        visibility=300,
        value_read=100,
        settle=500,
        success_navigation=300,
        error_appear=300,
        text_check=100,
        message_check=100,
    )


@pytest.fixture
def harness_config(fast_timeouts: TimeoutConfig, tmp_path: Path) -> HarnessConfig:
    """Create a test harness configuration writing into a temp directory."""
    return HarnessConfig(
        base_url=SITE_URL,
        timeouts=fast_timeouts,
        max_parallel_contexts=2,
        test_data_dir=str(Path(__file__).parent.parent / "test-data"),
        har_dir=str(tmp_path / "har"),
        replay_mode=ReplayMode.OFF,
        report_output_dir=str(tmp_path / "reports"),
    )


# ============================================================================
# Fake Site Fixtures
# ============================================================================


@pytest.fixture
def site() -> PracticeSite:
    return PracticeSite()


@pytest.fixture
def fake_page(site: PracticeSite) -> FakePage:
    return FakePage(site)


@pytest.fixture
def login_page(site: PracticeSite) -> FakePage:
    """A fake page already showing the login form."""
    page = FakePage(site)
    site.render(page, f"{SITE_URL}/login")
    return page


@pytest.fixture
def register_page(site: PracticeSite) -> FakePage:
    """A fake page already showing the registration form."""
    page = FakePage(site)
    site.render(page, f"{SITE_URL}/register")
    return page


# ============================================================================
# Test Case Fixtures
# ============================================================================


@pytest.fixture
def valid_login_case() -> LoginTestCase:
    return LoginTestCase(
        id="TC1",
        name="Valid credentials",
        username="practice",
        password="SuperSecretPassword!",
        expected_state="securePage",
        expected_message="You logged into a secure area!",
    )


@pytest.fixture
def invalid_username_case() -> LoginTestCase:
    return LoginTestCase(
        id="TC2",
        name="Invalid username",
        username="wrongUser",
        password="SuperSecretPassword!",
        expected_state="loginPageWithError",
        expected_error="Invalid username.",
    )


@pytest.fixture
def valid_register_case() -> RegisterTestCase:
    return RegisterTestCase(
        id="TC1",
        name="Valid registration",
        username="newuser",
        password="NewPassword123!",
        confirm_password="NewPassword123!",
        expected_state="loginPage",
        expected_message="Successfully registered, you can log in now.",
    )


@pytest.fixture
def mismatch_register_case() -> RegisterTestCase:
    return RegisterTestCase(
        id="TC4",
        name="Non-matching passwords",
        username="someuser",
        password="TestPassword123!",
        confirm_password="DifferentPassword456!",
        expected_state="registerPageWithError",
        expected_error="Passwords do not match.",
    )


# ============================================================================
# Test Result Fixtures
# ============================================================================


@pytest.fixture
def step_result() -> StepResult:
    """Create a test step result."""
    return StepResult(step_index=0, name="Navigate to Login Page", status="pass",
                      duration_seconds=0.2)


@pytest.fixture
def test_result(step_result: StepResult) -> TestResult:
    """Create a test result."""
    return TestResult(
        test_id="TC1",
        test_name="Valid credentials",
        flow="login",
        expected_state="securePage",
        final_state="securePage",
        result="pass",
        duration_seconds=0.5,
        final_url=f"{SITE_URL}/secure",
        step_results=[step_result],
    )


@pytest.fixture
def failed_test_result() -> TestResult:
    return TestResult(
        test_id="TC2",
        test_name="Invalid username",
        flow="login",
        expected_state="loginPageWithError",
        final_state="loginPage",
        result="fail",
        failure_reason="[Verify Login Error: Invalid username.] Post-condition failed: "
                       "Expected state not reached.",
        final_url=f"{SITE_URL}/login",
    )


@pytest.fixture
def run_result(test_result: TestResult, failed_test_result: TestResult) -> RunResult:
    """Create a test run result."""
    return RunResult(
        run_id="run_0001",
        started_at="2025-01-01T00:00:00Z",
        completed_at="2025-01-01T00:01:00Z",
        base_url=SITE_URL,
        replay_mode="replay",
        total_tests=2,
        passed=1,
        failed=1,
        errors=0,
        duration_seconds=60.0,
        test_results=[test_result, failed_test_result],
    )


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = SITE_URL
    page.on = Mock()
    page.screenshot = AsyncMock()
    page.goto = AsyncMock()
    page.close = AsyncMock()
    return page


@pytest.fixture
def mock_context(mock_page: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser context."""
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=mock_page)
    context.route_from_har = AsyncMock()
    context.set_default_timeout = MagicMock()
    context.set_default_navigation_timeout = MagicMock()
    return context


@pytest.fixture
def mock_browser(mock_context: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser."""
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock(return_value=mock_context)
    return browser
