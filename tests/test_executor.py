"""Tests for the executor — per-case contexts, timeouts and result aggregation."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from authflow.executor.executor import Executor, har_path_for
from authflow.flows.login import LOGIN_FLOW
from authflow.flows.register import REGISTER_FLOW
from authflow.models.config import ReplayMode, TimeoutConfig
from fake_site import FakePage, PracticeSite


def _tight_timeouts() -> TimeoutConfig:
    return TimeoutConfig(
        test=300, action=100, navigation=100, page_load=100, visibility=100,
        value_read=50, settle=100, success_navigation=100, error_appear=100,
        text_check=50, message_check=50,
    )


def _fake_context(site: PracticeSite, pages: list) -> MagicMock:
    async def new_page():
        pages.append(FakePage(site))
        return pages[-1]

    context = MagicMock()
    context.new_page = AsyncMock(side_effect=new_page)
    context.close = AsyncMock()
    return context


def _patched_browser(site: PracticeSite, pages: list, contexts: list):
    """Patch Playwright startup so every context hands out fake pages."""

    async def create_context(browser, config):
        contexts.append(_fake_context(site, pages))
        return contexts[-1]

    playwright = patch("authflow.executor.executor.async_playwright")
    launch = patch("authflow.executor.executor.launch_browser",
                   AsyncMock(return_value=AsyncMock()))
    context = patch("authflow.executor.executor.create_context",
                    AsyncMock(side_effect=create_context))
    return playwright, launch, context


class TestHarPathFor:
    def test_record_uses_per_case_file(self, tmp_path, valid_login_case):
        path = har_path_for(tmp_path, LOGIN_FLOW, valid_login_case, ReplayMode.RECORD)
        assert path == tmp_path / "login" / "TC1.har"

    def test_replay_prefers_per_case_file(self, tmp_path, valid_login_case):
        case_har = tmp_path / "login" / "TC1.har"
        case_har.parent.mkdir()
        case_har.write_text("{}")
        assert har_path_for(tmp_path, LOGIN_FLOW, valid_login_case,
                            ReplayMode.REPLAY) == case_har

    def test_replay_falls_back_to_flow_file(self, tmp_path, valid_login_case):
        assert har_path_for(tmp_path, LOGIN_FLOW, valid_login_case,
                            ReplayMode.REPLAY) == tmp_path / "login.har"


class TestLoadCases:
    def test_loads_in_file_order(self, harness_config, tmp_path):
        executor = Executor(harness_config, tmp_path / "runs")
        cases = executor.load_cases(["login", "register"])
        assert [(f.name, c.id) for f, c in cases] == [
            ("login", "TC1"), ("login", "TC2"), ("login", "TC3"),
            ("register", "TC1"), ("register", "TC2"), ("register", "TC3"), ("register", "TC4"),
        ]

    def test_unknown_flow(self, harness_config, tmp_path):
        executor = Executor(harness_config, tmp_path / "runs")
        with pytest.raises(ValueError):
            executor.load_cases(["checkout"])

    def test_run_directory_created(self, harness_config, tmp_path):
        executor = Executor(harness_config, tmp_path / "runs")
        assert executor.run_id.startswith("run_")
        assert executor.run_dir.is_dir()


@pytest.mark.asyncio
class TestRunTest:
    async def test_passing_case(self, harness_config, tmp_path, valid_login_case):
        executor = Executor(harness_config, tmp_path / "runs")
        pages = []
        result = await executor._run_test(_fake_context(PracticeSite(), pages),
                                          LOGIN_FLOW, valid_login_case)
        assert result.result == "pass"
        assert result.final_state == "securePage"
        assert result.final_url.endswith("/secure")
        assert len(result.step_results) == 5
        assert result.screenshots == []
        assert pages[0].closed

    async def test_failing_case_takes_screenshot(self, harness_config, tmp_path):
        executor = Executor(harness_config, tmp_path / "runs")
        case = LOGIN_FLOW.case_model(id="TC9", name="wrong", username="practice",
                                     password="nope", expected_state="securePage")
        result = await executor._run_test(_fake_context(PracticeSite(), []), LOGIN_FLOW, case)
        assert result.result == "fail"
        assert result.failure_reason.startswith("[Verify Secure Page]")
        assert result.final_state == "loginPage"
        assert len(result.screenshots) == 1

    async def test_timeout_is_an_error(self, harness_config, tmp_path, valid_login_case):
        harness_config.timeouts = _tight_timeouts()
        executor = Executor(harness_config, tmp_path / "runs")

        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        with patch("authflow.executor.executor.execute_flow", side_effect=hang):
            result = await executor._run_test(_fake_context(PracticeSite(), []),
                                              LOGIN_FLOW, valid_login_case)
        assert result.result == "error"
        assert result.failure_reason == "Test timed out after 300ms"
        assert result.final_state == "initial"

    async def test_crash_is_an_error(self, harness_config, tmp_path, valid_login_case):
        executor = Executor(harness_config, tmp_path / "runs")
        with patch("authflow.executor.executor.execute_flow",
                   AsyncMock(side_effect=RuntimeError("browser went away"))):
            result = await executor._run_test(_fake_context(PracticeSite(), []),
                                              LOGIN_FLOW, valid_login_case)
        assert result.result == "error"
        assert result.failure_reason == "browser went away"


@pytest.mark.integration
@pytest.mark.asyncio
class TestExecute:
    async def test_runs_every_case_in_its_own_context(self, harness_config, tmp_path):
        site, pages, contexts = PracticeSite(), [], []
        playwright, launch, context = _patched_browser(site, pages, contexts)
        with playwright, launch, context:
            executor = Executor(harness_config, tmp_path / "runs")
            result = await executor.execute()

        assert result.total_tests == 7
        assert result.passed == 7, [r.failure_reason for r in result.test_results]
        assert result.failed == 0 and result.errors == 0
        assert result.replay_mode == "off"
        assert len(contexts) == 7
        assert all(c.close.await_count == 1 for c in contexts)
        assert [r.test_id for r in result.test_results[:3]] == ["TC1", "TC2", "TC3"]

    async def test_selected_flow_only(self, harness_config, tmp_path):
        site, pages, contexts = PracticeSite(), [], []
        playwright, launch, context = _patched_browser(site, pages, contexts)
        with playwright, launch, context:
            result = await Executor(harness_config, tmp_path / "runs").execute(["register"])
        assert {r.flow for r in result.test_results} == {REGISTER_FLOW.name}
        assert result.passed == 4

    async def test_failures_are_counted(self, harness_config, tmp_path):
        site, pages, contexts = PracticeSite(), [], []
        site.accounts["practice"] = "rotated"
        playwright, launch, context = _patched_browser(site, pages, contexts)
        with playwright, launch, context:
            result = await Executor(harness_config, tmp_path / "runs").execute(["login"])
        assert result.passed == 2
        assert result.failed == 1
        failed = [r for r in result.test_results if r.result == "fail"]
        # TC3 still sees "Invalid password."; TC1 can no longer log in
        assert failed[0].test_id == "TC1"
