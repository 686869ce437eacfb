"""Tests for the evidence collector module."""

from unittest.mock import Mock

import pytest

from authflow.executor.evidence_collector import EvidenceCollector


class TestSetupListeners:
    """Tests for console listener setup."""

    def test_captures_console_and_page_errors(self, tmp_path):
        collector = EvidenceCollector(tmp_path / "evidence")

        callbacks = {}
        mock_page = Mock()
        mock_page.on = Mock(side_effect=lambda event, cb: callbacks.update({event: cb}))

        collector.setup_listeners(mock_page)

        msg = Mock()
        msg.type = "error"
        msg.text = "Failed to load resource: 401"
        callbacks["console"](msg)
        callbacks["pageerror"](ValueError("form is undefined"))

        assert collector.console_logs == [
            "[error] Failed to load resource: 401",
            "[pageerror] form is undefined",
        ]


@pytest.mark.asyncio
class TestTakeScreenshot:
    async def test_screenshot_named_after_case(self, tmp_path, mock_page):
        collector = EvidenceCollector(tmp_path / "evidence", "TC2")
        path = await collector.take_screenshot(mock_page, "failure")
        assert path == str(tmp_path / "evidence" / "TC2_failure.png")
        assert collector.screenshots == [path]
        mock_page.screenshot.assert_awaited_once_with(path=path, full_page=False)

    async def test_screenshot_without_case_id(self, tmp_path, mock_page):
        collector = EvidenceCollector(tmp_path / "evidence")
        assert (await collector.take_screenshot(mock_page, "failure")).endswith("failure.png")

    async def test_screenshot_failure_returns_empty(self, tmp_path, mock_page):
        mock_page.screenshot.side_effect = Exception("page crashed")
        collector = EvidenceCollector(tmp_path / "evidence")
        assert await collector.take_screenshot(mock_page, "failure") == ""
        assert collector.screenshots == []


class TestSaveLogs:
    def test_writes_console_log(self, tmp_path):
        collector = EvidenceCollector(tmp_path / "evidence", "TC1")
        collector.console_logs = ["[log] one", "[warning] two"]
        collector.save_logs()
        assert (tmp_path / "evidence" / "TC1_console.log").read_text() == \
            "[log] one\n[warning] two"

    def test_nothing_written_without_logs(self, tmp_path):
        collector = EvidenceCollector(tmp_path / "evidence")
        collector.save_logs()
        assert not (tmp_path / "evidence").exists()
