"""Evidence collector — browser console output and failure screenshots per test case."""

from __future__ import annotations

import logging
from pathlib import Path

from playwright.async_api import Page

logger = logging.getLogger(__name__)


class EvidenceCollector:
    """Evidence for one (flow, case) execution, kept under ``evidence_dir``."""

    def __init__(self, evidence_dir: Path, case_id: str = ""):
        self.evidence_dir = evidence_dir
        self.case_id = case_id
        self.console_logs: list[str] = []
        self.screenshots: list[str] = []

    def setup_listeners(self, page: Page) -> None:
        """Record console messages and uncaught page errors."""
        page.on("console", lambda msg: self.console_logs.append(f"[{msg.type}] {msg.text}"))
        page.on("pageerror", lambda error: self.console_logs.append(f"[pageerror] {error}"))

    async def take_screenshot(self, page: Page, label: str) -> str:
        """Capture the viewport; returns the file path, or "" if the page is gone."""
        name = f"{self.case_id}_{label}" if self.case_id else label
        path = self.evidence_dir / f"{name}.png"
        self.evidence_dir.mkdir(parents=True, exist_ok=True)
        try:
            await page.screenshot(path=str(path), full_page=False)
        except Exception as e:
            logger.warning("Screenshot '%s' failed: %s", name, e)
            return ""
        self.screenshots.append(str(path))
        return str(path)

    def save_logs(self) -> None:
        if not self.console_logs:
            return
        self.evidence_dir.mkdir(parents=True, exist_ok=True)
        name = f"{self.case_id}_console.log" if self.case_id else "console.log"
        (self.evidence_dir / name).write_text("\n".join(self.console_logs))
