"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from authflow.models.config import HarnessConfig
from authflow.models.test_result import RunResult

from .json_report import generate_json_report

logger = logging.getLogger(__name__)


class Reporter:
    """Generates reports from run results."""

    def __init__(self, config: HarnessConfig):
        self.config = config

    def generate_reports(
        self, run_result: RunResult, output_dir: Optional[Path] = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        for fmt in self.config.report_formats:
            if fmt == "json":
                path = out_dir / f"report_{run_result.run_id}.json"
                generate_json_report(run_result, path)
                generated["json"] = str(path)
                logger.info("JSON report: %s", path)
            else:
                logger.warning("Unsupported report format: %s", fmt)

        return generated
