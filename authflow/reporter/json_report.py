"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from authflow.models.test_result import RunResult


def _flow_summary(run_result: RunResult) -> dict[str, dict[str, int]]:
    summary: dict[str, dict[str, int]] = {}
    for r in run_result.test_results:
        counts = summary.setdefault(r.flow, {"total": 0, "pass": 0, "fail": 0, "error": 0})
        counts["total"] += 1
        counts[r.result] = counts.get(r.result, 0) + 1
    return summary


def generate_json_report(run_result: RunResult, output_path: Path) -> None:
    """Write the run as JSON, plus per-flow counts and a list of failed cases."""
    report = run_result.model_dump()
    report["flows"] = _flow_summary(run_result)
    report["failures"] = [
        {
            "flow": r.flow,
            "test_id": r.test_id,
            "test_name": r.test_name,
            "expected_state": r.expected_state,
            "final_state": r.final_state,
            "failure_reason": r.failure_reason,
            "final_url": r.final_url,
        }
        for r in run_result.test_results
        if r.result != "pass"
    ]

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
