"""Configuration models for the harness."""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, model_validator


class ReplayMode(str, Enum):
    OFF = "off"
    REPLAY = "replay"
    RECORD = "record"


class TimeoutConfig(BaseModel):
    """Timeouts in milliseconds.

    ``test`` bounds a whole test case; every other value bounds a single wait
    inside a step and must stay strictly below it, so a slow page is always
    reported as a step failure rather than a raw test timeout.
    """

    test: int = 60000
    action: int = 10000  # default for clicks/fills without an explicit timeout
    navigation: int = 20000  # default for navigations without an explicit timeout
    page_load: int = 25000
    visibility: int = 8000
    value_read: int = 3000
    settle: int = 12000
    success_navigation: int = 12000
    error_appear: int = 12000
    text_check: int = 8000
    message_check: int = 5000

    @model_validator(mode="after")
    def nested_below_test(self) -> "TimeoutConfig":
        for name, value in self.model_dump().items():
            if value <= 0:
                raise ValueError(f"Timeout '{name}' must be positive, got {value}")
            if name != "test" and value >= self.test:
                raise ValueError(
                    f"Timeout '{name}' ({value}ms) must be smaller than the "
                    f"test timeout ({self.test}ms)"
                )
        return self


def resolve_replay_mode(
    env: Optional[Mapping[str, str]] = None, default: ReplayMode = ReplayMode.REPLAY,
) -> ReplayMode:
    """``record`` when ``UPDATE_SNAPSHOT=true``, otherwise ``default``.

    Called once at startup; the result is passed explicitly to the code that
    sets up network replay.
    """
    env = os.environ if env is None else env
    if env.get("UPDATE_SNAPSHOT", "").strip().lower() == "true":
        return ReplayMode.RECORD
    return default


class HarnessConfig(BaseModel):
    # Target
    base_url: str = "https://practice.expandtesting.com"

    # Timeouts
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)

    # Browser
    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720

    # Execution limits
    max_parallel_contexts: int = Field(default=4, ge=1)
    flows: list[str] = Field(default_factory=lambda: ["login", "register"])

    # Data and network replay
    test_data_dir: str = "./test-data"
    har_dir: str = "./har"
    replay_mode: ReplayMode = ReplayMode.REPLAY

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["json"])
    report_output_dir: str = "./authflow-reports"
    capture_screenshots: bool = True

    @model_validator(mode="after")
    def strip_base_url(self) -> "HarnessConfig":
        self.base_url = self.base_url.rstrip("/")
        return self

    @classmethod
    def load(cls, path: str | Path) -> "HarnessConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
