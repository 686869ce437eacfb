"""Load test-case records from static JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TypeVar

from authflow.models.test_case import FlowTestCase

logger = logging.getLogger(__name__)

CaseT = TypeVar("CaseT", bound=FlowTestCase)


def load_test_cases(path: str | Path, model: type[CaseT]) -> list[CaseT]:
    """Read ``{"testCases": [...]}`` (or a bare list) into ``model`` instances.

    Order is preserved. Duplicate ids are rejected since each record drives
    exactly one flow execution.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Test data file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    records = data.get("testCases", []) if isinstance(data, dict) else data
    cases = [model.model_validate(record) for record in records]

    seen: set[str] = set()
    for case in cases:
        if case.id in seen:
            raise ValueError(f"Duplicate test case id '{case.id}' in {path}")
        seen.add(case.id)

    logger.debug("Loaded %d %s records from %s", len(cases), model.__name__, path)
    return cases
