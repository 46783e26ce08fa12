"""Pytest hooks to export assembled drafts as JSON fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from acp_builder.types import TransactionDraft
from tools.fixtures_io import draft_case_to_json

_DRAFT_CASES: dict[str, list[dict[str, Any]]] = {}


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--output",
        action="store",
        default=None,
        help="Output directory for generated fixtures",
    )


@pytest.fixture
def draft_vector() -> Callable[[str, str, TransactionDraft], None]:
    """Collect an assembled draft under a specific fixture path."""

    def _draft_vector(rel_path: str, name: str, draft: TransactionDraft) -> None:
        _DRAFT_CASES.setdefault(rel_path, []).append(draft_case_to_json(name, draft))

    return _draft_vector


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    output_dir = session.config.getoption("--output")
    if not output_dir:
        return

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    for rel_path, cases in _DRAFT_CASES.items():
        if not cases:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"cases": cases}, indent=2))
