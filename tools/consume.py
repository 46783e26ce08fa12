"""Consume draft fixtures and re-check them against the builder."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import sys
from typing import Optional

import click

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from acp_builder.codec import total_token_amount  # noqa: E402
from acp_builder.digest import compute_draft_digest  # noqa: E402
from acp_builder.errors import AcpError  # noqa: E402
from fixtures_io import draft_case_from_json  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _check_draft_case(case: dict) -> Optional[str]:
    try:
        draft = draft_case_from_json(case)
    except AcpError as e:
        return f"decode_error {e}"
    if compute_draft_digest(draft) != case["digest"]:
        return "digest_mismatch"
    if draft.input_capacity() != draft.output_capacity() + draft.fee:
        return "capacity_not_conserved"
    if total_token_amount(draft.inputs) != total_token_amount(draft.outputs):
        return "token_not_conserved"
    return None


@click.command()
@click.option(
    "--fixtures",
    default=None,
    help="Fixture directory (default: $ACP_FIXTURES_DIR or ./fixtures)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Log every checked case",
)
@click.option(
    "--stop-on-failure",
    is_flag=True,
    help="Stop on first failing case",
)
def main(fixtures: Optional[str], verbose: bool, stop_on_failure: bool) -> None:
    """Rebuild exported drafts and re-check digest and conservation."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    root = Path(fixtures or os.environ.get("ACP_FIXTURES_DIR", ROOT / "fixtures"))

    failures: list[str] = []
    checked = 0
    for path in sorted(root.rglob("*.json")):
        data = json.loads(path.read_text())
        for case in data.get("cases", []):
            checked += 1
            problem = _check_draft_case(case)
            if problem is None:
                logger.debug(f"PASS {path.name}:{case['name']}")
                continue
            failures.append(f"{path.name}:{case['name']}: {problem}")
            logger.error(f"FAIL {failures[-1]}")
            if stop_on_failure:
                raise SystemExit(1)

    if failures:
        raise SystemExit(1)

    logger.info(f"All {checked} fixture cases passed")


if __name__ == "__main__":
    main()
