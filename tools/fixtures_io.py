"""Helpers to serialize/deserialize draft fixtures."""

from __future__ import annotations

from typing import Any

from acp_builder.codec_adapter import cell_from_indexer, cell_to_json, draft_from_rpc, draft_to_rpc
from acp_builder.digest import compute_draft_digest
from acp_builder.types import TransactionDraft


def draft_case_to_json(name: str, draft: TransactionDraft) -> dict[str, Any]:
    # Inputs are exported with their full cell so consumers can rebuild the
    # draft without an index.
    return {
        "name": name,
        "input_cells": [cell_to_json(c) for c in draft.inputs],
        "tx": draft_to_rpc(draft),
        "fee": draft.fee,
        "digest": compute_draft_digest(draft),
    }


def draft_case_from_json(case: dict[str, Any]) -> TransactionDraft:
    inputs = [cell_from_indexer(item) for item in case["input_cells"]]
    draft = draft_from_rpc(case["tx"], inputs)
    draft.fee = int(case["fee"])
    return draft
