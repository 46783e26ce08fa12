"""Canonical draft digest used to correlate a draft across log lines and fixtures."""
from __future__ import annotations

from blake3 import blake3

from .encoding import serialize_transaction
from .types import TransactionDraft


def compute_draft_digest(draft: TransactionDraft) -> str:
    """BLAKE3-256 hex digest of the molecule-serialized draft.

    Two drafts with the same inputs, outputs, deps and witnesses share a
    digest. The fee is reflected only through the change output's capacity.
    """
    return blake3(serialize_transaction(draft)).hexdigest()
