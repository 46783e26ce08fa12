"""Boundary to the external signing and broadcast collaborator."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .digest import compute_draft_digest
from .types import TransactionDraft
from .validation import validate_private_key

logger = logging.getLogger(__name__)


class TransactionSigner(Protocol):
    async def sign(self, draft: TransactionDraft, private_key: str) -> Any:
        """Compute the signing message of ``draft``, sign it and seal the transaction."""
        ...

    async def send(self, signed: Any) -> str:
        """Submit a sealed transaction and return its hash."""
        ...


async def sign_and_send(draft: TransactionDraft, signer: TransactionSigner, private_key: str) -> str:
    validate_private_key(private_key)
    signed = await signer.sign(draft, private_key)
    tx_hash = await signer.send(signed)
    logger.info(f"Submitted draft {compute_draft_digest(draft)[:16]} as {tx_hash}")
    return tx_hash
