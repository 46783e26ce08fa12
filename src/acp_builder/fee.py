"""Fee estimation from serialized transaction size."""

from __future__ import annotations

import logging
from typing import Optional

from .config import FEE_RATE_DIVISOR, TX_SIZE_OFFSET
from .encoding import serialize_transaction
from .errors import ErrorCode, err, insufficient_balance
from .types import TransactionDraft

logger = logging.getLogger(__name__)


def transaction_size(draft: TransactionDraft) -> int:
    """Serialized size of ``draft`` as charged by the fee policy.

    Every field, including the zeroed signature placeholder in the witnesses,
    must already have its final byte length.
    """
    return len(serialize_transaction(draft)) + TX_SIZE_OFFSET


def calculate_fee(size: int, fee_rate: int) -> int:
    """``ceil(size * fee_rate / 1000)`` in exact integer arithmetic."""
    if size < 0:
        raise err(ErrorCode.INVALID_AMOUNT, "transaction size must be non-negative")
    if fee_rate < 0:
        raise err(ErrorCode.INVALID_AMOUNT, "fee rate must be non-negative")
    base = size * fee_rate
    fee = base // FEE_RATE_DIVISOR
    if fee * FEE_RATE_DIVISOR < base:
        fee += 1
    return fee


def calculate_tx_fee(draft: TransactionDraft, fee_rate: int, tx_size: Optional[int] = None) -> int:
    size = tx_size if tx_size is not None else transaction_size(draft)
    return calculate_fee(size, fee_rate)


def apply_fee(draft: TransactionDraft, fee_rate: int, payer: str) -> int:
    """Measure ``draft`` and charge the fee to its last (change) output."""
    if not draft.outputs:
        raise err(ErrorCode.INVALID_FORMAT, "draft has no output to charge the fee to")
    size = transaction_size(draft)
    fee = calculate_fee(size, fee_rate)
    change = draft.outputs[-1]
    if change.capacity < fee:
        raise insufficient_balance(payer, fee, change.capacity)
    change.capacity -= fee
    draft.fee = fee
    logger.debug(f"Draft size {size} bytes at {fee_rate} shannons/KB, fee {fee}")
    return fee
