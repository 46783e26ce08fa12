"""Token amount codec: the 16-byte little-endian u128 stored in token cell data."""

from __future__ import annotations

from typing import Iterable, Optional

from .config import TOKEN_AMOUNT_SIZE, U128_MAX
from .errors import ErrorCode, err
from .types import Cell, Script


def encode_amount(amount: int) -> bytes:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise err(ErrorCode.INVALID_AMOUNT, f"token amount must be an integer, got {amount!r}")
    if amount < 0:
        raise err(ErrorCode.INVALID_AMOUNT, "token amount must be non-negative")
    if amount > U128_MAX:
        raise err(ErrorCode.OVERFLOW, "token amount exceeds u128 max")
    return amount.to_bytes(TOKEN_AMOUNT_SIZE, "little", signed=False)


def decode_amount(data: bytes) -> int:
    if len(data) != TOKEN_AMOUNT_SIZE:
        raise err(
            ErrorCode.INVALID_FORMAT,
            f"token amount must be {TOKEN_AMOUNT_SIZE} bytes, got {len(data)}",
        )
    return int.from_bytes(bytes(data), "little", signed=False)


ZERO_AMOUNT = encode_amount(0)


def token_amount_of(cell: Cell) -> int:
    return decode_amount(cell.data)


def capacity_of(cell: Cell) -> int:
    return cell.capacity


def total_token_amount(cells: Iterable[Cell], token_type: Optional[Script] = None) -> int:
    """Sum the token amounts of ``cells``, optionally only those of ``token_type``."""
    total = 0
    for cell in cells:
        if cell.type is None:
            continue
        if token_type is not None and cell.type != token_type:
            continue
        total += decode_amount(cell.data)
    return total
