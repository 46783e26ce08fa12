"""Conversions between human amounts and the integer units the ledger stores."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .config import CKB_UNIT_SCALE, USDI_UNIT_SCALE
from .errors import ErrorCode, err

Amount = Union[int, str, Decimal]


def _scaled(value: Amount, scale: int, unit: str) -> int:
    if isinstance(value, float):
        # floats cannot represent amounts such as 144.01 exactly
        raise err(ErrorCode.INVALID_AMOUNT, f"{unit} amount must be int, str or Decimal")
    try:
        scaled = Decimal(value) * scale
    except InvalidOperation:
        raise err(ErrorCode.INVALID_AMOUNT, f"invalid {unit} amount: {value!r}") from None
    if scaled != scaled.to_integral_value():
        raise err(ErrorCode.INVALID_AMOUNT, f"{unit} amount {value} has too many decimals")
    if scaled < 0:
        raise err(ErrorCode.INVALID_AMOUNT, f"{unit} amount must be non-negative")
    return int(scaled)


def ckb_to_shannons(value: Amount) -> int:
    return _scaled(value, CKB_UNIT_SCALE, "CKB")


def token_to_units(value: Amount, scale: int = USDI_UNIT_SCALE) -> int:
    return _scaled(value, scale, "token")


def shannons_to_ckb(shannons: int) -> Decimal:
    return Decimal(shannons) / CKB_UNIT_SCALE


def units_to_token(units: int, scale: int = USDI_UNIT_SCALE) -> Decimal:
    return Decimal(units) / scale
