"""Error codes and exceptions raised while building ACP transactions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .types import OutPoint


class ErrorCategory(IntEnum):
    VALIDATION = 0x01
    RESOURCE = 0x03
    STATE = 0x04
    NETWORK = 0x06
    INTERNAL = 0xFF


class ErrorCode(IntEnum):
    # Validation
    INVALID_FORMAT = 0x0100
    INVALID_AMOUNT = 0x0105
    INVALID_ADDRESS = 0x0106
    INVALID_KEY = 0x0107

    # Resource
    INSUFFICIENT_BALANCE = 0x0300
    OVERFLOW = 0x0304

    # State
    CELL_NOT_FOUND = 0x0400
    FEE_CELL_NOT_FOUND = 0x0401
    SELF_OPERATION = 0x0409

    # Network
    RPC_ERROR = 0x0600

    # Internal
    INTERNAL_ERROR = 0xFF00

    @property
    def category(self) -> ErrorCategory:
        return ErrorCategory(self >> 8)


@dataclass(frozen=True)
class AcpError(Exception):
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.name}({self.code:#06x}): {self.message}"


@dataclass(frozen=True)
class InsufficientBalance(AcpError):
    address: str = ""
    expected: int = 0
    available: int = 0
    asset: str = "CKB"


@dataclass(frozen=True)
class MissingTargetCell(AcpError):
    address: str = ""
    out_point: Optional[OutPoint] = None


@dataclass(frozen=True)
class NoFeeReserveCell(AcpError):
    address: str = ""


@dataclass(frozen=True)
class InvalidAddressFormat(AcpError):
    value: str = ""


@dataclass(frozen=True)
class IndexerError(AcpError):
    method: str = ""


# Allow Python's Exception machinery to set the dunder exception attributes
# while keeping dataclass fields frozen (Python 3.13 contextlib compat).
_EXCEPTION_ATTRS = frozenset(
    ("__traceback__", "__context__", "__cause__", "__suppress_context__", "__notes__")
)


def _allow_exception_attrs(cls: type) -> None:
    frozen_setattr = cls.__setattr__

    def _setattr(self: AcpError, name: str, value: object) -> None:
        if name in _EXCEPTION_ATTRS:
            object.__setattr__(self, name, value)
        else:
            frozen_setattr(self, name, value)

    cls.__setattr__ = _setattr  # type: ignore[method-assign]


for _cls in (
    AcpError,
    InsufficientBalance,
    MissingTargetCell,
    NoFeeReserveCell,
    InvalidAddressFormat,
    IndexerError,
):
    _allow_exception_attrs(_cls)


def err(code: ErrorCode, message: str) -> AcpError:
    return AcpError(code=code, message=message)


def insufficient_balance(
    address: str, expected: int, available: int, asset: str = "CKB"
) -> InsufficientBalance:
    return InsufficientBalance(
        code=ErrorCode.INSUFFICIENT_BALANCE,
        message=(
            f"not enough {asset}, expected: {expected}, got: {available}; "
            f"more {asset} is needed in the address: {address}"
        ),
        address=address,
        expected=expected,
        available=available,
        asset=asset,
    )


def missing_target_cell(address: str, out_point: Optional[OutPoint] = None) -> MissingTargetCell:
    message = f"no ACP cell found for address: {address}"
    if out_point is not None:
        message += f" with out point: 0x{out_point.tx_hash.hex()}#{out_point.index}"
    return MissingTargetCell(
        code=ErrorCode.CELL_NOT_FOUND,
        message=message,
        address=address,
        out_point=out_point,
    )


def no_fee_reserve_cell(address: str) -> NoFeeReserveCell:
    return NoFeeReserveCell(
        code=ErrorCode.FEE_CELL_NOT_FOUND,
        message=f"no empty cell found in {address} with enough capacity for transaction fee",
        address=address,
    )


def invalid_address_format(
    value: str, reason: str, code: ErrorCode = ErrorCode.INVALID_ADDRESS
) -> InvalidAddressFormat:
    return InvalidAddressFormat(code=code, message=reason, value=value)


def indexer_error(method: str, message: str) -> IndexerError:
    return IndexerError(code=ErrorCode.RPC_ERROR, message=f"{method}: {message}", method=method)
