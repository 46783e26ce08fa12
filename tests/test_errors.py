from __future__ import annotations

import dataclasses

import pytest

from acp_builder.errors import (
    AcpError,
    ErrorCategory,
    ErrorCode,
    InsufficientBalance,
    err,
    indexer_error,
    insufficient_balance,
    missing_target_cell,
    no_fee_reserve_cell,
)
from acp_builder.test_accounts import ACP_DST, FUNDER
from acp_builder.types import OutPoint


def test_error_categories() -> None:
    assert ErrorCode.INVALID_AMOUNT.category == ErrorCategory.VALIDATION
    assert ErrorCode.INSUFFICIENT_BALANCE.category == ErrorCategory.RESOURCE
    assert ErrorCode.FEE_CELL_NOT_FOUND.category == ErrorCategory.STATE
    assert ErrorCode.RPC_ERROR.category == ErrorCategory.NETWORK
    assert ErrorCode.INTERNAL_ERROR.category == ErrorCategory.INTERNAL


def test_str_carries_code() -> None:
    e = err(ErrorCode.INVALID_AMOUNT, "bad")
    assert str(e) == "INVALID_AMOUNT(0x0105): bad"


def test_insufficient_balance_message() -> None:
    e = insufficient_balance(FUNDER, 300, 100, "USDI")
    assert isinstance(e, InsufficientBalance)
    assert "expected: 300, got: 100" in e.message
    assert FUNDER in e.message


def test_missing_target_cell_mentions_out_point() -> None:
    e = missing_target_cell(ACP_DST, OutPoint(b"\x0a" * 32, 2))
    assert ACP_DST in e.message
    assert e.message.endswith("#2")
    assert missing_target_cell(ACP_DST).out_point is None


def test_errors_are_frozen() -> None:
    e = no_fee_reserve_cell(FUNDER)
    with pytest.raises(dataclasses.FrozenInstanceError):
        e.address = ACP_DST  # type: ignore[misc]


def test_errors_can_be_chained() -> None:
    def _fail() -> None:
        try:
            raise ValueError("io")
        except ValueError as e:
            raise indexer_error("get_cells", "io") from e

    with pytest.raises(AcpError) as exc:
        _fail()
    assert isinstance(exc.value.__cause__, ValueError)
    assert exc.value.code == ErrorCode.RPC_ERROR
