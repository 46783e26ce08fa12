"""Token amount codec (16-byte little-endian u128)."""

from __future__ import annotations

import pytest

from acp_builder.codec import (
    ZERO_AMOUNT,
    decode_amount,
    encode_amount,
    token_amount_of,
    total_token_amount,
)
from acp_builder.config import U128_MAX
from acp_builder.errors import AcpError, ErrorCode
from acp_builder.test_accounts import ACP_SRC, CONFIG, FUNDER, LOCKS, plain_cell, token_cell
from acp_builder.types import Cell, HashType, Script


def test_encode_is_little_endian_fixed_width() -> None:
    assert encode_amount(1) == b"\x01" + bytes(15)
    assert encode_amount(0x0102) == b"\x02\x01" + bytes(14)
    assert len(encode_amount(10**12)) == 16


def test_zero_amount() -> None:
    assert ZERO_AMOUNT == bytes(16)
    assert decode_amount(ZERO_AMOUNT) == 0


@pytest.mark.parametrize("amount", [0, 1, 1300, 2**64, U128_MAX])
def test_decode_inverts_encode(amount: int) -> None:
    assert decode_amount(encode_amount(amount)) == amount


def test_encode_max_is_all_ones() -> None:
    assert encode_amount(U128_MAX) == b"\xff" * 16


def test_encode_overflow() -> None:
    with pytest.raises(AcpError) as exc:
        encode_amount(U128_MAX + 1)
    assert exc.value.code == ErrorCode.OVERFLOW


def test_encode_negative() -> None:
    with pytest.raises(AcpError) as exc:
        encode_amount(-1)
    assert exc.value.code == ErrorCode.INVALID_AMOUNT


@pytest.mark.parametrize("amount", [1.5, 2.0, True, "10"])
def test_encode_rejects_non_integer(amount) -> None:
    with pytest.raises(AcpError) as exc:
        encode_amount(amount)
    assert exc.value.code == ErrorCode.INVALID_AMOUNT


@pytest.mark.parametrize("data", [b"", bytes(15), bytes(17), bytes(32)])
def test_decode_rejects_wrong_length(data: bytes) -> None:
    with pytest.raises(AcpError) as exc:
        decode_amount(data)
    assert exc.value.code == ErrorCode.INVALID_FORMAT


def test_token_amount_of_plain_cell_fails() -> None:
    with pytest.raises(AcpError):
        token_amount_of(plain_cell(FUNDER, 100))


def test_total_token_amount_skips_plain_and_foreign_cells() -> None:
    other_token = Script(code_hash=bytes(32), hash_type=HashType.DATA, args=b"")
    cells = [
        token_cell(ACP_SRC, 14_401_000_000, 200),
        plain_cell(FUNDER, 100),
        token_cell(ACP_SRC, 14_402_000_000, 150),
        Cell(capacity=1, lock=LOCKS[FUNDER], type=other_token, data=encode_amount(999)),
    ]
    assert total_token_amount(cells, CONFIG.token_type) == 350
    assert total_token_amount(cells) == 350 + 999
