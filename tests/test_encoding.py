"""Molecule serialization of scripts, outputs and transactions."""

from __future__ import annotations

import pytest

from acp_builder.encoding import (
    secp256k1_witness_placeholder,
    serialize_bytes,
    serialize_cell_dep,
    serialize_cell_input,
    serialize_cell_output,
    serialize_out_point,
    serialize_script,
    serialize_transaction,
    serialize_witness_args,
)
from acp_builder.errors import AcpError, ErrorCode
from acp_builder.test_accounts import CONFIG, FUNDER, LOCKS
from acp_builder.types import Cell, CellDep, DepType, HashType, OutPoint, Script, TransactionDraft


def _u32(b: bytes, at: int) -> int:
    return int.from_bytes(b[at:at + 4], "little")


def test_serialize_bytes() -> None:
    assert serialize_bytes(b"") == bytes(4)
    assert serialize_bytes(b"\xab\xcd") == b"\x02\x00\x00\x00\xab\xcd"


def test_script_layout() -> None:
    script = Script(code_hash=b"\x11" * 32, hash_type=HashType.TYPE, args=b"\x22" * 20)
    raw = serialize_script(script)
    assert len(raw) == 73
    assert _u32(raw, 0) == 73
    assert [_u32(raw, 4), _u32(raw, 8), _u32(raw, 12)] == [16, 48, 49]
    assert raw[16:48] == b"\x11" * 32
    assert raw[48] == 1
    assert raw[49:53] == (20).to_bytes(4, "little")
    assert raw[53:] == b"\x22" * 20


@pytest.mark.parametrize(
    "hash_type,expected",
    [(HashType.DATA, 0), (HashType.TYPE, 1), (HashType.DATA1, 2), (HashType.DATA2, 4)],
)
def test_hash_type_byte(hash_type: HashType, expected: int) -> None:
    raw = serialize_script(Script(code_hash=bytes(32), hash_type=hash_type))
    assert raw[48] == expected


def test_script_rejects_short_code_hash() -> None:
    with pytest.raises(AcpError) as exc:
        serialize_script(Script(code_hash=bytes(20), hash_type=HashType.TYPE))
    assert exc.value.code == ErrorCode.INVALID_FORMAT


def test_out_point_and_cell_dep() -> None:
    out_point = OutPoint(b"\x01" * 32, 2)
    assert serialize_out_point(out_point) == b"\x01" * 32 + b"\x02\x00\x00\x00"
    assert serialize_cell_dep(CellDep(out_point, DepType.DEP_GROUP))[-1] == 1
    assert serialize_cell_dep(CellDep(out_point, DepType.CODE))[-1] == 0


def test_cell_input_needs_out_point() -> None:
    with pytest.raises(AcpError):
        serialize_cell_input(Cell(capacity=1, lock=LOCKS[FUNDER]))


def test_cell_input_since_zero() -> None:
    cell = Cell(capacity=1, lock=LOCKS[FUNDER], out_point=OutPoint(bytes(32), 0))
    raw = serialize_cell_input(cell)
    assert len(raw) == 44
    assert raw[:8] == bytes(8)


def test_cell_output_with_and_without_type() -> None:
    plain = Cell(capacity=6_100_000_000, lock=LOCKS[FUNDER])
    raw = serialize_cell_output(plain)
    assert len(raw) == 16 + 8 + 73
    assert raw[16:24] == (6_100_000_000).to_bytes(8, "little")
    token = Cell(capacity=1, lock=LOCKS[FUNDER], type=CONFIG.token_type)
    assert len(serialize_cell_output(token)) == 16 + 8 + 73 + 85


def test_cell_output_capacity_overflow() -> None:
    with pytest.raises(AcpError) as exc:
        serialize_cell_output(Cell(capacity=2**64, lock=LOCKS[FUNDER]))
    assert exc.value.code == ErrorCode.OVERFLOW


def test_witness_placeholder_is_85_bytes() -> None:
    placeholder = secp256k1_witness_placeholder()
    assert len(placeholder) == 85
    assert placeholder[20:] == bytes(65)
    assert placeholder == serialize_witness_args(lock=bytes(65))


def test_empty_witness_args() -> None:
    assert serialize_witness_args() == b"\x10\x00\x00\x00" + b"\x10\x00\x00\x00" * 3


def test_empty_transaction() -> None:
    raw = serialize_transaction(TransactionDraft())
    # raw tx table: 7 words of header, u32 version, three empty fixvecs, two empty dynvecs
    raw_tx_size = 28 + 4 + 4 * 5
    assert len(raw) == 12 + raw_tx_size + 4
    assert _u32(raw, 0) == len(raw)
