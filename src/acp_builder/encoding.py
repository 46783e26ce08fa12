"""Molecule wire encoding for transaction drafts (the subset needed for sizing)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .config import SECP256K1_SIGNATURE_SIZE, U64_MAX
from .errors import ErrorCode, AcpError
from .types import Cell, CellDep, DepType, HashType, OutPoint, Script, TransactionDraft


HASH_TYPE_IDS = {
    HashType.DATA: 0,
    HashType.TYPE: 1,
    HashType.DATA1: 2,
    HashType.DATA2: 4,
}

DEP_TYPE_IDS = {
    DepType.CODE: 0,
    DepType.DEP_GROUP: 1,
}


@dataclass
class Writer:
    buf: bytearray

    def write_u8(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(1, "little", signed=False))

    def write_u32(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(4, "little", signed=False))

    def write_u64(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(8, "little", signed=False))

    def write_bytes(self, b: bytes) -> None:
        self.buf.extend(b)


def _expect_len(name: str, value: bytes, size: int) -> None:
    if len(value) != size:
        raise AcpError(ErrorCode.INVALID_FORMAT, f"{name} must be {size} bytes")


def _table(fields: list[bytes]) -> bytes:
    # Tables and dynvecs share a layout: total size, one offset per item, items.
    header_size = 4 * (len(fields) + 1)
    w = Writer(bytearray())
    w.write_u32(header_size + sum(len(f) for f in fields))
    offset = header_size
    for f in fields:
        w.write_u32(offset)
        offset += len(f)
    for f in fields:
        w.write_bytes(f)
    return bytes(w.buf)


def _dynvec(items: Iterable[bytes]) -> bytes:
    return _table(list(items))


def _fixvec(items: Iterable[bytes]) -> bytes:
    items = list(items)
    w = Writer(bytearray())
    w.write_u32(len(items))
    for item in items:
        w.write_bytes(item)
    return bytes(w.buf)


def serialize_bytes(value: bytes) -> bytes:
    w = Writer(bytearray())
    w.write_u32(len(value))
    w.write_bytes(bytes(value))
    return bytes(w.buf)


def _option(value: Optional[bytes]) -> bytes:
    return b"" if value is None else value


def serialize_script(script: Script) -> bytes:
    _expect_len("code_hash", script.code_hash, 32)
    hash_type = Writer(bytearray())
    hash_type.write_u8(HASH_TYPE_IDS[script.hash_type])
    return _table([
        bytes(script.code_hash),
        bytes(hash_type.buf),
        serialize_bytes(script.args),
    ])


def serialize_out_point(out_point: OutPoint) -> bytes:
    _expect_len("tx_hash", out_point.tx_hash, 32)
    w = Writer(bytearray())
    w.write_bytes(bytes(out_point.tx_hash))
    w.write_u32(out_point.index)
    return bytes(w.buf)


def serialize_cell_input(cell: Cell, since: int = 0) -> bytes:
    if cell.out_point is None:
        raise AcpError(ErrorCode.INVALID_FORMAT, "input cell has no out point")
    w = Writer(bytearray())
    w.write_u64(since)
    w.write_bytes(serialize_out_point(cell.out_point))
    return bytes(w.buf)


def serialize_cell_dep(dep: CellDep) -> bytes:
    w = Writer(bytearray())
    w.write_bytes(serialize_out_point(dep.out_point))
    w.write_u8(DEP_TYPE_IDS[dep.dep_type])
    return bytes(w.buf)


def serialize_cell_output(cell: Cell) -> bytes:
    if not (0 <= cell.capacity <= U64_MAX):
        raise AcpError(ErrorCode.OVERFLOW, f"capacity {cell.capacity} does not fit u64")
    w = Writer(bytearray())
    w.write_u64(cell.capacity)
    type_bytes = None if cell.type is None else serialize_script(cell.type)
    return _table([bytes(w.buf), serialize_script(cell.lock), _option(type_bytes)])


def serialize_raw_transaction(draft: TransactionDraft) -> bytes:
    w = Writer(bytearray())
    w.write_u32(draft.version)
    for h in draft.header_deps:
        _expect_len("header_dep", h, 32)
    return _table([
        bytes(w.buf),
        _fixvec(serialize_cell_dep(d) for d in draft.cell_deps),
        _fixvec(bytes(h) for h in draft.header_deps),
        _fixvec(serialize_cell_input(c) for c in draft.inputs),
        _dynvec(serialize_cell_output(c) for c in draft.outputs),
        _dynvec(serialize_bytes(d) for d in draft.outputs_data),
    ])


def serialize_transaction(draft: TransactionDraft) -> bytes:
    return _table([
        serialize_raw_transaction(draft),
        _dynvec(serialize_bytes(wit) for wit in draft.witnesses),
    ])


def serialize_witness_args(
    lock: Optional[bytes] = None,
    input_type: Optional[bytes] = None,
    output_type: Optional[bytes] = None,
) -> bytes:
    return _table([
        _option(None if lock is None else serialize_bytes(lock)),
        _option(None if input_type is None else serialize_bytes(input_type)),
        _option(None if output_type is None else serialize_bytes(output_type)),
    ])


def secp256k1_witness_placeholder(signature_size: int = SECP256K1_SIGNATURE_SIZE) -> bytes:
    """WitnessArgs whose lock reserves zeroed room for one recoverable signature."""
    return serialize_witness_args(lock=bytes(signature_size))
