"""Core ledger types for the ACP transaction builder.

Cells are the unit of value. A cell always holds capacity (shannons) and a lock
script; a token cell additionally carries a type script and a 16-byte amount in
its data. A ``TransactionDraft`` is the unsigned, in-progress transaction that
the assembler recipes build.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class HashType(Enum):
    DATA = "data"
    TYPE = "type"
    DATA1 = "data1"
    DATA2 = "data2"


class DepType(Enum):
    CODE = "code"
    DEP_GROUP = "dep_group"


@dataclass(frozen=True)
class Script:
    code_hash: bytes
    hash_type: HashType
    args: bytes = b""

    def occupied_size(self) -> int:
        return len(self.code_hash) + 1 + len(self.args)


@dataclass(frozen=True)
class OutPoint:
    tx_hash: bytes
    index: int


@dataclass(frozen=True)
class CellDep:
    out_point: OutPoint
    dep_type: DepType


@dataclass
class Cell:
    capacity: int
    lock: Script
    type: Optional[Script] = None
    data: bytes = b""
    # Set once the cell lives on-chain; outputs of a draft have none.
    out_point: Optional[OutPoint] = None

    def is_plain(self) -> bool:
        return self.type is None and not self.data


@dataclass
class TransactionDraft:
    version: int = 0
    cell_deps: List[CellDep] = field(default_factory=list)
    header_deps: List[bytes] = field(default_factory=list)
    inputs: List[Cell] = field(default_factory=list)
    outputs: List[Cell] = field(default_factory=list)
    witnesses: List[bytes] = field(default_factory=list)
    fee: int = 0

    @property
    def outputs_data(self) -> List[bytes]:
        return [out.data for out in self.outputs]

    def set_witness(self, index: int, witness: bytes) -> None:
        while len(self.witnesses) <= index:
            self.witnesses.append(b"")
        self.witnesses[index] = witness

    def input_capacity(self) -> int:
        return sum(cell.capacity for cell in self.inputs)

    def output_capacity(self) -> int:
        return sum(cell.capacity for cell in self.outputs)
