"""Occupied-capacity rules: the minimum capacity a cell must hold for its own bytes."""

from __future__ import annotations

from .config import CAPACITY_FIELD_SIZE, CKB_UNIT_SCALE
from .types import Cell


def occupied_size(cell: Cell) -> int:
    size = CAPACITY_FIELD_SIZE + cell.lock.occupied_size() + len(cell.data)
    if cell.type is not None:
        size += cell.type.occupied_size()
    return size


def occupied_capacity(cell: Cell) -> int:
    """Minimum capacity of ``cell`` in shannons (1 byte costs 1 CKB)."""
    return occupied_size(cell) * CKB_UNIT_SCALE


def has_surplus_capacity(cell: Cell) -> bool:
    return cell.capacity > occupied_capacity(cell)
