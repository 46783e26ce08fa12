"""Greedy first-fit cell selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List

from .errors import insufficient_balance
from .types import Cell

logger = logging.getLogger(__name__)


@dataclass
class Selection:
    cells: List[Cell] = field(default_factory=list)
    total: int = 0


def select_cells(
    candidates: Iterable[Cell],
    target: int,
    amount_of: Callable[[Cell], int],
    *,
    address: str = "",
    asset: str = "CKB",
) -> Selection:
    """Take candidates in order until their summed amount exceeds ``target``.

    The comparison is strict so the selection always leaves headroom for the
    fee charged later. Candidates are never re-ordered; callers control the
    order through the index.

    Raises:
        InsufficientBalance: the candidates are exhausted at or below ``target``.
    """
    selection = Selection()
    for cell in candidates:
        selection.total += amount_of(cell)
        selection.cells.append(cell)
        if selection.total > target:
            logger.debug(
                f"Selected {len(selection.cells)} {asset} cells totalling "
                f"{selection.total} for target {target}"
            )
            return selection
    raise insufficient_balance(address, target, selection.total, asset)
