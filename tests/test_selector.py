"""Greedy cell selection."""

from __future__ import annotations

import pytest

from acp_builder.codec import capacity_of, token_amount_of
from acp_builder.errors import ErrorCode, InsufficientBalance
from acp_builder.selector import select_cells
from acp_builder.test_accounts import ACP_SRC, FUNDER, plain_cell, token_cell

CKB = 100_000_000


def _plain(*capacities: int):
    return [plain_cell(FUNDER, c * CKB) for c in capacities]


def test_stops_once_total_exceeds_target() -> None:
    cells = _plain(50, 60, 40, 70)
    selection = select_cells(cells, 100 * CKB, capacity_of)
    assert selection.cells == cells[:2]
    assert selection.total == 110 * CKB


def test_create_scenario_takes_all_three() -> None:
    cells = _plain(50, 60, 40)
    selection = select_cells(cells, 14_401_000_000, capacity_of)
    assert selection.cells == cells
    assert selection.total == 150 * CKB


def test_exact_total_is_not_enough() -> None:
    cells = _plain(50, 50)
    with pytest.raises(InsufficientBalance) as exc:
        select_cells(cells, 100 * CKB, capacity_of, address=FUNDER)
    assert exc.value.code == ErrorCode.INSUFFICIENT_BALANCE
    assert exc.value.expected == 100 * CKB
    assert exc.value.available == 100 * CKB
    assert exc.value.address == FUNDER
    assert exc.value.asset == "CKB"


def test_single_cell_above_target() -> None:
    cells = _plain(200, 10)
    selection = select_cells(cells, 100 * CKB, capacity_of)
    assert selection.cells == cells[:1]


def test_keeps_candidate_order() -> None:
    cells = _plain(10, 300, 20)
    selection = select_cells(cells, 100 * CKB, capacity_of)
    assert selection.cells == cells[:2]


def test_no_candidates() -> None:
    with pytest.raises(InsufficientBalance) as exc:
        select_cells([], 1, capacity_of, address=FUNDER)
    assert exc.value.available == 0


def test_zero_target_takes_first_nonempty_cell() -> None:
    cells = _plain(1, 2)
    selection = select_cells(cells, 0, capacity_of)
    assert selection.cells == cells[:1]


def test_token_selection_reports_asset() -> None:
    cells = [token_cell(ACP_SRC, 144 * CKB, 100), token_cell(ACP_SRC, 144 * CKB, 50)]
    with pytest.raises(InsufficientBalance) as exc:
        select_cells(cells, 500, token_amount_of, address=ACP_SRC, asset="USDI")
    assert exc.value.asset == "USDI"
    assert exc.value.available == 150
    assert "USDI" in exc.value.message


def test_token_selection_by_amount_not_capacity() -> None:
    cells = [token_cell(ACP_SRC, 500 * CKB, 10), token_cell(ACP_SRC, 144 * CKB, 300)]
    selection = select_cells(cells, 200, token_amount_of)
    assert selection.cells == cells
    assert selection.total == 310
