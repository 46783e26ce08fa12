"""Transaction recipes for anyone-can-pay (ACP) token cells.

Every recipe follows the same two-pass shape:

1. fetch candidate cells from the index, select inputs, and build a draft whose
   outputs, cell deps and witness placeholder already have their final byte
   size, with the change output still holding what will become the fee;
2. measure the draft and subtract the fee from the last output.

Each call builds its own ``TransactionDraft``; nothing is shared between calls
and no cell is reserved, so concurrent calls over one address may pick the
same cells. The ledger rejects the second spend.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .capacity import has_surplus_capacity
from .codec import ZERO_AMOUNT, capacity_of, decode_amount, encode_amount, token_amount_of
from .config import DEFAULT_FEE_RATE, LedgerConfig
from .digest import compute_draft_digest
from .encoding import secp256k1_witness_placeholder
from .errors import (
    ErrorCode,
    err,
    insufficient_balance,
    invalid_address_format,
    missing_target_cell,
    no_fee_reserve_cell,
)
from .fee import apply_fee
from .indexer import CellIndex
from .selector import select_cells
from .types import Cell, OutPoint, Script, TransactionDraft
from .validation import validate_address

logger = logging.getLogger(__name__)


class AcpAssembler:
    """Builds unsigned ACP transactions against one ledger configuration."""

    def __init__(self, config: LedgerConfig, index: CellIndex):
        self.config = config
        self.index = index

    # --- lookups ---

    def _lock_for(self, address: str) -> Script:
        validate_address(address, self.config)
        return self.index.lock_for(address)

    def _acp_lock_for(self, address: str) -> Script:
        lock = self._lock_for(address)
        if not self.config.is_acp_lock(lock):
            raise invalid_address_format(address, f"not an ACP address: {address}")
        return lock

    async def has_acp_cells(self, address: str) -> bool:
        """Whether ``address`` owns at least one ACP token cell.

        Raises:
            InvalidAddressFormat: ``address`` is malformed, unknown to the index,
                or not an ACP address. A non-ACP address is an error rather
                than ``False``.
        """
        self._acp_lock_for(address)
        cells = await self.index.cells_by_owner_and_token(address, self.config.token_type)
        return len(cells) > 0

    async def ckb_balance(self, address: str) -> int:
        self._lock_for(address)
        return sum(c.capacity for c in await self.index.cells_by_owner(address))

    async def token_balance(self, address: str) -> int:
        self._lock_for(address)
        cells = await self.index.cells_by_owner_and_token(address, self.config.token_type)
        return sum(token_amount_of(c) for c in cells)

    async def _target_acp_cell(self, address: str, out_point: Optional[OutPoint]) -> Cell:
        lock = self._acp_lock_for(address)
        if out_point is not None:
            cell = await self.index.cell_by_origin(out_point)
            if cell is None or cell.lock != lock or cell.type != self.config.token_type:
                raise missing_target_cell(address, out_point)
            return cell
        cells = await self.index.cells_by_owner_and_token(
            address, self.config.token_type, min_capacity=self.config.acp_min_capacity
        )
        if not cells:
            raise missing_target_cell(address)
        return cells[0]

    # --- shared steps ---

    def _token_cell(self, capacity: int, lock: Script, amount: int) -> Cell:
        return Cell(capacity=capacity, lock=lock, type=self.config.token_type, data=encode_amount(amount))

    def _finish(self, recipe: str, draft: TransactionDraft, fee_rate: int, payer: str) -> TransactionDraft:
        draft.set_witness(0, secp256k1_witness_placeholder())
        fee = apply_fee(draft, fee_rate, payer)
        logger.info(
            f"Assembled {recipe} draft {compute_draft_digest(draft)[:16]}: "
            f"{len(draft.inputs)} inputs, {len(draft.outputs)} outputs, fee {fee} shannons"
        )
        return draft

    @staticmethod
    def _check_positive(amount: int, label: str) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise err(ErrorCode.INVALID_AMOUNT, f"{label} must be an integer, got {amount!r}")
        if amount <= 0:
            raise err(ErrorCode.INVALID_AMOUNT, f"{label} must be positive")

    # --- recipes ---

    async def create_acp_cells(
        self,
        from_address: str,
        acp_address: str,
        count: int = 1,
        acp_capacity: Optional[int] = None,
        fee_rate: int = DEFAULT_FEE_RATE,
    ) -> TransactionDraft:
        """
        Create ``count`` empty ACP token cells funded by plain cells of ``from_address``.

        Tx structure: [fromPlainInputs] -> [acpOutputs * count, changeOutput]

        Args:
            from_address: Address providing CKB for the new cells and the fee
            acp_address: ACP address that will own the new cells
            count: Number of ACP cells to create
            acp_capacity: Capacity of each new cell in shannons; defaults to the
                ACP minimum plus a 0.01 CKB buffer for the cell's own later fees
            fee_rate: Shannons per KB of serialized transaction

        Raises:
            InsufficientBalance: The plain cells of ``from_address`` cannot cover
                ``count * acp_capacity`` plus the fee
        """
        from_lock = self._lock_for(from_address)
        acp_lock = self._acp_lock_for(acp_address)
        self._check_positive(count, "count")
        single_capacity = self.config.acp_default_capacity if acp_capacity is None else acp_capacity
        self._check_positive(single_capacity, "ACP capacity")
        if single_capacity < self.config.acp_min_capacity:
            raise err(
                ErrorCode.INVALID_AMOUNT,
                f"ACP capacity {single_capacity} is below the minimum {self.config.acp_min_capacity}",
            )
        expected = single_capacity * count

        candidates = await self.index.cells_by_owner(from_address)
        selection = select_cells(candidates, expected, capacity_of, address=from_address)

        draft = TransactionDraft()
        draft.inputs.extend(selection.cells)
        for _ in range(count):
            draft.outputs.append(
                Cell(capacity=single_capacity, lock=acp_lock, type=self.config.token_type, data=ZERO_AMOUNT)
            )
        draft.outputs.append(Cell(capacity=selection.total - expected, lock=from_lock))
        draft.cell_deps.extend([self.config.secp256k1.cell_dep(), self.config.token_cell_dep])
        return self._finish("create_acp_cells", draft, fee_rate, from_address)

    async def deposit_ckb_to_acp(
        self,
        from_address: str,
        to_acp_address: str,
        amount: int,
        fee_rate: int = DEFAULT_FEE_RATE,
        acp_out_point: Optional[OutPoint] = None,
    ) -> TransactionDraft:
        """
        Add ``amount`` shannons of capacity to an ACP cell.

        Tx structure: [fromPlainInputs, toAcpCell] -> [toAcpOutput, changeOutput]

        The ACP cell is consumed and recreated with the larger capacity; its
        token data is carried through unchanged.
        """
        from_lock = self._lock_for(from_address)
        self._acp_lock_for(to_acp_address)
        self._check_positive(amount, "deposit amount")
        candidates = await self.index.cells_by_owner(from_address)
        selection = select_cells(candidates, amount, capacity_of, address=from_address)
        acp_cell = await self._target_acp_cell(to_acp_address, acp_out_point)

        draft = TransactionDraft()
        draft.inputs.extend(selection.cells)
        draft.inputs.append(acp_cell)
        draft.outputs.append(
            Cell(
                capacity=acp_cell.capacity + amount,
                lock=acp_cell.lock,
                type=acp_cell.type,
                data=acp_cell.data,
            )
        )
        draft.outputs.append(Cell(capacity=selection.total - amount, lock=from_lock))
        draft.cell_deps.extend([
            self.config.secp256k1.cell_dep(),
            self.config.anyone_can_pay.cell_dep(),
            self.config.token_cell_dep,
        ])
        return self._finish("deposit_ckb_to_acp", draft, fee_rate, from_address)

    async def transfer_token_to_acp(
        self,
        from_address: str,
        to_acp_address: str,
        amount: int,
        fee_rate: int = DEFAULT_FEE_RATE,
        acp_out_point: Optional[OutPoint] = None,
    ) -> TransactionDraft:
        """
        Move ``amount`` token units from ``from_address`` into an ACP cell.

        Tx structure:
        [fromTokenInputs, fromPlainInput(optional), toAcpCell]
            -> [toAcpOutput, tokenChangeOutput, plainChangeOutput(optional)]

        The plain input is pulled in only when none of the selected token cells
        holds capacity above its occupied minimum to pay the fee from.

        Raises:
            InsufficientBalance: Token cells of ``from_address`` cannot exceed ``amount``
            MissingTargetCell: ``to_acp_address`` has no ACP cell
            NoFeeReserveCell: A plain cell is needed and ``from_address`` has none
        """
        from_lock = self._lock_for(from_address)
        if from_lock == self._acp_lock_for(to_acp_address):
            raise err(ErrorCode.SELF_OPERATION, "cannot transfer to the sending address")
        self._check_positive(amount, "transfer amount")
        token_cells = await self.index.cells_by_owner_and_token(from_address, self.config.token_type)
        acp_cell = await self._target_acp_cell(to_acp_address, acp_out_point)
        selection = select_cells(
            token_cells, amount, token_amount_of, address=from_address, asset=self.config.token_symbol
        )

        need_fee_cell = True
        for cell in selection.cells:
            if has_surplus_capacity(cell):
                need_fee_cell = False
                break
        fee_cell: Optional[Cell] = None
        if need_fee_cell:
            plain_cells = await self.index.cells_by_owner(from_address)
            if not plain_cells:
                raise no_fee_reserve_cell(from_address)
            fee_cell = plain_cells[0]
            logger.debug(f"No surplus capacity in token inputs, adding fee cell {fee_cell.out_point}")

        draft = TransactionDraft()
        draft.inputs.extend(selection.cells)
        if fee_cell is not None:
            draft.inputs.append(fee_cell)
        draft.inputs.append(acp_cell)

        draft.outputs.append(
            self._token_cell(acp_cell.capacity, acp_cell.lock, decode_amount(acp_cell.data) + amount)
        )
        draft.outputs.append(
            self._token_cell(
                sum(c.capacity for c in selection.cells), from_lock, selection.total - amount
            )
        )
        if fee_cell is not None:
            draft.outputs.append(Cell(capacity=fee_cell.capacity, lock=fee_cell.lock))
        draft.cell_deps.extend([
            self.config.secp256k1.cell_dep(),
            self.config.anyone_can_pay.cell_dep(),
            self.config.token_cell_dep,
        ])
        return self._finish("transfer_token_to_acp", draft, fee_rate, from_address)

    async def transfer_from_acp_to_acp(
        self,
        from_acp_address: str,
        to_acp_address: str,
        amount: int,
        fee_rate: int = DEFAULT_FEE_RATE,
        acp_out_point: Optional[OutPoint] = None,
    ) -> TransactionDraft:
        """
        Move ``amount`` token units between two ACP addresses.

        Tx structure: [fromAcpInputs, toAcpCell] -> [toAcpOutput, tokenChangeOutput]

        The fee comes out of the change cell returned to the source ACP address.
        """
        from_lock = self._acp_lock_for(from_acp_address)
        to_lock = self._acp_lock_for(to_acp_address)
        if from_lock == to_lock:
            raise err(ErrorCode.SELF_OPERATION, "source and destination ACP addresses must differ")
        self._check_positive(amount, "transfer amount")
        source_cells = await self.index.cells_by_owner_and_token(from_acp_address, self.config.token_type)
        acp_cell = await self._target_acp_cell(to_acp_address, acp_out_point)
        selection = select_cells(
            source_cells, amount, token_amount_of, address=from_acp_address, asset=self.config.token_symbol
        )

        draft = TransactionDraft()
        draft.inputs.extend(selection.cells)
        draft.inputs.append(acp_cell)
        draft.outputs.append(
            self._token_cell(acp_cell.capacity, acp_cell.lock, decode_amount(acp_cell.data) + amount)
        )
        draft.outputs.append(
            self._token_cell(
                sum(c.capacity for c in selection.cells), from_lock, selection.total - amount
            )
        )
        draft.cell_deps.extend([
            self.config.secp256k1.cell_dep(),
            self.config.anyone_can_pay.cell_dep(),
            self.config.token_cell_dep,
        ])
        return self._finish("transfer_from_acp_to_acp", draft, fee_rate, from_acp_address)

    async def transfer_all_from_acp(
        self,
        from_acp_address: str,
        to_address: str,
        fee_rate: int = DEFAULT_FEE_RATE,
    ) -> TransactionDraft:
        """
        Drain every ACP token cell of ``from_acp_address`` into one cell of ``to_address``.

        The single output carries the summed token amount and the summed
        capacity minus the fee; nothing is returned to the source.

        Raises:
            MissingTargetCell: ``from_acp_address`` has no ACP cell
            InsufficientBalance: The ACP cells hold no tokens
        """
        self._acp_lock_for(from_acp_address)
        to_lock = self._lock_for(to_address)
        source_cells: List[Cell] = await self.index.cells_by_owner_and_token(
            from_acp_address, self.config.token_type, min_capacity=self.config.acp_min_capacity
        )
        if not source_cells:
            raise missing_target_cell(from_acp_address)
        total_amount = sum(token_amount_of(c) for c in source_cells)
        if total_amount == 0:
            raise insufficient_balance(from_acp_address, 1, 0, self.config.token_symbol)

        draft = TransactionDraft()
        draft.inputs.extend(source_cells)
        draft.outputs.append(
            self._token_cell(sum(c.capacity for c in source_cells), to_lock, total_amount)
        )
        draft.cell_deps.extend([self.config.anyone_can_pay.cell_dep(), self.config.token_cell_dep])
        return self._finish("transfer_all_from_acp", draft, fee_rate, from_acp_address)
