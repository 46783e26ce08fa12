"""Cell index adapters: the read-only view of live cells the assembler queries.

``CellIndex`` is the contract. ``MemoryCellIndex`` keeps cells in memory and
is what tests and offline tooling use; ``RpcCellIndex`` talks JSON-RPC to a
CKB node's indexer over aiohttp.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

import aiohttp

from .codec_adapter import (
    cell_from_indexer,
    cell_from_live_cell,
    out_point_to_rpc,
    script_to_rpc,
)
from .config import U64_MAX, LedgerConfig
from .errors import indexer_error, invalid_address_format
from .types import Cell, OutPoint, Script

logger = logging.getLogger(__name__)


class CellIndex(Protocol):
    def lock_for(self, address: str) -> Script:
        """Decode ``address`` into its lock script."""
        ...

    async def cells_by_owner(self, address: str) -> List[Cell]:
        """Live cells locked by ``address`` that carry no type script."""
        ...

    async def cells_by_owner_and_token(
        self, address: str, token_type: Script, min_capacity: Optional[int] = None
    ) -> List[Cell]:
        """Live cells locked by ``address`` with type ``token_type``."""
        ...

    async def cell_by_origin(self, out_point: OutPoint) -> Optional[Cell]:
        """The live cell created at ``out_point``, or ``None``."""
        ...


class MemoryCellIndex:
    """In-memory cell index. Enumeration follows insertion order."""

    def __init__(self) -> None:
        self._cells: Dict[OutPoint, Cell] = {}
        self._locks: Dict[str, Script] = {}

    def register_address(self, address: str, lock: Script) -> None:
        self._locks[address] = lock

    def lock_for(self, address: str) -> Script:
        lock = self._locks.get(address)
        if lock is None:
            raise invalid_address_format(address, f"unknown address: {address}")
        return lock

    def add_cell(self, cell: Cell) -> None:
        """
        Insert a live cell.

        Raises:
            ValueError: If the cell has no out point or is already indexed
        """
        if cell.out_point is None:
            raise ValueError("indexed cells must have an out point")
        if cell.out_point in self._cells:
            raise ValueError(f"cell {cell.out_point} already exists")
        self._cells[cell.out_point] = cell

    def remove_cell(self, out_point: OutPoint) -> None:
        if out_point not in self._cells:
            raise ValueError(f"cell {out_point} not found")
        del self._cells[out_point]

    def all_cells(self) -> List[Cell]:
        return list(self._cells.values())

    async def cells_by_owner(self, address: str) -> List[Cell]:
        lock = self.lock_for(address)
        return [c for c in self._cells.values() if c.lock == lock and c.type is None]

    async def cells_by_owner_and_token(
        self, address: str, token_type: Script, min_capacity: Optional[int] = None
    ) -> List[Cell]:
        lock = self.lock_for(address)
        return [
            c
            for c in self._cells.values()
            if c.lock == lock
            and c.type == token_type
            and (min_capacity is None or c.capacity >= min_capacity)
        ]

    async def cell_by_origin(self, out_point: OutPoint) -> Optional[Cell]:
        return self._cells.get(out_point)


class RpcCellIndex:
    """JSON-RPC client for the CKB indexer (``get_cells``) and node (``get_live_cell``)."""

    def __init__(
        self,
        config: LedgerConfig,
        resolve_lock: Callable[[str], Script],
        page_size: int = 100,
    ):
        self.config = config
        self.page_size = page_size
        self.session: Optional[aiohttp.ClientSession] = None
        self._resolve_lock = resolve_lock
        self._request_id = 0

    async def connect(self) -> None:
        """Initialize HTTP session."""
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> "RpcCellIndex":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def lock_for(self, address: str) -> Script:
        return self._resolve_lock(address)

    async def _call(self, url: str, method: str, params: List[Any]) -> Any:
        if self.session is None:
            raise indexer_error(method, "client is not connected")
        self._request_id += 1
        payload = {"id": self._request_id, "jsonrpc": "2.0", "method": method, "params": params}
        try:
            async with self.session.post(url, json=payload) as resp:
                resp.raise_for_status()
                data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[{method}] request to {url} failed: {e}")
            raise indexer_error(method, str(e) or type(e).__name__) from e
        if data.get("error"):
            message = data["error"].get("message", "unknown error")
            logger.error(f"[{method}] RPC error: {message}")
            raise indexer_error(method, message)
        return data.get("result")

    async def _collect(self, search_key: Dict[str, Any]) -> List[Cell]:
        cells: List[Cell] = []
        cursor: Optional[str] = None
        while True:
            params: List[Any] = [search_key, "asc", hex(self.page_size)]
            if cursor:
                params.append(cursor)
            result = await self._call(self.config.indexer_url, "get_cells", params) or {}
            objects = result.get("objects", [])
            cells.extend(cell_from_indexer(obj) for obj in objects)
            cursor = result.get("last_cursor")
            if len(objects) < self.page_size or not cursor:
                break
        logger.debug(f"get_cells returned {len(cells)} cells")
        return cells

    async def cells_by_owner(self, address: str) -> List[Cell]:
        search_key = {
            "script": script_to_rpc(self.lock_for(address)),
            "script_type": "lock",
            # an empty type script slot
            "filter": {"script_len_range": ["0x0", "0x1"]},
        }
        return await self._collect(search_key)

    async def cells_by_owner_and_token(
        self, address: str, token_type: Script, min_capacity: Optional[int] = None
    ) -> List[Cell]:
        search_filter: Dict[str, Any] = {"script": script_to_rpc(token_type)}
        if min_capacity is not None:
            search_filter["output_capacity_range"] = [hex(min_capacity), hex(U64_MAX)]
        search_key = {
            "script": script_to_rpc(self.lock_for(address)),
            "script_type": "lock",
            "filter": search_filter,
        }
        return await self._collect(search_key)

    async def cell_by_origin(self, out_point: OutPoint) -> Optional[Cell]:
        result = await self._call(
            self.config.rpc_url, "get_live_cell", [out_point_to_rpc(out_point), True]
        )
        if not result:
            return None
        return cell_from_live_cell(result, out_point)
