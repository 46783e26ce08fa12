"""Convert between builder types and the CKB JSON-RPC representation.

Quantities are ``0x``-prefixed hex strings without leading zeros, byte strings
are ``0x``-prefixed hex, and field names are ``snake_case``. ``draft_to_rpc``
produces the transaction JSON handed to the external signer.
"""

from __future__ import annotations

from typing import Any, Optional

from .errors import ErrorCode, AcpError
from .types import Cell, CellDep, DepType, HashType, OutPoint, Script, TransactionDraft


def _hex_to_bytes(value: Optional[str]) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise AcpError(ErrorCode.INVALID_FORMAT, "hex value must be string")
    v = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(v)
    except ValueError:
        raise AcpError(ErrorCode.INVALID_FORMAT, f"invalid hex: {value!r}") from None


def _bytes_to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def _hex_to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.startswith(("0x", "0X")):
        raise AcpError(ErrorCode.INVALID_FORMAT, f"invalid hex quantity: {value!r}")
    return int(value, 16)


def _int_to_hex(value: int) -> str:
    return hex(int(value))


def script_to_rpc(script: Script) -> dict[str, str]:
    return {
        "code_hash": _bytes_to_hex(script.code_hash),
        "hash_type": script.hash_type.value,
        "args": _bytes_to_hex(script.args),
    }


def script_from_rpc(data: Optional[dict[str, Any]]) -> Optional[Script]:
    if data is None:
        return None
    return Script(
        code_hash=_hex_to_bytes(data["code_hash"]),
        hash_type=HashType(data["hash_type"]),
        args=_hex_to_bytes(data.get("args", "0x")),
    )


def out_point_to_rpc(out_point: OutPoint) -> dict[str, str]:
    return {"tx_hash": _bytes_to_hex(out_point.tx_hash), "index": _int_to_hex(out_point.index)}


def out_point_from_rpc(data: dict[str, Any]) -> OutPoint:
    return OutPoint(tx_hash=_hex_to_bytes(data["tx_hash"]), index=_hex_to_int(data["index"]))


def cell_dep_to_rpc(dep: CellDep) -> dict[str, Any]:
    return {"out_point": out_point_to_rpc(dep.out_point), "dep_type": dep.dep_type.value}


def cell_dep_from_rpc(data: dict[str, Any]) -> CellDep:
    return CellDep(out_point_from_rpc(data["out_point"]), DepType(data["dep_type"]))


def cell_output_to_rpc(cell: Cell) -> dict[str, Any]:
    return {
        "capacity": _int_to_hex(cell.capacity),
        "lock": script_to_rpc(cell.lock),
        "type": None if cell.type is None else script_to_rpc(cell.type),
    }


def _cell_from_output(output: dict[str, Any], data: Optional[str], out_point: Optional[OutPoint]) -> Cell:
    lock = script_from_rpc(output["lock"])
    if lock is None:
        raise AcpError(ErrorCode.INVALID_FORMAT, "cell output has no lock")
    return Cell(
        capacity=_hex_to_int(output["capacity"]),
        lock=lock,
        type=script_from_rpc(output.get("type")),
        data=_hex_to_bytes(data),
        out_point=out_point,
    )


def cell_from_indexer(item: dict[str, Any]) -> Cell:
    """Parse one object of the indexer ``get_cells`` result."""
    return _cell_from_output(
        item["output"],
        item.get("output_data"),
        out_point_from_rpc(item["out_point"]),
    )


def cell_from_live_cell(result: dict[str, Any], out_point: OutPoint) -> Optional[Cell]:
    """Parse a ``get_live_cell`` result; ``None`` unless the cell is live."""
    if result.get("status") != "live" or not result.get("cell"):
        return None
    cell = result["cell"]
    data = (cell.get("data") or {}).get("content")
    return _cell_from_output(cell["output"], data, out_point)


def draft_to_rpc(draft: TransactionDraft) -> dict[str, Any]:
    inputs = []
    for cell in draft.inputs:
        if cell.out_point is None:
            raise AcpError(ErrorCode.INVALID_FORMAT, "input cell has no out point")
        inputs.append({"since": "0x0", "previous_output": out_point_to_rpc(cell.out_point)})
    return {
        "version": _int_to_hex(draft.version),
        "cell_deps": [cell_dep_to_rpc(d) for d in draft.cell_deps],
        "header_deps": [_bytes_to_hex(h) for h in draft.header_deps],
        "inputs": inputs,
        "outputs": [cell_output_to_rpc(c) for c in draft.outputs],
        "outputs_data": [_bytes_to_hex(d) for d in draft.outputs_data],
        "witnesses": [_bytes_to_hex(w) for w in draft.witnesses],
    }


def cell_to_json(cell: Cell) -> dict[str, Any]:
    """Indexer-shaped JSON for a cell (the inverse of ``cell_from_indexer``)."""
    result: dict[str, Any] = {
        "output": cell_output_to_rpc(cell),
        "output_data": _bytes_to_hex(cell.data),
    }
    if cell.out_point is not None:
        result["out_point"] = out_point_to_rpc(cell.out_point)
    return result


def cell_output_from_rpc(output: dict[str, Any], data: Optional[str]) -> Cell:
    return _cell_from_output(output, data, None)


def draft_from_rpc(tx: dict[str, Any], input_cells: list[Cell]) -> TransactionDraft:
    """Rebuild a draft from ``draft_to_rpc`` JSON.

    RPC inputs only reference their cells, so the spent cells are passed in
    input order.
    """
    if len(input_cells) != len(tx["inputs"]):
        raise AcpError(ErrorCode.INVALID_FORMAT, "input cells do not match transaction inputs")
    for cell, item in zip(input_cells, tx["inputs"]):
        if cell.out_point != out_point_from_rpc(item["previous_output"]):
            raise AcpError(ErrorCode.INVALID_FORMAT, "input cell out point mismatch")
    if len(tx["outputs"]) != len(tx["outputs_data"]):
        raise AcpError(ErrorCode.INVALID_FORMAT, "outputs and outputs_data length mismatch")
    return TransactionDraft(
        version=_hex_to_int(tx["version"]),
        cell_deps=[cell_dep_from_rpc(d) for d in tx["cell_deps"]],
        header_deps=[_hex_to_bytes(h) for h in tx["header_deps"]],
        inputs=list(input_cells),
        outputs=[cell_output_from_rpc(o, d) for o, d in zip(tx["outputs"], tx["outputs_data"])],
        witnesses=[_hex_to_bytes(w) for w in tx["witnesses"]],
    )
