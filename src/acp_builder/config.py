"""Ledger configuration for the ACP transaction builder.

Network-dependent script hashes and cell deps are carried by an explicit
``LedgerConfig`` value that callers pass to every component. Keep the presets
aligned with the lumos MAINNET/TESTNET script tables and the USDI deployment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .types import CellDep, DepType, HashType, OutPoint, Script

# Units
CKB_DECIMALS = 8
CKB_UNIT_SCALE = 10**CKB_DECIMALS
USDI_DECIMALS = 6
USDI_UNIT_SCALE = 10**USDI_DECIMALS

# Sizes (bytes)
CAPACITY_FIELD_SIZE = 8
TOKEN_AMOUNT_SIZE = 16
SECP256K1_SIGNATURE_SIZE = 65
# Extra offset slot a transaction occupies inside a serialized block.
TX_SIZE_OFFSET = 4

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1

# Fees
DEFAULT_FEE_RATE = 1000  # shannons per KB
FEE_RATE_DIVISOR = 1000
ACP_FEE_BUFFER = CKB_UNIT_SCALE // 100  # 0.01 CKB kept in each new ACP cell

# JoyID-compatible ACP lock args: 22 bytes (blake160 + 2 bytes of flags).
DEFAULT_ACP_LOCK_ARGS_SIZE = 22

NETWORK_MAINNET = "mainnet"
NETWORK_TESTNET = "testnet"


def _hex(value: str) -> bytes:
    v = value[2:] if value.startswith(("0x", "0X")) else value
    return bytes.fromhex(v)


@dataclass(frozen=True)
class ScriptInfo:
    """Deployed script: code hash plus the cell dep that provides its code."""

    code_hash: bytes
    hash_type: HashType
    tx_hash: bytes
    index: int
    dep_type: DepType

    def script(self, args: bytes) -> Script:
        return Script(code_hash=self.code_hash, hash_type=self.hash_type, args=args)

    def cell_dep(self) -> CellDep:
        return CellDep(OutPoint(self.tx_hash, self.index), self.dep_type)

    def matches(self, script: Script) -> bool:
        return script.code_hash == self.code_hash and script.hash_type == self.hash_type


_SECP256K1_CODE_HASH = _hex("0x9bd7e06f3ecf4be0f2fcd2188b23f1b9fcc88e5d4b65a8637b17723bbda3cce8")

MAINNET_SECP256K1 = ScriptInfo(
    code_hash=_SECP256K1_CODE_HASH,
    hash_type=HashType.TYPE,
    tx_hash=_hex("0x71a7ba8fc96349fea0ed3a5c47992e3b4084b031a42264a018e0072e8172e46c"),
    index=0,
    dep_type=DepType.DEP_GROUP,
)
MAINNET_ANYONE_CAN_PAY = ScriptInfo(
    code_hash=_hex("0xd369597ff47f29fbc0d47d2e3775370d1250b85140c670e4718af712983a2354"),
    hash_type=HashType.TYPE,
    tx_hash=_hex("0x4153a2014952d7cac45f285ce9a7c5c0c0e1b21f2d378b82ac1433cb11c25c4d"),
    index=0,
    dep_type=DepType.DEP_GROUP,
)
MAINNET_USDI_TYPE = Script(
    code_hash=_hex("0xbfa35a9c38a676682b65ade8f02be164d48632281477e36f8dc2f41f79e56bfc"),
    hash_type=HashType.TYPE,
    args=_hex("0xd591ebdc69626647e056e13345fd830c8b876bb06aa07ba610479eb77153ea9f"),
)
MAINNET_USDI_CELL_DEP = CellDep(
    OutPoint(_hex("0xf6a5eef65101899db9709c8de1cc28f23c1bee90d857ebe176f6647ef109e20d"), 0),
    DepType.CODE,
)

TESTNET_SECP256K1 = ScriptInfo(
    code_hash=_SECP256K1_CODE_HASH,
    hash_type=HashType.TYPE,
    tx_hash=_hex("0xf8de3bb47d055cdf460d93a2a6e1b05f7432f9777c8c474abf4eec1d4aee5d37"),
    index=0,
    dep_type=DepType.DEP_GROUP,
)
TESTNET_ANYONE_CAN_PAY = ScriptInfo(
    code_hash=_hex("0x3419a1c09eb2567f6552ee7a8ecffd64155cffe0f1796e6e61ec088d740c1356"),
    hash_type=HashType.TYPE,
    tx_hash=_hex("0xec26b0f85ed839ece5f11c4c4e837ec359f5adc4420410f6453b1f6b60fb96a6"),
    index=0,
    dep_type=DepType.DEP_GROUP,
)
TESTNET_USDI_TYPE = Script(
    code_hash=_hex("0xcc9dc33ef234e14bc788c43a4848556a5fb16401a04662fc55db9bb201987037"),
    hash_type=HashType.TYPE,
    args=_hex("0x71fd1985b2971a9903e4d8ed0d59e6710166985217ca0681437883837b86162f"),
)
TESTNET_USDI_CELL_DEP = CellDep(
    OutPoint(_hex("0xaec423c2af7fe844b476333190096b10fc5726e6d9ac58a9b71f71ffac204fee"), 0),
    DepType.CODE,
)


@dataclass(frozen=True)
class LedgerConfig:
    """Everything the builder needs to know about one network."""

    network: str
    address_prefix: str
    secp256k1: ScriptInfo
    anyone_can_pay: ScriptInfo
    token_type: Script
    token_cell_dep: CellDep
    token_symbol: str = "USDI"
    token_decimals: int = USDI_DECIMALS
    acp_lock_args_size: int = DEFAULT_ACP_LOCK_ARGS_SIZE
    rpc_url: str = "http://127.0.0.1:8114"
    indexer_url: str = "http://127.0.0.1:8114"
    request_timeout: float = 30.0

    @classmethod
    def mainnet(cls) -> "LedgerConfig":
        return cls(
            network=NETWORK_MAINNET,
            address_prefix="ckb",
            secp256k1=MAINNET_SECP256K1,
            anyone_can_pay=MAINNET_ANYONE_CAN_PAY,
            token_type=MAINNET_USDI_TYPE,
            token_cell_dep=MAINNET_USDI_CELL_DEP,
            rpc_url="https://mainnet.ckb.dev/rpc",
            indexer_url="https://mainnet.ckb.dev/indexer",
        )

    @classmethod
    def testnet(cls) -> "LedgerConfig":
        return cls(
            network=NETWORK_TESTNET,
            address_prefix="ckt",
            secp256k1=TESTNET_SECP256K1,
            anyone_can_pay=TESTNET_ANYONE_CAN_PAY,
            token_type=TESTNET_USDI_TYPE,
            token_cell_dep=TESTNET_USDI_CELL_DEP,
            rpc_url="https://testnet.ckb.dev/rpc",
            indexer_url="https://testnet.ckb.dev/indexer",
        )

    @classmethod
    def for_network(cls, network: str) -> "LedgerConfig":
        if network == NETWORK_MAINNET:
            return cls.mainnet()
        if network == NETWORK_TESTNET:
            return cls.testnet()
        raise ValueError(f"unknown network: {network!r}")

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Load configuration from environment variables."""
        config = cls.for_network(os.environ.get("ACP_NETWORK", NETWORK_TESTNET))
        overrides: dict[str, Any] = {}
        if os.environ.get("CKB_RPC_URL"):
            overrides["rpc_url"] = os.environ["CKB_RPC_URL"]
        if os.environ.get("CKB_INDEXER_URL"):
            overrides["indexer_url"] = os.environ["CKB_INDEXER_URL"]
        if os.environ.get("CKB_REQUEST_TIMEOUT"):
            overrides["request_timeout"] = float(os.environ["CKB_REQUEST_TIMEOUT"])
        return replace(config, **overrides)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LedgerConfig":
        """Load a network preset and apply the overrides found in a YAML file."""
        doc = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(doc, dict):
            raise ValueError("ledger config must be a mapping")
        return cls.from_mapping(doc)

    @classmethod
    def from_mapping(cls, doc: dict[str, Any]) -> "LedgerConfig":
        config = cls.for_network(doc.get("network", NETWORK_TESTNET))
        overrides: dict[str, Any] = {}
        for key in ("rpc_url", "indexer_url", "address_prefix"):
            if key in doc:
                overrides[key] = str(doc[key])
        if "request_timeout" in doc:
            overrides["request_timeout"] = float(doc["request_timeout"])
        if "acp_lock_args_size" in doc:
            overrides["acp_lock_args_size"] = int(doc["acp_lock_args_size"])

        token = doc.get("token")
        if isinstance(token, dict):
            if "symbol" in token:
                overrides["token_symbol"] = str(token["symbol"])
            if "decimals" in token:
                overrides["token_decimals"] = int(token["decimals"])
            if "code_hash" in token:
                overrides["token_type"] = Script(
                    code_hash=_hex(token["code_hash"]),
                    hash_type=HashType(token.get("hash_type", "type")),
                    args=_hex(token.get("args", "0x")),
                )
            dep = token.get("cell_dep")
            if isinstance(dep, dict):
                overrides["token_cell_dep"] = CellDep(
                    OutPoint(_hex(dep["tx_hash"]), int(dep.get("index", 0))),
                    DepType(dep.get("dep_type", "code")),
                )
        return replace(config, **overrides)

    @property
    def acp_min_capacity(self) -> int:
        """Occupied capacity of an ACP token cell, in shannons."""
        lock_size = len(self.anyone_can_pay.code_hash) + 1 + self.acp_lock_args_size
        size = (
            CAPACITY_FIELD_SIZE
            + lock_size
            + self.token_type.occupied_size()
            + TOKEN_AMOUNT_SIZE
        )
        return size * CKB_UNIT_SCALE

    @property
    def acp_default_capacity(self) -> int:
        return self.acp_min_capacity + ACP_FEE_BUFFER

    @property
    def token_unit_scale(self) -> int:
        return 10**self.token_decimals

    def is_acp_lock(self, lock: Optional[Script]) -> bool:
        return lock is not None and self.anyone_can_pay.matches(lock)

    def is_secp256k1_lock(self, lock: Optional[Script]) -> bool:
        return lock is not None and self.secp256k1.matches(lock)
