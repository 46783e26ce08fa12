from __future__ import annotations

import pytest

from acp_builder.config import LedgerConfig
from acp_builder.errors import ErrorCode, InvalidAddressFormat
from acp_builder.test_accounts import FUNDER
from acp_builder.validation import validate_address, validate_private_key


def test_accepts_network_address() -> None:
    assert validate_address(FUNDER, LedgerConfig.testnet()) == FUNDER
    mainnet_address = "ckb1" + FUNDER[4:]
    assert validate_address(mainnet_address, LedgerConfig.mainnet()) == mainnet_address


@pytest.mark.parametrize(
    "address,reason",
    [
        (None, "non-empty"),
        ("ckb1" + "q" * 40, "start with"),
        ("ckt1qqqqq", "too short"),
        ("ckt1" + "q" * 1020, "too long"),
        ("ckt1qqqqqqqqqo", "non-bech32"),
        ("CKT1QQQQQQQQQQ", "start with"),
    ],
)
def test_rejects_malformed_address(address, reason: str) -> None:
    with pytest.raises(InvalidAddressFormat) as exc:
        validate_address(address, LedgerConfig.testnet())
    assert reason in exc.value.message
    assert exc.value.code == ErrorCode.INVALID_ADDRESS


def test_private_key() -> None:
    key = "0x" + "Ab" * 32
    assert validate_private_key(key) == key
    with pytest.raises(InvalidAddressFormat) as exc:
        validate_private_key(key[:-1])
    assert exc.value.code == ErrorCode.INVALID_KEY
