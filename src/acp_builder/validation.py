"""Boundary checks on caller-supplied addresses and keys.

These run before any I/O so a malformed argument fails fast. Decoding an
address into its lock script is left to the cell index collaborator.
"""

from __future__ import annotations

from .config import LedgerConfig
from .errors import ErrorCode, invalid_address_format

BECH32_CHARSET = frozenset("qpzry9x8gf2tvdw0s3jn54khce6mua7l")
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# bech32 checksum is 6 characters; CKB addresses carry at least a format byte.
MIN_ADDRESS_DATA_LEN = 7
MAX_ADDRESS_LEN = 1023

PRIVATE_KEY_HEX_LEN = 66  # 0x + 32-byte secret


def validate_address(address: str, config: LedgerConfig) -> str:
    if not isinstance(address, str) or not address:
        raise invalid_address_format(str(address), "address must be a non-empty string")
    if len(address) > MAX_ADDRESS_LEN:
        raise invalid_address_format(address, "address too long")
    hrp = config.address_prefix + "1"
    if not address.startswith(hrp):
        raise invalid_address_format(
            address, f"address must start with {hrp!r} on {config.network}"
        )
    data = address[len(hrp):]
    if len(data) < MIN_ADDRESS_DATA_LEN:
        raise invalid_address_format(address, "address too short")
    if any(ch not in BECH32_CHARSET for ch in data):
        raise invalid_address_format(address, "address contains non-bech32 characters")
    return address


def _validate_hex_key(value: str, length: int, label: str) -> str:
    if (
        not isinstance(value, str)
        or not value.startswith("0x")
        or len(value) != length
        or any(ch not in HEX_DIGITS for ch in value[2:])
    ):
        raise invalid_address_format(
            str(value),
            f"the secp256k1 {label} should be a {length}-character hex string prefixed with 0x",
            code=ErrorCode.INVALID_KEY,
        )
    return value


def validate_private_key(private_key: str) -> str:
    return _validate_hex_key(private_key, PRIVATE_KEY_HEX_LEN, "private key")
