"""
lopext Crypto Address Module

Helpers for 20-byte EVM addresses as they appear in orders and hook payloads.
"""

import re
from typing import Union

from eth_utils import to_checksum_address as _to_checksum_address

from ..constants import ADDRESS_LENGTH

ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")
ZERO_ADDRESS = "0x" + "00" * ADDRESS_LENGTH


def is_valid_address(address: object) -> bool:
    """Check if value is a 0x-prefixed 20-byte hex address (any casing)."""
    return isinstance(address, str) and ADDRESS_PATTERN.fullmatch(address) is not None


def normalize_address(address: str) -> str:
    """
    Normalize address to lowercase with 0x prefix.

    Raises:
        ValueError: If the address is malformed
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return "0x" + address[2:].lower()


def to_checksum_address(address: str) -> str:
    """Convert address to EIP-55 checksum format."""
    return _to_checksum_address(normalize_address(address))


def address_to_bytes(address: str) -> bytes:
    """Decode a 0x address into its 20 raw bytes."""
    return bytes.fromhex(normalize_address(address)[2:])


def bytes_to_address(data: Union[bytes, bytearray]) -> str:
    """Encode 20 raw bytes as a lowercase 0x address."""
    if len(data) != ADDRESS_LENGTH:
        raise ValueError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(data)}")
    return "0x" + bytes(data).hex()


def address_to_int(address: str) -> int:
    return int.from_bytes(address_to_bytes(address), "big")

