"""
lopext Crypto Hashing Module

Keccak-256 (Web3 standard) used for order hashes, extension salts and
function selectors.
"""

from typing import Union

from eth_utils import keccak


def keccak256(data: Union[bytes, str]) -> bytes:
    """
    Compute Keccak-256 hash.

    Args:
        data: Input bytes or hex string (with or without 0x prefix)

    Returns:
        32-byte hash
    """
    if isinstance(data, str):
        if data.startswith('0x') or data.startswith('0X'):
            data = data[2:]
        data = bytes.fromhex(data)
    return keccak(data)


def keccak256_hex(data: Union[bytes, str]) -> str:
    """Compute Keccak-256 hash and return as 0x-prefixed hex string."""
    return '0x' + keccak256(data).hex()


def function_selector(signature: str) -> bytes:
    """
    First 4 bytes of keccak256 of a function signature.

    Args:
        signature: Canonical signature like "decimals()"
    """
    return keccak(text=signature)[:4]
