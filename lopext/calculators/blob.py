"""
Fixed-layout blob helpers shared by the calculators.

All integers are big-endian. Signed words use two's complement.
"""

from ..constants import ADDRESS_LENGTH, INT256_MAX, INT256_MIN, UINT256_MAX, WORD_SIZE
from ..crypto.address import address_to_bytes, bytes_to_address
from ..exceptions import InvalidBlobLength


def expect_length(blob: bytes, expected: int) -> None:
    if len(blob) != expected:
        raise InvalidBlobLength(expected, len(blob))


def read_uint(blob: bytes, start: int, length: int = WORD_SIZE) -> int:
    return int.from_bytes(blob[start:start + length], "big")


def read_int256(blob: bytes, start: int) -> int:
    return int.from_bytes(blob[start:start + WORD_SIZE], "big", signed=True)


def read_address(blob: bytes, start: int) -> str:
    return bytes_to_address(blob[start:start + ADDRESS_LENGTH])


def uint_bytes(value: int, length: int = WORD_SIZE) -> bytes:
    if value < 0 or value >= 2 ** (8 * length):
        raise ValueError(f"Value {value} does not fit in {length} unsigned bytes")
    return value.to_bytes(length, "big")


def int256_bytes(value: int) -> bytes:
    if value < INT256_MIN or value > INT256_MAX:
        raise ValueError(f"Value {value} does not fit in int256")
    return (value & UINT256_MAX).to_bytes(WORD_SIZE, "big")


def address_bytes(address: str) -> bytes:
    return address_to_bytes(address)
