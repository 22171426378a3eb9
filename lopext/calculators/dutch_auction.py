"""
Dutch auction calculator.

Blob: [startTime:32][endTime:32][startAmount:32][endAmount:32].

The taking amount decays linearly from startAmount to endAmount over the
auction window. Both boundaries are inclusive and intermediate values are
truncated toward zero.
"""

import time
from dataclasses import dataclass
from typing import Optional

from ..exceptions import ZeroAmount
from .blob import expect_length, read_uint, uint_bytes

BLOB_LENGTH = 4 * 32


def _div_trunc(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


@dataclass(frozen=True)
class DutchAuctionBlob:
    start_time: int
    end_time: int
    start_amount: int
    end_amount: int

    def encode(self) -> bytes:
        return (
            uint_bytes(self.start_time)
            + uint_bytes(self.end_time)
            + uint_bytes(self.start_amount)
            + uint_bytes(self.end_amount)
        )

    @classmethod
    def decode(cls, blob: bytes) -> "DutchAuctionBlob":
        expect_length(blob, BLOB_LENGTH)
        return cls(
            start_time=read_uint(blob, 0),
            end_time=read_uint(blob, 32),
            start_amount=read_uint(blob, 64),
            end_amount=read_uint(blob, 96),
        )

    def amount_at(self, now: int) -> int:
        if now <= self.start_time:
            return self.start_amount
        if now >= self.end_time:
            return self.end_amount
        elapsed = now - self.start_time
        duration = self.end_time - self.start_time
        return self.start_amount - _div_trunc(
            (self.start_amount - self.end_amount) * elapsed, duration
        )


def auction_amount(blob: bytes, now: Optional[int] = None) -> int:
    """Current auction amount at `now` (defaults to the wall clock)."""
    if now is None:
        now = int(time.time())
    return DutchAuctionBlob.decode(blob).amount_at(now)


def get_making_amount(order, blob: bytes, taking_amount: int, now: Optional[int] = None) -> int:
    """Maker amount for `taking_amount`, rounded down."""
    current = auction_amount(blob, now)
    if current == 0:
        raise ZeroAmount("Auction amount is zero")
    return order.making_amount * taking_amount // current


def get_taking_amount(order, blob: bytes, making_amount: int, now: Optional[int] = None) -> int:
    """Taker amount for `making_amount`, rounded up."""
    if order.making_amount == 0:
        raise ZeroAmount("Order making amount is zero")
    current = auction_amount(blob, now)
    return -(-making_amount * current // order.making_amount)
