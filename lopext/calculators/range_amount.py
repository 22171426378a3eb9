"""
Range (linear price) calculator.

Blob: [priceStart:32][priceEnd:32].

The price moves linearly with the filled maker amount, from priceStart at
zero fill to priceEnd at a full fill. Prices are 1e18 fixed point. Filling
a chunk costs the trapezoid area under the price line over that chunk; the
maker amount for a given taker amount is the quadratic inverse, which
needs a non-zero slope.
"""

import math
from dataclasses import dataclass

from ..constants import RANGE_PRICE_SCALE
from ..exceptions import IncorrectRange, ZeroAmount
from .blob import expect_length, read_uint, uint_bytes

BLOB_LENGTH = 2 * 32


@dataclass(frozen=True)
class RangeBlob:
    price_start: int
    price_end: int

    def encode(self) -> bytes:
        return uint_bytes(self.price_start) + uint_bytes(self.price_end)

    @classmethod
    def decode(cls, blob: bytes) -> "RangeBlob":
        expect_length(blob, BLOB_LENGTH)
        return cls(price_start=read_uint(blob, 0), price_end=read_uint(blob, 32))


def _check_range(price_start: int, price_end: int) -> None:
    if price_end < price_start:
        raise IncorrectRange(f"Price end {price_end} is below price start {price_start}")


def price_at(price_start: int, price_end: int, filled: int, total: int) -> int:
    """Price after `filled` of `total` maker units have been filled."""
    _check_range(price_start, price_end)
    if total == 0:
        raise ZeroAmount("Total amount is zero")
    return price_start + (price_end - price_start) * filled // total


def get_range_taker_amount(
    price_start: int,
    price_end: int,
    order_making_amount: int,
    making_amount: int,
    remaining_making_amount: int,
) -> int:
    _check_range(price_start, price_end)
    if order_making_amount == 0:
        raise ZeroAmount("Order making amount is zero")
    filled = order_making_amount - remaining_making_amount
    return (
        (price_end - price_start) * (2 * filled + making_amount) // order_making_amount
        + 2 * price_start
    ) * making_amount // (2 * RANGE_PRICE_SCALE)


def get_range_maker_amount(
    price_start: int,
    price_end: int,
    order_making_amount: int,
    taking_amount: int,
    remaining_making_amount: int,
) -> int:
    _check_range(price_start, price_end)
    if order_making_amount == 0:
        raise ZeroAmount("Order making amount is zero")
    filled = order_making_amount - remaining_making_amount
    k = (price_end - price_start) * RANGE_PRICE_SCALE // order_making_amount
    if k == 0:
        raise ZeroAmount("Range slope is zero")
    b_div_k = price_start * RANGE_PRICE_SCALE // k
    return (
        math.isqrt((b_div_k + filled) ** 2 + 2 * taking_amount * RANGE_PRICE_SCALE**2 // k)
        - b_div_k
        - filled
    )


def get_making_amount(order, blob: bytes, taking_amount: int, remaining_making_amount: int) -> int:
    params = RangeBlob.decode(blob)
    return get_range_maker_amount(
        params.price_start, params.price_end, order.making_amount, taking_amount, remaining_making_amount,
    )


def get_taking_amount(order, blob: bytes, making_amount: int, remaining_making_amount: int) -> int:
    params = RangeBlob.decode(blob)
    return get_range_taker_amount(
        params.price_start, params.price_end, order.making_amount, making_amount, remaining_making_amount,
    )
