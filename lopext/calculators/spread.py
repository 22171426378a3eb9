"""
Spread arithmetic.

Spreads are parts per 1e9 on top of a 1e9 base: a multiplier of exactly
1e9 leaves an amount untouched. Wrappers store ``1e9 - s`` in the
making-amount blob and ``1e9 + s`` in the taking-amount blob, so a spread
shaves what the taker receives and inflates what the taker pays by the same
proportion.
"""

from enum import Enum

from ..constants import SPREAD_DENOMINATOR


class Side(str, Enum):
    MAKER = "maker"
    TAKER = "taker"


def maker_spread(spread: int) -> int:
    """Multiplier written into the making-amount blob."""
    if spread < 0 or spread > SPREAD_DENOMINATOR:
        raise ValueError(f"Spread must be within 0..{SPREAD_DENOMINATOR}, got {spread}")
    return SPREAD_DENOMINATOR - spread


def taker_spread(spread: int) -> int:
    """Multiplier written into the taking-amount blob."""
    if spread < 0:
        raise ValueError(f"Spread must be non-negative, got {spread}")
    return SPREAD_DENOMINATOR + spread


def apply_spread(amount: int, multiplier: int) -> int:
    return amount * multiplier // SPREAD_DENOMINATOR


def spread_adjusted_price(price: int, spread: int, side: Side) -> int:
    """Adjust `price` by `spread` in favour of the maker for the given side."""
    side = Side(side)
    if side is Side.MAKER:
        return apply_spread(price, maker_spread(spread))
    return apply_spread(price, taker_spread(spread))
