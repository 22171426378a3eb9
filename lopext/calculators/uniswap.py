"""
AMM pool calculator.

Blob: [feeTier:3][spread:32] (35 bytes).

The pool is resolved from the sorted token pair and fee tier; its
``sqrtPriceX96`` gives token1 per token0 as ``sqrtP**2 / 2**192``.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from ..constants import DEFAULT_UNISWAP_FEE_TIER, Q96, UNISWAP_FEE_TIERS
from ..crypto.address import address_to_int, normalize_address
from ..exceptions import InvalidFeeTier, PoolNotFound, ZeroAmount
from .blob import expect_length, read_uint, uint_bytes
from .spread import apply_spread

logger = logging.getLogger(__name__)

BLOB_LENGTH = 3 + 32
SUPPORTED_FEE_TIERS: Tuple[int, ...] = UNISWAP_FEE_TIERS


def is_valid_fee_tier(fee_tier: int) -> bool:
    return fee_tier in SUPPORTED_FEE_TIERS


class PoolSource(Protocol):
    """Pool factory + pool state reader."""

    def get_pool(self, token0: str, token1: str, fee_tier: int) -> Optional[str]: ...

    def sqrt_price_x96(self, pool: str) -> int: ...


@dataclass(frozen=True)
class UniswapBlob:
    spread: int
    fee_tier: int = DEFAULT_UNISWAP_FEE_TIER

    def encode(self) -> bytes:
        return uint_bytes(self.fee_tier, 3) + uint_bytes(self.spread)

    @classmethod
    def decode(cls, blob: bytes) -> "UniswapBlob":
        expect_length(blob, BLOB_LENGTH)
        return cls(fee_tier=read_uint(blob, 0, 3), spread=read_uint(blob, 3))


def sort_tokens(token_a: str, token_b: str) -> Tuple[str, str]:
    a, b = normalize_address(token_a), normalize_address(token_b)
    return (a, b) if address_to_int(a) < address_to_int(b) else (b, a)


def quote(source: PoolSource, token_in: str, token_out: str, amount_in: int, fee_tier: int) -> int:
    """Convert `amount_in` of token_in to token_out at the pool's spot price."""
    if not is_valid_fee_tier(fee_tier):
        raise InvalidFeeTier(fee_tier)
    token0, token1 = sort_tokens(token_in, token_out)
    pool = source.get_pool(token0, token1, fee_tier)
    if not pool or address_to_int(pool) == 0:
        raise PoolNotFound(f"No pool for {token0}/{token1} at fee tier {fee_tier}")
    sqrt_price = source.sqrt_price_x96(pool)
    if sqrt_price == 0:
        raise PoolNotFound(f"Pool {pool} is not initialized")
    price_x192 = sqrt_price * sqrt_price
    if normalize_address(token_in) == token0:
        amount_out = amount_in * price_x192 // (Q96 * Q96)
    else:
        amount_out = amount_in * (Q96 * Q96) // price_x192
    logger.debug("Pool %s quote %d -> %d", pool, amount_in, amount_out)
    return amount_out


def get_making_amount(
    maker_asset: str, taker_asset: str, blob: bytes, taking_amount: int, source: PoolSource,
) -> int:
    params = UniswapBlob.decode(blob)
    if taking_amount == 0:
        raise ZeroAmount("Taking amount must be non-zero")
    if normalize_address(maker_asset) == normalize_address(taker_asset):
        return apply_spread(taking_amount, params.spread)
    amount = quote(source, taker_asset, maker_asset, taking_amount, params.fee_tier)
    return apply_spread(amount, params.spread)


def get_taking_amount(
    maker_asset: str, taker_asset: str, blob: bytes, making_amount: int, source: PoolSource,
) -> int:
    params = UniswapBlob.decode(blob)
    if making_amount == 0:
        raise ZeroAmount("Making amount must be non-zero")
    if normalize_address(maker_asset) == normalize_address(taker_asset):
        return apply_spread(making_amount, params.spread)
    amount = quote(source, maker_asset, taker_asset, making_amount, params.fee_tier)
    return apply_spread(amount, params.spread)
