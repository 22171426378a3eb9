"""
Oracle feed calculator.

Single-feed blob: [flags:1][oracle:20][spread:32] (53 bytes)
Double-feed blob: [flags:1][oracle1:20][oracle2:20][decimalsScale:32][spread:32] (105 bytes)

Flags: 0x80 inverse (divide by the answer instead of multiplying), 0x40
double feed. The spread multiplier is applied to the amount first and the
1e9 denominator divided out last, as the on-chain calculator does.
decimalsScale is a signed word: negative values divide by 10**|scale|.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from ..constants import DOUBLE_PRICE_FLAG, INVERSE_FLAG, ORACLE_TTL, SPREAD_DENOMINATOR
from ..exceptions import DifferentOracleDecimals, PriceDiscoveryFailed, StaleOraclePrice
from .blob import (
    address_bytes,
    expect_length,
    int256_bytes,
    read_address,
    read_int256,
    read_uint,
    uint_bytes,
)

logger = logging.getLogger(__name__)

SINGLE_BLOB_LENGTH = 1 + 20 + 32
DOUBLE_BLOB_LENGTH = 1 + 20 + 20 + 32 + 32


class PriceFeed(Protocol):
    """Aggregator feed reader."""

    def latest_round_data(self, oracle: str) -> Tuple[int, int]:
        """Return (answer, updated_at)."""
        ...

    def decimals(self, oracle: str) -> int: ...


@dataclass(frozen=True)
class SingleFeedBlob:
    oracle: str
    spread: int
    inverse: bool = False

    def encode(self) -> bytes:
        flags = INVERSE_FLAG if self.inverse else 0
        return uint_bytes(flags, 1) + address_bytes(self.oracle) + uint_bytes(self.spread)


@dataclass(frozen=True)
class DoubleFeedBlob:
    oracle1: str
    oracle2: str
    decimals_scale: int
    spread: int

    def encode(self) -> bytes:
        return (
            uint_bytes(DOUBLE_PRICE_FLAG, 1)
            + address_bytes(self.oracle1)
            + address_bytes(self.oracle2)
            + int256_bytes(self.decimals_scale)
            + uint_bytes(self.spread)
        )


def decode_blob(blob: bytes):
    """Decode either layout, chosen by the double-feed flag."""
    if not blob:
        expect_length(blob, SINGLE_BLOB_LENGTH)
    flags = blob[0]
    if flags & DOUBLE_PRICE_FLAG:
        expect_length(blob, DOUBLE_BLOB_LENGTH)
        return DoubleFeedBlob(
            oracle1=read_address(blob, 1),
            oracle2=read_address(blob, 21),
            decimals_scale=read_int256(blob, 41),
            spread=read_uint(blob, 73),
        )
    expect_length(blob, SINGLE_BLOB_LENGTH)
    return SingleFeedBlob(
        oracle=read_address(blob, 1),
        spread=read_uint(blob, 21),
        inverse=bool(flags & INVERSE_FLAG),
    )


def _read_feed(feed: PriceFeed, oracle: str, now: int) -> int:
    try:
        answer, updated_at = feed.latest_round_data(oracle)
    except Exception as e:
        raise PriceDiscoveryFailed(f"Oracle {oracle} unavailable: {e}") from e
    if updated_at + ORACLE_TTL < now:
        raise StaleOraclePrice(f"Oracle {oracle} answer is older than {ORACLE_TTL} seconds")
    if answer <= 0:
        raise PriceDiscoveryFailed(f"Oracle {oracle} reported a non-positive answer: {answer}")
    return answer


def _read_decimals(feed: PriceFeed, oracle: str) -> int:
    try:
        return feed.decimals(oracle)
    except Exception as e:
        raise PriceDiscoveryFailed(f"Oracle {oracle} decimals unavailable: {e}") from e


def _single_price(params: SingleFeedBlob, amount: int, feed: PriceFeed, now: int) -> int:
    answer = _read_feed(feed, params.oracle, now)
    scale = 10 ** _read_decimals(feed, params.oracle)
    spreaded = params.spread * amount
    if params.inverse:
        return spreaded * scale // answer // SPREAD_DENOMINATOR
    return spreaded * answer // scale // SPREAD_DENOMINATOR


def _double_price(params: DoubleFeedBlob, amount: int, feed: PriceFeed, now: int) -> int:
    if _read_decimals(feed, params.oracle1) != _read_decimals(feed, params.oracle2):
        raise DifferentOracleDecimals("Oracle decimals differ")
    answer1 = _read_feed(feed, params.oracle1, now)
    answer2 = _read_feed(feed, params.oracle2, now)
    spreaded = params.spread * amount
    if params.decimals_scale > 0:
        result = spreaded * answer1 * 10**params.decimals_scale // answer2
    elif params.decimals_scale < 0:
        result = spreaded * answer1 // answer2 // 10**(-params.decimals_scale)
    else:
        result = spreaded * answer1 // answer2
    return result // SPREAD_DENOMINATOR


def get_spreaded_amount(blob: bytes, amount: int, feed: PriceFeed, now: Optional[int] = None) -> int:
    """
    Convert `amount` through the feed(s) described by `blob`.

    The engine calls this for both directions; the making and taking blobs
    differ in inverse flag (or oracle order) and spread multiplier.
    """
    params = decode_blob(blob)
    if now is None:
        now = int(time.time())
    if isinstance(params, DoubleFeedBlob):
        result = _double_price(params, amount, feed, now)
    else:
        result = _single_price(params, amount, feed, now)
    logger.debug("Oracle amount %d -> %d", amount, result)
    return result


def get_making_amount(blob: bytes, taking_amount: int, feed: PriceFeed, now: Optional[int] = None) -> int:
    return get_spreaded_amount(blob, taking_amount, feed, now)


def get_taking_amount(blob: bytes, making_amount: int, feed: PriceFeed, now: Optional[int] = None) -> int:
    return get_spreaded_amount(blob, making_amount, feed, now)
