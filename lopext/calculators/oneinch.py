"""
Aggregator quote calculator.

Blob: [flags:1][makerToken:20][takerToken:20][spread:32] (73 bytes).

The making amount for a taking amount is the aggregator's quote for
takerToken -> makerToken, scaled by the blob's spread multiplier; the taking
amount is the symmetric quote. A pair of identical tokens never touches the
quote source.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from ..crypto.address import normalize_address
from ..exceptions import PriceDiscoveryFailed, ZeroAmount
from .blob import address_bytes, expect_length, read_address, read_uint, uint_bytes
from .spread import apply_spread

logger = logging.getLogger(__name__)

BLOB_LENGTH = 1 + 20 + 20 + 32


class QuoteSource(Protocol):
    """Market quote collaborator (an aggregation router view in production)."""

    def get_expected_return(self, src_token: str, dst_token: str, amount: int) -> int: ...


@dataclass(frozen=True)
class OneInchBlob:
    maker_token: str
    taker_token: str
    spread: int
    flags: int = 0

    def encode(self) -> bytes:
        return (
            uint_bytes(self.flags, 1)
            + address_bytes(self.maker_token)
            + address_bytes(self.taker_token)
            + uint_bytes(self.spread)
        )

    @classmethod
    def decode(cls, blob: bytes) -> "OneInchBlob":
        expect_length(blob, BLOB_LENGTH)
        return cls(
            flags=blob[0],
            maker_token=read_address(blob, 1),
            taker_token=read_address(blob, 21),
            spread=read_uint(blob, 41),
        )

    @property
    def same_token(self) -> bool:
        return normalize_address(self.maker_token) == normalize_address(self.taker_token)


def _quote(source: QuoteSource, src: str, dst: str, amount: int) -> int:
    try:
        return source.get_expected_return(src, dst, amount)
    except Exception as e:
        raise PriceDiscoveryFailed(f"Quote {src} -> {dst} failed: {e}") from e


def get_making_amount(blob: bytes, taking_amount: int, source: QuoteSource) -> int:
    params = OneInchBlob.decode(blob)
    if taking_amount == 0:
        raise ZeroAmount("Taking amount must be non-zero")
    if params.same_token:
        return apply_spread(taking_amount, params.spread)
    quoted = _quote(source, params.taker_token, params.maker_token, taking_amount)
    logger.debug("Aggregator quote %s -> %s: %d", params.taker_token, params.maker_token, quoted)
    return apply_spread(quoted, params.spread)


def get_taking_amount(blob: bytes, making_amount: int, source: QuoteSource) -> int:
    params = OneInchBlob.decode(blob)
    if making_amount == 0:
        raise ZeroAmount("Making amount must be non-zero")
    if params.same_token:
        return apply_spread(making_amount, params.spread)
    quoted = _quote(source, params.maker_token, params.taker_token, making_amount)
    logger.debug("Aggregator quote %s -> %s: %d", params.maker_token, params.taker_token, quoted)
    return apply_spread(quoted, params.spread)
