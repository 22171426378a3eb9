"""
lopext Amount Calculators

Pure integer reproductions of the on-chain amount getters and gates:
- Spread arithmetic shared by the quote-based calculators
- Aggregator quote, AMM pool and oracle feed pricing
- Dutch auction (time decay) and range (fill-linear) pricing
- Vesting unlock gate
- Gas station cost model
"""

from . import chainlink, dutch_auction, oneinch, range_amount, uniswap, vesting
from .spread import Side, apply_spread, maker_spread, taker_spread, spread_adjusted_price
from .oneinch import OneInchBlob, QuoteSource
from .uniswap import UniswapBlob, PoolSource, SUPPORTED_FEE_TIERS, is_valid_fee_tier
from .chainlink import SingleFeedBlob, DoubleFeedBlob, PriceFeed
from .dutch_auction import DutchAuctionBlob
from .range_amount import RangeBlob, price_at, get_range_maker_amount, get_range_taker_amount
from .vesting import VestingSchedule, VestingUnlock, VestingCheck, check_unlock
from .gas_station import GasStationCosts, GasCostBreakdown

__all__ = [
    # Calculator modules
    "chainlink",
    "dutch_auction",
    "oneinch",
    "range_amount",
    "uniswap",
    "vesting",
    # Spread
    "Side",
    "apply_spread",
    "maker_spread",
    "taker_spread",
    "spread_adjusted_price",
    # Blob layouts and market sources
    "OneInchBlob",
    "QuoteSource",
    "UniswapBlob",
    "PoolSource",
    "SUPPORTED_FEE_TIERS",
    "is_valid_fee_tier",
    "SingleFeedBlob",
    "DoubleFeedBlob",
    "PriceFeed",
    "DutchAuctionBlob",
    "RangeBlob",
    "price_at",
    "get_range_maker_amount",
    "get_range_taker_amount",
    # Vesting
    "VestingSchedule",
    "VestingUnlock",
    "VestingCheck",
    "check_unlock",
    # Gas station
    "GasStationCosts",
    "GasCostBreakdown",
]
