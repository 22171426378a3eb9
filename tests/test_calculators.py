"""
Amount calculator and vesting gate tests.

Covers:
  - Spread arithmetic
  - Dutch auction decay
  - Range (fill-linear) pricing
  - Vesting unlock gate
  - Aggregator, AMM and oracle quote calculators
  - Gas station cost model

Run with:
    pytest tests/test_calculators.py -v
"""

import pytest

from lopext.calculators import chainlink, dutch_auction, oneinch, range_amount, uniswap
from lopext.calculators.chainlink import DoubleFeedBlob, SingleFeedBlob
from lopext.calculators.dutch_auction import DutchAuctionBlob
from lopext.calculators.gas_station import GasStationCosts
from lopext.calculators.oneinch import OneInchBlob
from lopext.calculators.range_amount import (
    RangeBlob,
    get_range_maker_amount,
    get_range_taker_amount,
    price_at,
)
from lopext.calculators.spread import (
    Side,
    apply_spread,
    maker_spread,
    spread_adjusted_price,
    taker_spread,
)
from lopext.calculators.uniswap import UniswapBlob, sort_tokens
from lopext.calculators.vesting import VestingSchedule, check_unlock
from lopext.exceptions import (
    CalculationError,
    ConfigurationError,
    DifferentOracleDecimals,
    IncorrectRange,
    InvalidBlobLength,
    InvalidFeeTier,
    InvalidUnlockAmount,
    InvalidVestingParameters,
    PoolNotFound,
    PriceDiscoveryFailed,
    StaleOraclePrice,
    VestingAlreadyCompleted,
    VestingNotStarted,
    ZeroAmount,
)
from lopext.order import Order

E18 = 10**18
TOKEN_A = "0x" + "0a" * 20
TOKEN_B = "0x" + "0b" * 20
ORACLE_1 = "0x" + "e1" * 20
ORACLE_2 = "0x" + "e2" * 20
MAKER = "0x" + "01" * 20
TAKER = "0x" + "99" * 20


def make_order(making_amount, taking_amount=E18):
    return Order(
        salt=0,
        maker=MAKER,
        receiver=MAKER,
        maker_asset=TOKEN_A,
        taker_asset=TOKEN_B,
        making_amount=making_amount,
        taking_amount=taking_amount,
        maker_traits=0,
    )


# ============================================================================
# Spread
# ============================================================================


class TestSpread:

    def test_zero_spread_is_identity(self):
        assert maker_spread(0) == 10**9
        assert taker_spread(0) == 10**9
        assert apply_spread(12345, maker_spread(0)) == 12345

    def test_half_percent(self):
        s = 5_000_000
        assert apply_spread(10**9, maker_spread(s)) == 995_000_000
        assert apply_spread(10**9, taker_spread(s)) == 1_005_000_000

    def test_maker_spread_bounds(self):
        assert maker_spread(10**9) == 0
        with pytest.raises(ValueError):
            maker_spread(10**9 + 1)
        with pytest.raises(ValueError):
            taker_spread(-1)

    def test_adjusted_price_by_side(self):
        assert spread_adjusted_price(1000, 10**8, Side.MAKER) == 900
        assert spread_adjusted_price(1000, 10**8, "taker") == 1100


# ============================================================================
# Dutch auction
# ============================================================================


class TestDutchAuction:

    auction = DutchAuctionBlob(start_time=1000, end_time=2000, start_amount=2 * E18, end_amount=E18)

    def test_boundaries_inclusive(self):
        assert self.auction.amount_at(1000) == 2 * E18
        assert self.auction.amount_at(500) == 2 * E18
        assert self.auction.amount_at(2000) == E18
        assert self.auction.amount_at(5000) == E18

    def test_midpoint(self):
        assert self.auction.amount_at(1500) == 3 * E18 // 2

    def test_monotonically_non_increasing(self):
        amounts = [self.auction.amount_at(t) for t in range(900, 2101, 7)]
        assert all(a >= b for a, b in zip(amounts, amounts[1:]))

    def test_blob_round_trip_and_length(self):
        blob = self.auction.encode()
        assert len(blob) == 128
        assert DutchAuctionBlob.decode(blob) == self.auction
        with pytest.raises(InvalidBlobLength):
            DutchAuctionBlob.decode(blob[:-1])

    def test_amount_getters_round_in_maker_favour(self):
        order = make_order(making_amount=3)
        blob = DutchAuctionBlob(0, 10, 10, 10).encode()
        # floor(3 * 2 / 10) == 0, ceil(1 * 10 / 3) == 4
        assert dutch_auction.get_making_amount(order, blob, 2, now=5) == 0
        assert dutch_auction.get_taking_amount(order, blob, 1, now=5) == 4

    def test_full_fill_at_start(self):
        order = make_order(making_amount=E18)
        blob = self.auction.encode()
        assert dutch_auction.get_taking_amount(order, blob, E18, now=1000) == 2 * E18
        assert dutch_auction.get_making_amount(order, blob, 2 * E18, now=1000) == E18

    def test_zero_auction_amount(self):
        blob = DutchAuctionBlob(0, 10, 0, 0).encode()
        with pytest.raises(ZeroAmount):
            dutch_auction.get_making_amount(make_order(E18), blob, 1, now=5)


# ============================================================================
# Range
# ============================================================================


class TestRange:

    price_start = 1000 * E18
    price_end = 2000 * E18
    total = 10 * E18

    def test_price_endpoints(self):
        assert price_at(self.price_start, self.price_end, 0, self.total) == self.price_start
        assert price_at(self.price_start, self.price_end, self.total, self.total) == self.price_end

    def test_price_monotonic(self):
        prices = [price_at(self.price_start, self.price_end, f, self.total) for f in range(0, self.total + 1, E18)]
        assert prices == sorted(prices)

    def test_full_fill_cost_is_trapezoid(self):
        cost = get_range_taker_amount(self.price_start, self.price_end, self.total, self.total, self.total)
        assert cost == 15_000 * E18

    def test_split_fill_costs_add_up(self):
        half = self.total // 2
        first = get_range_taker_amount(self.price_start, self.price_end, self.total, half, self.total)
        second = get_range_taker_amount(self.price_start, self.price_end, self.total, half, half)
        assert first + second == 15_000 * E18
        assert second > first

    def test_maker_amount_inverts_taker_amount(self):
        taking = get_range_taker_amount(self.price_start, self.price_end, self.total, 4 * E18, self.total)
        making = get_range_maker_amount(self.price_start, self.price_end, self.total, taking, self.total)
        assert abs(making - 4 * E18) <= 1

    def test_flat_range_has_no_maker_amount(self):
        with pytest.raises(ZeroAmount, match="slope") as exc_info:
            get_range_maker_amount(E18, E18, 10, 5 * E18, 10)
        assert not exc_info.value.retryable

    def test_slope_rounding_to_zero(self):
        with pytest.raises(ZeroAmount, match="slope"):
            get_range_maker_amount(E18, E18 + 1, 10 * E18, E18, 10 * E18)

    def test_flat_range_taker_amount(self):
        assert get_range_taker_amount(E18, E18, 10, 5, 10) == 5

    def test_inverted_range(self):
        with pytest.raises(IncorrectRange):
            price_at(2, 1, 0, 10)
        with pytest.raises(IncorrectRange):
            get_range_taker_amount(2, 1, 10, 1, 10)

    def test_zero_total(self):
        with pytest.raises(ZeroAmount):
            price_at(1, 2, 0, 0)

    def test_blob_getters(self):
        order = make_order(making_amount=self.total)
        blob = RangeBlob(self.price_start, self.price_end).encode()
        assert len(blob) == 64
        assert range_amount.get_taking_amount(order, blob, self.total, self.total) == 15_000 * E18


# ============================================================================
# Vesting
# ============================================================================


class TestVesting:
    """1000 tokens over 9 periods of one day starting at T."""

    T = 1_700_000_000
    DAY = 86400
    schedule = VestingSchedule(vesting_period=DAY, total_periods=9, start_time=T)
    order = make_order(making_amount=1000)

    def check(self, amount, remaining=1000, now=None):
        return check_unlock(self.order, self.schedule.encode(), TAKER, amount, remaining, now=now)

    def test_not_started(self):
        with pytest.raises(VestingNotStarted):
            self.check(1, now=self.T - 1)

    def test_first_period_unlocks_at_start(self):
        result = self.check(111, now=self.T)
        assert result.current_period == 1
        assert result.max_unlockable == 111
        assert [(u.period, u.amount) for u in result.unlocks] == [(1, 111)]

    def test_over_unlock_rejected(self):
        with pytest.raises(InvalidUnlockAmount) as exc_info:
            self.check(112, now=self.T)
        assert exc_info.value.current_period == 1
        assert exc_info.value.max_unlockable == 111

    def test_remainder_never_unlocks(self):
        now = self.T + 100 * self.DAY
        assert self.check(999, now=now).max_unlockable == 999
        with pytest.raises(InvalidUnlockAmount):
            self.check(1000, now=now)

    def test_accounts_for_previous_fills(self):
        now = self.T + self.DAY
        assert self.check(111, remaining=889, now=now).max_unlockable == 222
        with pytest.raises(InvalidUnlockAmount):
            self.check(112, remaining=889, now=now)

    def test_fill_spanning_periods_emits_one_event_per_period(self):
        result = self.check(300, remaining=950, now=self.T + 5 * self.DAY)
        assert [(u.period, u.amount) for u in result.unlocks] == [(1, 61), (2, 111), (3, 111), (4, 17)]
        assert sum(u.amount for u in result.unlocks) == 300
        assert all(u.taker == TAKER for u in result.unlocks)

    def test_completed(self):
        with pytest.raises(VestingAlreadyCompleted):
            self.check(1, remaining=0, now=self.T)

    def test_invalid_parameters(self):
        blob = VestingSchedule(0, 9, self.T).encode()
        with pytest.raises(InvalidVestingParameters):
            check_unlock(self.order, blob, TAKER, 1, 1000, now=self.T)

    def test_schedule_helpers(self):
        assert self.schedule.end_time == self.T + 9 * self.DAY
        assert self.schedule.elapsed_periods(self.T + 8 * self.DAY) == 9
        assert self.schedule.elapsed_periods(self.T - 1) == 0
        assert VestingSchedule.decode(self.schedule.encode()) == self.schedule


# ============================================================================
# Aggregator quotes
# ============================================================================


class FailingQuoteSource:

    def get_expected_return(self, src_token, dst_token, amount):
        raise RuntimeError("router reverted")


class FixedRateQuoteSource:

    def __init__(self, rate):
        self.rate = rate

    def get_expected_return(self, src_token, dst_token, amount):
        return amount * self.rate


class TestOneInch:

    @pytest.mark.parametrize("getter", [oneinch.get_making_amount, oneinch.get_taking_amount])
    def test_same_token_never_queries_source(self, getter):
        blob = OneInchBlob(TOKEN_A, TOKEN_A, maker_spread(0)).encode()
        assert getter(blob, 500, FailingQuoteSource()) == 500

    def test_quote_with_spread(self):
        blob = OneInchBlob(TOKEN_A, TOKEN_B, taker_spread(10**8)).encode()
        assert oneinch.get_taking_amount(blob, 100, FixedRateQuoteSource(2)) == 220

    def test_source_failure_is_retryable(self):
        blob = OneInchBlob(TOKEN_A, TOKEN_B, maker_spread(0)).encode()
        with pytest.raises(PriceDiscoveryFailed) as exc_info:
            oneinch.get_making_amount(blob, 100, FailingQuoteSource())
        assert exc_info.value.retryable is True

    def test_zero_amount(self):
        blob = OneInchBlob(TOKEN_A, TOKEN_B, maker_spread(0)).encode()
        with pytest.raises(ZeroAmount):
            oneinch.get_making_amount(blob, 0, FixedRateQuoteSource(1))

    def test_blob_length(self):
        blob = OneInchBlob(TOKEN_A, TOKEN_B, 10**9).encode()
        assert len(blob) == 73
        assert OneInchBlob.decode(blob).taker_token == TOKEN_B
        with pytest.raises(InvalidBlobLength):
            oneinch.get_making_amount(blob + b"\x00", 1, FixedRateQuoteSource(1))


# ============================================================================
# AMM pools
# ============================================================================


class FakePoolSource:

    def __init__(self, pools=None, sqrt_prices=None):
        self.pools = pools or {}
        self.sqrt_prices = sqrt_prices or {}

    def get_pool(self, token0, token1, fee_tier):
        return self.pools.get((token0, token1, fee_tier))

    def sqrt_price_x96(self, pool):
        return self.sqrt_prices.get(pool, 0)


POOL = "0x" + "50" * 20


class TestUniswap:

    def test_sort_tokens(self):
        assert sort_tokens(TOKEN_B, TOKEN_A) == (TOKEN_A, TOKEN_B)

    def test_invalid_fee_tier(self):
        blob = UniswapBlob(spread=10**9, fee_tier=100).encode()
        with pytest.raises(InvalidFeeTier):
            uniswap.get_taking_amount(TOKEN_A, TOKEN_B, blob, 1, FakePoolSource())

    def test_missing_pool(self):
        blob = UniswapBlob(spread=10**9).encode()
        with pytest.raises(PoolNotFound):
            uniswap.get_taking_amount(TOKEN_A, TOKEN_B, blob, 1, FakePoolSource())

    def test_zero_address_pool(self):
        source = FakePoolSource(pools={(TOKEN_A, TOKEN_B, 3000): "0x" + "00" * 20})
        with pytest.raises(PoolNotFound):
            uniswap.get_taking_amount(TOKEN_A, TOKEN_B, UniswapBlob(spread=10**9).encode(), 1, source)

    def test_uninitialized_pool(self):
        source = FakePoolSource(pools={(TOKEN_A, TOKEN_B, 3000): POOL})
        with pytest.raises(PoolNotFound, match="not initialized"):
            uniswap.get_taking_amount(TOKEN_A, TOKEN_B, UniswapBlob(spread=10**9).encode(), 1, source)

    def test_quote_both_directions(self):
        # sqrtP = 2 * 2**96 -> 4 token1 per token0
        source = FakePoolSource(
            pools={(TOKEN_A, TOKEN_B, 500): POOL},
            sqrt_prices={POOL: 2 * 2**96},
        )
        blob = UniswapBlob(spread=10**9, fee_tier=500).encode()
        assert uniswap.get_taking_amount(TOKEN_A, TOKEN_B, blob, 10, source) == 40
        assert uniswap.get_making_amount(TOKEN_A, TOKEN_B, blob, 40, source) == 10

    def test_same_token_short_circuit(self):
        blob = UniswapBlob(spread=taker_spread(10**8)).encode()
        assert uniswap.get_taking_amount(TOKEN_A, TOKEN_A, blob, 100, FakePoolSource()) == 110

    def test_blob_length(self):
        blob = UniswapBlob(spread=1, fee_tier=10000).encode()
        assert len(blob) == 35
        assert UniswapBlob.decode(blob) == UniswapBlob(spread=1, fee_tier=10000)


# ============================================================================
# Oracle feeds
# ============================================================================


class FakePriceFeed:

    def __init__(self, answers, decimals=None, updated_at=1_000_000):
        self.answers = answers
        self._decimals = decimals or {}
        self.updated_at = updated_at

    def latest_round_data(self, oracle):
        return self.answers[oracle], self.updated_at

    def decimals(self, oracle):
        return self._decimals.get(oracle, 8)


NOW = 1_000_000


class TestChainlink:

    def test_single_feed(self):
        feed = FakePriceFeed({ORACLE_1: 2000 * 10**8})
        blob = SingleFeedBlob(ORACLE_1, spread=10**9).encode()
        assert len(blob) == 53
        assert chainlink.get_taking_amount(blob, E18, feed, now=NOW) == 2000 * E18

    def test_single_feed_inverse(self):
        feed = FakePriceFeed({ORACLE_1: 2000 * 10**8})
        blob = SingleFeedBlob(ORACLE_1, spread=10**9, inverse=True).encode()
        assert chainlink.get_making_amount(blob, 2000 * E18, feed, now=NOW) == E18

    def test_spread_applied(self):
        feed = FakePriceFeed({ORACLE_1: 10**8})
        blob = SingleFeedBlob(ORACLE_1, spread=taker_spread(10**7)).encode()
        assert chainlink.get_taking_amount(blob, 1000, feed, now=NOW) == 1010

    def test_double_feed_scales(self):
        feed = FakePriceFeed({ORACLE_1: 3000 * 10**8, ORACLE_2: 10**8})
        blob = DoubleFeedBlob(ORACLE_1, ORACLE_2, decimals_scale=-12, spread=10**9).encode()
        assert len(blob) == 105
        # 1 token (18 decimals) at 3000 -> 3000 units of a 6-decimals token
        assert chainlink.get_taking_amount(blob, E18, feed, now=NOW) == 3000 * 10**6
        positive = DoubleFeedBlob(ORACLE_2, ORACLE_1, decimals_scale=12, spread=10**9).encode()
        assert chainlink.get_making_amount(positive, 3000 * 10**6, feed, now=NOW) == E18

    def test_decode_round_trip(self):
        blob = DoubleFeedBlob(ORACLE_1, ORACLE_2, decimals_scale=-5, spread=7).encode()
        assert chainlink.decode_blob(blob) == DoubleFeedBlob(ORACLE_1, ORACLE_2, -5, 7)

    def test_stale_answer(self):
        feed = FakePriceFeed({ORACLE_1: 10**8}, updated_at=NOW - 4 * 3600 - 1)
        blob = SingleFeedBlob(ORACLE_1, spread=10**9).encode()
        with pytest.raises(StaleOraclePrice):
            chainlink.get_taking_amount(blob, 1, feed, now=NOW)

    def test_answer_at_ttl_is_fresh(self):
        feed = FakePriceFeed({ORACLE_1: 10**8}, updated_at=NOW - 4 * 3600)
        blob = SingleFeedBlob(ORACLE_1, spread=10**9).encode()
        assert chainlink.get_taking_amount(blob, 5, feed, now=NOW) == 5

    def test_non_positive_answer(self):
        feed = FakePriceFeed({ORACLE_1: 0})
        blob = SingleFeedBlob(ORACLE_1, spread=10**9).encode()
        with pytest.raises(PriceDiscoveryFailed):
            chainlink.get_taking_amount(blob, 1, feed, now=NOW)

    def test_mismatched_decimals(self):
        feed = FakePriceFeed({ORACLE_1: 1, ORACLE_2: 1}, decimals={ORACLE_1: 8, ORACLE_2: 18})
        blob = DoubleFeedBlob(ORACLE_1, ORACLE_2, 0, 10**9).encode()
        with pytest.raises(DifferentOracleDecimals, match="decimals differ") as exc_info:
            chainlink.get_taking_amount(blob, 1, feed, now=NOW)
        assert isinstance(exc_info.value, CalculationError)
        assert not exc_info.value.retryable

    def test_wrong_length(self):
        with pytest.raises(InvalidBlobLength):
            chainlink.get_taking_amount(b"\x00" * 10, 1, FakePriceFeed({}), now=NOW)


# ============================================================================
# Gas station
# ============================================================================


class TestGasStation:

    def test_costs_for_100_ether_at_100_bps(self):
        costs = GasStationCosts(taker_fee_bps=100, gas_stipend=150_000)
        breakdown = costs.calculate(flash_loan_amount=100 * E18, gas_price=20 * 10**9)
        assert breakdown.flash_loan_fee == 5 * 10**16
        assert breakdown.taker_fee == E18
        assert breakdown.gas_reimbursement == 150_000 * 20 * 10**9
        assert breakdown.total == 5 * 10**16 + E18 + 3 * 10**15

    def test_fee_too_high(self):
        with pytest.raises(ConfigurationError, match="fee too high"):
            GasStationCosts(taker_fee_bps=10001, gas_stipend=1)

    def test_invalid_stipend(self):
        with pytest.raises(ConfigurationError, match="invalid gas stipend"):
            GasStationCosts(taker_fee_bps=0, gas_stipend=0)
