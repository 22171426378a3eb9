"""
Vesting gate (pre-interaction check).

Blob: [vestingPeriod:32][totalPeriods:32][startTime:32].

Each elapsed period unlocks ``totalMaking // totalPeriods`` more of the
order. The division remainder is never unlocked: with 1000 tokens over 9
periods at most 999 can ever be filled and the last unit stays locked.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..exceptions import (
    InvalidUnlockAmount,
    InvalidVestingParameters,
    VestingAlreadyCompleted,
    VestingNotStarted,
)
from .blob import expect_length, read_uint, uint_bytes

logger = logging.getLogger(__name__)

BLOB_LENGTH = 3 * 32


@dataclass(frozen=True)
class VestingSchedule:
    vesting_period: int
    total_periods: int
    start_time: int

    def encode(self) -> bytes:
        return uint_bytes(self.vesting_period) + uint_bytes(self.total_periods) + uint_bytes(self.start_time)

    @classmethod
    def decode(cls, blob: bytes) -> "VestingSchedule":
        expect_length(blob, BLOB_LENGTH)
        return cls(
            vesting_period=read_uint(blob, 0),
            total_periods=read_uint(blob, 32),
            start_time=read_uint(blob, 64),
        )

    @property
    def end_time(self) -> int:
        return self.start_time + self.vesting_period * self.total_periods

    def amount_per_period(self, total_making_amount: int) -> int:
        return total_making_amount // self.total_periods

    def elapsed_periods(self, now: int) -> int:
        """Periods unlocked at `now`; the first period unlocks at start_time."""
        if now < self.start_time:
            return 0
        return min(self.total_periods, (now - self.start_time) // self.vesting_period + 1)

    def max_unlockable(self, total_making_amount: int, now: int) -> int:
        return self.elapsed_periods(now) * self.amount_per_period(total_making_amount)


@dataclass(frozen=True)
class VestingUnlock:
    """Informational event, one per period a fill reaches into."""
    taker: str
    amount: int
    period: int
    timestamp: int


@dataclass
class VestingCheck:
    current_period: int
    max_unlockable: int
    unlocks: List[VestingUnlock] = field(default_factory=list)


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def check_unlock(
    order,
    blob: bytes,
    taker: str,
    making_amount: int,
    remaining_making_amount: int,
    now: Optional[int] = None,
) -> VestingCheck:
    """
    Validate a fill of `making_amount` against the vesting schedule.

    Raises:
        InvalidVestingParameters: Period length or count is zero
        VestingAlreadyCompleted: Nothing remains to be filled
        VestingNotStarted: `now` is before the start time
        InvalidUnlockAmount: The fill would exceed the unlocked amount
    """
    schedule = VestingSchedule.decode(blob)
    if schedule.vesting_period == 0 or schedule.total_periods == 0:
        raise InvalidVestingParameters("Vesting period and total periods must be non-zero")
    if now is None:
        now = int(time.time())

    total = order.making_amount
    filled = total - remaining_making_amount
    current_period = schedule.elapsed_periods(now)
    max_unlockable = schedule.max_unlockable(total, now)

    if remaining_making_amount == 0:
        raise VestingAlreadyCompleted(
            "Vesting already completed", current_period, max_unlockable,
        )
    if now < schedule.start_time:
        raise VestingNotStarted(
            f"Vesting starts at {schedule.start_time}", current_period, max_unlockable,
        )
    if filled + making_amount > max_unlockable:
        raise InvalidUnlockAmount(
            f"Fill of {making_amount} exceeds unlocked amount "
            f"({max_unlockable - filled} available in period {current_period})",
            current_period,
            max_unlockable,
        )

    unlocks: List[VestingUnlock] = []
    per_period = schedule.amount_per_period(total)
    if per_period and making_amount:
        first = filled // per_period + 1
        last = _ceil_div(filled + making_amount, per_period)
        for period in range(first, last + 1):
            amount = min(filled + making_amount, period * per_period) - max(filled, (period - 1) * per_period)
            unlocks.append(VestingUnlock(taker=taker, amount=amount, period=period, timestamp=now))
    logger.debug("Vesting fill of %d accepted in period %d", making_amount, current_period)
    return VestingCheck(current_period, max_unlockable, unlocks)
