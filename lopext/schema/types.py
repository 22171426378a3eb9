"""
lopext Field Types

Reusable scalar validators and parsers for hook schemas.

Every type exposes a synchronous, side-effect free ``validate(value)`` that
raises FieldValidationError, and a ``parse(value, context=None)`` returning
the typed value. Token amounts are the only asynchronous parsers: they read
the asset's decimals through the build context, so they live behind
AsyncFieldType and are only ever awaited after validation has passed.
"""

import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional, Union

from ..constants import (
    INT256_MAX,
    INT256_MIN,
    MAX_TIMESTAMP_HORIZON,
    MAX_VESTING_PERIOD,
    MAX_VESTING_PERIODS,
    MIN_VESTING_PERIOD,
    SPREAD_DECIMALS,
    UINT256_MAX,
)
from ..crypto.address import is_valid_address
from ..exceptions import ConfigurationError, FieldValidationError

Number = Union[int, str, Decimal, float]


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def to_decimal(value: Any) -> Decimal:
    """
    Convert a raw number (int, float, Decimal or numeric string) to Decimal.

    Raises:
        FieldValidationError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise FieldValidationError("Value must be a number")
    if isinstance(value, float):
        value = repr(value)
    try:
        result = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise FieldValidationError("Value must be a number") from None
    if not result.is_finite():
        raise FieldValidationError("Value must be a finite number")
    return result


def to_integer(value: Any) -> int:
    """
    Convert a raw value to int the way a BigInt constructor would:
    ints, integral Decimals and decimal or 0x-prefixed hex strings.
    """
    if isinstance(value, bool) or value is None:
        raise FieldValidationError("Value must be convertible to an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith(("0x", "-0x")):
                return int(text, 16)
            return int(text, 10)
        except ValueError:
            raise FieldValidationError("Value must be convertible to an integer") from None
    number = to_decimal(value)
    if number != number.to_integral_value():
        raise FieldValidationError("Value must be an integer")
    return int(number)


def parse_units(value: Number, decimals: int) -> int:
    """
    Scale a human-readable number to base units.

    ``parse_units("0.5", 7) == 5_000_000``. More fractional digits than
    ``decimals`` is an error rather than a silent rounding.
    """
    sign, digits, exponent = to_decimal(value).as_tuple()
    coefficient = int("".join(str(d) for d in digits)) if digits else 0
    shift = exponent + decimals
    if shift >= 0:
        scaled = coefficient * 10**shift
    else:
        scaled, remainder = divmod(coefficient, 10**-shift)
        if remainder:
            raise FieldValidationError(f"Too many decimal places for {decimals} decimals")
    return -scaled if sign else scaled


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------

class FieldType:
    """Synchronous field type."""

    name = "field"

    def validate(self, value: Any) -> None:
        raise NotImplementedError

    def parse(self, value: Any, context: Any = None) -> Any:
        return value

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class AsyncFieldType(FieldType):
    """Field type whose parser needs an awaited collaborator call."""

    async def parse(self, value: Any, context: Any = None) -> Any:  # type: ignore[override]
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Scalar types
# ---------------------------------------------------------------------------

class AddressType(FieldType):
    name = "address"

    def validate(self, value: Any) -> None:
        if not isinstance(value, str):
            raise FieldValidationError("Address must be a string")
        if not is_valid_address(value):
            raise FieldValidationError("Invalid Ethereum address format")

    def parse(self, value: str, context: Any = None) -> str:
        return value.lower()


class Uint256Type(FieldType):
    name = "uint256"

    def validate(self, value: Any) -> None:
        if value is None:
            raise FieldValidationError("Value cannot be None")
        number = to_integer(value)
        if number < 0:
            raise FieldValidationError("Value must be non-negative")
        if number > UINT256_MAX:
            raise FieldValidationError("Value exceeds uint256 maximum")

    def parse(self, value: Any, context: Any = None) -> str:
        return str(to_integer(value))


class Int256Type(FieldType):
    name = "int256"

    def validate(self, value: Any) -> None:
        if value is None:
            raise FieldValidationError("Value cannot be None")
        number = to_integer(value)
        if number < INT256_MIN or number > INT256_MAX:
            raise FieldValidationError("Value is out of int256 range")

    def parse(self, value: Any, context: Any = None) -> int:
        return to_integer(value)


class BooleanType(FieldType):
    name = "boolean"

    def validate(self, value: Any) -> None:
        if not isinstance(value, bool) and value not in ("true", "false"):
            raise FieldValidationError('Value must be a boolean or "true"/"false" string')

    def parse(self, value: Any, context: Any = None) -> bool:
        if isinstance(value, bool):
            return value
        return value == "true"


class TimestampType(FieldType):
    """Unix timestamp, at most ~100 years in the future."""

    name = "timestamp"

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def validate(self, value: Any) -> None:
        if value is None:
            raise FieldValidationError("Timestamp cannot be None")
        number = to_decimal(value)
        if number != number.to_integral_value():
            raise FieldValidationError("Timestamp must be an integer")
        if number < 0:
            raise FieldValidationError("Timestamp must be non-negative")
        if number > int(self._clock()) + MAX_TIMESTAMP_HORIZON:
            raise FieldValidationError("Timestamp is too far in the future")

    def parse(self, value: Any, context: Any = None) -> int:
        return int(to_decimal(value))


class PercentageType(FieldType):
    """
    Percentage scaled to a 1e7 fixed-point integer ("0.5" -> 5_000_000),
    i.e. parts per 1e9 once combined with the spread denominator.
    """

    name = "percentage"

    def __init__(self, min_value: Number = 0, max_value: Number = 100, label: str = "Spread"):
        self.min_value = to_decimal(min_value)
        self.max_value = to_decimal(max_value)
        self.label = label

    def validate(self, value: Any) -> None:
        try:
            number = to_decimal(value)
        except FieldValidationError:
            raise FieldValidationError(f"{self.label} must be a number") from None
        if number < 0:
            raise FieldValidationError(f"{self.label} must be positive")
        if number < self.min_value:
            raise FieldValidationError(f"{self.label} must be at least {self.min_value}%")
        if number > self.max_value:
            raise FieldValidationError(f"{self.label} must be less than or equal to {self.max_value}")
        parse_units(number, SPREAD_DECIMALS)

    def parse(self, value: Any, context: Any = None) -> int:
        return parse_units(value, SPREAD_DECIMALS)


class ChoiceType(FieldType):
    name = "choice"

    def __init__(self, choices: Iterable[Any]):
        self.choices = tuple(choices)
        if not self.choices:
            raise ConfigurationError("ChoiceType needs at least one choice")

    def validate(self, value: Any) -> None:
        if value not in self.choices:
            allowed = ", ".join(repr(c) for c in self.choices)
            raise FieldValidationError(f"Value must be one of: {allowed}")


# ---------------------------------------------------------------------------
# Token amounts (async)
# ---------------------------------------------------------------------------

class TokenAmountType(AsyncFieldType):
    """
    Positive human-readable amount of the maker or taker asset, scaled to
    base units with the asset's decimals.

    The context must provide ``async asset_decimals(side)``.
    """

    def __init__(self, side: str):
        if side not in ("maker", "taker"):
            raise ConfigurationError(f"Unknown asset side: {side!r}")
        self.side = side
        self.name = f"{side}_token_amount"

    def validate(self, value: Any) -> None:
        try:
            number = to_decimal(value)
        except FieldValidationError:
            raise FieldValidationError("Token amount must be a number") from None
        if number <= 0:
            raise FieldValidationError("Token amount must be positive")

    async def parse(self, value: Any, context: Any = None) -> int:
        if context is None:
            raise ConfigurationError(f"{self.name} needs a build context to resolve decimals")
        decimals = await context.asset_decimals(self.side)
        return parse_units(value, decimals)


# ---------------------------------------------------------------------------
# Vesting schedule types
# ---------------------------------------------------------------------------

class VestingPeriodType(FieldType):
    """Duration between unlocks, 1 hour to 10 years."""

    name = "vesting_period"

    def validate(self, value: Any) -> None:
        try:
            number = to_decimal(value)
        except FieldValidationError:
            raise FieldValidationError("Vesting period must be a number") from None
        if number != number.to_integral_value():
            raise FieldValidationError("Vesting period must be a whole number of seconds")
        if number <= 0:
            raise FieldValidationError("Vesting period must be positive")
        if number < MIN_VESTING_PERIOD:
            raise FieldValidationError(
                f"Vesting period must be at least 1 hour ({MIN_VESTING_PERIOD} seconds)"
            )
        if number > MAX_VESTING_PERIOD:
            raise FieldValidationError("Vesting period cannot exceed 10 years")

    def parse(self, value: Any, context: Any = None) -> int:
        return int(to_decimal(value))


class TotalPeriodsType(FieldType):
    name = "total_periods"

    def validate(self, value: Any) -> None:
        try:
            number = to_decimal(value)
        except FieldValidationError:
            raise FieldValidationError("Total periods must be a number") from None
        if number != number.to_integral_value():
            raise FieldValidationError("Total periods must be an integer")
        if number <= 0:
            raise FieldValidationError("Total periods must be positive")
        if number > MAX_VESTING_PERIODS:
            raise FieldValidationError(f"Total periods cannot exceed {MAX_VESTING_PERIODS}")

    def parse(self, value: Any, context: Any = None) -> int:
        return int(to_decimal(value))


# Shared instances
address = AddressType()
uint256 = Uint256Type()
int256 = Int256Type()
boolean = BooleanType()
timestamp = TimestampType()
spread = PercentageType()
maker_token_amount = TokenAmountType("maker")
taker_token_amount = TokenAmountType("taker")
vesting_period = VestingPeriodType()
total_periods = TotalPeriodsType()
