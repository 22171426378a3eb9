"""
lopext Exceptions

Custom exception classes for extension composition and amount calculation.

Calculation errors expose ``retryable`` so callers can tell a price source
that is temporarily unavailable from a payload that can never be valid.
Gating errors are expected user-facing outcomes and carry the vesting
position needed to self-correct.
"""

from typing import Any, Dict, Optional


class LOPExtError(Exception):
    """Base exception for lopext."""
    pass


class ConfigurationError(LOPExtError):
    """Malformed wrapper definition or missing deployment configuration."""
    pass


class ValidationError(LOPExtError):
    """Caller-supplied parameters failed field or schema checks."""

    def __init__(self, errors: Dict[str, Any], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or f"Invalid extension parameters: {errors}")


class FieldValidationError(ValueError):
    """A single raw value was rejected by its field type."""
    pass


class HookCollisionError(LOPExtError):
    """Two extension wrappers claim the same hook slot."""

    def __init__(self, slot: str, existing: str, incoming: str):
        self.slot = slot
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Hook collision detected: {slot} is already defined by "
            f"'{existing}', cannot add '{incoming}'"
        )


class RpcError(LOPExtError):
    """JSON-RPC transport or node error."""
    pass


# ---------------------------------------------------------------------------
# Calculation errors
# ---------------------------------------------------------------------------

class CalculationError(LOPExtError):
    """Base class for amount-calculator failures."""
    retryable = False


class InvalidBlobLength(CalculationError):
    """Calculator blob does not have the expected byte length."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid blob length: expected {expected} bytes, got {actual}")


class ZeroAmount(CalculationError):
    """Requested amount is zero where a non-zero amount is required."""
    pass


class PriceDiscoveryFailed(CalculationError):
    """External quote source reverted or was unreachable."""
    retryable = True


class StaleOraclePrice(CalculationError):
    """Oracle answer is older than the allowed TTL."""
    retryable = True


class InvalidFeeTier(CalculationError):
    """AMM fee tier is not supported."""

    def __init__(self, fee_tier: int):
        self.fee_tier = fee_tier
        super().__init__(f"Invalid fee tier: {fee_tier}")


class PoolNotFound(CalculationError):
    """No AMM pool exists for the pair and fee tier."""
    pass


class IncorrectRange(CalculationError):
    """Range calculator price bounds are inverted."""
    pass


class DifferentOracleDecimals(CalculationError):
    """Double-feed oracles report different decimals."""
    pass


# ---------------------------------------------------------------------------
# Gating errors
# ---------------------------------------------------------------------------

class GatingError(LOPExtError):
    """Base class for vesting gate rejections."""

    def __init__(self, message: str, current_period: int = 0, max_unlockable: int = 0):
        self.current_period = current_period
        self.max_unlockable = max_unlockable
        super().__init__(message)


class InvalidVestingParameters(GatingError):
    """Vesting period or period count is zero."""
    pass


class VestingNotStarted(GatingError):
    """Fill attempted before the vesting start time."""
    pass


class InvalidUnlockAmount(GatingError):
    """Fill would exceed the amount unlocked so far."""
    pass


class VestingAlreadyCompleted(GatingError):
    """Order has already been completely filled."""
    pass
