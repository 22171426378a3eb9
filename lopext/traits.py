"""
Maker traits codec

Packs and unpacks the order-level 256-bit bitfield:

  bits 0-79     allowed sender (low 80 bits of the address, 0 = anyone)
  bits 80-119   expiration timestamp (0 = never)
  bits 120-159  nonce or epoch
  bits 160-199  series
  bit  247      unwrap WETH to native on fill
  bit  248      use Permit2
  bit  249      order has an extension
  bit  250      check epoch manager
  bit  251      post-interaction call
  bit  252      pre-interaction call
  bit  254      allow multiple fills
  bit  255      NO partial fills (partial fills are allowed when clear)

Subfields wider than their bit range are silently truncated to the range,
matching the protocol's own masking. Callers range-check before packing.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

from .constants import (
    ALLOW_MULTIPLE_FILLS_FLAG,
    ALLOWED_SENDER_BITS,
    ALLOWED_SENDER_OFFSET,
    EXPIRATION_BITS,
    EXPIRATION_OFFSET,
    HAS_EXTENSION_FLAG,
    NEED_CHECK_EPOCH_MANAGER_FLAG,
    NO_PARTIAL_FILLS_FLAG,
    NONCE_OR_EPOCH_BITS,
    NONCE_OR_EPOCH_OFFSET,
    POST_INTERACTION_CALL_FLAG,
    PRE_INTERACTION_CALL_FLAG,
    SERIES_BITS,
    SERIES_OFFSET,
    UINT256_MAX,
    UNWRAP_WETH_FLAG,
    USE_PERMIT2_FLAG,
)
from .crypto.address import address_to_int


def _get_bit(value: int, bit: int) -> bool:
    return (value >> bit) & 1 == 1


def _get_mask(value: int, offset: int, width: int) -> int:
    return (value >> offset) & ((1 << width) - 1)


def _set_mask(value: int, offset: int, width: int) -> int:
    if value < 0:
        raise ValueError("Maker traits subfields must be non-negative")
    return (value & ((1 << width) - 1)) << offset


@dataclass(frozen=True)
class MakerTraitFlags:
    """Boolean maker-traits flags. The defaults correspond to a zero bitfield."""
    allow_partial_fills: bool = True
    allow_multiple_fills: bool = False
    has_pre_interaction: bool = False
    has_post_interaction: bool = False
    need_epoch_check: bool = False
    has_extension: bool = False
    use_permit2: bool = False
    unwrap_weth: bool = False


@dataclass(frozen=True)
class MakerTraitSubfields:
    """
    Integer subfields. Zero is the protocol's "unset" sentinel for the
    allowed sender, the expiration and the nonce/epoch, so those are
    normalized to None. Series 0 is a real series and stays an int.
    """
    allowed_sender: Optional[int] = None
    expiration: Optional[int] = None
    nonce_or_epoch: Optional[int] = None
    series: int = 0

    def __post_init__(self) -> None:
        for name in ("allowed_sender", "expiration", "nonce_or_epoch"):
            if getattr(self, name) == 0:
                object.__setattr__(self, name, None)


_FLAG_BITS = {
    "allow_multiple_fills": ALLOW_MULTIPLE_FILLS_FLAG,
    "has_pre_interaction": PRE_INTERACTION_CALL_FLAG,
    "has_post_interaction": POST_INTERACTION_CALL_FLAG,
    "need_epoch_check": NEED_CHECK_EPOCH_MANAGER_FLAG,
    "has_extension": HAS_EXTENSION_FLAG,
    "use_permit2": USE_PERMIT2_FLAG,
    "unwrap_weth": UNWRAP_WETH_FLAG,
}


def pack(flags: MakerTraitFlags, subfields: MakerTraitSubfields) -> int:
    """Pack flags and subfields into the 256-bit maker-traits integer."""
    value = 0
    if not flags.allow_partial_fills:
        value |= 1 << NO_PARTIAL_FILLS_FLAG
    for name, bit in _FLAG_BITS.items():
        if getattr(flags, name):
            value |= 1 << bit
    value |= _set_mask(subfields.allowed_sender or 0, ALLOWED_SENDER_OFFSET, ALLOWED_SENDER_BITS)
    value |= _set_mask(subfields.expiration or 0, EXPIRATION_OFFSET, EXPIRATION_BITS)
    value |= _set_mask(subfields.nonce_or_epoch or 0, NONCE_OR_EPOCH_OFFSET, NONCE_OR_EPOCH_BITS)
    value |= _set_mask(subfields.series, SERIES_OFFSET, SERIES_BITS)
    return value


def unpack(value: int) -> Tuple[MakerTraitFlags, MakerTraitSubfields]:
    """Exact inverse of `pack`. Every flag is read independently."""
    if value < 0 or value > UINT256_MAX:
        raise ValueError("Maker traits must fit in uint256")
    flags = MakerTraitFlags(
        allow_partial_fills=not _get_bit(value, NO_PARTIAL_FILLS_FLAG),
        **{name: _get_bit(value, bit) for name, bit in _FLAG_BITS.items()},
    )
    subfields = MakerTraitSubfields(
        allowed_sender=_get_mask(value, ALLOWED_SENDER_OFFSET, ALLOWED_SENDER_BITS),
        expiration=_get_mask(value, EXPIRATION_OFFSET, EXPIRATION_BITS),
        nonce_or_epoch=_get_mask(value, NONCE_OR_EPOCH_OFFSET, NONCE_OR_EPOCH_BITS),
        series=_get_mask(value, SERIES_OFFSET, SERIES_BITS),
    )
    return flags, subfields


def parse_maker_traits(order: Any) -> Dict[str, Any]:
    """
    Flatten an order's maker traits into a plain dict (flags + subfields).

    Accepts an Order or the raw maker-traits integer. The allowed sender is
    rendered as the 20 hex digits stored on chain.
    """
    value = getattr(order, "maker_traits", order)
    flags, subfields = unpack(int(value))
    parsed = {f.name: getattr(flags, f.name) for f in fields(flags)}
    parsed.update({f.name: getattr(subfields, f.name) for f in fields(subfields)})
    if subfields.allowed_sender is not None:
        parsed["allowed_sender"] = format(subfields.allowed_sender, "020x")
    return parsed


@dataclass(frozen=True)
class MakerTraits:
    """
    Immutable maker-traits value. Every `with_*` method returns a new
    instance; the packed integer is never mutated in place.
    """
    flags: MakerTraitFlags = MakerTraitFlags()
    subfields: MakerTraitSubfields = MakerTraitSubfields()

    @classmethod
    def default(cls) -> "MakerTraits":
        return cls()

    @classmethod
    def from_int(cls, value: int) -> "MakerTraits":
        flags, subfields = unpack(value)
        return cls(flags, subfields)

    def as_int(self) -> int:
        return pack(self.flags, self.subfields)

    def __int__(self) -> int:
        return self.as_int()

    def with_flags(self, **changes: bool) -> "MakerTraits":
        return replace(self, flags=replace(self.flags, **changes))

    def with_subfields(self, **changes: Optional[int]) -> "MakerTraits":
        return replace(self, subfields=replace(self.subfields, **changes))

    def with_expiration(self, expiration: Optional[int]) -> "MakerTraits":
        return self.with_subfields(expiration=expiration)

    def with_nonce(self, nonce: Optional[int]) -> "MakerTraits":
        return self.with_subfields(nonce_or_epoch=nonce)

    def with_epoch(self, series: int, epoch: int) -> "MakerTraits":
        """Bind the order to an epoch-manager series; enables the epoch check."""
        return self.with_subfields(series=series, nonce_or_epoch=epoch).with_flags(
            need_epoch_check=True
        )

    def with_allowed_sender(self, sender: Optional[str]) -> "MakerTraits":
        """Restrict takers to `sender` (only its low 80 bits are stored)."""
        if sender is None:
            return self.with_subfields(allowed_sender=None)
        return self.with_subfields(
            allowed_sender=address_to_int(sender) & ((1 << ALLOWED_SENDER_BITS) - 1)
        )

    def with_extension_slots(self, has_extension: bool, has_pre: bool, has_post: bool) -> "MakerTraits":
        return self.with_flags(
            has_extension=has_extension,
            has_pre_interaction=has_pre,
            has_post_interaction=has_post,
        )

    def is_expired(self, now: int) -> bool:
        return self.subfields.expiration is not None and self.subfields.expiration <= now
