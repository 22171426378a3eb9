"""
lopext Extension Codec

The settlement engine reads an order's extension as:

  [offsets: 32 bytes][field 0]...[field 7][custom data]

The offsets word holds eight cumulative 32-bit end offsets, field 0 in the
lowest 4 bytes. Fields, in order: maker asset suffix, taker asset suffix,
making amount data, taking amount data, predicate, maker permit,
pre-interaction, post-interaction. An extension with no data at all encodes
to the empty byte string.

Each hook slot payload is ``target (20 bytes) || blob``.
"""

from dataclasses import dataclass, fields, replace
from typing import Dict, Tuple

from .constants import ADDRESS_LENGTH, UINT160_MASK, WORD_SIZE
from .crypto.address import bytes_to_address
from .crypto.hashing import keccak256
from .hooks import HookSlot

OFFSET_BITS = 32
MAX_OFFSET = 2**OFFSET_BITS - 1

SLOT_FIELDS: Dict[HookSlot, str] = {
    HookSlot.MAKER_AMOUNT: "making_amount_data",
    HookSlot.TAKER_AMOUNT: "taking_amount_data",
    HookSlot.PRE_INTERACTION: "pre_interaction",
    HookSlot.POST_INTERACTION: "post_interaction",
}


@dataclass(frozen=True)
class Extension:
    maker_asset_suffix: bytes = b""
    taker_asset_suffix: bytes = b""
    making_amount_data: bytes = b""
    taking_amount_data: bytes = b""
    predicate: bytes = b""
    maker_permit: bytes = b""
    pre_interaction: bytes = b""
    post_interaction: bytes = b""
    custom_data: bytes = b""

    def _offset_fields(self) -> Tuple[bytes, ...]:
        return tuple(getattr(self, f.name) for f in fields(self) if f.name != "custom_data")

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def slot_data(self, slot: HookSlot) -> bytes:
        return getattr(self, SLOT_FIELDS[HookSlot(slot)])

    def with_slot(self, slot: HookSlot, data: bytes) -> "Extension":
        return replace(self, **{SLOT_FIELDS[HookSlot(slot)]: bytes(data)})

    def encode(self) -> bytes:
        """Serialize to the settlement engine's wire format."""
        if self.is_empty():
            return b""
        offsets = 0
        end = 0
        for index, data in enumerate(self._offset_fields()):
            end += len(data)
            if end > MAX_OFFSET:
                raise ValueError("Extension is too large for 32-bit offsets")
            offsets |= end << (OFFSET_BITS * index)
        return (
            offsets.to_bytes(WORD_SIZE, "big")
            + b"".join(self._offset_fields())
            + self.custom_data
        )

    @classmethod
    def decode(cls, data: bytes) -> "Extension":
        """
        Parse wire bytes produced by `encode`.

        Raises:
            ValueError: If the offsets word is missing or points past the data
        """
        data = bytes(data)
        if not data:
            return cls()
        if len(data) < WORD_SIZE:
            raise ValueError(f"Extension shorter than the {WORD_SIZE}-byte offsets word")
        offsets = int.from_bytes(data[:WORD_SIZE], "big")
        body = data[WORD_SIZE:]
        names = [f.name for f in fields(cls) if f.name != "custom_data"]
        values = {}
        start = 0
        for index, name in enumerate(names):
            end = (offsets >> (OFFSET_BITS * index)) & MAX_OFFSET
            if end < start or end > len(body):
                raise ValueError(f"Invalid extension offset for {name}: {end}")
            values[name] = body[start:end]
            start = end
        return cls(custom_data=body[start:], **values)

    def hash(self) -> bytes:
        return keccak256(self.encode())

    def salt_bits(self) -> int:
        """Low 160 bits of keccak256(encoded extension), or 0 when empty."""
        if self.is_empty():
            return 0
        return int.from_bytes(self.hash(), "big") & UINT160_MASK

    def to_dict(self) -> Dict[str, str]:
        return {f.name: "0x" + getattr(self, f.name).hex() for f in fields(self)}


def split_target(data: bytes) -> Tuple[str, bytes]:
    """
    Split a hook slot payload into its target address and module blob.

    Raises:
        ValueError: If the payload is shorter than an address
    """
    if len(data) < ADDRESS_LENGTH:
        raise ValueError(f"Slot payload must start with a {ADDRESS_LENGTH}-byte target")
    return bytes_to_address(data[:ADDRESS_LENGTH]), bytes(data[ADDRESS_LENGTH:])
