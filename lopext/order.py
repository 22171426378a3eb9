"""
lopext Order

The settlement engine's order struct, salt derivation and EIP-712 hashing.

When the order carries an extension, the low 160 bits of the salt must equal
the low 160 bits of keccak256(extension); the engine rejects the order
otherwise. The upper 96 bits are free and default to random.
"""

import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional

from eth_abi import encode

from .constants import (
    LIMIT_ORDER_PROTOCOL_ADDRESS,
    LOP_DOMAIN_NAME,
    LOP_DOMAIN_VERSION,
    ORDER_TYPE_STRING,
    UINT160_MASK,
)
from .crypto.address import normalize_address
from .crypto.hashing import keccak256
from .crypto.signing import domain_separator, typed_data_hash
from .extension import Extension
from .traits import MakerTraits

ORDER_TYPE_HASH = keccak256(ORDER_TYPE_STRING.encode())

SALT_RANDOM_BITS = 96


def build_salt(extension: Optional[Extension] = None, base: Optional[int] = None) -> int:
    """
    Derive an order salt.

    Args:
        extension: The order's extension; its hash fills the low 160 bits
        base: Upper 96 bits; random when omitted
    """
    if base is None:
        base = secrets.randbits(SALT_RANDOM_BITS)
    if base < 0 or base >= 2**SALT_RANDOM_BITS:
        raise ValueError("Salt base must fit in 96 bits")
    salt = base << 160
    if extension is not None:
        salt |= extension.salt_bits()
    return salt


@dataclass(frozen=True)
class Order:
    salt: int
    maker: str
    receiver: str
    maker_asset: str
    taker_asset: str
    making_amount: int
    taking_amount: int
    maker_traits: int

    def __post_init__(self):
        for name in ("maker", "receiver", "maker_asset", "taker_asset"):
            object.__setattr__(self, name, normalize_address(getattr(self, name)))

    @property
    def traits(self) -> MakerTraits:
        return MakerTraits.from_int(self.maker_traits)

    def matches_extension(self, extension: Extension) -> bool:
        """True when the salt commits to `extension`."""
        return (self.salt & UINT160_MASK) == extension.salt_bits()

    def struct_hash(self) -> bytes:
        return keccak256(encode(
            ["bytes32", "uint256", "address", "address", "address", "address",
             "uint256", "uint256", "uint256"],
            [
                ORDER_TYPE_HASH,
                self.salt,
                self.maker,
                self.receiver,
                self.maker_asset,
                self.taker_asset,
                self.making_amount,
                self.taking_amount,
                self.maker_traits,
            ],
        ))

    def hash(self, chain_id: int, verifying_contract: str = LIMIT_ORDER_PROTOCOL_ADDRESS) -> bytes:
        """EIP-712 order hash signed by the maker."""
        separator = domain_separator(LOP_DOMAIN_NAME, LOP_DOMAIN_VERSION, chain_id, verifying_contract)
        return typed_data_hash(separator, self.struct_hash())

    def as_tuple(self) -> tuple:
        """ABI tuple form; addresses are packed as uint256 like the engine's Address type."""
        return (
            self.salt,
            int(self.maker, 16),
            int(self.receiver, 16),
            int(self.maker_asset, 16),
            int(self.taker_asset, 16),
            self.making_amount,
            self.taking_amount,
            self.maker_traits,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form with uint256 values as decimal strings."""
        return {
            "salt": str(self.salt),
            "maker": self.maker,
            "receiver": self.receiver,
            "makerAsset": self.maker_asset,
            "takerAsset": self.taker_asset,
            "makingAmount": str(self.making_amount),
            "takingAmount": str(self.taking_amount),
            "makerTraits": str(self.maker_traits),
        }
