"""
lopext Crypto Module

Primitives used to hash and sign orders:
- Hash functions (keccak256, function selectors)
- Address normalization and conversion
- EIP-712 typed-data hashing and secp256k1 signing
"""

from .hashing import keccak256, keccak256_hex, function_selector
from .address import (
    ZERO_ADDRESS,
    is_valid_address,
    normalize_address,
    to_checksum_address,
    address_to_bytes,
    bytes_to_address,
    address_to_int,
)
from .signing import (
    Signer,
    LocalSigner,
    domain_separator,
    typed_data_hash,
    recover_signer,
    compact_signature,
)

__all__ = [
    # Hashing
    "keccak256",
    "keccak256_hex",
    "function_selector",
    # Address
    "ZERO_ADDRESS",
    "is_valid_address",
    "normalize_address",
    "to_checksum_address",
    "address_to_bytes",
    "bytes_to_address",
    "address_to_int",
    # Signing
    "Signer",
    "LocalSigner",
    "domain_separator",
    "typed_data_hash",
    "recover_signer",
    "compact_signature",
]
