"""
lopext Crypto Signing Module

EIP-712 typed-data hashing and secp256k1 signing of order hashes.

The builder only relies on the `Signer` protocol; `LocalSigner` is the
in-process implementation backed by eth-keys.
"""

from typing import Protocol, Tuple, Union

from eth_abi import encode
from eth_keys import keys
from eth_utils import decode_hex

from .address import normalize_address
from .hashing import keccak256
from ..constants import EIP712_DOMAIN_TYPE_STRING


class Signer(Protocol):
    """Signing collaborator used by the order builder."""

    @property
    def address(self) -> str: ...

    async def sign(self, typed_hash: bytes) -> bytes: ...


def domain_separator(name: str, version: str, chain_id: int, verifying_contract: str) -> bytes:
    """
    Compute the EIP-712 domain separator.

    Args:
        name: Domain name
        version: Domain version
        chain_id: Chain ID
        verifying_contract: Address of the verifying contract
    """
    return keccak256(encode(
        ["bytes32", "bytes32", "bytes32", "uint256", "address"],
        [
            keccak256(EIP712_DOMAIN_TYPE_STRING.encode()),
            keccak256(name.encode()),
            keccak256(version.encode()),
            chain_id,
            normalize_address(verifying_contract),
        ],
    ))


def typed_data_hash(separator: bytes, struct_hash: bytes) -> bytes:
    """EIP-712 digest: keccak256(0x19 0x01 domainSeparator structHash)."""
    return keccak256(b'\x19\x01' + separator + struct_hash)


def recover_signer(typed_hash: bytes, signature: bytes) -> str:
    """
    Recover signer address from a 65-byte r || s || v signature.

    Returns:
        Checksum address of the signer
    """
    if len(signature) != 65:
        raise ValueError(f"Signature must be 65 bytes, got {len(signature)}")
    v = signature[64]
    if v >= 27:
        v -= 27
    sig = keys.Signature(signature_bytes=signature[:64] + bytes([v]))
    return sig.recover_public_key_from_msg_hash(typed_hash).to_checksum_address()


def compact_signature(signature: bytes) -> Tuple[bytes, bytes]:
    """
    Split a 65-byte signature into EIP-2098 (r, vs) form as expected by the
    settlement engine's fillOrder entrypoint.
    """
    if len(signature) != 65:
        raise ValueError(f"Signature must be 65 bytes, got {len(signature)}")
    r = signature[:32]
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    y_parity = v - 27 if v >= 27 else v
    vs = (s | (y_parity << 255)).to_bytes(32, "big")
    return r, vs


class LocalSigner:
    """
    secp256k1 signer holding a private key in process.

    Wraps eth-keys PrivateKey.
    """

    def __init__(self, private_key: Union[bytes, str]):
        if isinstance(private_key, str):
            private_key = decode_hex(private_key)
        if len(private_key) != 32:
            raise ValueError(f"Private key must be 32 bytes, got {len(private_key)}")
        self._key = keys.PrivateKey(private_key)

    @property
    def address(self) -> str:
        return self._key.public_key.to_checksum_address()

    async def sign(self, typed_hash: bytes) -> bytes:
        """
        Sign a 32-byte typed-data digest.

        Returns:
            65-byte signature r || s || v with v in {27, 28}
        """
        if len(typed_hash) != 32:
            raise ValueError(f"Digest must be 32 bytes, got {len(typed_hash)}")
        sig = self._key.sign_msg_hash(typed_hash)
        return sig.r.to_bytes(32, "big") + sig.s.to_bytes(32, "big") + bytes([sig.v + 27])

    def __repr__(self) -> str:
        return f"LocalSigner({self.address})"
