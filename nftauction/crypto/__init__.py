"""
Cryptographic primitives for nftauction.

This module provides:
- Hashing functions (Keccak-256, SHA-256)
- Key generation and deterministic dev keys
- Digital signatures (recoverable ECDSA on secp256k1)
- Address derivation and EIP-55 checksums

Design Notes:
-------------
Accounts follow Ethereum conventions so that addresses printed by the
simulator look like the ones a Hardhat or Brownie devnet would print:

    address = keccak256(public_key)[-20:]

Transactions are authenticated by public key recovery rather than by
carrying the sender's public key, so signatures are 65 bytes (r || s || v).
"""

import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# The zero address denotes the native asset and "no bidder"
ZERO_ADDRESS = "0x" + "00" * 20


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: address derivation, transaction hashes, block hashes.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return hashlib.sha256(data).digest()


# =============================================================================
# Key Generation
# =============================================================================


@dataclass
class KeyPair:
    """
    An ECDSA keypair on secp256k1.

    Attributes:
        private_key: 32-byte secret key (integer in [1, order-1])
        public_key: 64-byte uncompressed public key (x || y coordinates)
    """
    private_key: bytes  # 32 bytes
    public_key: bytes   # 64 bytes (uncompressed, no 0x04 prefix)

    @property
    def address(self) -> str:
        """Checksummed address derived from the public key."""
        return address_from_public_key(self.public_key)


def generate_keypair() -> KeyPair:
    """Generate a new random keypair."""
    private_key_int = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    private_key = private_key_int.to_bytes(32, byteorder="big")
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def keypair_from_seed(seed: str, index: int) -> KeyPair:
    """
    Derive a deterministic keypair for dev accounts.

    private_key = keccak256(seed || index) mod (order - 1) + 1

    Args:
        seed: Arbitrary seed phrase
        index: Account index

    Returns:
        KeyPair that is stable for the same (seed, index)
    """
    digest = keccak256(seed.encode() + index.to_bytes(4, byteorder="big"))
    private_key_int = int.from_bytes(digest, byteorder="big") % (SECP256K1_ORDER - 1) + 1
    private_key = private_key_int.to_bytes(32, byteorder="big")
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


# =============================================================================
# Addresses
# =============================================================================


def to_checksum_address(address: str) -> str:
    """
    Apply the EIP-55 mixed-case checksum to a hex address.

    Raises:
        ValueError: if the input is not a 20-byte hex address
    """
    raw = address[2:] if address.lower().startswith("0x") else address
    if len(raw) != 40:
        raise ValueError(f"Address must be 20 bytes, got {address!r}")
    try:
        int(raw, 16)
    except ValueError:
        raise ValueError(f"Address contains invalid hex characters: {address!r}")

    lowered = raw.lower()
    digest = keccak256(lowered.encode("ascii")).hex()
    checksummed = "".join(
        char.upper() if int(digest[i], 16) >= 8 else char
        for i, char in enumerate(lowered)
    )
    return "0x" + checksummed


def address_from_public_key(public_key: bytes) -> str:
    """
    Derive address from public key (Ethereum-style).

    Address = last 20 bytes of keccak256(public_key), EIP-55 checksummed.
    """
    if len(public_key) != 64:
        raise ValueError(f"Public key must be 64 bytes, got {len(public_key)}")
    return to_checksum_address(keccak256(public_key)[-20:].hex())


def is_valid_address(address: str) -> bool:
    """Check if string is a valid address format."""
    if not isinstance(address, str) or not address.startswith("0x"):
        return False
    if len(address) != 42:  # 0x + 40 hex chars
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


# =============================================================================
# Digital Signatures (ECDSA)
# =============================================================================


def sign(message_hash: bytes, private_key: bytes) -> bytes:
    """
    Sign a message hash using ECDSA on secp256k1.

    Args:
        message_hash: 32-byte hash of the message to sign
        private_key: 32-byte private key

    Returns:
        65-byte signature (r || s || recovery_id)

    Note: s is kept in the lower half of the curve order (EIP-2), which
    prevents signature malleability. Flipping s flips the recovery id.
    """
    if len(message_hash) != 32:
        raise ValueError("Message hash must be 32 bytes")
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    v, r, s = secp256k1.ecdsa_raw_sign(message_hash, private_key)

    if s > SECP256K1_ORDER // 2:
        s = SECP256K1_ORDER - s
        v = 55 - v  # 27 <-> 28

    return (
        r.to_bytes(32, byteorder="big") +
        s.to_bytes(32, byteorder="big") +
        bytes([v - 27])
    )


def recover_public_key(message_hash: bytes, signature: bytes) -> Optional[bytes]:
    """
    Recover public key from a recoverable signature.

    Args:
        message_hash: 32-byte hash
        signature: 65-byte signature (r || s || recovery_id)

    Returns:
        64-byte public key, or None if recovery fails
    """
    if len(message_hash) != 32 or len(signature) != 65:
        return None

    r = int.from_bytes(signature[:32], byteorder="big")
    s = int.from_bytes(signature[32:64], byteorder="big")
    recovery_id = signature[64]

    if recovery_id not in (0, 1):
        return None
    if not (1 <= r < SECP256K1_ORDER and 1 <= s <= SECP256K1_ORDER // 2):
        return None

    try:
        recovered = secp256k1.ecdsa_raw_recover(message_hash, (27 + recovery_id, r, s))
    except (ValueError, ZeroDivisionError):
        return None

    if not recovered:
        return None

    x_bytes = recovered[0].to_bytes(32, byteorder="big")
    y_bytes = recovered[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def recover_address(message_hash: bytes, signature: bytes) -> Optional[str]:
    """Recover the signer's address, or None if the signature is malformed."""
    public_key = recover_public_key(message_hash, signature)
    if public_key is None:
        return None
    return address_from_public_key(public_key)


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


__all__ = [
    "SECP256K1_ORDER",
    "ZERO_ADDRESS",
    "keccak256",
    "sha256",
    "KeyPair",
    "generate_keypair",
    "keypair_from_seed",
    "private_key_to_public_key",
    "to_checksum_address",
    "address_from_public_key",
    "is_valid_address",
    "sign",
    "recover_public_key",
    "recover_address",
    "bytes_to_hex",
    "hex_to_bytes",
]
