"""
Unit tests for cryptographic primitives.

Tests cover:
1. Key generation and deterministic dev keys
2. Signing and public key recovery
3. Hashing functions
4. Address derivation and EIP-55 checksums
"""

import pytest

from nftauction.crypto import (
    generate_keypair,
    keypair_from_seed,
    sign,
    recover_public_key,
    recover_address,
    sha256,
    keccak256,
    private_key_to_public_key,
    address_from_public_key,
    to_checksum_address,
    bytes_to_hex,
    hex_to_bytes,
    is_valid_address,
    SECP256K1_ORDER,
    ZERO_ADDRESS,
)


class TestKeyGeneration:
    """Tests for key generation."""

    def test_keypair_generation_produces_valid_lengths(self):
        """KeyPair should have correct field lengths."""
        kp = generate_keypair()
        assert len(kp.private_key) == 32
        assert len(kp.public_key) == 64

    def test_keypair_address_format(self):
        """Address should be 0x-prefixed 40 hex chars."""
        kp = generate_keypair()
        assert kp.address.startswith("0x")
        assert len(kp.address) == 42
        assert is_valid_address(kp.address)

    def test_known_private_key_address(self):
        """Private key 1 maps to the well-known Ethereum address."""
        private_key = (1).to_bytes(32, "big")
        public_key = private_key_to_public_key(private_key)
        assert address_from_public_key(public_key) == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"

    def test_seeded_keys_are_deterministic(self):
        """Same seed and index give the same key."""
        assert keypair_from_seed("devnet", 0) == keypair_from_seed("devnet", 0)
        assert keypair_from_seed("devnet", 0) != keypair_from_seed("devnet", 1)
        assert keypair_from_seed("devnet", 0) != keypair_from_seed("other", 0)

    def test_seeded_key_in_range(self):
        key = int.from_bytes(keypair_from_seed("devnet", 3).private_key, "big")
        assert 1 <= key < SECP256K1_ORDER

    def test_private_key_length_checked(self):
        with pytest.raises(ValueError):
            private_key_to_public_key(b"\x01" * 31)


class TestSigning:
    """Tests for recoverable ECDSA signatures."""

    def test_signature_length(self):
        """Signature should be 65 bytes (r || s || v)."""
        kp = generate_keypair()
        sig = sign(keccak256(b"test message"), kp.private_key)
        assert len(sig) == 65
        assert sig[64] in (0, 1)

    def test_low_s(self):
        """s must be in the lower half of the curve order."""
        kp = generate_keypair()
        for i in range(5):
            sig = sign(keccak256(bytes([i])), kp.private_key)
            assert int.from_bytes(sig[32:64], "big") <= SECP256K1_ORDER // 2

    def test_recover_public_key(self):
        """Recovery should return the signer's public key."""
        kp = generate_keypair()
        msg_hash = keccak256(b"test message")
        sig = sign(msg_hash, kp.private_key)
        assert recover_public_key(msg_hash, sig) == kp.public_key
        assert recover_address(msg_hash, sig) == kp.address

    def test_recover_wrong_message(self):
        """A different message recovers a different address."""
        kp = generate_keypair()
        sig = sign(keccak256(b"message 1"), kp.private_key)
        assert recover_address(keccak256(b"message 2"), sig) != kp.address

    def test_recover_rejects_bad_recovery_id(self):
        kp = generate_keypair()
        msg_hash = keccak256(b"x")
        sig = sign(msg_hash, kp.private_key)
        assert recover_public_key(msg_hash, sig[:64] + bytes([5])) is None

    def test_recover_rejects_wrong_length(self):
        assert recover_address(keccak256(b"x"), b"\x00" * 64) is None

    def test_sign_requires_32_byte_hash(self):
        kp = generate_keypair()
        with pytest.raises(ValueError):
            sign(b"short", kp.private_key)


class TestHashing:
    """Tests for hash functions."""

    def test_keccak256_empty(self):
        """Keccak-256, not SHA3-256."""
        assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"

    def test_sha256_empty(self):
        assert sha256(b"").hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestAddresses:
    """Tests for address helpers."""

    def test_eip55_checksum(self):
        """EIP-55 reference vectors."""
        assert to_checksum_address("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed") == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        assert to_checksum_address("fb6916095ca1df60bb79ce92ce3ea74c37c5d359") == "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"

    def test_checksum_rejects_bad_input(self):
        with pytest.raises(ValueError):
            to_checksum_address("0x1234")
        with pytest.raises(ValueError):
            to_checksum_address("0x" + "zz" * 20)

    def test_zero_address(self):
        assert is_valid_address(ZERO_ADDRESS)
        assert to_checksum_address(ZERO_ADDRESS) == ZERO_ADDRESS

    def test_is_valid_address(self):
        assert not is_valid_address("0x1234")
        assert not is_valid_address("1234" * 10)
        assert not is_valid_address(None)

    def test_hex_roundtrip(self):
        assert bytes_to_hex(b"\x01\xff") == "0x01ff"
        assert hex_to_bytes("0x01ff") == b"\x01\xff"
        assert hex_to_bytes("01ff") == b"\x01\xff"
