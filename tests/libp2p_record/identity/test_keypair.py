"""Tests for identity key pairs."""

from __future__ import annotations

import pytest

from libp2p_record.identity import IdentityKeypair, KeyType

# secp256k1 private key 1: its public key is the curve generator point G.
_SECP256K1_ONE = (1).to_bytes(32, "big")
_GENERATOR_COMPRESSED = bytes.fromhex(
    "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
)

# RFC 8032 test vector 1.
_ED25519_SEED = bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60")
_ED25519_PUBLIC = bytes.fromhex("d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a")


class TestGenerate:
    """Tests for key generation."""

    def test_default_is_secp256k1(self) -> None:
        """Generated key pairs are secp256k1 unless asked otherwise."""
        keypair = IdentityKeypair.generate()

        assert keypair.key_type == KeyType.SECP256K1
        assert len(keypair.private_key_bytes()) == 32
        assert len(keypair.public_key_bytes()) == 33
        assert keypair.public_key_bytes()[0] in (0x02, 0x03)

    def test_ed25519(self) -> None:
        """Ed25519 key pairs have 32-byte keys."""
        keypair = IdentityKeypair.generate(KeyType.ED25519)

        assert keypair.key_type == KeyType.ED25519
        assert len(keypair.private_key_bytes()) == 32
        assert len(keypair.public_key_bytes()) == 32

    @pytest.mark.parametrize("key_type", [KeyType.RSA, KeyType.ECDSA])
    def test_unsupported_key_types(self, key_type: KeyType) -> None:
        """Only secp256k1 and Ed25519 key pairs can be created."""
        with pytest.raises(ValueError, match="Unsupported signing key type"):
            IdentityKeypair.generate(key_type)


class TestFromBytes:
    """Tests for loading private keys."""

    def test_secp256k1_known_key(self) -> None:
        """Private key 1 has the generator as its public key."""
        keypair = IdentityKeypair.from_bytes(_SECP256K1_ONE)

        assert keypair.public_key_bytes() == _GENERATOR_COMPRESSED
        assert keypair.private_key_bytes() == _SECP256K1_ONE

    def test_ed25519_known_key(self) -> None:
        """RFC 8032 seed derives the published public key."""
        keypair = IdentityKeypair.from_bytes(_ED25519_SEED, KeyType.ED25519)

        assert keypair.public_key_bytes() == _ED25519_PUBLIC
        assert keypair.private_key_bytes() == _ED25519_SEED

    @pytest.mark.parametrize("key_type", [KeyType.SECP256K1, KeyType.ED25519])
    def test_round_trip(self, key_type: KeyType) -> None:
        """A saved private key loads back to the same identity."""
        keypair = IdentityKeypair.generate(key_type)
        loaded = IdentityKeypair.from_bytes(keypair.private_key_bytes(), key_type)

        assert loaded.to_peer_id() == keypair.to_peer_id()

    @pytest.mark.parametrize("length", [0, 31, 33])
    def test_wrong_length(self, length: int) -> None:
        """Private keys are exactly 32 bytes."""
        with pytest.raises(ValueError, match=f"Expected 32 bytes, got {length}"):
            IdentityKeypair.from_bytes(bytes(length))

    def test_zero_scalar(self) -> None:
        """Zero is not a valid secp256k1 private key."""
        with pytest.raises(ValueError):
            IdentityKeypair.from_bytes(bytes(32))

    def test_unsupported_key_type(self) -> None:
        """RSA keys cannot be loaded from 32 bytes."""
        with pytest.raises(ValueError, match="Unsupported signing key type"):
            IdentityKeypair.from_bytes(bytes(32), KeyType.RSA)


class TestSign:
    """Tests for signing."""

    def test_public_key_matches(self) -> None:
        """The libp2p public key carries the raw public key bytes."""
        keypair = IdentityKeypair.generate()
        public_key = keypair.public_key()

        assert public_key.key_type == KeyType.SECP256K1
        assert public_key.key_data == keypair.public_key_bytes()

    def test_ecdsa_signature_is_der(self) -> None:
        """secp256k1 signatures are DER sequences."""
        signature = IdentityKeypair.generate().sign(b"message")

        assert signature[0] == 0x30
        assert len(signature) <= 72

    def test_ed25519_is_deterministic(self) -> None:
        """Ed25519 signs the same message to the same 64 bytes."""
        keypair = IdentityKeypair.generate(KeyType.ED25519)

        assert keypair.sign(b"message") == keypair.sign(b"message")
        assert len(keypair.sign(b"message")) == 64
