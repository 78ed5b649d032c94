"""
Signing key pairs for peer identity.

A peer signs its records with the private half of its identity key. Two key
types can sign: secp256k1 (the default, as on the Ethereum libp2p network)
and Ed25519 (the go-libp2p default). Signatures follow the libp2p-crypto
conventions described in `keys`.
"""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from .keys import KeyType, PublicKey
from .peer_id import PeerId

__all__ = [
    "IdentityKeypair",
]


@dataclass(frozen=True, slots=True)
class IdentityKeypair:
    """
    A private identity key.

    Attributes:
        private_key: The secp256k1 or Ed25519 private key.
    """

    private_key: ec.EllipticCurvePrivateKey | ed25519.Ed25519PrivateKey

    @classmethod
    def generate(cls, key_type: KeyType = KeyType.SECP256K1) -> IdentityKeypair:
        """
        Generate a fresh random key pair.

        Args:
            key_type: SECP256K1 (default) or ED25519.

        Returns:
            A new key pair from the OS random source.

        Raises:
            ValueError: If `key_type` cannot sign.
        """
        if key_type == KeyType.SECP256K1:
            return cls(private_key=ec.generate_private_key(ec.SECP256K1()))
        if key_type == KeyType.ED25519:
            return cls(private_key=ed25519.Ed25519PrivateKey.generate())
        raise ValueError(f"Unsupported signing key type: {key_type.name}")

    @classmethod
    def from_bytes(cls, data: bytes, key_type: KeyType = KeyType.SECP256K1) -> IdentityKeypair:
        """
        Load a key pair from its 32-byte private key.

        Args:
            data: secp256k1 scalar (big-endian) or Ed25519 seed.
            key_type: Which of the two `data` is.

        Returns:
            The key pair.

        Raises:
            ValueError: If `data` is not a valid private key of `key_type`.
        """
        if len(data) != 32:
            raise ValueError(f"Expected 32 bytes, got {len(data)}")

        if key_type == KeyType.SECP256K1:
            scalar = int.from_bytes(data, "big")
            return cls(private_key=ec.derive_private_key(scalar, ec.SECP256K1()))
        if key_type == KeyType.ED25519:
            return cls(private_key=ed25519.Ed25519PrivateKey.from_private_bytes(data))
        raise ValueError(f"Unsupported signing key type: {key_type.name}")

    @property
    def key_type(self) -> KeyType:
        """The libp2p key type of this key pair."""
        if isinstance(self.private_key, ed25519.Ed25519PrivateKey):
            return KeyType.ED25519
        return KeyType.SECP256K1

    def private_key_bytes(self) -> bytes:
        """Return the raw 32-byte private key."""
        if isinstance(self.private_key, ed25519.Ed25519PrivateKey):
            return self.private_key.private_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PrivateFormat.Raw,
                encryption_algorithm=serialization.NoEncryption(),
            )
        return self.private_key.private_numbers().private_value.to_bytes(32, "big")

    def public_key_bytes(self) -> bytes:
        """
        Return the raw public key.

        33-byte compressed point for secp256k1, 32 bytes for Ed25519.
        """
        if isinstance(self.private_key, ed25519.Ed25519PrivateKey):
            return self.private_key.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        return self.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )

    def public_key(self) -> PublicKey:
        """
        Return the public half in libp2p-crypto form.

        Returns:
            The key that goes into envelopes signed by this key pair.
        """
        return PublicKey(key_type=self.key_type, key_data=self.public_key_bytes())

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message.

        Args:
            message: Bytes to sign, e.g. an envelope signing message.

        Returns:
            A 64-byte Ed25519 signature or a DER-encoded ECDSA-SHA256 signature.
        """
        if isinstance(self.private_key, ed25519.Ed25519PrivateKey):
            return self.private_key.sign(message)
        return self.private_key.sign(message, ec.ECDSA(hashes.SHA256()))

    def to_peer_id(self) -> PeerId:
        """
        Derive the peer ID owned by this key pair.

        Returns:
            The peer ID that records signed with this key must carry.
        """
        return self.public_key().to_peer_id()
