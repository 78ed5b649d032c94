"""
libp2p-crypto public keys.

Public keys travel inside envelopes as a small protobuf (from crypto.proto)::

    message PublicKey {
        required KeyType Type = 1;  // Field 1, varint
        required bytes Data = 2;    // Field 2, length-delimited
    }

The layout of `Data` and the signature scheme depend on the key type:

    ============  ==============================  ==========================
    Key type      Data                            Signature
    ============  ==============================  ==========================
    RSA           PKIX DER public key             PKCS#1 v1.5, SHA-256
    Ed25519       32-byte raw public key          Ed25519
    Secp256k1     33-byte compressed SEC1 point   ECDSA, SHA-256, DER
    ECDSA         PKIX DER public key             ECDSA, SHA-256, DER
    ============  ==============================  ==========================

References:
    - https://github.com/libp2p/specs/blob/master/peer-ids/peer-ids.md#keys
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa

from .. import protobuf
from ..exceptions import MalformedInputError
from .peer_id import PeerId

__all__ = [
    "KeyType",
    "PublicKey",
]

_CryptoPublicKey = ed25519.Ed25519PublicKey | ec.EllipticCurvePublicKey | rsa.RSAPublicKey


class KeyType(IntEnum):
    """libp2p-crypto key type codes (crypto.proto KeyType enum)."""

    RSA = 0
    ED25519 = 1
    SECP256K1 = 2
    ECDSA = 3


# Field numbers of the PublicKey message
_FIELD_TYPE = 1
_FIELD_DATA = 2


@dataclass(frozen=True, slots=True)
class PublicKey:
    """
    A public key in libp2p-crypto form.

    Attributes:
        key_type: Key algorithm.
        key_data: Algorithm-specific key bytes (see module docstring).
    """

    key_type: KeyType
    key_data: bytes

    def encode(self) -> bytes:
        """
        Encode as the PublicKey protobuf.

        Both fields are always written, in tag order::

            [0x08][type varint][0x12][length varint][key_data]
        """
        return protobuf.encode_uint64(_FIELD_TYPE, self.key_type) + protobuf.encode_bytes(
            _FIELD_DATA, self.key_data
        )

    @classmethod
    def decode(cls, data: bytes) -> PublicKey:
        """
        Decode a PublicKey protobuf and check that the key itself parses.

        Fields may arrive in any order; unknown fields are skipped.

        Args:
            data: Encoded PublicKey message, e.g. field 1 of an envelope.

        Returns:
            The public key, known to load for its key type.

        Raises:
            MalformedInputError: If a field is missing, the key type is
                unknown, or the key bytes are not a valid key of that type.
        """
        key_type: int | None = None
        key_data: bytes | None = None

        for field_number, _, value in protobuf.iter_fields(data, "PublicKey"):
            if field_number == _FIELD_TYPE:
                key_type = protobuf.expect_varint(value, "PublicKey", "Type")
            elif field_number == _FIELD_DATA:
                key_data = protobuf.expect_bytes(value, "PublicKey", "Data")

        if key_type is None:
            raise MalformedInputError("PublicKey", "missing Type")
        if key_data is None:
            raise MalformedInputError("PublicKey", "missing Data")
        try:
            known_type = KeyType(key_type)
        except ValueError as e:
            raise MalformedInputError("PublicKey", f"unknown key type {key_type}") from e

        public_key = cls(key_type=known_type, key_data=key_data)
        try:
            public_key._load()
        except (ValueError, UnsupportedAlgorithm) as e:
            raise MalformedInputError(
                "PublicKey", f"invalid {public_key.key_type.name} key: {e}"
            ) from e
        return public_key

    def _load(self) -> _CryptoPublicKey:
        """Build the `cryptography` key object for this key."""
        match self.key_type:
            case KeyType.ED25519:
                return ed25519.Ed25519PublicKey.from_public_bytes(self.key_data)
            case KeyType.SECP256K1:
                return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), self.key_data)
            case KeyType.ECDSA:
                loaded = serialization.load_der_public_key(self.key_data)
                if not isinstance(loaded, ec.EllipticCurvePublicKey):
                    raise ValueError("ECDSA key data is not an elliptic curve key")
                return loaded
            case KeyType.RSA:
                loaded = serialization.load_der_public_key(self.key_data)
                if not isinstance(loaded, rsa.RSAPublicKey):
                    raise ValueError("RSA key data is not an RSA key")
                return loaded
        raise ValueError(f"Unsupported key type: {self.key_type}")

    def verify(self, message: bytes, signature: bytes) -> bool:
        """
        Verify a signature over `message`.

        Args:
            message: The signed bytes.
            signature: Signature in the scheme of this key type.

        Returns:
            True if the signature is valid, False otherwise. An unparsable
            key or signature is reported as invalid, never raised.
        """
        try:
            key = self._load()
            if isinstance(key, ed25519.Ed25519PublicKey):
                key.verify(signature, message)
            elif isinstance(key, ec.EllipticCurvePublicKey):
                key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
            else:
                key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
        except (InvalidSignature, ValueError, UnsupportedAlgorithm):
            return False
        return True

    def to_peer_id(self) -> PeerId:
        """
        Derive the peer ID owned by this key.

        Returns:
            The peer ID, see `PeerId.from_public_key`.
        """
        return PeerId.from_public_key(self)
