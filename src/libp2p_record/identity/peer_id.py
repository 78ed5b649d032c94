"""
Peer IDs.

A peer ID is the multihash of a peer's protobuf-encoded public key:

    1. Encode the public key as a libp2p-crypto PublicKey protobuf
    2. If the encoding is <= 42 bytes: multihash(identity, encoded)
    3. Otherwise: multihash(sha256, sha256(encoded))

Ed25519 and secp256k1 keys are small enough for the identity hash, so the
public key can be recovered from the peer ID itself. RSA and ECDSA keys are
hashed.

Peer records carry the raw multihash bytes. The Base58 form is for display:

    - Ed25519 keys: "12D3KooW..."
    - secp256k1 keys: "16Uiu2..."
    - Hashed keys: "Qm..."

References:
    - https://github.com/libp2p/specs/blob/master/peer-ids/peer-ids.md
    - https://github.com/multiformats/multihash
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Final

from ..varint import VarintError, decode_varint, encode_varint

if TYPE_CHECKING:
    from .keys import PublicKey

__all__ = [
    "Base58",
    "Multihash",
    "MultihashCode",
    "PeerId",
]


class MultihashCode(IntEnum):
    """Multihash function codes used for peer IDs."""

    IDENTITY = 0x00
    """No hashing: the digest is the data itself."""

    SHA256 = 0x12
    """SHA-256 (32-byte digest)."""


_IDENTITY_THRESHOLD: Final[int] = 42
"""Largest public key encoding that is embedded instead of hashed."""


class Base58:
    """Bitcoin-alphabet Base58, the text form of peer IDs."""

    ALPHABET: Final[str] = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

    @classmethod
    def encode(cls, data: bytes) -> str:
        """
        Encode bytes as Base58.

        Each leading zero byte becomes a leading '1', so the byte length
        survives a round trip.

        Args:
            data: Bytes to encode.

        Returns:
            The Base58 string (empty for empty input).
        """
        leading_zeros = len(data) - len(data.lstrip(b"\x00"))

        num = int.from_bytes(data, "big")
        result: list[str] = []
        while num > 0:
            num, remainder = divmod(num, 58)
            result.append(cls.ALPHABET[remainder])

        result.extend(cls.ALPHABET[0] * leading_zeros)
        return "".join(reversed(result))

    @classmethod
    def decode(cls, s: str) -> bytes:
        """
        Decode a Base58 string.

        Args:
            s: Base58 text; each leading '1' becomes a zero byte.

        Returns:
            The decoded bytes.

        Raises:
            ValueError: If the string contains a character outside the alphabet.
        """
        leading_ones = len(s) - len(s.lstrip(cls.ALPHABET[0]))

        num = 0
        for char in s:
            index = cls.ALPHABET.find(char)
            if index < 0:
                raise ValueError(f"Invalid Base58 character: {char!r}")
            num = num * 58 + index

        body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
        return b"\x00" * leading_ones + body


@dataclass(frozen=True, slots=True)
class Multihash:
    """
    A self-describing hash: [code varint][length varint][digest].

    Attributes:
        code: Hash function identifier.
        digest: Hash output (the data itself for the identity code).
    """

    code: int
    digest: bytes

    def encode(self) -> bytes:
        """
        Encode as multihash bytes.

        Returns:
            [code varint][length varint][digest].
        """
        return encode_varint(self.code) + encode_varint(len(self.digest)) + self.digest

    @classmethod
    def decode(cls, data: bytes) -> Multihash:
        """
        Parse multihash bytes.

        The declared digest length must match the remaining bytes exactly.
        Any hash code is accepted here; peer IDs narrow it further.

        Args:
            data: Complete multihash bytes.

        Returns:
            The parsed multihash.

        Raises:
            ValueError: If the framing is truncated or inconsistent.
        """
        try:
            code, code_len = decode_varint(data)
            length, length_len = decode_varint(data, code_len)
        except VarintError as e:
            raise ValueError(f"Invalid multihash: {e}") from e

        digest = data[code_len + length_len :]
        if len(digest) != length:
            raise ValueError(
                f"Invalid multihash: declared {length} digest bytes, found {len(digest)}"
            )
        return cls(code=code, digest=digest)

    @classmethod
    def from_data(cls, data: bytes) -> Multihash:
        """
        Build the multihash that names `data`.

        Args:
            data: A protobuf-encoded public key.

        Returns:
            An identity multihash if `data` is at most 42 bytes, otherwise a
            SHA-256 multihash of it.
        """
        if len(data) <= _IDENTITY_THRESHOLD:
            return cls(code=MultihashCode.IDENTITY, digest=data)
        return cls(code=MultihashCode.SHA256, digest=hashlib.sha256(data).digest())


@dataclass(frozen=True, slots=True)
class PeerId:
    """
    A libp2p peer identifier.

    Two peer IDs are equal when their multihash bytes are equal.

    Attributes:
        multihash: Raw multihash bytes.
    """

    multihash: bytes

    def __str__(self) -> str:
        return Base58.encode(self.multihash)

    def __repr__(self) -> str:
        return f"PeerId({self!s})"

    def to_base58(self) -> str:
        """
        Return the Base58 text form.

        Returns:
            The string shown in logs and multiaddrs, e.g. "16Uiu2HAm...".
        """
        return Base58.encode(self.multihash)

    def to_bytes(self) -> bytes:
        """Return the binary form carried in peer records."""
        return self.multihash

    @classmethod
    def from_bytes(cls, data: bytes) -> PeerId:
        """
        Parse the binary form.

        Only identity and SHA-256 multihashes name peers; other hash codes
        are rejected even when the framing is valid.

        Args:
            data: Multihash bytes, as carried in a peer record.

        Returns:
            The peer ID.

        Raises:
            ValueError: If the bytes are not a well-formed multihash or use
                another hash function.
        """
        mh = Multihash.decode(data)
        if mh.code not in (MultihashCode.IDENTITY, MultihashCode.SHA256):
            raise ValueError(f"Invalid multihash: unsupported hash code {mh.code:#x}")
        return cls(multihash=bytes(data))

    @classmethod
    def from_base58(cls, s: str) -> PeerId:
        """
        Parse the Base58 text form.

        Args:
            s: Base58 peer ID, as produced by `to_base58`.

        Returns:
            The peer ID.

        Raises:
            ValueError: If the string is not Base58 or not a multihash.
        """
        return cls.from_bytes(Base58.decode(s))

    @classmethod
    def from_public_key(cls, public_key: PublicKey) -> PeerId:
        """
        Derive the peer ID owned by a public key.

        Args:
            public_key: The peer's public key.

        Returns:
            The multihash of the key's protobuf encoding.
        """
        return cls(multihash=Multihash.from_data(public_key.encode()).encode())

    def matches_public_key(self, public_key: PublicKey) -> bool:
        """
        Check whether this peer ID was derived from `public_key`.

        Args:
            public_key: Key to check, e.g. the one on a received envelope.

        Returns:
            True if `public_key` derives exactly this peer ID.
        """
        return self == PeerId.from_public_key(public_key)
