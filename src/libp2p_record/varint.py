"""
Unsigned LEB128 varints.

Every length prefix in this library is an unsigned varint: the protobuf field
tags and lengths of envelopes and peer records, the multihash framing of peer
IDs, and the three length prefixes of the envelope signing message.

Each byte carries 7 bits of the value, least significant group first. The
high bit is a continuation flag::

    [C|D D D D D D D]
     ^-- 1 = more bytes follow, 0 = last byte

Example: 300 = 0b10_0101100 encodes as [0xAC, 0x02].

Values are limited to 64 bits, so a varint is at most 10 bytes long. Longer
input is rejected instead of read forever.

References:
    https://protobuf.dev/programming-guides/encoding/#varints
    https://github.com/multiformats/unsigned-varint
"""

from __future__ import annotations

from typing import Final

MAX_VARINT_LEN: Final = 10
"""Maximum encoded length of a 64-bit value."""

MAX_UINT64: Final = 2**64 - 1
"""Largest encodable value."""


class VarintError(Exception):
    """Raised when a varint cannot be decoded."""


def encode_varint(value: int) -> bytes:
    """
    Encode an unsigned integer as a varint.

    Args:
        value: Integer in [0, 2^64 - 1].

    Returns:
        Between 1 and 10 bytes.

    Raises:
        ValueError: If value is negative or wider than 64 bits.
    """
    if value < 0:
        raise ValueError("Varint must be non-negative")
    if value > MAX_UINT64:
        raise ValueError(f"Varint exceeds 64 bits: {value}")

    result = bytearray()
    while value >= 0x80:
        result.append((value & 0x7F) | 0x80)
        value >>= 7
    result.append(value)
    return bytes(result)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode a varint starting at `offset`.

    Args:
        data: Buffer holding the varint.
        offset: Position of its first byte.

    Returns:
        (value, bytes_consumed).

    Raises:
        VarintError: If the buffer ends mid-varint or the varint is longer
            than 10 bytes.
    """
    result = 0
    shift = 0
    pos = offset

    while True:
        if pos >= len(data):
            raise VarintError("Truncated varint")

        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        shift += 7

        if not byte & 0x80:
            break

        if pos - offset >= MAX_VARINT_LEN:
            raise VarintError("Varint too long")

    if result > MAX_UINT64:
        raise VarintError("Varint overflows 64 bits")

    return result, pos - offset
