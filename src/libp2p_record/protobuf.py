"""
Protobuf wire format helpers.

The messages exchanged here (PublicKey, Envelope, PeerRecord) have small,
fixed schemas shared with go-libp2p and rust-libp2p, so they are encoded by
hand rather than through generated code.

Each field is a tag varint followed by its value::

    tag = (field_number << 3) | wire_type

Only two wire types carry data in these schemas:

- 0 (varint): integers and enums
- 2 (length-delimited): bytes and embedded messages

Encoding is deterministic proto3: callers emit fields in field-number order
and omit default values. Decoding skips unknown fields so newer peers can add
fields without breaking older readers.

References:
    https://protobuf.dev/programming-guides/encoding/
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

from .exceptions import MalformedInputError
from .varint import VarintError, decode_varint, encode_varint

WIRE_TYPE_VARINT: Final = 0
"""Varint wire type for integers, bools and enums."""

WIRE_TYPE_FIXED64: Final = 1
"""64-bit little-endian wire type."""

WIRE_TYPE_LENGTH_DELIMITED: Final = 2
"""Length-delimited wire type for bytes, strings and embedded messages."""

WIRE_TYPE_FIXED32: Final = 5
"""32-bit little-endian wire type."""


def encode_tag(field_number: int, wire_type: int) -> bytes:
    """
    Encode a protobuf field tag.

    Args:
        field_number: Field number from the message schema (1 or more).
        wire_type: One of the WIRE_TYPE_* constants.

    Returns:
        The tag varint.
    """
    return encode_varint((field_number << 3) | wire_type)


def encode_bytes(field_number: int, value: bytes) -> bytes:
    """
    Encode a length-delimited field (bytes or embedded message).

    Args:
        field_number: Field number from the message schema.
        value: Field contents; an embedded message is passed already encoded.

    Returns:
        Tag, length varint and `value`.
    """
    return encode_tag(field_number, WIRE_TYPE_LENGTH_DELIMITED) + encode_varint(len(value)) + value


def encode_uint64(field_number: int, value: int) -> bytes:
    """
    Encode a uint64 field.

    Args:
        field_number: Field number from the message schema.
        value: Integer in [0, 2^64 - 1].

    Returns:
        Tag and value varint.
    """
    return encode_tag(field_number, WIRE_TYPE_VARINT) + encode_varint(value)


def iter_fields(data: bytes, type_name: str) -> Iterator[tuple[int, int, int | bytes]]:
    """
    Walk the fields of an encoded message.

    Args:
        data: Encoded message.
        type_name: Message name used in error reports.

    Yields:
        (field_number, wire_type, value) tuples. The value is an int for
        varint fields and the raw bytes for every other wire type.

    Raises:
        MalformedInputError: On truncated input, a zero field number, or a
            wire type that does not exist (3, 4, 6, 7 are invalid; groups are
            not supported).
    """
    pos = 0
    while pos < len(data):
        start = pos
        try:
            tag, consumed = decode_varint(data, pos)
            pos += consumed

            field_number, wire_type = tag >> 3, tag & 0x07
            if field_number == 0:
                raise MalformedInputError(type_name, "field number 0", offset=start)

            if wire_type == WIRE_TYPE_VARINT:
                value, consumed = decode_varint(data, pos)
                pos += consumed
                yield field_number, wire_type, value
                continue
        except VarintError as e:
            raise MalformedInputError(type_name, str(e), offset=start) from e

        if wire_type == WIRE_TYPE_LENGTH_DELIMITED:
            try:
                length, consumed = decode_varint(data, pos)
            except VarintError as e:
                raise MalformedInputError(type_name, str(e), offset=pos) from e
            pos += consumed
        elif wire_type == WIRE_TYPE_FIXED64:
            length = 8
        elif wire_type == WIRE_TYPE_FIXED32:
            length = 4
        else:
            raise MalformedInputError(type_name, f"unknown wire type {wire_type}", offset=start)

        if pos + length > len(data):
            raise MalformedInputError(
                type_name,
                f"field {field_number} needs {length} bytes, {len(data) - pos} left",
                offset=pos,
            )

        yield field_number, wire_type, data[pos : pos + length]
        pos += length


def expect_bytes(value: int | bytes, type_name: str, field_name: str) -> bytes:
    """Return a length-delimited field value, rejecting any other wire type."""
    if not isinstance(value, bytes):
        raise MalformedInputError(type_name, f"{field_name} must be length-delimited")
    return value


def expect_varint(value: int | bytes, type_name: str, field_name: str) -> int:
    """Return a varint field value, rejecting any other wire type."""
    if not isinstance(value, int):
        raise MalformedInputError(type_name, f"{field_name} must be a varint")
    return value
