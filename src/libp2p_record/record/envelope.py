"""
Signed envelopes.

An envelope binds a record to the key that produced it. The record travels
as opaque bytes next to a type tag saying how to decode it::

    message Envelope {
        PublicKey public_key = 1;   // producer's key (libp2p-crypto protobuf)
        bytes payload_type = 2;     // which record kind the payload is
        bytes payload = 3;          // the serialized record
        bytes signature = 5;        // signature over the signing message
    }

Signing Message
---------------

The signature does not cover the payload alone. It covers::

    uvarint(len(domain)) || domain || uvarint(len(payload_type)) || payload_type
        || uvarint(len(payload)) || payload

The domain is a fixed string per record kind. Binding it into the signature
stops a signature made for one purpose from being replayed for another. The
length prefixes make the concatenation unambiguous. This framing must match
go-libp2p and rust-libp2p byte for byte.

Consumption
-----------

Incoming bytes go through a linear pipeline::

    bytes -> unmarshalled -> validated -> decoded
                  |              |           |
            malformed      bad signature   unknown type / bad payload

Each rejection is a typed exception for that one message. Nothing is retried.

References:
    - https://github.com/libp2p/specs/blob/master/RFC/0002-signed-envelopes.md
"""

from __future__ import annotations

import logging
from typing import TypeVar

from typing_extensions import Self

from .. import protobuf
from ..base import StrictBaseModel
from ..exceptions import (
    InvalidSignatureError,
    MalformedInputError,
    NilReceiverError,
    UnknownPayloadTypeError,
)
from ..identity import IdentityKeypair, PublicKey
from ..varint import encode_varint
from .record import Record
from .registry import PayloadTypeRegistry, default_registry

__all__ = [
    "Envelope",
    "consume_envelope",
    "consume_typed_envelope",
    "make_envelope",
    "signing_message",
]

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

# Field numbers of the Envelope message (4 is unused)
_FIELD_PUBLIC_KEY = 1
_FIELD_PAYLOAD_TYPE = 2
_FIELD_PAYLOAD = 3
_FIELD_SIGNATURE = 5


def signing_message(domain: str, payload_type: bytes, payload: bytes) -> bytes:
    """
    Build the length-prefixed message an envelope signature covers.

    Args:
        domain: Signature domain, encoded as UTF-8.
        payload_type: Payload type tag.
        payload: Serialized record.

    Returns:
        Each of the three parts prefixed with its unsigned varint length.
    """
    parts = (domain.encode("utf-8"), payload_type, payload)
    return b"".join(encode_varint(len(part)) + part for part in parts)


class Envelope(StrictBaseModel):
    """A record payload signed by its producer."""

    public_key: PublicKey
    """Producer's public key. Identifies the producer and verifies the signature."""

    payload_type: bytes
    """Tag of the record kind in `raw_payload`."""

    raw_payload: bytes
    """Serialized record. Opaque to the envelope."""

    signature: bytes
    """Signature over the signing message of the envelope's domain."""

    def marshal(self) -> bytes:
        """
        Serialize as the Envelope protobuf.

        The public key is always written. Empty byte fields are omitted, so
        equal envelopes always marshal to the same bytes.

        Returns:
            The wire encoding, ready to send or store.
        """
        result = bytearray(protobuf.encode_bytes(_FIELD_PUBLIC_KEY, self.public_key.encode()))
        if self.payload_type:
            result.extend(protobuf.encode_bytes(_FIELD_PAYLOAD_TYPE, self.payload_type))
        if self.raw_payload:
            result.extend(protobuf.encode_bytes(_FIELD_PAYLOAD, self.raw_payload))
        if self.signature:
            result.extend(protobuf.encode_bytes(_FIELD_SIGNATURE, self.signature))
        return bytes(result)

    @classmethod
    def unmarshal(cls, data: bytes) -> Self:
        """
        Parse an Envelope protobuf. The signature is not checked.

        Args:
            data: Marshalled envelope from an untrusted source.

        Returns:
            The envelope, which still has to be validated.

        Raises:
            MalformedInputError: If the bytes are truncated or corrupt, or the
                public key is missing or invalid.
        """
        public_key: PublicKey | None = None
        payload_type = b""
        raw_payload = b""
        signature = b""

        for field_number, _, value in protobuf.iter_fields(data, "Envelope"):
            if field_number == _FIELD_PUBLIC_KEY:
                public_key = PublicKey.decode(
                    protobuf.expect_bytes(value, "Envelope", "public_key")
                )
            elif field_number == _FIELD_PAYLOAD_TYPE:
                payload_type = protobuf.expect_bytes(value, "Envelope", "payload_type")
            elif field_number == _FIELD_PAYLOAD:
                raw_payload = protobuf.expect_bytes(value, "Envelope", "payload")
            elif field_number == _FIELD_SIGNATURE:
                signature = protobuf.expect_bytes(value, "Envelope", "signature")

        if public_key is None:
            raise MalformedInputError("Envelope", "missing public_key")

        return cls(
            public_key=public_key,
            payload_type=payload_type,
            raw_payload=raw_payload,
            signature=signature,
        )

    def validate(self, domain: str) -> bool:
        """
        Check the signature against `domain`.

        A mismatch is an expected outcome for untrusted input, so it is
        reported as False rather than raised.

        Args:
            domain: Signature domain of the expected record kind.

        Returns:
            True if the signature covers this envelope's payload under `domain`.
        """
        message = signing_message(domain, self.payload_type, self.raw_payload)
        return self.public_key.verify(message, self.signature)

    def record(self, registry: PayloadTypeRegistry | None = None) -> Record:
        """
        Decode the payload with the record class registered for its type.

        Does not check the signature; call `validate` first or use
        `consume_envelope`.

        Args:
            registry: Registry to dispatch on. Defaults to `default_registry()`.

        Returns:
            The decoded record, an instance of the registered class.

        Raises:
            UnknownPayloadTypeError: If no record class is registered.
            MalformedInputError: If the payload does not decode.
        """
        if registry is None:
            registry = default_registry()
        return registry.lookup(self.payload_type).unmarshal_record(self.raw_payload)

    def typed_record(self, record_type: type[R] | None) -> R:
        """
        Decode the payload as `record_type`, bypassing the registry.

        Args:
            record_type: Record class expected in the payload.

        Returns:
            The decoded record.

        Raises:
            NilReceiverError: If `record_type` is None.
            MalformedInputError: If the payload does not decode.
        """
        if record_type is None:
            raise NilReceiverError()
        return record_type.unmarshal_record(self.raw_payload)

    def equal(self, other: Envelope | None) -> bool:
        """Return True if `other` has the same key, type, payload and signature."""
        if other is None:
            return False
        return (
            self.public_key == other.public_key
            and self.payload_type == other.payload_type
            and self.raw_payload == other.raw_payload
            and self.signature == other.signature
        )


def _log_rejected(envelope: Envelope) -> None:
    """Log a signature rejection, naming the claimed producer."""
    # Deriving the peer ID hashes RSA and ECDSA keys; skip it unless it is logged.
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Rejected envelope from %s: invalid signature", envelope.public_key.to_peer_id()
        )


def make_envelope(
    private_key: IdentityKeypair,
    domain: str,
    payload_type: bytes,
    record: Record,
) -> Envelope:
    """
    Serialize `record` and sign it into an envelope.

    Args:
        private_key: Producer's key. Its public half goes into the envelope.
        domain: Signature domain of the record kind.
        payload_type: Tag of the record kind.
        record: The record to wrap.

    Raises:
        ValueError: If `domain` or `payload_type` is empty.
    """
    if not domain:
        raise ValueError("Envelope domain must not be empty")
    if not payload_type:
        raise ValueError("Envelope payload type must not be empty")

    payload = record.marshal_record()
    signature = private_key.sign(signing_message(domain, payload_type, payload))

    return Envelope(
        public_key=private_key.public_key(),
        payload_type=payload_type,
        raw_payload=payload,
        signature=signature,
    )


def consume_envelope(
    data: bytes,
    domain: str,
    registry: PayloadTypeRegistry | None = None,
) -> tuple[Envelope, Record]:
    """
    Unmarshal, validate and decode an envelope from untrusted bytes.

    Args:
        data: Marshalled envelope.
        domain: Domain the signature must be valid for.
        registry: Registry to dispatch on. Defaults to `default_registry()`.

    Returns:
        The validated envelope and its decoded record.

    Raises:
        MalformedInputError: If the envelope or its payload does not decode.
        InvalidSignatureError: If the signature is not valid for `domain`.
        UnknownPayloadTypeError: If the signature is valid but no record class
            is registered for the payload type. The validated envelope is
            attached to the exception.
    """
    envelope = Envelope.unmarshal(data)

    if not envelope.validate(domain):
        _log_rejected(envelope)
        raise InvalidSignatureError(domain)

    try:
        record = envelope.record(registry)
    except UnknownPayloadTypeError as e:
        logger.debug("Valid envelope with unknown payload type %r", envelope.payload_type)
        raise UnknownPayloadTypeError(envelope.payload_type, envelope=envelope) from e

    return envelope, record


def consume_typed_envelope(
    data: bytes,
    record_type: type[R] | None,
) -> tuple[Envelope, R]:
    """
    Unmarshal, validate and decode an envelope of a known record kind.

    The signature is checked against `record_type.DOMAIN` and the payload is
    decoded as `record_type` without consulting a registry.

    Raises:
        NilReceiverError: If `record_type` is None.
        MalformedInputError: If the envelope or its payload does not decode.
        InvalidSignatureError: If the signature is not valid for the domain.
    """
    if record_type is None:
        raise NilReceiverError()

    envelope = Envelope.unmarshal(data)

    if not envelope.validate(record_type.DOMAIN):
        _log_rejected(envelope)
        raise InvalidSignatureError(record_type.DOMAIN)

    return envelope, envelope.typed_record(record_type)
