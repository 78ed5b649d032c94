"""Exception hierarchy for envelope and record processing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .identity import PeerId
    from .record.envelope import Envelope


class RecordError(Exception):
    """
    Base exception for all envelope and record errors.

    None of these are fatal: each one rejects a single message.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class MalformedInputError(RecordError):
    """
    Raised when bytes cannot be decoded into the expected message.

    Attributes:
        type_name: The message being decoded.
        detail: Description of what went wrong.
        offset: The byte offset where decoding failed (if known).
    """

    def __init__(
        self,
        type_name: str,
        detail: str,
        *,
        offset: int | None = None,
    ) -> None:
        self.type_name = type_name
        self.detail = detail
        self.offset = offset

        msg = f"Failed to decode {type_name}: {detail}"
        if offset is not None:
            msg = f"{msg} (at byte offset {offset})"

        super().__init__(msg)


class InvalidSignatureError(RecordError):
    """Raised when an envelope signature does not verify for the expected domain."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        super().__init__(f"Invalid envelope signature for domain {domain!r}")


class UnknownPayloadTypeError(RecordError):
    """
    Raised when no record kind is registered for a payload type.

    The signature and the payload's decodability are independent facts: when
    raised while consuming an envelope, the signature has already been checked
    and the validated envelope is attached.

    Attributes:
        payload_type: The unregistered tag.
        envelope: The validated envelope, if raised during consumption.
    """

    def __init__(self, payload_type: bytes, *, envelope: Envelope | None = None) -> None:
        self.payload_type = payload_type
        self.envelope = envelope
        super().__init__(f"No record type registered for payload type {payload_type!r}")


class IdentityMismatchError(RecordError):
    """
    Raised when signing a record with a key that does not match its peer ID.

    Attributes:
        expected: The peer ID claimed by the record.
        actual: The peer ID derived from the signing key.
    """

    def __init__(self, expected: PeerId, actual: PeerId) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Signing key belongs to {actual}, record is for {expected}")


class NilReceiverError(RecordError):
    """Raised when decoding a payload without a destination record type."""

    def __init__(self) -> None:
        super().__init__("Cannot decode payload into a nil record type")
