"""
The record capability.

A record is any value that can serialize itself to bytes and be rebuilt from
those bytes. Envelopes carry records as opaque payloads; the payload type tag
in the envelope says which record class can read them back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from typing_extensions import Self


class Record(ABC):
    """
    Base class of every record kind that can travel in an envelope.

    Subclasses declare the envelope domain and payload type they are signed
    under, and implement the two halves of their wire format.
    """

    DOMAIN: ClassVar[str]
    """Signature domain of this record kind."""

    PAYLOAD_TYPE: ClassVar[bytes]
    """Payload type tag of this record kind."""

    @abstractmethod
    def marshal_record(self) -> bytes:
        """Serialize this record to its wire format."""

    @classmethod
    @abstractmethod
    def unmarshal_record(cls, data: bytes) -> Self:
        """
        Build a record from its wire format.

        Raises:
            MalformedInputError: If `data` is not a valid encoding.
        """
