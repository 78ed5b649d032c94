"""
Signed envelopes and the payload type registry.

An envelope carries any registered record kind. The registry maps payload
type tags to the record classes that decode them.
"""

from .envelope import (
    Envelope,
    consume_envelope,
    consume_typed_envelope,
    make_envelope,
    signing_message,
)
from .record import Record
from .registry import PayloadTypeRegistry, default_registry

__all__ = [
    "Envelope",
    "Record",
    "PayloadTypeRegistry",
    "default_registry",
    "make_envelope",
    "consume_envelope",
    "consume_typed_envelope",
    "signing_message",
]
