"""
Signed, extensible peer records for libp2p.

A producer wraps a record in an envelope signed with its identity key. A
consumer verifies the envelope and decodes the payload into the record kind
registered for its payload type.
"""

from .config import PEER_RECORD_ENVELOPE_DOMAIN, PEER_RECORD_ENVELOPE_PAYLOAD_TYPE
from .exceptions import (
    IdentityMismatchError,
    InvalidSignatureError,
    MalformedInputError,
    NilReceiverError,
    RecordError,
    UnknownPayloadTypeError,
)
from .identity import IdentityKeypair, KeyType, PeerId, PublicKey
from .peer import (
    AddrInfo,
    PeerRecord,
    new_peer_record,
    peer_record_from_addr_info,
    timestamp_seq,
)
from .record import (
    Envelope,
    PayloadTypeRegistry,
    Record,
    consume_envelope,
    consume_typed_envelope,
    default_registry,
    make_envelope,
)

__all__ = [
    "PEER_RECORD_ENVELOPE_DOMAIN",
    "PEER_RECORD_ENVELOPE_PAYLOAD_TYPE",
    "RecordError",
    "MalformedInputError",
    "InvalidSignatureError",
    "UnknownPayloadTypeError",
    "IdentityMismatchError",
    "NilReceiverError",
    "IdentityKeypair",
    "KeyType",
    "PeerId",
    "PublicKey",
    "AddrInfo",
    "PeerRecord",
    "new_peer_record",
    "peer_record_from_addr_info",
    "timestamp_seq",
    "Envelope",
    "PayloadTypeRegistry",
    "Record",
    "consume_envelope",
    "consume_typed_envelope",
    "default_registry",
    "make_envelope",
]
