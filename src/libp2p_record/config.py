"""Protocol constants for signed peer records."""

from typing_extensions import Final

PEER_RECORD_ENVELOPE_DOMAIN: Final = "libp2p-peer-record"
"""Signature domain of peer records, separating them from other signed record kinds."""

PEER_RECORD_ENVELOPE_PAYLOAD_TYPE: Final = b"/libp2p/peer-record"
"""Payload type tag identifying a peer record inside an envelope."""
