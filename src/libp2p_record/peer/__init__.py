"""Peer records: signed address advertisements."""

from .record import (
    AddrInfo,
    PeerRecord,
    SeqNumber,
    new_peer_record,
    peer_record_from_addr_info,
    timestamp_seq,
)

__all__ = [
    "AddrInfo",
    "PeerRecord",
    "SeqNumber",
    "new_peer_record",
    "peer_record_from_addr_info",
    "timestamp_seq",
]
