"""Test helpers for libp2p_record unit tests."""

from .builders import (
    DEFAULT_ADDR,
    BrokenRecord,
    NoteRecord,
    RawRecord,
    make_peer_record,
    tamper,
)

__all__ = [
    "DEFAULT_ADDR",
    "BrokenRecord",
    "NoteRecord",
    "RawRecord",
    "make_peer_record",
    "tamper",
]
