"""Record kinds and builders shared by the envelope and peer record tests."""

from __future__ import annotations

from collections.abc import Iterable
from typing import ClassVar

from multiaddr import Multiaddr
from typing_extensions import Self

from libp2p_record import IdentityKeypair, MalformedInputError, PeerRecord, Record
from libp2p_record.base import StrictBaseModel

DEFAULT_ADDR = "/ip4/1.2.3.4/tcp/4001"
"""Address used by records that do not care about their addresses."""


class NoteRecord(StrictBaseModel, Record):
    """A minimal record kind that is never registered by default."""

    DOMAIN: ClassVar[str] = "libp2p-test-note"
    PAYLOAD_TYPE: ClassVar[bytes] = b"/test/note"

    text: str

    def marshal_record(self) -> bytes:
        return self.text.encode("utf-8")

    @classmethod
    def unmarshal_record(cls, data: bytes) -> Self:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInputError("NoteRecord", str(e)) from e
        return cls(text=text)


class RawRecord(StrictBaseModel, Record):
    """A record whose payload is arbitrary bytes, for signing hand-made payloads."""

    DOMAIN: ClassVar[str] = "libp2p-test-raw"
    PAYLOAD_TYPE: ClassVar[bytes] = b"/test/raw"

    data: bytes

    def marshal_record(self) -> bytes:
        return self.data

    @classmethod
    def unmarshal_record(cls, data: bytes) -> Self:
        return cls(data=data)


class BrokenRecord(StrictBaseModel, Record):
    """A record that cannot be serialized."""

    DOMAIN: ClassVar[str] = "libp2p-test-broken"
    PAYLOAD_TYPE: ClassVar[bytes] = b"/test/broken"

    def marshal_record(self) -> bytes:
        raise ValueError("cannot serialize")

    @classmethod
    def unmarshal_record(cls, data: bytes) -> Self:
        return cls()


def make_peer_record(
    keypair: IdentityKeypair,
    addrs: Iterable[str] = (DEFAULT_ADDR,),
    seq: int = 1000,
) -> PeerRecord:
    """Build a peer record for `keypair` from address strings."""
    return PeerRecord(
        peer_id=keypair.to_peer_id(),
        addrs=tuple(Multiaddr(addr) for addr in addrs),
        seq=seq,
    )


def tamper(data: bytes, bit: int) -> bytes:
    """Flip one bit of `data`."""
    flipped = bytearray(data)
    flipped[bit // 8] ^= 1 << (bit % 8)
    return bytes(flipped)
