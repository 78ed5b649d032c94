"""
Peer records.

A peer record is a peer's signed advertisement of the addresses it can be
reached at. Peers exchange them directly (for example during identify) or
through a peer routing provider such as a DHT.

Wire format (peer_record.proto)::

    message PeerRecord {
        message AddressInfo {
            bytes multiaddr = 1;
        }
        bytes peer_id = 1;
        uint64 seq = 2;
        repeated AddressInfo addresses = 3;
    }

Ordering
--------

Records from one peer are ordered by `seq`: a newer record MUST carry a
greater `seq` than the records it replaces. `new_peer_record` uses the
current time in nanoseconds, which increases under normal clock behaviour.
Callers that need strict monotonicity across clock adjustments must track
the last `seq` they issued. A `seq` of zero is valid, but other peers may
ignore or deprioritize such records.

Unknown Addresses
-----------------

Decoding skips addresses that do not parse instead of rejecting the record.
A newer peer may advertise address protocols an older decoder does not know,
and the rest of its record is still useful.

Sharing a Record
----------------

::

    record = new_peer_record(keypair.to_peer_id(), addrs)
    data = record.marshal_signed(keypair)

    envelope, received = consume_envelope(data, PEER_RECORD_ENVELOPE_DOMAIN)

References:
    - https://github.com/libp2p/specs/blob/master/RFC/0003-routing-records.md
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Annotated, Any, ClassVar

from multiaddr import Multiaddr
from multiaddr.exceptions import Error as MultiaddrError
from pydantic import Field, field_validator
from typing_extensions import Self

from .. import protobuf
from ..base import StrictBaseModel
from ..config import PEER_RECORD_ENVELOPE_DOMAIN, PEER_RECORD_ENVELOPE_PAYLOAD_TYPE
from ..exceptions import IdentityMismatchError, MalformedInputError
from ..identity import IdentityKeypair, PeerId
from ..record import Envelope, Record, make_envelope
from ..varint import MAX_UINT64

__all__ = [
    "AddrInfo",
    "PeerRecord",
    "SeqNumber",
    "new_peer_record",
    "peer_record_from_addr_info",
    "timestamp_seq",
]

logger = logging.getLogger(__name__)

SeqNumber = Annotated[int, Field(ge=0, le=MAX_UINT64)]
"""Unsigned 64-bit record sequence number."""

# Field numbers of the PeerRecord message
_FIELD_PEER_ID = 1
_FIELD_SEQ = 2
_FIELD_ADDRESSES = 3

# Field number of the nested AddressInfo message
_FIELD_MULTIADDR = 1


class AddrInfo(StrictBaseModel):
    """A peer ID together with the addresses it listens on."""

    peer_id: PeerId
    addrs: tuple[Multiaddr, ...] = ()

    @field_validator("addrs", mode="before")
    @classmethod
    def _coerce_addrs(cls, v: Any) -> Any:
        """Accept a list of addresses; they are stored as a tuple."""
        return tuple(v) if isinstance(v, list) else v


class PeerRecord(StrictBaseModel, Record):
    """The addresses a peer advertises, ordered in time by `seq`."""

    DOMAIN: ClassVar[str] = PEER_RECORD_ENVELOPE_DOMAIN
    PAYLOAD_TYPE: ClassVar[bytes] = PEER_RECORD_ENVELOPE_PAYLOAD_TYPE

    peer_id: PeerId
    """The peer this record describes. Must match the signing key."""

    addrs: tuple[Multiaddr, ...] = ()
    """Public addresses of the peer. Order is kept but carries no meaning."""

    seq: SeqNumber = 0
    """Sequence number. MUST increase with every new record from the peer."""

    @field_validator("addrs", mode="before")
    @classmethod
    def _coerce_addrs(cls, v: Any) -> Any:
        """Accept a list of addresses; they are stored as a tuple."""
        return tuple(v) if isinstance(v, list) else v

    def marshal_record(self) -> bytes:
        """Serialize as the PeerRecord protobuf."""
        result = bytearray(protobuf.encode_bytes(_FIELD_PEER_ID, self.peer_id.to_bytes()))
        if self.seq:
            result.extend(protobuf.encode_uint64(_FIELD_SEQ, self.seq))
        for addr in self.addrs:
            address_info = protobuf.encode_bytes(_FIELD_MULTIADDR, addr.to_bytes())
            result.extend(protobuf.encode_bytes(_FIELD_ADDRESSES, address_info))
        return bytes(result)

    @classmethod
    def unmarshal_record(cls, data: bytes) -> Self:
        """
        Parse a PeerRecord protobuf.

        Addresses that are not valid multiaddrs are dropped.

        Raises:
            MalformedInputError: If the protobuf is corrupt or the peer ID is
                not a valid multihash.
        """
        peer_id_bytes = b""
        seq = 0
        addrs: list[Multiaddr] = []

        for field_number, _, value in protobuf.iter_fields(data, "PeerRecord"):
            if field_number == _FIELD_PEER_ID:
                peer_id_bytes = protobuf.expect_bytes(value, "PeerRecord", "peer_id")
            elif field_number == _FIELD_SEQ:
                seq = protobuf.expect_varint(value, "PeerRecord", "seq")
            elif field_number == _FIELD_ADDRESSES:
                addr = _decode_address(protobuf.expect_bytes(value, "PeerRecord", "addresses"))
                if addr is not None:
                    addrs.append(addr)

        try:
            peer_id = PeerId.from_bytes(peer_id_bytes)
        except ValueError as e:
            raise MalformedInputError("PeerRecord", f"invalid peer_id: {e}") from e

        return cls(peer_id=peer_id, addrs=tuple(addrs), seq=seq)

    def sign(self, private_key: IdentityKeypair) -> Envelope:
        """
        Wrap this record in an envelope signed by `private_key`.

        Raises:
            IdentityMismatchError: If the key does not belong to `peer_id`.
        """
        signer = private_key.to_peer_id()
        if signer != self.peer_id:
            raise IdentityMismatchError(expected=self.peer_id, actual=signer)
        return make_envelope(private_key, self.DOMAIN, self.PAYLOAD_TYPE, self)

    def marshal_signed(self, private_key: IdentityKeypair) -> bytes:
        """Sign this record and marshal the envelope in one step."""
        return self.sign(private_key).marshal()

    def equal(self, other: PeerRecord | None) -> bool:
        """
        Compare peer ID, seq and addresses.

        Addresses are compared in order, one multiaddr at a time.
        """
        if other is None:
            return False
        if self.peer_id != other.peer_id or self.seq != other.seq:
            return False
        if len(self.addrs) != len(other.addrs):
            return False
        return all(mine == theirs for mine, theirs in zip(self.addrs, other.addrs, strict=True))

    def to_addr_info(self) -> AddrInfo:
        """Return the peer ID and addresses of this record."""
        return AddrInfo(peer_id=self.peer_id, addrs=self.addrs)


def _decode_address(address_info: bytes) -> Multiaddr | None:
    """Parse one AddressInfo message, returning None for unusable addresses."""
    raw = b""
    for field_number, _, value in protobuf.iter_fields(address_info, "AddressInfo"):
        if field_number == _FIELD_MULTIADDR:
            raw = protobuf.expect_bytes(value, "AddressInfo", "multiaddr")

    if not raw:
        logger.debug("Dropping empty address from peer record")
        return None

    try:
        addr = Multiaddr(raw)
        canonical = Multiaddr(str(addr)).to_bytes()
    except (MultiaddrError, ValueError, LookupError, IndexError) as e:
        logger.debug("Dropping unparsable address %s from peer record: %s", raw.hex(), e)
        return None

    # A short fixed-width component can still parse; it must re-encode to the same bytes.
    if canonical != raw:
        logger.debug("Dropping non-canonical address %s from peer record", raw.hex())
        return None

    return addr


def timestamp_seq() -> int:
    """Return a sequence number based on the current time in nanoseconds."""
    return time.time_ns()


def new_peer_record(peer_id: PeerId, addrs: Iterable[Multiaddr] = ()) -> PeerRecord:
    """Create a record with a timestamp-based sequence number."""
    return PeerRecord(peer_id=peer_id, addrs=tuple(addrs), seq=timestamp_seq())


def peer_record_from_addr_info(info: AddrInfo) -> PeerRecord:
    """Create a record for `info` with a timestamp-based sequence number."""
    return new_peer_record(info.peer_id, info.addrs)
