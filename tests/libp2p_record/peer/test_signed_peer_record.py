"""End-to-end tests for signed peer records on the wire."""

from __future__ import annotations

import pytest
from multiaddr import Multiaddr

from libp2p_record import (
    PEER_RECORD_ENVELOPE_DOMAIN,
    IdentityKeypair,
    InvalidSignatureError,
    KeyType,
    PeerRecord,
    consume_envelope,
    consume_typed_envelope,
    make_envelope,
)

from tests.libp2p_record.helpers import DEFAULT_ADDR, make_peer_record


class TestSignedPeerRecord:
    """A peer shares its addresses; another peer receives them."""

    @pytest.mark.parametrize("key_type", [KeyType.SECP256K1, KeyType.ED25519])
    def test_share_and_receive(self, key_type: KeyType) -> None:
        """The receiver gets back exactly what the sender advertised."""
        sender = IdentityKeypair.generate(key_type)
        record = make_peer_record(sender)

        envelope, received = consume_envelope(
            record.marshal_signed(sender), PEER_RECORD_ENVELOPE_DOMAIN
        )

        assert isinstance(received, PeerRecord)
        assert received.peer_id == sender.to_peer_id()
        assert received.seq == 1000
        assert received.addrs == (Multiaddr(DEFAULT_ADDR),)
        assert envelope.public_key.to_peer_id() == received.peer_id

    def test_altered_payload_byte(self, keypair: IdentityKeypair) -> None:
        """Changing the seq on the wire invalidates the record."""
        record = make_peer_record(keypair)
        payload = record.marshal_record()
        data = bytearray(record.marshal_signed(keypair))
        # The payload opens with the 41-byte peer_id field, then seq 1000 as 0x10 0xe8 0x07.
        seq_at = data.index(payload) + 41
        assert data[seq_at : seq_at + 3] == b"\x10\xe8\x07"
        data[seq_at + 1] = 0xE7

        with pytest.raises(InvalidSignatureError):
            consume_envelope(bytes(data), PEER_RECORD_ENVELOPE_DOMAIN)

    def test_altered_address(self, keypair: IdentityKeypair) -> None:
        """Redirecting the advertised address invalidates the record."""
        record = make_peer_record(keypair)
        payload = record.marshal_record()
        data = bytearray(record.marshal_signed(keypair))
        # The payload ends with the address; its last IPv4 octet sits before the 3-byte tcp part.
        last_octet_at = data.index(payload) + len(payload) - 4
        assert data[last_octet_at] == 4
        data[last_octet_at] = 5

        with pytest.raises(InvalidSignatureError):
            consume_typed_envelope(bytes(data), PeerRecord)

    def test_newer_record_supersedes(self, keypair: IdentityKeypair) -> None:
        """A receiver can order two records from the same peer by seq."""
        old = make_peer_record(keypair, ("/ip4/1.2.3.4/tcp/4001",), seq=1000)
        new = make_peer_record(keypair, ("/ip4/5.6.7.8/tcp/4001",), seq=1001)

        _, old_received = consume_typed_envelope(old.marshal_signed(keypair), PeerRecord)
        _, new_received = consume_typed_envelope(new.marshal_signed(keypair), PeerRecord)

        assert new_received.seq > old_received.seq
        assert str(new_received.addrs[0]) == "/ip4/5.6.7.8/tcp/4001"

    def test_signer_identity_is_on_the_envelope(
        self, keypair: IdentityKeypair, other_keypair: IdentityKeypair
    ) -> None:
        """A record wrapped by another key validates, but names a different peer than its signer."""
        record = make_peer_record(keypair)
        envelope = make_envelope(other_keypair, record.DOMAIN, record.PAYLOAD_TYPE, record)

        checked, received = consume_envelope(envelope.marshal(), PEER_RECORD_ENVELOPE_DOMAIN)

        assert isinstance(received, PeerRecord)
        assert not received.peer_id.matches_public_key(checked.public_key)

    def test_received_payload_matches_signed_bytes(
        self, keypair: IdentityKeypair, peer_record: PeerRecord
    ) -> None:
        """Re-encoding the received record gives exactly the bytes the sender signed."""
        envelope, received = consume_typed_envelope(peer_record.marshal_signed(keypair), PeerRecord)

        assert received.marshal_record() == envelope.raw_payload == peer_record.marshal_record()
