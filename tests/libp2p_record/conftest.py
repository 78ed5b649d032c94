"""Shared fixtures for libp2p_record tests."""

from __future__ import annotations

import pytest

from libp2p_record import IdentityKeypair, KeyType, PeerRecord

from tests.libp2p_record.helpers import make_peer_record


@pytest.fixture
def keypair() -> IdentityKeypair:
    """secp256k1 identity key."""
    return IdentityKeypair.generate()


@pytest.fixture
def ed25519_keypair() -> IdentityKeypair:
    """Ed25519 identity key."""
    return IdentityKeypair.generate(KeyType.ED25519)


@pytest.fixture
def other_keypair() -> IdentityKeypair:
    """A second, unrelated secp256k1 identity key."""
    return IdentityKeypair.generate()


@pytest.fixture
def peer_record(keypair: IdentityKeypair) -> PeerRecord:
    """A record for `keypair` advertising one TCP address at seq 1000."""
    return make_peer_record(keypair)
