"""
Peer identity: public keys, signing key pairs and peer IDs.

The signing primitives come from `cryptography`; this package only adds the
libp2p-crypto key encoding and the multihash-based peer ID derivation.
"""

from .keypair import IdentityKeypair
from .keys import KeyType, PublicKey
from .peer_id import Base58, Multihash, MultihashCode, PeerId

__all__ = [
    "IdentityKeypair",
    "KeyType",
    "PublicKey",
    "PeerId",
    "Multihash",
    "MultihashCode",
    "Base58",
]
