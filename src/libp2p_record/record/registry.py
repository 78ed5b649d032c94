"""
Payload type registry.

Maps an envelope's payload type tag to the record class that decodes it, so
a consumer can turn opaque payload bytes into the right concrete record.

Reads vastly outnumber writes: record kinds are registered once at start-up
and looked up for every consumed envelope. The registry is copy-on-write.
Writers serialize on a lock, build a new mapping and publish it with a single
reference assignment. Readers never lock and always see a complete mapping.

The shared default registry is created on the first call to
`default_registry()` and comes with the built-in record kinds. Register
application record kinds on it during start-up, before envelopes are
consumed from several threads.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType

from ..exceptions import UnknownPayloadTypeError
from .record import Record

__all__ = [
    "PayloadTypeRegistry",
    "default_registry",
]

logger = logging.getLogger(__name__)


class PayloadTypeRegistry:
    """Thread-safe mapping from payload type tag to record class."""

    def __init__(self) -> None:
        self._types: Mapping[bytes, type[Record]] = MappingProxyType({})
        self._write_lock = threading.Lock()

    def register(self, payload_type: bytes, record_type: type[Record]) -> None:
        """
        Register the record class that decodes `payload_type` payloads.

        Registering the same class twice is a no-op.

        Raises:
            ValueError: If the tag is empty or already taken by another class.
        """
        if not payload_type:
            raise ValueError("Payload type must not be empty")

        with self._write_lock:
            existing = self._types.get(payload_type)
            if existing is record_type:
                return
            if existing is not None:
                raise ValueError(
                    f"Payload type {payload_type!r} already registered to {existing.__name__}"
                )

            updated = dict(self._types)
            updated[payload_type] = record_type
            self._types = MappingProxyType(updated)

        logger.debug("Registered payload type %r -> %s", payload_type, record_type.__name__)

    def get(self, payload_type: bytes) -> type[Record] | None:
        """Return the record class for `payload_type`, or None if unregistered."""
        return self._types.get(payload_type)

    def lookup(self, payload_type: bytes) -> type[Record]:
        """
        Return the record class for `payload_type`.

        Raises:
            UnknownPayloadTypeError: If nothing is registered for the tag.
        """
        record_type = self._types.get(payload_type)
        if record_type is None:
            raise UnknownPayloadTypeError(payload_type)
        return record_type

    def __contains__(self, payload_type: object) -> bool:
        return payload_type in self._types

    def __len__(self) -> int:
        return len(self._types)


_default: PayloadTypeRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> PayloadTypeRegistry:
    """Return the process-wide registry, creating it with the built-in record kinds."""
    global _default

    if _default is None:
        with _default_lock:
            if _default is None:
                # Deferred: peer records import the envelope module, which uses this one.
                from ..peer.record import PeerRecord

                registry = PayloadTypeRegistry()
                registry.register(PeerRecord.PAYLOAD_TYPE, PeerRecord)
                _default = registry

    return _default
