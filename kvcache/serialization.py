"""MessagePack serialization shared by all cache backends."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import msgspec

from kvcache.exceptions import DeserializationError, SerializationError


class Envelope(msgspec.Struct, frozen=True, array_like=True):
    """Stored form of a file cache entry."""

    value: Any
    expires_at: int


def _reject_naive_datetimes(value: Any) -> None:
    # msgpack only has a timestamp type for aware datetimes; naive ones
    # would be written as strings and read back as str.
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise SerializationError(
                f"Cannot serialize datetime without a timezone: {value.isoformat()}"
            )
    elif isinstance(value, dict):
        for key, item in value.items():
            _reject_naive_datetimes(key)
            _reject_naive_datetimes(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            _reject_naive_datetimes(item)


class Serializer:
    """Encode cache values and envelopes with msgspec.

    Round-trips None, bool, int, float, str, bytes, lists, dicts and
    timezone-aware datetimes (decoded as UTC). Tuples and sets decode as
    lists. Datetimes without a timezone are rejected.
    """

    def __init__(self):
        self.encoder = msgspec.msgpack.Encoder()
        self.value_decoder = msgspec.msgpack.Decoder()
        self.envelope_decoder = msgspec.msgpack.Decoder(Envelope)

    def dumps(self, value: Any) -> bytes:
        """Encode a bare value."""
        _reject_naive_datetimes(value)
        try:
            return self.encoder.encode(value)
        except (msgspec.EncodeError, TypeError, OverflowError) as e:
            raise SerializationError(
                f"Cannot serialize value of type {type(value).__name__}: {e}"
            ) from e

    def loads(self, data: bytes, location: str = "<payload>") -> Any:
        """Decode a bare value."""
        try:
            return self.value_decoder.decode(data)
        except msgspec.DecodeError as e:
            raise DeserializationError(location, str(e)) from e

    def dump_envelope(self, value: Any, expires_at: int) -> bytes:
        """Encode a value together with its expiry timestamp."""
        _reject_naive_datetimes(value)
        return self.dumps(Envelope(value=value, expires_at=expires_at))

    def load_envelope(self, data: bytes, location: str = "<payload>") -> Envelope:
        """Decode an envelope written by dump_envelope."""
        try:
            return self.envelope_decoder.decode(data)
        except msgspec.DecodeError as e:
            raise DeserializationError(location, str(e)) from e
