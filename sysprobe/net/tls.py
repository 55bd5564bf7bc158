"""Decode the record header of a TLS packet."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from sysprobe.errors import PacketParsingError

_HEADER = struct.Struct("!BHH")


class TlsContentType(enum.IntEnum):
    """The content type of a TLS record."""

    CHANGE_CIPHER_SPEC = 20
    ALERT = 21
    HANDSHAKE = 22
    APPLICATION_DATA = 23
    HEARTBEAT = 24


class TlsVersion(enum.IntEnum):
    """The protocol version announced by a TLS record."""

    SSL20 = 2
    SSL30 = 768
    TLS10 = 769
    TLS11 = 770
    TLS12 = 771
    TLS13 = 772


def parse_header_bytes(data: bytes) -> tuple[bytes, tuple[int, int, int]]:
    """Split off the record header, returning the rest and (type, version, length)."""
    if len(data) < _HEADER.size:
        raise PacketParsingError()
    content_type, version, length = _HEADER.unpack_from(data)
    return bytes(data[_HEADER.size:]), (content_type, version, length)


@dataclass
class Tls:
    """A TLS record."""

    content_type: TlsContentType
    version: TlsVersion
    length: int
    payload: bytes

    @classmethod
    def new(cls, content_type: int, version: int, length: int, payload: bytes) -> Tls:
        """Build a record from raw header values, rejecting unknown ones."""
        try:
            return cls(
                content_type=TlsContentType(content_type),
                version=TlsVersion(version),
                length=length,
                payload=bytes(payload),
            )
        except ValueError:
            raise PacketParsingError() from None

    @classmethod
    def from_bytes(cls, data: bytes) -> Tls:
        """Decode a TLS record from raw bytes."""
        payload, (content_type, version, length) = parse_header_bytes(data)
        return cls.new(content_type, version, length, payload)