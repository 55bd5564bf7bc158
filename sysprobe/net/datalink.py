"""Decode the data link layer of a captured frame."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from sysprobe.errors import UnimplementedProtocolError
from sysprobe.net.layer import Layer

ETHERNET_HEADER_LENGTH = 14
_ETHERNET_HEADER = struct.Struct("!6s6sH")


class DataLinkProtocol(enum.Enum):
    """Data link protocols the decoder understands."""

    ETHERNET = "ethernet"

    def __str__(self) -> str:
        return self.value


@dataclass
class Ethernet:
    """An Ethernet II frame."""

    destination: str
    source: str
    ethertype: int
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Ethernet | None:
        """Decode a frame, or return None when it is shorter than a header."""
        if len(packet) < ETHERNET_HEADER_LENGTH:
            return None
        destination, source, ethertype = _ETHERNET_HEADER.unpack_from(packet)
        return cls(
            destination=destination.hex(":"),
            source=source.hex(":"),
            ethertype=ethertype,
            payload=bytes(packet[ETHERNET_HEADER_LENGTH:]),
        )


@dataclass
class DataLink:
    """The decoded data link layer of a packet."""

    protocol: DataLinkProtocol
    ethernet: Ethernet | None = None


def read_packet(packet: bytes) -> DataLink:
    """Decode the data link layer of a raw captured packet."""
    ethernet = Ethernet.parse(packet)
    if ethernet is None:
        raise UnimplementedProtocolError(str(Layer.DATA_LINK), "unknown")
    return DataLink(protocol=DataLinkProtocol.ETHERNET, ethernet=ethernet)