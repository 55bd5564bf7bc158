"""Decode the transport layer of a captured packet."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Callable

from sysprobe.errors import PacketParsingError, UnimplementedProtocolError
from sysprobe.net.layer import Layer
from sysprobe.net.network import Network, NetworkProtocol

IP_PROTOCOL_ICMP = 1
IP_PROTOCOL_TCP = 6
IP_PROTOCOL_UDP = 17
IP_PROTOCOL_ICMPV6 = 58

_IP_PROTOCOL_NAMES = {
    0: "Hopopt",
    1: "Icmp",
    2: "Igmp",
    3: "Ggp",
    4: "Ipv4",
    5: "St",
    6: "Tcp",
    7: "Cbt",
    8: "Egp",
    9: "Igp",
    17: "Udp",
    41: "Ipv6",
    43: "Ipv6Route",
    44: "Ipv6Frag",
    46: "Rsvp",
    47: "Gre",
    50: "Esp",
    51: "Ah",
    58: "Icmpv6",
    59: "Ipv6NoNxt",
    60: "Ipv6Opts",
    103: "Pim",
    112: "Vrrp",
    132: "Sctp",
    136: "UdpLite",
    253: "Test1",
    254: "Test2",
}

_TCP = struct.Struct("!HHIIHHHH")
_UDP = struct.Struct("!HHHH")
_ICMP = struct.Struct("!BBH")


def ip_protocol_name(number: int) -> str:
    """Return the name of an IP next-header protocol number."""
    return _IP_PROTOCOL_NAMES.get(number, "unknown")


class TransportProtocol(enum.Enum):
    """Transport layer protocols the decoder understands.

    ICMP belongs to the network layer but is handled here.
    """

    TCP = "tcp"
    UDP = "udp"
    ICMPV4 = "icmpv4"
    ICMPV6 = "icmpv6"

    def __str__(self) -> str:
        return self.value


@dataclass
class Tcp:
    """A TCP segment."""

    source: int
    destination: int
    sequence: int
    acknowledgement: int
    data_offset: int
    reserved: int
    flags: int
    window: int
    checksum: int
    urgent_ptr: int
    options: bytes
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Tcp | None:
        """Decode a segment, or return None when it is shorter than a header."""
        if len(packet) < _TCP.size:
            return None
        (source, destination, sequence, acknowledgement, offset_flags,
         window, checksum, urgent_ptr) = _TCP.unpack_from(packet)
        data_offset = offset_flags >> 12
        options_end = max(data_offset * 4, _TCP.size)
        options = bytes(packet[_TCP.size:options_end])
        return cls(
            source=source,
            destination=destination,
            sequence=sequence,
            acknowledgement=acknowledgement,
            data_offset=data_offset,
            reserved=(offset_flags >> 9) & 0x07,
            flags=offset_flags & 0x01FF,
            window=window,
            checksum=checksum,
            urgent_ptr=urgent_ptr,
            options=options,
            payload=bytes(packet[_TCP.size + len(options):]),
        )


@dataclass
class Udp:
    """A UDP datagram."""

    source: int
    destination: int
    length: int
    checksum: int
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Udp | None:
        """Decode a datagram, or return None when it is shorter than a header."""
        if len(packet) < _UDP.size:
            return None
        source, destination, length, checksum = _UDP.unpack_from(packet)
        return cls(
            source=source,
            destination=destination,
            length=length,
            checksum=checksum,
            payload=bytes(packet[_UDP.size:]),
        )


@dataclass
class Icmp:
    """An ICMP message for IPv4."""

    icmp_type: int
    icmp_code: int
    checksum: int
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Icmp | None:
        """Decode a message, or return None when it is shorter than a header."""
        if len(packet) < _ICMP.size:
            return None
        icmp_type, icmp_code, checksum = _ICMP.unpack_from(packet)
        return cls(icmp_type, icmp_code, checksum, bytes(packet[_ICMP.size:]))


@dataclass
class Icmpv6:
    """An ICMP message for IPv6."""

    icmpv6_type: int
    icmpv6_code: int
    checksum: int
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Icmpv6 | None:
        """Decode a message, or return None when it is shorter than a header."""
        if len(packet) < _ICMP.size:
            return None
        icmpv6_type, icmpv6_code, checksum = _ICMP.unpack_from(packet)
        return cls(icmpv6_type, icmpv6_code, checksum, bytes(packet[_ICMP.size:]))


@dataclass
class Transport:
    """The decoded transport layer of a packet."""

    protocol: TransportProtocol
    tcp: Tcp | None = None
    udp: Udp | None = None
    icmpv4: Icmp | None = None
    icmpv6: Icmpv6 | None = None


def parse_tcp(packet: bytes) -> Transport | None:
    """Decode a TCP segment, or return None if it is too short."""
    tcp = Tcp.parse(packet)
    return None if tcp is None else Transport(protocol=TransportProtocol.TCP, tcp=tcp)


def parse_udp(packet: bytes) -> Transport | None:
    """Decode a UDP datagram, or return None if it is too short."""
    udp = Udp.parse(packet)
    return None if udp is None else Transport(protocol=TransportProtocol.UDP, udp=udp)


def parse_icmpv4(packet: bytes) -> Transport | None:
    """Decode an ICMPv4 message, or return None if it is too short."""
    icmp = Icmp.parse(packet)
    return None if icmp is None else Transport(protocol=TransportProtocol.ICMPV4, icmpv4=icmp)


def parse_icmpv6(packet: bytes) -> Transport | None:
    """Decode an ICMPv6 message, or return None if it is too short."""
    icmp = Icmpv6.parse(packet)
    return None if icmp is None else Transport(protocol=TransportProtocol.ICMPV6, icmpv6=icmp)


_Parser = Callable[[bytes], "Transport | None"]

_IPV4_PARSERS: dict[int, _Parser] = {
    IP_PROTOCOL_TCP: parse_tcp,
    IP_PROTOCOL_UDP: parse_udp,
    IP_PROTOCOL_ICMP: parse_icmpv4,
}

_IPV6_PARSERS: dict[int, _Parser] = {
    IP_PROTOCOL_TCP: parse_tcp,
    IP_PROTOCOL_UDP: parse_udp,
    IP_PROTOCOL_ICMPV6: parse_icmpv6,
}


def read_packet(network: Network) -> Transport:
    """Decode the transport layer carried by a network packet."""
    if network.protocol is NetworkProtocol.IPV4:
        if network.ipv4 is None:
            raise PacketParsingError()
        number, payload, parsers = network.ipv4.next_level_protocol, network.ipv4.payload, _IPV4_PARSERS
    elif network.protocol is NetworkProtocol.IPV6:
        if network.ipv6 is None:
            raise PacketParsingError()
        number, payload, parsers = network.ipv6.next_header, network.ipv6.payload, _IPV6_PARSERS
    else:
        raise UnimplementedProtocolError(str(Layer.TRANSPORT), str(network.protocol))
    parser = parsers.get(number)
    if parser is None:
        raise UnimplementedProtocolError(str(Layer.TRANSPORT), ip_protocol_name(number))
    transport = parser(payload)
    if transport is None:
        raise PacketParsingError()
    return transport