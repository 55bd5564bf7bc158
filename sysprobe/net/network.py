"""Decode the network layer of a captured packet."""

from __future__ import annotations

import enum
import ipaddress
import struct
from dataclasses import dataclass

from sysprobe.errors import PacketParsingError, UnimplementedProtocolError
from sysprobe.net.datalink import DataLink, DataLinkProtocol
from sysprobe.net.layer import Layer

_ETHERTYPE_IPV4 = 0x0800
_ETHERTYPE_ARP = 0x0806
_ETHERTYPE_IPV6 = 0x86DD

_ETHER_TYPE_NAMES = {
    0x0800: "Ipv4",
    0x0806: "Arp",
    0x0842: "WakeOnLan",
    0x22F3: "Trill",
    0x6003: "DECnet",
    0x8035: "Rarp",
    0x809B: "AppleTalk",
    0x80F3: "Aarp",
    0x8137: "Ipx",
    0x8204: "Qnx",
    0x86DD: "Ipv6",
    0x8808: "FlowControl",
    0x8819: "CobraNet",
    0x8847: "Mpls",
    0x8848: "MplsMcast",
    0x8863: "PppoeDiscovery",
    0x8864: "PppoeSession",
    0x8100: "Vlan",
    0x88A8: "PBridge",
    0x88CC: "Lldp",
    0x88F7: "Ptp",
    0x8902: "Cfm",
    0x9100: "QinQ",
}

_ARP = struct.Struct("!HHBBH6s4s6s4s")
_IPV4 = struct.Struct("!BBHHHBBH4s4s")
_IPV6 = struct.Struct("!IHBB16s16s")


def _slice(data: bytes, start: int, length: int) -> bytes:
    start = min(start, len(data))
    return bytes(data[start:min(start + length, len(data))])


class NetworkProtocol(enum.Enum):
    """Network layer protocols the decoder understands."""

    ARP = "arp"
    IPV4 = "ipv4"
    IPV6 = "ipv6"

    def __str__(self) -> str:
        return self.value


@dataclass
class Arp:
    """An ARP packet for Ethernet and IPv4."""

    hardware_type: int
    protocol_type: int
    hw_addr_len: int
    proto_addr_len: int
    operation: int
    sender_hw_addr: str
    sender_proto_addr: ipaddress.IPv4Address
    target_hw_addr: str
    target_proto_addr: ipaddress.IPv4Address
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Arp | None:
        if len(packet) < _ARP.size:
            return None
        (hardware_type, protocol_type, hw_len, proto_len, operation,
         sender_hw, sender_proto, target_hw, target_proto) = _ARP.unpack_from(packet)
        return cls(
            hardware_type=hardware_type,
            protocol_type=protocol_type,
            hw_addr_len=hw_len,
            proto_addr_len=proto_len,
            operation=operation,
            sender_hw_addr=sender_hw.hex(":"),
            sender_proto_addr=ipaddress.IPv4Address(sender_proto),
            target_hw_addr=target_hw.hex(":"),
            target_proto_addr=ipaddress.IPv4Address(target_proto),
            payload=bytes(packet[_ARP.size:]),
        )


@dataclass
class Ipv4:
    """An IPv4 packet."""

    version: int
    header_length: int
    dscp: int
    ecn: int
    total_length: int
    identification: int
    flags: int
    fragment_offset: int
    ttl: int
    next_level_protocol: int
    checksum: int
    source: ipaddress.IPv4Address
    destination: ipaddress.IPv4Address
    options: bytes
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Ipv4 | None:
        if len(packet) < _IPV4.size:
            return None
        (version_ihl, tos, total_length, identification, flags_fragment,
         ttl, protocol, checksum, source, destination) = _IPV4.unpack_from(packet)
        header_length = version_ihl & 0x0F
        options_length = max(header_length * 4 - _IPV4.size, 0)
        payload_length = max(total_length - header_length * 4, 0)
        return cls(
            version=version_ihl >> 4,
            header_length=header_length,
            dscp=tos >> 2,
            ecn=tos & 0x03,
            total_length=total_length,
            identification=identification,
            flags=flags_fragment >> 13,
            fragment_offset=flags_fragment & 0x1FFF,
            ttl=ttl,
            next_level_protocol=protocol,
            checksum=checksum,
            source=ipaddress.IPv4Address(source),
            destination=ipaddress.IPv4Address(destination),
            options=_slice(packet, _IPV4.size, options_length),
            payload=_slice(packet, _IPV4.size + options_length, payload_length),
        )


@dataclass
class Ipv6:
    """An IPv6 packet."""

    version: int
    traffic_class: int
    flow_label: int
    payload_length: int
    next_header: int
    hop_limit: int
    source: ipaddress.IPv6Address
    destination: ipaddress.IPv6Address
    payload: bytes

    @classmethod
    def parse(cls, packet: bytes) -> Ipv6 | None:
        if len(packet) < _IPV6.size:
            return None
        (word, payload_length, next_header, hop_limit,
         source, destination) = _IPV6.unpack_from(packet)
        return cls(
            version=word >> 28,
            traffic_class=(word >> 20) & 0xFF,
            flow_label=word & 0xFFFFF,
            payload_length=payload_length,
            next_header=next_header,
            hop_limit=hop_limit,
            source=ipaddress.IPv6Address(source),
            destination=ipaddress.IPv6Address(destination),
            payload=_slice(packet, _IPV6.size, payload_length),
        )


@dataclass
class Network:
    """The decoded network layer of a packet."""

    protocol: NetworkProtocol
    ipv4: Ipv4 | None = None
    ipv6: Ipv6 | None = None
    arp: Arp | None = None


def parse_arp(packet: bytes) -> Network | None:
    """Decode an ARP packet, or return None if it is too short."""
    arp = Arp.parse(packet)
    return None if arp is None else Network(protocol=NetworkProtocol.ARP, arp=arp)


def parse_ipv4(packet: bytes) -> Network | None:
    """Decode an IPv4 packet, or return None if it is too short."""
    ipv4 = Ipv4.parse(packet)
    return None if ipv4 is None else Network(protocol=NetworkProtocol.IPV4, ipv4=ipv4)


def parse_ipv6(packet: bytes) -> Network | None:
    """Decode an IPv6 packet, or return None if it is too short."""
    ipv6 = Ipv6.parse(packet)
    return None if ipv6 is None else Network(protocol=NetworkProtocol.IPV6, ipv6=ipv6)


_PARSERS = {
    _ETHERTYPE_IPV4: parse_ipv4,
    _ETHERTYPE_IPV6: parse_ipv6,
    _ETHERTYPE_ARP: parse_arp,
}


def read_packet(data_link: DataLink) -> Network:
    """Decode the network layer carried by a data link frame."""
    if data_link.protocol is DataLinkProtocol.ETHERNET:
        ethernet = data_link.ethernet
        if ethernet is None:
            raise PacketParsingError()
        parser = _PARSERS.get(ethernet.ethertype)
        if parser is None:
            name = _ETHER_TYPE_NAMES.get(ethernet.ethertype, "unknown")
            raise UnimplementedProtocolError(str(Layer.NETWORK), name.lower())
        network = parser(ethernet.payload)
        if network is None:
            raise PacketParsingError()
        return network
    raise UnimplementedProtocolError(str(Layer.NETWORK), str(data_link.protocol))