import ipaddress
import struct

import pytest

from sysprobe.errors import PacketParsingError, UnimplementedProtocolError
from sysprobe.net import datalink
from sysprobe.net.network import (
    NetworkProtocol,
    parse_arp,
    parse_ipv4,
    parse_ipv6,
    read_packet,
)

SRC_MAC = bytes.fromhex("001122334455")
DST_MAC = bytes.fromhex("66778899aabb")
IPV4_SRC = bytes([192, 168, 0, 1])
IPV4_DST = bytes([192, 168, 0, 2])
IPV6_SRC = ipaddress.IPv6Address("2001:db8::1").packed
IPV6_DST = ipaddress.IPv6Address("2001:db8::2").packed

PROTO_ICMP = 1
PROTO_TCP = 6
PROTO_UDP = 17


def create_ethernet_packet(ether_type, payload):
    return DST_MAC + SRC_MAC + struct.pack("!H", ether_type) + payload


def create_arp_packet():
    arp = struct.pack(
        "!HHBBH6s4s6s4s", 1, 0x0800, 6, 4, 1, SRC_MAC, IPV4_SRC, DST_MAC, IPV4_DST
    )
    return create_ethernet_packet(0x0806, arp)


def create_ipv4_packet(next_protocol, payload):
    header = struct.pack(
        "!BBHHHBBH4s4s", 0x45, 0, 20 + len(payload), 0, 0, 64, next_protocol, 0,
        IPV4_SRC, IPV4_DST,
    )
    return create_ethernet_packet(0x0800, header + payload)


def create_ipv6_packet(next_protocol, payload):
    header = struct.pack(
        "!IHBB16s16s", 6 << 28, len(payload), next_protocol, 64, IPV6_SRC, IPV6_DST
    )
    return create_ethernet_packet(0x86DD, header + payload)


def test_display_network_protocol():
    assert str(parse_arp(create_arp_packet()).protocol) == "arp"
    assert str(parse_ipv4(create_ipv4_packet(PROTO_ICMP, bytes(20))).protocol) == "ipv4"
    assert str(parse_ipv6(create_ipv6_packet(PROTO_UDP, bytes(40))).protocol) == "ipv6"


def test_parse_arp_valid():
    network = parse_arp(create_arp_packet())
    assert network.protocol is NetworkProtocol.ARP
    assert network.arp is not None
    assert network.ipv4 is None
    assert network.ipv6 is None


def test_parse_arp_invalid():
    assert parse_arp(b"") is None


def test_parse_ipv4_valid():
    network = parse_ipv4(create_ipv4_packet(PROTO_ICMP, bytes(20)))
    assert network.protocol is NetworkProtocol.IPV4
    assert network.ipv4 is not None
    assert network.arp is None
    assert network.ipv6 is None


def test_parse_ipv4_invalid():
    assert parse_ipv4(b"") is None


def test_parse_ipv6_valid():
    network = parse_ipv6(create_ipv6_packet(PROTO_UDP, bytes(40)))
    assert network.protocol is NetworkProtocol.IPV6
    assert network.ipv6 is not None
    assert network.arp is None
    assert network.ipv4 is None


def test_parse_ipv6_invalid():
    assert parse_ipv6(b"") is None


def test_read_packet_ethernet_ipv4():
    data_link = datalink.read_packet(create_ipv4_packet(PROTO_TCP, bytes(20)))
    result = read_packet(data_link)
    assert result.protocol is NetworkProtocol.IPV4
    ipv4 = result.ipv4
    assert ipv4.next_level_protocol == PROTO_TCP
    assert ipv4.version == 4
    assert ipv4.header_length == 5
    assert ipv4.ttl == 64
    assert ipv4.source == ipaddress.IPv4Address("192.168.0.1")
    assert ipv4.destination == ipaddress.IPv4Address("192.168.0.2")
    assert ipv4.payload == bytes(20)


def test_read_packet_ethernet_ipv6():
    data_link = datalink.read_packet(create_ipv6_packet(PROTO_UDP, b"abc" + bytes(37)))
    result = read_packet(data_link)
    assert result.protocol is NetworkProtocol.IPV6
    ipv6 = result.ipv6
    assert ipv6.version == 6
    assert ipv6.next_header == PROTO_UDP
    assert ipv6.hop_limit == 64
    assert ipv6.source == ipaddress.IPv6Address("2001:db8::1")
    assert ipv6.payload[:3] == b"abc"
    assert len(ipv6.payload) == 40


def test_read_packet_ethernet_arp():
    result = read_packet(datalink.read_packet(create_arp_packet()))
    assert result.protocol is NetworkProtocol.ARP
    assert result.arp.operation == 1
    assert result.arp.sender_proto_addr == ipaddress.IPv4Address("192.168.0.1")
    assert result.arp.target_proto_addr == ipaddress.IPv4Address("192.168.0.2")
    assert result.arp.sender_hw_addr == "00:11:22:33:44:55"


def test_read_packet_unimplemented_protocol():
    data_link = datalink.read_packet(bytes(14))
    with pytest.raises(UnimplementedProtocolError) as info:
        read_packet(data_link)
    assert info.value.layer == "network"
    assert info.value.protocol == "unknown"


def test_read_packet_named_unimplemented_protocol():
    data_link = datalink.read_packet(create_ethernet_packet(0x8100, bytes(4)))
    with pytest.raises(UnimplementedProtocolError) as info:
        read_packet(data_link)
    assert info.value.protocol == "vlan"


def test_read_packet_truncated_ipv4():
    data_link = datalink.read_packet(create_ethernet_packet(0x0800, bytes(10)))
    with pytest.raises(PacketParsingError):
        read_packet(data_link)


def test_ipv4_payload_clamped_to_packet():
    header = struct.pack(
        "!BBHHHBBH4s4s", 0x45, 0, 200, 0, 0, 64, PROTO_UDP, 0, IPV4_SRC, IPV4_DST
    )
    network = parse_ipv4(header + b"xyz")
    assert network.ipv4.total_length == 200
    assert network.ipv4.payload == b"xyz"