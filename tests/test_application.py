import pytest

from sysprobe.errors import PacketParsingError, UnimplementedProtocolError
from sysprobe.net.application import Application, ApplicationProtocol, read_packet
from sysprobe.net.tls import TlsContentType
from sysprobe.net.transport import Icmp, Tcp, Transport, TransportProtocol, Udp

TLS_BYTES = bytes([0x16, 0x03, 0x03, 0x00, 0x05, 0x01, 0x02, 0x03, 0x04, 0x05])


def create_dns_packet() -> bytes:
    header = bytes([0x12, 0x34, 0x81, 0x80, 0x00, 0x01, 0x00, 0x01, 0x00, 0x00, 0x00, 0x00])
    query = bytes(
        [3, 119, 119, 119, 7, 101, 120, 97, 109, 112, 108, 101, 3, 99, 111, 109, 0,
         0x00, 0x01, 0x00, 0x01]
    )
    record = bytes(
        [0xC0, 0x0C, 0x00, 0x01, 0x00, 0x01, 0x00, 0x00, 0x00, 0x3C, 0x00, 0x04,
         0x5D, 0xB8, 0xD8, 0x22]
    )
    return header + query + record + record


def create_http_packet() -> bytes:
    content = "name=ChatGPT&language=Rust"
    return (
        "POST /submit HTTP/1.1\r\n"
        "Host: example.com\r\n"
        "Content-Type: application/x-www-form-urlencoded\r\n"
        f"Content-Length: {len(content)}\r\n"
        "Connection: close\r\n\r\n"
        f"{content}"
    ).encode()


def tcp_transport(payload: bytes) -> Transport:
    tcp = Tcp(
        source=1247,
        destination=53,
        sequence=0,
        acknowledgement=0,
        data_offset=0,
        reserved=0,
        flags=0,
        window=0,
        checksum=0,
        urgent_ptr=0,
        options=b"",
        payload=payload,
    )
    return Transport(protocol=TransportProtocol.TCP, tcp=tcp)


def udp_transport(payload: bytes) -> Transport:
    udp = Udp(source=8646, destination=53, length=0, checksum=0, payload=payload)
    return Transport(protocol=TransportProtocol.UDP, udp=udp)


def test_display_application_protocol():
    assert str(read_packet(tcp_transport(create_dns_packet())).protocol) == "dns"
    assert str(read_packet(tcp_transport(create_http_packet())).protocol) == "http"
    assert str(read_packet(tcp_transport(TLS_BYTES)).protocol) == "tls"


def test_read_packet_tcp_dns():
    application = read_packet(tcp_transport(create_dns_packet()))
    assert application.protocol is ApplicationProtocol.DNS
    assert application.dns.responses[0].data == bytes([93, 184, 216, 34])


def test_read_packet_udp_dns():
    application = read_packet(udp_transport(create_dns_packet()))
    assert application.protocol is ApplicationProtocol.DNS
    assert application.dns.responses[0].data == bytes([93, 184, 216, 34])


def test_read_packet_tcp_http():
    application = read_packet(tcp_transport(create_http_packet()))
    assert application.protocol is ApplicationProtocol.HTTP
    assert application.http.body == "name=ChatGPT&language=Rust"
    assert application.dns is None


def test_read_packet_tcp_tls():
    application = read_packet(tcp_transport(TLS_BYTES))
    assert application.protocol is ApplicationProtocol.TLS
    assert application.tls.content_type is TlsContentType.HANDSHAKE


def test_read_packet_udp_http_is_not_decoded():
    with pytest.raises(PacketParsingError):
        read_packet(udp_transport(create_http_packet()))


def test_read_packet_unknown_payload():
    with pytest.raises(PacketParsingError):
        read_packet(tcp_transport(b"\xff\x00\x01"))


def test_read_packet_icmp_is_unimplemented():
    transport = Transport(
        protocol=TransportProtocol.ICMPV4,
        icmpv4=Icmp(icmp_type=8, icmp_code=0, checksum=0, payload=b""),
    )
    with pytest.raises(UnimplementedProtocolError) as info:
        read_packet(transport)
    assert info.value.layer == "application"
    assert info.value.protocol == "icmpv4"


def test_application_defaults_are_empty():
    application = Application(protocol=ApplicationProtocol.DNS)
    assert (application.dns, application.http, application.tls) == (None, None, None)