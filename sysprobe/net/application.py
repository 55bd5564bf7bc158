"""Decode the application layer of a captured packet."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from sysprobe.errors import PacketParsingError, UnimplementedProtocolError
from sysprobe.net import dns as dns_codec
from sysprobe.net.dns import Dns
from sysprobe.net.http import Http
from sysprobe.net.layer import Layer
from sysprobe.net.tls import Tls
from sysprobe.net.transport import Transport, TransportProtocol


class ApplicationProtocol(enum.Enum):
    """Application protocols the decoder understands."""

    DNS = "dns"
    HTTP = "http"
    TLS = "tls"

    def __str__(self) -> str:
        return self.value


@dataclass
class Application:
    """The decoded application layer of a packet."""

    protocol: ApplicationProtocol
    dns: Dns | None = None
    http: Http | None = None
    tls: Tls | None = None


def _parse_dns(payload: bytes) -> Application | None:
    dns = dns_codec.from_bytes(payload)
    return None if dns is None else Application(protocol=ApplicationProtocol.DNS, dns=dns)


def _parse_http(payload: bytes) -> Application | None:
    try:
        return Application(protocol=ApplicationProtocol.HTTP, http=Http.from_bytes(payload))
    except PacketParsingError:
        return None


def _parse_tls(payload: bytes) -> Application | None:
    try:
        return Application(protocol=ApplicationProtocol.TLS, tls=Tls.from_bytes(payload))
    except PacketParsingError:
        return None


def _parse_tcp(payload: bytes) -> Application | None:
    return _parse_dns(payload) or _parse_http(payload) or _parse_tls(payload)


def read_packet(transport: Transport) -> Application:
    """Decode the application layer carried by a transport segment."""
    if transport.protocol is TransportProtocol.TCP:
        if transport.tcp is None:
            raise PacketParsingError()
        application = _parse_tcp(transport.tcp.payload)
    elif transport.protocol is TransportProtocol.UDP:
        if transport.udp is None:
            raise PacketParsingError()
        application = _parse_dns(transport.udp.payload)
    else:
        raise UnimplementedProtocolError(str(Layer.APPLICATION), str(transport.protocol).lower())
    if application is None:
        raise PacketParsingError()
    return application