"""Decode a captured packet through every protocol layer it carries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from sysprobe.errors import PacketParsingError, UnimplementedProtocolError
from sysprobe.net import application as application_layer
from sysprobe.net import datalink as datalink_layer
from sysprobe.net import network as network_layer
from sysprobe.net import transport as transport_layer
from sysprobe.net.application import Application
from sysprobe.net.datalink import DataLink
from sysprobe.net.network import Network
from sysprobe.net.transport import Transport

_log = logging.getLogger(__name__)

# Errors that only mean a layer could not be decoded; decoding stops there.
_DECODE_ERRORS = (UnimplementedProtocolError, PacketParsingError)


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class Capture:
    """A raw packet seen on a device, with each layer that could be decoded."""

    device: str
    packet: bytes
    created_at: int = field(default_factory=_now_millis)
    data_link: DataLink | None = None
    network: Network | None = None
    transport: Transport | None = None
    application: Application | None = None

    @classmethod
    def parse(cls, packet: bytes, device: str) -> Capture:
        """Decode as many layers of the packet as possible.

        Decoding stops at the first layer whose protocol is unknown or whose
        bytes are malformed; the layers below it are kept.
        """
        capture = cls(device=device, packet=bytes(packet))
        try:
            capture.data_link = datalink_layer.read_packet(capture.packet)
            capture.network = network_layer.read_packet(capture.data_link)
            capture.transport = transport_layer.read_packet(capture.network)
            capture.application = application_layer.read_packet(capture.transport)
        except _DECODE_ERRORS as error:
            _log.debug("%s", error)
        return capture