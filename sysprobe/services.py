"""Read network service definitions from the services file."""

from __future__ import annotations

import re
from dataclasses import dataclass

from sysprobe.errors import EtcError

FILE_PATH = "/etc/services"
ROW_REGEX = re.compile(r"^([a-zA-Z0-9-]+)\s+(\d{1,5})/([a-zA-Z0-9-]+)")
_MAX_PORT = 0xFFFF


@dataclass(frozen=True, order=True)
class Service:
    """A named service bound to a port and protocol."""

    name: str
    port: int
    protocol: str


def _parse_port(text: str) -> int:
    if not text.isascii():
        raise EtcError(f"invalid port number: {text!r}")
    port = int(text)
    if port > _MAX_PORT:
        raise EtcError(f"port number out of range: {text!r}")
    return port


def read_services(path: str | None = None) -> list[Service]:
    """Read the services file, skipping rows that do not match and duplicates."""
    with open(path or FILE_PATH, encoding="utf-8") as handle:
        contents = handle.read()
    services: list[Service] = []
    for line in contents.splitlines():
        match = ROW_REGEX.match(line)
        if match is None:
            continue
        service = Service(
            name=match.group(1),
            port=_parse_port(match.group(2)),
            protocol=match.group(3),
        )
        if service not in services:
            services.append(service)
    return services