"""Exception hierarchy shared by the probes."""

from __future__ import annotations


class SysprobeError(Exception):
    """Base class for every error raised by the package."""


class EtcError(SysprobeError, ValueError):
    """A system configuration file holds content that cannot be parsed."""


class UnimplementedOSError(SysprobeError):
    """A probe has no implementation for the running operating system."""

    def __init__(self, tool: str, os: str, arch: str | None = None) -> None:
        self.tool = tool
        self.os = os
        self.arch = arch
        if arch is None:
            message = f"{tool} is not implemented for OS {os}."
        else:
            message = f"{tool} is not implemented for OS {os} with architecture {arch}."
        super().__init__(message)


class ParseProcessError(SysprobeError, ValueError):
    """A row of process listing output could not be parsed."""

    def __init__(self, process: str) -> None:
        self.process = process
        super().__init__(f"Error parsing process: {process}")


class UnimplementedProtocolError(SysprobeError):
    """A packet uses a protocol the decoder does not handle on that layer."""

    def __init__(self, layer: str, protocol: str) -> None:
        self.layer = layer
        self.protocol = protocol
        super().__init__(f"Protocol {protocol} on layer {layer} is not implemented yet")


class PacketParsingError(SysprobeError, ValueError):
    """A packet is too short or malformed to be decoded."""

    def __init__(self) -> None:
        super().__init__("Packet can't be read yet")