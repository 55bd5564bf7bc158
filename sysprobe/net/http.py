"""Decode HTTP/1 style requests and responses."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

from sysprobe.errors import PacketParsingError

_STATUS_CODE = re.compile(r"\+?[0-9]+")
_U16_MAX = 0xFFFF


class _CaseInsensitive(enum.Enum):
    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None

    def __str__(self) -> str:
        return self.value


class HttpMethod(_CaseInsensitive):
    """An HTTP request method."""

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    OPTIONS = "options"
    HEAD = "head"
    CONNECT = "connect"
    TRACE = "trace"


class HttpType(enum.Enum):
    """Whether a message is a request or a response."""

    REQUEST = "request"
    RESPONSE = "response"

    def __str__(self) -> str:
        return self.value


class HttpVersion(_CaseInsensitive):
    """An HTTP protocol version."""

    V0_9 = "HTTP/0.9"
    V1_0 = "HTTP/1.0"
    V1_1 = "HTTP/1.1"
    V2 = "HTTP/2"
    V3 = "HTTP/3"


def _member(enum_type, text: str):
    try:
        return enum_type(text)
    except ValueError:
        raise PacketParsingError() from None


def _status_code(text: str) -> int:
    if not _STATUS_CODE.fullmatch(text):
        raise PacketParsingError()
    code = int(text)
    if code > _U16_MAX:
        raise PacketParsingError()
    return code


@dataclass
class HttpInstruction:
    """The start line of an HTTP message."""

    type: HttpType
    version: HttpVersion
    method: HttpMethod | None = None
    uri: str | None = None
    status_code: int | None = None
    status_text: str | None = None

    @classmethod
    def from_str(cls, row: str) -> HttpInstruction:
        """Parse a request line, falling back to a status line."""
        try:
            return cls._request(row)
        except PacketParsingError:
            return cls._response(row)

    @classmethod
    def _request(cls, row: str) -> HttpInstruction:
        fields = row.split()
        if len(fields) < 3:
            raise PacketParsingError()
        method = _member(HttpMethod, fields[0])
        version = _member(HttpVersion, fields[2])
        return cls(type=HttpType.REQUEST, version=version, method=method, uri=fields[1])

    @classmethod
    def _response(cls, row: str) -> HttpInstruction:
        fields = row.split()
        if len(fields) < 2:
            raise PacketParsingError()
        version = _member(HttpVersion, fields[0])
        return cls(
            type=HttpType.RESPONSE,
            version=version,
            status_code=_status_code(fields[1]),
            status_text=" ".join(fields[2:]),
        )


def parse_headers(lines: list[str]) -> dict[str, str]:
    """Parse 'Name: value' header lines into a mapping."""
    headers: dict[str, str] = {}
    for line in lines:
        name, colon, value = line.partition(":")
        if not colon:
            raise PacketParsingError()
        headers[name.strip()] = value.strip()
    return headers


@dataclass
class Http:
    """An HTTP message: start line, headers and body."""

    instruction: HttpInstruction
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def from_bytes(cls, data: bytes) -> Http:
        """Decode an HTTP message; the header block must end with an empty line."""
        if not data:
            raise PacketParsingError()
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError:
            raise PacketParsingError() from None
        rows = text.split("\r\n")
        try:
            blank = rows.index("")
        except ValueError:
            raise PacketParsingError() from None
        return cls(
            instruction=HttpInstruction.from_str(rows[0]),
            headers=parse_headers(rows[1:blank]),
            body="\r\n".join(rows[blank + 1:]),
        )