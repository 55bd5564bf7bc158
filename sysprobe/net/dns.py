"""Decode DNS messages carried by a transport payload."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

_HEADER = struct.Struct("!HHHHHH")
_QUERY_TAIL = struct.Struct("!HH")
_RECORD = struct.Struct("!HHHIH")


@dataclass
class DnsQuery:
    """A question entry; the name keeps its length-prefixed wire form."""

    qname: bytes
    qtype: int
    qclass: int


@dataclass
class DnsResponse:
    """A resource record whose owner name is a two-byte compression tag."""

    name_tag: int
    rtype: int
    rclass: int
    ttl: int
    data_len: int
    data: bytes


@dataclass
class Dns:
    """A DNS message."""

    id: int
    is_response: bool
    opcode: int
    is_authoritative: bool
    is_truncated: bool
    is_recursion_desirable: bool
    is_recursion_available: bool
    zero_reserved: bool
    is_answer_authenticated: bool
    is_non_authenticated_data: bool
    rcode: int
    query_count: int
    response_count: int
    authority_rr_count: int
    additional_rr_count: int
    queries: list[DnsQuery] = field(default_factory=list)
    responses: list[DnsResponse] = field(default_factory=list)
    authorities: list[DnsResponse] = field(default_factory=list)
    additional: list[DnsResponse] = field(default_factory=list)
    payload: bytes = b""


def _read_queries(data: bytes, offset: int, count: int) -> tuple[list[DnsQuery], int]:
    queries: list[DnsQuery] = []
    for _ in range(count):
        end = data.find(b"\x00", offset)
        if end < 0 or end + 1 + _QUERY_TAIL.size > len(data):
            break
        qtype, qclass = _QUERY_TAIL.unpack_from(data, end + 1)
        queries.append(DnsQuery(qname=bytes(data[offset:end + 1]), qtype=qtype, qclass=qclass))
        offset = end + 1 + _QUERY_TAIL.size
    return queries, offset


def _read_records(data: bytes, offset: int, count: int) -> tuple[list[DnsResponse], int]:
    records: list[DnsResponse] = []
    for _ in range(count):
        if offset + _RECORD.size > len(data):
            break
        name_tag, rtype, rclass, ttl, data_len = _RECORD.unpack_from(data, offset)
        start = offset + _RECORD.size
        if start + data_len > len(data):
            break
        records.append(
            DnsResponse(
                name_tag=name_tag,
                rtype=rtype,
                rclass=rclass,
                ttl=ttl,
                data_len=data_len,
                data=bytes(data[start:start + data_len]),
            )
        )
        offset = start + data_len
    return records, offset


def _decode(data: bytes) -> Dns | None:
    if len(data) < _HEADER.size:
        return None
    ident, flags, qdcount, ancount, nscount, arcount = _HEADER.unpack_from(data)
    offset = _HEADER.size
    queries, offset = _read_queries(data, offset, qdcount)
    responses, offset = _read_records(data, offset, ancount)
    authorities, offset = _read_records(data, offset, nscount)
    additional, offset = _read_records(data, offset, arcount)
    return Dns(
        id=ident,
        is_response=bool(flags >> 15 & 1),
        opcode=flags >> 11 & 0xF,
        is_authoritative=bool(flags >> 10 & 1),
        is_truncated=bool(flags >> 9 & 1),
        is_recursion_desirable=bool(flags >> 8 & 1),
        is_recursion_available=bool(flags >> 7 & 1),
        zero_reserved=bool(flags >> 6 & 1),
        is_answer_authenticated=bool(flags >> 5 & 1),
        is_non_authenticated_data=bool(flags >> 4 & 1),
        rcode=flags & 0xF,
        query_count=qdcount,
        response_count=ancount,
        authority_rr_count=nscount,
        additional_rr_count=arcount,
        queries=queries,
        responses=responses,
        authorities=authorities,
        additional=additional,
        payload=bytes(data[offset:]),
    )


def valid_header(dns: Dns) -> bool:
    """Tell whether the header counts agree with the decoded sections."""
    return (
        (dns.query_count > 0 or dns.response_count > 0)
        and dns.query_count == len(dns.queries)
        and dns.response_count == len(dns.responses)
        and dns.opcode < 16
        and dns.rcode < 16
    )


def from_bytes(data: bytes) -> Dns | None:
    """Decode a DNS message, or return None when the bytes are not one."""
    dns = _decode(bytes(data))
    if dns is None or not valid_header(dns):
        return None
    return dns