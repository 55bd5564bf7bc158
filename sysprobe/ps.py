"""List running processes from the output of ``ps``."""

from __future__ import annotations

import platform
import re
import subprocess
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime

from sysprobe.errors import ParseProcessError, UnimplementedOSError

PS_COMMAND = ["ps", "-eo", "pid,ppid,uid,lstart,pcpu,pmem,stat,args"]
DATE_FORMAT = "%a %b %d %H:%M:%S %Y"

_UNSIGNED = re.compile(r"\+?[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")
_U32_MAX = 2**32 - 1
_I16_MIN, _I16_MAX = -(2**15), 2**15 - 1


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class Process:
    """One row of the process table."""

    pid: int
    ppid: int
    uid: int
    lstart: int
    pcpu: float
    pmem: float
    status: str
    command: str
    created_at: int = field(default_factory=_now_millis)


def _parse_int(text: str, low: int, high: int) -> int:
    pattern = _SIGNED if low < 0 else _UNSIGNED
    if not pattern.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    value = int(text)
    if not low <= value <= high:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def _parse_float(text: str) -> float:
    if "_" in text or text != text.strip():
        raise ValueError(f"invalid float: {text!r}")
    return float(text)


def parse_date(date_chunks: list[str]) -> int:
    """Turn the words of an ``lstart`` column into a local Unix timestamp."""
    moment = datetime.strptime(" ".join(date_chunks), DATE_FORMAT)
    return int(moment.timestamp())


def parse_row(row: str) -> Process:
    """Parse a single row of ``ps`` output."""
    chunks = row.split()
    try:
        if len(chunks) < 11:
            raise ValueError(f"expected at least 11 columns, got {len(chunks)}")
        return Process(
            pid=_parse_int(chunks[0], 0, _U32_MAX),
            ppid=_parse_int(chunks[1], 0, _U32_MAX),
            uid=_parse_int(chunks[2], _I16_MIN, _I16_MAX),
            lstart=parse_date(chunks[3:8]),
            pcpu=_parse_float(chunks[8]),
            pmem=_parse_float(chunks[9]),
            status=chunks[10],
            command=" ".join(chunks[11:]),
        )
    except ValueError as exc:
        if isinstance(exc, ParseProcessError):
            raise
        raise ParseProcessError(row) from exc


def parse_output(output: str) -> list[Process]:
    """Parse ``ps`` output, skipping its header line."""
    return [parse_row(row) for row in output.splitlines()[1:]]


def _current_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "macos"
    return sys.platform


def ps() -> list[Process]:
    """Return the processes running on this machine."""
    os_name = _current_os()
    if os_name not in ("linux", "macos"):
        raise UnimplementedOSError("ps", os_name, platform.machine())
    result = subprocess.run(PS_COMMAND, capture_output=True, check=False)
    return parse_output(result.stdout.decode("utf-8", errors="replace"))