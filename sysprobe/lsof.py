"""List open files from the field output of ``lsof``."""

from __future__ import annotations

import enum
import platform
import re
import subprocess
import sys
import time
from dataclasses import dataclass, field

from sysprobe.errors import UnimplementedOSError

LSOF_FIELDS = "pcuftDsin"

_UNSIGNED = re.compile(r"\+?[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_I16_MIN, _I16_MAX = -(2**15), 2**15 - 1


class FileType(enum.Enum):
    """Which kind of open files to list."""

    REGULAR = "regular"
    NETWORK = "network"
    ALL = "all"

    def __str__(self) -> str:
        return self.value


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class OpenFile:
    """A file held open by a process."""

    pid: int
    uid: int
    command: str
    fd: str = ""
    type: str = ""
    device: str = ""
    size: int = 0
    node: str = ""
    name: str = ""
    created_at: int = field(default_factory=_now_millis)


def _parse_int(text: str, low: int, high: int) -> int:
    pattern = _SIGNED if low < 0 else _UNSIGNED
    if not pattern.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    value = int(text)
    if not low <= value <= high:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def split_of_per_process(output: str) -> list[str]:
    """Split lsof output into one chunk per process."""
    return output.split("\np") if output else []


def split_process_per_rows(of_per_process: str) -> list[str]:
    """Split a process chunk into its header followed by one chunk per file."""
    return of_per_process.split("\nf") if of_per_process else []


def deserialize_header(header: str) -> tuple[int, int, str]:
    """Return the pid, uid and command from a process header chunk."""
    lines = _lines(header)
    if len(lines) < 3:
        raise ValueError(f"incomplete lsof process header: {header!r}")
    pid = _parse_int(lines[0].replace("p", ""), 0, _U32_MAX)
    uid = _parse_int(lines[2][1:], _I16_MIN, _I16_MAX)
    command = lines[1][1:]
    return pid, uid, command


def row_to_struct(header: tuple[int, int, str], row: str) -> OpenFile:
    """Build an OpenFile from a process header and one file chunk."""
    pid, uid, command = header
    fields = _lines(row)
    if not fields:
        raise ValueError("empty lsof file row")
    open_file = OpenFile(pid=pid, uid=uid, command=command, fd=fields[0])
    for item in fields[1:]:
        label, value = item[:1], item[1:]
        if label == "t":
            open_file.type = value
        elif label == "s":
            open_file.size = _parse_int(value, 0, _U64_MAX)
        elif label == "i":
            open_file.node = value
        elif label == "D":
            open_file.device = value
        elif label == "n":
            open_file.name = value
        else:
            raise ValueError(f"invalid lsof field label {label}")
    return open_file


def parse_output(output: str) -> list[OpenFile]:
    """Parse the whole field output of lsof."""
    open_files: list[OpenFile] = []
    for process in split_of_per_process(output):
        rows = split_process_per_rows(process)
        if not rows:
            raise ValueError("empty lsof process chunk")
        header = deserialize_header(rows[0])
        open_files.extend(row_to_struct(header, row) for row in rows[1:])
    return open_files


def _run_lsof(target: str) -> list[OpenFile]:
    result = subprocess.run(
        ["lsof", "-F", LSOF_FIELDS, target], capture_output=True, check=False
    )
    return parse_output(result.stdout.decode("utf-8", errors="replace"))


def _current_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "macos"
    return sys.platform


def lsof(file_type: FileType) -> list[OpenFile]:
    """List open files of the given kind; ALL lists network files first."""
    os_name = _current_os()
    if os_name not in ("linux", "macos"):
        raise UnimplementedOSError("lsof", os_name, platform.machine())
    if file_type is FileType.REGULAR:
        return _run_lsof("/")
    if file_type is FileType.NETWORK:
        return _run_lsof("-i")
    return _run_lsof("-i") + _run_lsof("/")