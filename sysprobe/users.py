"""List local user accounts and their numeric ids."""

from __future__ import annotations

import platform
import re
import subprocess
import sys
from dataclasses import dataclass

from sysprobe.errors import EtcError, UnimplementedOSError

FILE_PATH = "/etc/passwd"
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1


@dataclass(frozen=True, order=True)
class User:
    """A user account name and its uid."""

    name: str
    uid: int


def _parse_uid(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise EtcError(f"invalid uid: {text!r}")
    uid = int(text)
    if not _I32_MIN <= uid <= _I32_MAX:
        raise EtcError(f"uid out of range: {text!r}")
    return uid


def parse_cut_output(output: str) -> list[User]:
    """Parse 'name:uid' rows, skipping comments and blank rows."""
    users = []
    for row in output.splitlines():
        if not row or row.startswith("#"):
            continue
        fields = row.split(":")
        if len(fields) < 2:
            raise EtcError(f"missing uid in row: {row!r}")
        users.append(User(name=fields[0], uid=_parse_uid(fields[1])))
    return users


def parse_dscl_output(output: str) -> list[User]:
    """Parse 'name uid' rows where the name may contain spaces."""
    users = []
    for row in output.splitlines():
        fields = row.split()
        if not fields:
            raise EtcError(f"empty row: {row!r}")
        *name_parts, uid = fields
        users.append(User(name=" ".join(name_parts), uid=_parse_uid(uid)))
    return users


def _command_output(args: list[str]) -> str:
    result = subprocess.run(args, capture_output=True, check=False)
    return result.stdout.decode("utf-8", errors="replace")


def _current_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "macos"
    return sys.platform


def read_users(path: str | None = None) -> list[User]:
    """List users from the passwd file on Linux or the directory service on macOS."""
    os_name = _current_os()
    if os_name == "macos":
        return parse_dscl_output(_command_output(["dscl", ".", "-list", "/Users", "UniqueID"]))
    if os_name == "linux":
        return parse_cut_output(_command_output(["cut", "-d:", "-f1,3", path or FILE_PATH]))
    raise UnimplementedOSError("users", os_name, platform.machine())