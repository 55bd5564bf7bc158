"""Read host name to address mappings from the hosts file."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass

FILE_PATH = "/etc/hosts"


@dataclass(frozen=True, order=True)
class Host:
    """A host name and the address it resolves to."""

    name: str
    address: str


def parse_host_row(row: str) -> list[Host]:
    """Return one Host per name listed on a hosts file row."""
    if row.startswith("#"):
        return []
    fields = row.split()
    if len(fields) < 2:
        return []
    address, *names = fields
    return [Host(name=name, address=address) for name in names]


def _command_output(args: list[str]) -> str:
    result = subprocess.run(args, capture_output=True, check=False)
    return result.stdout.decode("utf-8", errors="replace").strip()


def get_hostname_row() -> Host:
    """Return the machine's own host name with the address DNS gives for it."""
    hostname = _command_output(["hostname"])
    address = _command_output(["dig", "+short", hostname])
    return Host(name=hostname, address=address)


def read_hosts(path: str | None = None) -> list[Host]:
    """Read the hosts file, led by the local host name, without duplicates."""
    hosts = [get_hostname_row()]
    with open(path or FILE_PATH, encoding="utf-8") as handle:
        contents = handle.read()
    for line in contents.splitlines():
        for host in parse_host_row(line):
            if host not in hosts:
                hosts.append(host)
    return hosts