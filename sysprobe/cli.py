"""Command line front end printing hosts, services, users, open files and processes."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Iterable, Sequence

from sysprobe.errors import SysprobeError
from sysprobe.hosts import read_hosts
from sysprobe.lsof import FileType, lsof
from sysprobe.ps import ps
from sysprobe.services import read_services
from sysprobe.users import read_users

_TRUNCATE = 100


def _row(widths: Sequence[int], values: Sequence[object]) -> str:
    return " | ".join(f"{str(value):<{width}}" for width, value in zip(widths, values))


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(value)


def _hosts_table(args: argparse.Namespace) -> Iterable[str]:
    widths = (25, 25)
    yield _row(widths, ("name", "address"))
    for host in read_hosts(args.path):
        yield _row(widths, (host.name, host.address))


def _services_table(args: argparse.Namespace) -> Iterable[str]:
    widths = (25, 25, 25)
    yield _row(widths, ("service", "protocol", "port"))
    for service in read_services(args.path):
        yield _row(widths, (service.name, service.protocol, service.port))


def _users_table(args: argparse.Namespace) -> Iterable[str]:
    widths = (25, 25)
    yield _row(widths, ("name", "uid"))
    for user in read_users(args.path):
        yield _row(widths, (user.name, user.uid))


def _lsof_table(args: argparse.Namespace) -> Iterable[str]:
    widths = (6, 5, 5, 10, 5, 10, 6, 5, 5)
    yield _row(
        widths,
        ("pid", "uid", "command", "fd", "type", "device", "size", "node", "name"),
    )
    for item in lsof(FileType(args.type)):
        yield _row(
            widths,
            (
                item.pid, item.uid, item.command, item.fd, item.type,
                item.device, item.size, item.node, item.name[:_TRUNCATE],
            ),
        )


def _ps_table(args: argparse.Namespace) -> Iterable[str]:
    widths = (6, 5, 5, 10, 5, 5, 6, 5)
    yield _row(
        widths,
        ("pid", "ppid", "uid", "lstart", "pcpu", "pmem", "status", "command"),
    )
    for process in ps():
        yield _row(
            widths,
            (
                process.pid, process.ppid, process.uid, process.lstart,
                _number(process.pcpu), _number(process.pmem), process.status,
                process.command[:_TRUNCATE],
            ),
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysprobe", description="Inspect the local system."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    handlers: list[tuple[str, str, Callable[[argparse.Namespace], Iterable[str]]]] = [
        ("hosts", "list host name to address mappings", _hosts_table),
        ("services", "list network services", _services_table),
        ("users", "list user accounts", _users_table),
    ]
    for name, help_text, handler in handlers:
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("--path", default=None, help="file to read instead of the default")
        sub.set_defaults(handler=handler)

    lsof_parser = commands.add_parser("lsof", help="list open files")
    lsof_parser.add_argument(
        "--type",
        choices=[file_type.value for file_type in FileType],
        default=FileType.ALL.value,
        help="kind of open files to list",
    )
    lsof_parser.set_defaults(handler=_lsof_table)

    ps_parser = commands.add_parser("ps", help="list running processes")
    ps_parser.set_defaults(handler=_ps_table)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line tool and return its exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        lines = list(args.handler(args))
    except (SysprobeError, OSError, ValueError) as error:
        print(f"{parser.prog}: {error}", file=sys.stderr)
        return 1
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())