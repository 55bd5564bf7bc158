"""Follow system log files and publish every new line to an asyncio queue."""

from __future__ import annotations

import asyncio
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Iterable

from sysprobe.errors import UnimplementedOSError

LINUX_LOG_FILES = (
    "/var/log/alternatives.log",
    "/var/log/auth.log",
    "/var/log/user.log",
    "/var/log/syslog",
    "/var/log/dmesg",
    "/var/log/boot.log",
    "/var/log/cron",
    "/var/log/daemon.log",
    "/var/log/apt/term.log",
    "/var/log/apt/history.log",
    "/var/log/dpkg.log",
    "/var/log/faillog",
    "/var/log/kern.log",
)
MACOS_LOG_FILES: tuple[str, ...] = ()
WINDOWS_LOG_FILES: tuple[str, ...] = ()
TEST_LOG_FILES = ("file0.txt", "file1.txt")

TEST_LOGS_ENV = "SYSPROBE_TEST_LOGS"
POLL_INTERVAL = 0.05

_LOG_FILES_BY_OS = {
    "linux": LINUX_LOG_FILES,
    "macos": MACOS_LOG_FILES,
    "windows": WINDOWS_LOG_FILES,
}


@dataclass(frozen=True)
class Log:
    """One line read from a log file."""

    file: str
    date: int
    row: str


def _current_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform == "win32":
        return "windows"
    return sys.platform


def log_files() -> list[str]:
    """Return the log files to follow on this operating system."""
    if os.environ.get(TEST_LOGS_ENV) is not None:
        return list(TEST_LOG_FILES)
    os_name = _current_os()
    try:
        return list(_LOG_FILES_BY_OS[os_name])
    except KeyError:
        raise UnimplementedOSError("logs", os_name) from None


class _FileTail:
    """Tracks the read position in one followed file."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._pending = b""
        try:
            with open(path, "rb") as handle:
                self._position = os.fstat(handle.fileno()).st_size
        except FileNotFoundError:
            self._position = 0

    def read_lines(self) -> list[str]:
        try:
            with open(self.path, "rb") as handle:
                size = os.fstat(handle.fileno()).st_size
                if size < self._position:
                    self._position = 0
                    self._pending = b""
                handle.seek(self._position)
                data = handle.read()
        except FileNotFoundError:
            self._position = 0
            self._pending = b""
            return []
        self._position += len(data)
        chunks = (self._pending + data).split(b"\n")
        self._pending = chunks.pop()
        return [chunk.removesuffix(b"\r").decode("utf-8", errors="replace") for chunk in chunks]


async def _follow(tails: list[_FileTail]) -> AsyncIterator[tuple[str, str]]:
    while True:
        produced = False
        for tail in tails:
            for row in tail.read_lines():
                produced = True
                yield tail.path, row
        if not produced:
            await asyncio.sleep(POLL_INTERVAL)


async def producer(
    queue: asyncio.Queue,
    stop_event: asyncio.Event,
    files: Iterable[str] | None = None,
) -> None:
    """Put a Log on the queue for every line appended to the followed files.

    Reading starts at the current end of files that already exist. The stop
    event is checked after each line, so one more line must arrive after it is
    set for the producer to return.
    """
    paths = list(log_files() if files is None else files)
    lines = _follow([_FileTail(path) for path in paths])
    try:
        while not stop_event.is_set():
            path, row = await anext(lines)
            await queue.put(
                Log(
                    file=str(Path(path).resolve(strict=True)),
                    date=int(time.time()),
                    row=row,
                )
            )
    finally:
        await lines.aclose()