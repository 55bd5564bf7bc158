import subprocess
import sys

import pytest

from sysprobe.errors import ParseProcessError, UnimplementedOSError
from sysprobe.ps import Process, parse_date, parse_output, parse_row, ps

XORG_COMMAND = (
    "/usr/lib/xorg/Xorg :0 -seat seat0 -auth /run/lightdm/root/:0 "
    "-nolisten tcp vt7 -novtswitch"
)

PS_OUTPUT = (
    "PID  PPID   UID                          STARTED %CPU %MEM STAT COMMAND\n"
    "    1     0     0 Tue Aug 29 08:01:10 2023  0.1  0.3 Ss   /sbin/init\n"
    " 1234     1  1000 Tue Aug 29 09:05:12 2023  0.0  1.2 S    " + XORG_COMMAND + "\n"
    " 5678  1234  1000 Tue Aug 29 09:15:05 2023  0.2  0.5 R    "
    "/usr/bin/python3 /home/user/script.py\n"
    " 9101  5678  1000 Tue Aug 29 10:00:02 2023  0.0  0.1 S    /bin/bash\n"
)


def test_parse_output():
    processes = parse_output(PS_OUTPUT)
    assert len(processes) == 4
    assert processes[-1].pid == 9101
    assert processes[1].command == XORG_COMMAND


def test_parse_row():
    row = "1234     1  1000 Tue Aug 29 09:05:12 2023  0.0  1.2 S    " + XORG_COMMAND
    process = parse_row(row)
    assert process.pid == 1234
    assert process.ppid == 1
    assert process.uid == 1000
    assert process.pcpu == 0.0
    assert process.pmem == 1.2
    assert process.status == "S"
    assert process.command == XORG_COMMAND


def test_parse_output_header_only():
    assert parse_output("PID PPID UID STARTED %CPU %MEM STAT COMMAND\n") == []


def test_parse_date_differences():
    early = parse_date(["Tue", "Aug", "29", "08:01:10", "2023"])
    late = parse_date(["Tue", "Aug", "29", "09:05:12", "2023"])
    assert late - early == 3842


def test_parse_row_lstart_matches_parse_date():
    process = parse_row("1 0 0 Tue Aug 29 08:01:10 2023 0.1 0.3 Ss /sbin/init")
    assert process.lstart == parse_date(["Tue", "Aug", "29", "08:01:10", "2023"])


def test_parse_date_invalid():
    with pytest.raises(ValueError):
        parse_date(["not", "a", "date", "at", "all"])


def test_parse_row_too_short():
    with pytest.raises(ParseProcessError) as info:
        parse_row("1234 1 1000")
    assert info.value.process == "1234 1 1000"


def test_parse_row_negative_pid():
    with pytest.raises(ParseProcessError):
        parse_row("-1 0 0 Tue Aug 29 08:01:10 2023 0.1 0.3 Ss /sbin/init")


def test_parse_row_uid_out_of_range():
    with pytest.raises(ParseProcessError):
        parse_row("1 0 65534 Tue Aug 29 08:01:10 2023 0.1 0.3 Ss /sbin/init")


def test_parse_output_reports_bad_row():
    bad = "abc 0 0 Tue Aug 29 08:01:10 2023 0.1 0.3 Ss /sbin/init"
    with pytest.raises(ParseProcessError) as info:
        parse_output("HEADER\n" + bad + "\n")
    assert info.value.process == bad
    assert str(info.value) == f"Error parsing process: {bad}"


def test_ps_unimplemented_os(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    with pytest.raises(UnimplementedOSError) as info:
        ps()
    assert info.value.tool == "ps"
    assert info.value.os == "win32"


def test_ps_runs_command(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0, stdout=PS_OUTPUT.encode(), stderr=b"")

    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(subprocess, "run", fake_run)
    processes = ps()
    assert calls == [["ps", "-eo", "pid,ppid,uid,lstart,pcpu,pmem,stat,args"]]
    assert [p.pid for p in processes] == [1, 1234, 5678, 9101]
    assert all(isinstance(p, Process) and p.created_at > 0 for p in processes)