# sysprobe

sysprobe reads what a Linux or macOS machine knows about itself and returns
it as plain Python objects:

- host names from `/etc/hosts`, led by this machine's own name and address
- services from `/etc/services`
- user accounts from `/etc/passwd` on Linux or the directory service on macOS
- running processes, through `ps`
- open files and network sockets, through `lsof`
- new lines appended to log files, put on an `asyncio.Queue`
- raw Ethernet frames decoded layer by layer: Ethernet; ARP, IPv4, IPv6;
  TCP, UDP, ICMP, ICMPv6; and at the top DNS, HTTP and TLS records

It has no dependencies outside the standard library. Several probes run
system tools (`hostname`, `dig`, `cut`, `dscl`, `ps`, `lsof`), which must be
installed.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

The `sysprobe` command prints one table, chosen by a subcommand:

```
sysprobe hosts [--path FILE]
sysprobe services [--path FILE]
sysprobe users [--path FILE]
sysprobe lsof [--type {regular,network,all}]
sysprobe ps
```

`--path` reads another file instead of `/etc/hosts`, `/etc/services` or
`/etc/passwd` (for `users` it is only used on Linux). `lsof --type` defaults
to `all`. Commands and names longer than 100 characters are cut short in the
`lsof` and `ps` tables. If a probe fails, the message is printed to standard
error and the exit status is 1. `sysprobe --help` lists the subcommands.

## Library

```python
from sysprobe.hosts import read_hosts
from sysprobe.services import read_services
from sysprobe.users import read_users
from sysprobe.ps import ps
from sysprobe.lsof import lsof, FileType

for host in read_hosts():
    print(host.name, host.address)

for service in read_services():
    print(service.name, service.port, service.protocol)

for user in read_users():
    print(user.name, user.uid)

for process in ps():
    print(process.pid, process.status, process.command)

for open_file in lsof(FileType.NETWORK):
    print(open_file.pid, open_file.command, open_file.name)
```

- `read_hosts(path=None)` returns `Host(name, address)` records without
  duplicates. The first is this machine's name as given by `hostname`, with
  the address `dig +short` returns for it. `parse_host_row` parses one line.
- `read_services(path=None)` returns `Service(name, port, protocol)` records
  without duplicates; lines that do not look like `name port/protocol` are
  skipped.
- `read_users(path=None)` returns `User(name, uid)` records. The parsers
  `parse_cut_output` and `parse_dscl_output` can be used on their own.
- `ps()` returns `Process` records with `pid`, `ppid`, `uid`, `lstart`
  (start time as a Unix timestamp), `pcpu`, `pmem`, `status`, `command` and
  `created_at` (milliseconds). `parse_output` and `parse_row` parse `ps`
  output; a row that cannot be parsed raises `ParseProcessError`.
- `lsof(file_type)` returns `OpenFile` records with `pid`, `uid`,
  `command`, `fd`, `type`, `device`, `size`, `node`, `name` and
  `created_at`. `FileType.ALL` lists network files first, then regular
  ones. `parse_output` parses `lsof -F pcuftDsin` output.

`ps`, `lsof` and `read_users` raise `sysprobe.errors.UnimplementedOSError`
on systems other than Linux and macOS. All errors of the package derive from
`sysprobe.errors.SysprobeError`.

### Following log files

`sysprobe.logs.producer(queue, stop_event, files=None)` is a coroutine. It
follows the given files, or `log_files()` for this system, starting at their
current end, and puts a `Log(file, date, row)` on the queue for each new
line. `file` is the resolved path and `date` a Unix timestamp. The stop event
is checked after each line, so one more line must arrive after it is set for
the coroutine to return.

`log_files()` returns a list of files under `/var/log` on Linux and an empty
list on macOS and Windows; when the environment variable
`SYSPROBE_TEST_LOGS` is set it returns `file0.txt` and `file1.txt`.

### Decoding packets

`sysprobe.net.capture.Capture.parse(packet, device)` takes the raw bytes of
an Ethernet frame and the name of the device it came from. It decodes as many
layers as it can and stops at the first layer whose protocol is unknown or
whose bytes are malformed, leaving that layer and those above it as `None`:

```python
from sysprobe.net.capture import Capture

capture = Capture.parse(frame_bytes, "eth0")
if capture.application is not None:
    print(capture.application.protocol)
```

Each layer can also be decoded by itself with the `read_packet` function of
`sysprobe.net.datalink`, `sysprobe.net.network`, `sysprobe.net.transport`
and `sysprobe.net.application`; these raise `UnimplementedProtocolError` or
`PacketParsingError`. A TCP payload is tried as DNS, then HTTP, then TLS; a
UDP payload only as DNS. DNS names are kept in their length-prefixed wire
form, and only the header of a TLS record is decoded.

## What it does not do

sysprobe does not capture packets itself: it has no way to open a network
interface or list devices, and decodes only frames it is given. There is no
command for following logs or decoding packets; those are library functions
only.