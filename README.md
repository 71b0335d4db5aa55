# minnet

A small, dependency-free toolkit for working with network packets and
sockets on Linux.

## Modules

- `minnet.parser`: `Parser` and `Serializer` for big-endian wire formats
  spread over several byte chunks, plus the helpers `parse(obj, buffers)`
  (returns `True` when parsing succeeded) and `serialize(obj)` (returns a
  list of byte chunks). A `Parser` that runs out of input is marked as
  failed (`has_error()`) instead of raising.
- `minnet.checksum`: `InternetChecksum`, the ones'-complement Internet
  checksum, fed incrementally with `add()` or `add_all()`.
- `minnet.ethernet`: `EthernetHeader` (fields `dst`, `src`, `ethertype`),
  `EthernetFrame`, `ETHERNET_BROADCAST` and `format_ethernet_address`.
- `minnet.ipv4`: `IPv4Header`, `IPv4Datagram` (also available as
  `InternetDatagram`) and `format_ipv4`. Parsing an `IPv4Header` checks the
  version, header length and checksum; `serialize` writes the checksum as
  it stands, so call `compute_checksum()` first. A header whose version is
  not 4 raises `ValueError` when serialized.
- `minnet.arp`: `ARPMessage`, for Ethernet/IPv4 requests and replies;
  other combinations fail to parse and raise `ValueError` on
  serialization.
- `minnet.address`: `Address`. `Address(ip, port)` takes a numeric IPv4
  address without any lookup; `Address.resolve(hostname, service)` does a
  name lookup; `Address.from_ipv4_numeric(n)` and `ipv4_numeric()` convert
  to and from 32-bit integers. `ip`, `port`, `ip_port()` and `str()` give
  the numeric forms.
- `minnet.errors`: `TaggedError`, `UnixError`, `check_system_call` and
  `notnull`.
- `minnet.rng`: `get_random_engine()`, a `random.Random` seeded from the
  operating system's entropy source.
- `minnet.file_descriptor`: `FileDescriptor`, a handle on an OS file
  descriptor with `read()`, `write()`, `writev()`, `set_blocking()`,
  `duplicate()` (another handle sharing the same descriptor) and read and
  write counters. It works as a context manager.
- `minnet.sockets`: `Socket`, `DatagramSocket`, `UDPSocket`, `TCPSocket`
  and `PacketSocket`, built on `FileDescriptor`. On non-blocking sockets,
  `DatagramSocket.recv()` and `TCPSocket.accept()` return `None` when
  nothing is waiting.

## Installation

```
pip install .
```

## Example

Build an IPv4 header, serialize it and parse it back:

```python
from minnet.ipv4 import IPv4Header
from minnet.parser import parse, serialize

header = IPv4Header(src=0x0A000002, dst=0xC0A80002, length=20)
header.compute_checksum()

wire = serialize(header)          # list of byte chunks

decoded = IPv4Header()
ok = parse(decoded, wire)         # True when the header is well formed
print(ok, decoded)
```

Compute an Internet checksum:

```python
from minnet.checksum import InternetChecksum

check = InternetChecksum()
check.add(b"\x45\x00\x00\x14")
print(hex(check.value()))
```

Send a UDP datagram to yourself:

```python
from minnet.address import Address
from minnet.sockets import UDPSocket

with UDPSocket() as receiver, UDPSocket() as sender:
    receiver.bind(Address("127.0.0.1", 0))
    sender.sendto(receiver.local_address(), b"hello")
    source, payload = receiver.recv()
    print(source, payload)
```

## What it does not do

minnet handles packet formats and socket plumbing only. It has no TCP
implementation, no byte-stream reassembly, no network interface with ARP
resolution and no router; it provides no command-line program.
IPv4 options are skipped when parsing and never written.

## Running the tests

```
pip install .[test]
pytest
```