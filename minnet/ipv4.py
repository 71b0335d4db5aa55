"""IPv4 headers (without options) and datagrams."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from minnet.checksum import InternetChecksum
from minnet.parser import Parser, Serializer


def format_ipv4(address: int) -> str:
    """Render a host-order 32-bit address as a dotted quad."""
    return ".".join(str(byte) for byte in address.to_bytes(4, "big"))


def _read(parser: Parser, width: int, current: int) -> int:
    value = parser.integer(width)
    return current if parser.has_error() else value


@dataclass
class IPv4Header:
    """IPv4 header; options are skipped when parsing and never written."""

    LENGTH: ClassVar[int] = 20
    DEFAULT_TTL: ClassVar[int] = 128
    PROTO_TCP: ClassVar[int] = 6

    ver: int = 4
    hlen: int = 5
    tos: int = 0
    length: int = 0
    identification: int = 0
    df: bool = True
    mf: bool = False
    offset: int = 0
    ttl: int = 128
    proto: int = 6
    cksum: int = 0
    src: int = 0
    dst: int = 0

    def payload_length(self) -> int:
        return (self.length - 4 * self.hlen) & 0xFFFF

    def pseudo_checksum(self) -> int:
        """The pseudo-header's contribution to a TCP checksum."""
        total = (self.src >> 16) + (self.src & 0xFFFF)
        total += (self.dst >> 16) + (self.dst & 0xFFFF)
        total += self.proto
        total += self.payload_length()
        return total & 0xFFFFFFFF

    def compute_checksum(self) -> None:
        """Set ``cksum`` to the correct value for the current fields."""
        self.cksum = 0
        serializer = Serializer()
        self.serialize(serializer)
        check = InternetChecksum()
        check.add_all(serializer.output())
        self.cksum = check.value()

    def __str__(self) -> str:
        ttl = "" if self.ttl >= 10 else f"ttl={self.ttl}, "
        return (
            f"IPv{self.ver:x}, len={self.length:x}, protocol={self.proto:x}, {ttl}"
            f"src={format_ipv4(self.src)}, dst={format_ipv4(self.dst)}"
        )

    def parse(self, parser: Parser) -> None:
        """Parse a header, marking the parser failed on a bad version, length or checksum.

        Raises ValueError when the parsed version is not 4, since the
        checksum is verified by re-serializing the header.
        """
        first_byte = parser.integer(1)
        self.ver = first_byte >> 4
        self.hlen = first_byte & 0x0F
        self.tos = _read(parser, 1, self.tos)
        self.length = _read(parser, 2, self.length)
        self.identification = _read(parser, 2, self.identification)

        flags_offset = parser.integer(2)
        self.df = bool(flags_offset & 0x4000)
        self.mf = bool(flags_offset & 0x2000)
        self.offset = flags_offset & 0x1FFF

        self.ttl = _read(parser, 1, self.ttl)
        self.proto = _read(parser, 1, self.proto)
        self.cksum = _read(parser, 2, self.cksum)
        self.src = _read(parser, 4, self.src)
        self.dst = _read(parser, 4, self.dst)

        if self.ver != 4:
            parser.set_error()
        if self.hlen < 5:
            parser.set_error()

        options = self.hlen * 4 - self.LENGTH
        parser.remove_prefix(options if options >= 0 else parser.remaining())

        given = self.cksum
        self.compute_checksum()
        if self.cksum != given:
            parser.set_error()

    def serialize(self, serializer: Serializer) -> None:
        """Write the header as is; the checksum is not recomputed."""
        if self.ver != 4:
            raise ValueError("wrong IP version")
        serializer.integer((self.ver << 4) | (self.hlen & 0x0F), 1)
        serializer.integer(self.tos, 1)
        serializer.integer(self.length, 2)
        serializer.integer(self.identification, 2)
        flags_offset = (
            (0x4000 if self.df else 0) | (0x2000 if self.mf else 0) | (self.offset & 0x1FFF)
        )
        serializer.integer(flags_offset, 2)
        serializer.integer(self.ttl, 1)
        serializer.integer(self.proto, 1)
        serializer.integer(self.cksum, 2)
        serializer.integer(self.src, 4)
        serializer.integer(self.dst, 4)


@dataclass
class IPv4Datagram:
    """An IPv4 header followed by its payload chunks."""

    header: IPv4Header = field(default_factory=IPv4Header)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        self.header.parse(parser)
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffers(self.payload)


InternetDatagram = IPv4Datagram