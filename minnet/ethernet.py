"""Ethernet addresses, headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from minnet.parser import Parser, Serializer

ETHERNET_ADDRESS_LENGTH = 6
ETHERNET_BROADCAST = b"\xff" * ETHERNET_ADDRESS_LENGTH


def format_ethernet_address(address: bytes) -> str:
    """Render an Ethernet address as colon-separated hex, e.g. ``ff:ff:...``."""
    return ":".join(f"{byte:02x}" for byte in address)


def _read(parser: Parser, width: int, current: int) -> int:
    value = parser.integer(width)
    return current if parser.has_error() else value


def _read_address(parser: Parser, current: bytes) -> bytes:
    return bytes(_read(parser, 1, old) for old in current)


@dataclass
class EthernetHeader:
    """Ethernet frame header."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPV4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    src: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    ethertype: int = 0

    def __str__(self) -> str:
        if self.ethertype == self.TYPE_IPV4:
            kind = "IPv4"
        elif self.ethertype == self.TYPE_ARP:
            kind = "ARP"
        else:
            kind = f"[unknown type {self.ethertype:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}, "
            f"src={format_ethernet_address(self.src)}, type={kind}"
        )

    def parse(self, parser: Parser) -> None:
        self.dst = _read_address(parser, self.dst)
        self.src = _read_address(parser, self.src)
        self.ethertype = _read(parser, 2, self.ethertype)

    def serialize(self, serializer: Serializer) -> None:
        for byte in self.dst:
            serializer.integer(byte, 1)
        for byte in self.src:
            serializer.integer(byte, 1)
        serializer.integer(self.ethertype, 2)


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload chunks."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        self.header.parse(parser)
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffers(self.payload)