"""ARP messages for Ethernet and IPv4."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from minnet.ethernet import ETHERNET_ADDRESS_LENGTH, EthernetHeader, format_ethernet_address
from minnet.ipv4 import format_ipv4
from minnet.parser import Parser, Serializer


def _read(parser: Parser, width: int, current: int) -> int:
    value = parser.integer(width)
    return current if parser.has_error() else value


def _read_address(parser: Parser, current: bytes) -> bytes:
    return bytes(_read(parser, 1, old) for old in current)


@dataclass
class ARPMessage:
    """An ARP request or reply."""

    LENGTH: ClassVar[int] = 28
    TYPE_ETHERNET: ClassVar[int] = 1
    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2

    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPV4
    hardware_address_size: int = ETHERNET_ADDRESS_LENGTH
    protocol_address_size: int = 4
    opcode: int = 0

    sender_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    sender_ip_address: int = 0

    target_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    target_ip_address: int = 0

    def supported(self) -> bool:
        """True for Ethernet/IPv4 requests and replies."""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPV4
            and self.hardware_address_size == ETHERNET_ADDRESS_LENGTH
            and self.protocol_address_size == 4
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    def __str__(self) -> str:
        if self.opcode == self.OPCODE_REQUEST:
            opcode = "REQUEST"
        elif self.opcode == self.OPCODE_REPLY:
            opcode = "REPLY"
        else:
            opcode = "(unknown type)"
        return (
            f"opcode={opcode}, "
            f"sender={format_ethernet_address(self.sender_ethernet_address)}"
            f"/{format_ipv4(self.sender_ip_address)}, "
            f"target={format_ethernet_address(self.target_ethernet_address)}"
            f"/{format_ipv4(self.target_ip_address)}"
        )

    def parse(self, parser: Parser) -> None:
        self.hardware_type = _read(parser, 2, self.hardware_type)
        self.protocol_type = _read(parser, 2, self.protocol_type)
        self.hardware_address_size = _read(parser, 1, self.hardware_address_size)
        self.protocol_address_size = _read(parser, 1, self.protocol_address_size)
        self.opcode = _read(parser, 2, self.opcode)

        if not self.supported():
            parser.set_error()
            return

        self.sender_ethernet_address = _read_address(parser, self.sender_ethernet_address)
        self.sender_ip_address = _read(parser, 4, self.sender_ip_address)
        self.target_ethernet_address = _read_address(parser, self.target_ethernet_address)
        self.target_ip_address = _read(parser, 4, self.target_ip_address)

    def serialize(self, serializer: Serializer) -> None:
        if not self.supported():
            raise ValueError(
                "ARPMessage: unsupported field combination "
                "(must be Ethernet/IP, and request or reply)"
            )
        serializer.integer(self.hardware_type, 2)
        serializer.integer(self.protocol_type, 2)
        serializer.integer(self.hardware_address_size, 1)
        serializer.integer(self.protocol_address_size, 1)
        serializer.integer(self.opcode, 2)
        for byte in self.sender_ethernet_address:
            serializer.integer(byte, 1)
        serializer.integer(self.sender_ip_address, 4)
        for byte in self.target_ethernet_address:
            serializer.integer(byte, 1)
        serializer.integer(self.target_ip_address, 4)