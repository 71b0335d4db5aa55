"""Socket addresses with name resolution and numeric conversions."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from minnet.errors import TaggedError

_INET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def _lookup(node: str, service: str, family: int, flags: int) -> tuple[int, tuple[Any, ...]]:
    try:
        results = socket.getaddrinfo(node, service, family, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(
            f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)
        ) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    found_family, _, _, _, sockaddr = results[0]
    return int(found_family), tuple(sockaddr)


class Address:
    """A socket address: an address family plus its sockaddr tuple.

    ``Address(ip, port)`` takes a numeric IPv4 address and performs no lookup.
    """

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        self._family, self._sockaddr = _lookup(ip, str(port), socket.AF_INET, flags)

    @classmethod
    def _make(cls, family: int, sockaddr: tuple[Any, ...]) -> Address:
        address = cls.__new__(cls)
        address._family = int(family)
        address._sockaddr = tuple(sockaddr)
        return address

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a hostname and a service name or number to an IPv4 address."""
        family, sockaddr = _lookup(hostname, service, socket.AF_INET, socket.AI_ALL)
        return cls._make(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: tuple[Any, ...]) -> Address:
        """Wrap an address as returned by the socket module for ``family``."""
        if not isinstance(sockaddr, tuple):
            raise ValueError("invalid sockaddr")
        return cls._make(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Create an IPv4 address (port 0) from its 32-bit host-order value."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"not a 32-bit address: {ip_address}")
        return cls._make(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    @property
    def family(self) -> int:
        return self._family

    def to_sockaddr(self) -> tuple[Any, ...]:
        """The address as a tuple the socket module accepts."""
        return self._sockaddr

    def ip_port(self) -> tuple[str, int]:
        """Numeric host string and port."""
        if self._family not in _INET_FAMILIES:
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "ai_family not supported")
        flags = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
        try:
            host, port = socket.getnameinfo(self._sockaddr, flags)
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno or 0, exc.strerror or str(exc)) from exc
        return host, int(port)

    @property
    def ip(self) -> str:
        return self.ip_port()[0]

    @property
    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit host-order integer."""
        if self._family != socket.AF_INET or len(self._sockaddr) != 2:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address(family={self._family}, sockaddr={self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))