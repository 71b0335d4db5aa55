"""Network sockets built on shared file-descriptor handles."""

from __future__ import annotations

import socket
import struct
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from minnet.address import Address
from minnet.errors import UnixError
from minnet.file_descriptor import READ_BUFFER_SIZE, FileDescriptor

_AF_PACKET = getattr(socket, "AF_PACKET", 17)
_SOL_PACKET = getattr(socket, "SOL_PACKET", 263)
_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)
_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0x20)
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_MR_PROMISC = 1


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    def __init__(self, domain: int, type_: int, protocol: int = 0) -> None:
        try:
            sock = socket.socket(domain, type_, protocol)
        except OSError as exc:
            raise UnixError("socket", exc.errno or 0) from exc
        super().__init__(sock.detach())

    @classmethod
    def _adopt(cls, fd: FileDescriptor, domain: int, type_: int, protocol: int = 0) -> Socket:
        """Take over ``fd``, checking that it is a socket of the expected kind."""
        adopted = cls._sharing(fd._handle)
        with adopted._socket("getsockopt") as sock:
            actual_domain, actual_type, actual_protocol = sock.family, sock.type, sock.proto
        if actual_domain != domain:
            raise RuntimeError("socket domain mismatch")
        if actual_type != type_:
            raise RuntimeError("socket type mismatch")
        if protocol and actual_protocol != protocol:
            raise RuntimeError("socket protocol mismatch")
        return adopted

    @contextmanager
    def _socket(self, attempt: str) -> Iterator[socket.socket]:
        """A temporary socket object over this descriptor, which it never closes."""
        with self._checked(attempt):
            sock = socket.socket(fileno=self.fd_num)
            try:
                yield sock
            finally:
                sock.detach()

    def _getsockopt(self, level: int, option: int) -> int:
        value = 0
        with self._socket("getsockopt") as sock:
            value = sock.getsockopt(level, option)
        return value

    def _setsockopt(self, level: int, option: int, value: int | bytes) -> None:
        with self._socket("setsockopt") as sock:
            sock.setsockopt(level, option, value)

    def _address(self, attempt: str, query: Callable[[socket.socket], Any]) -> Address:
        with self._socket(attempt) as sock:
            family = int(sock.family)
            raw = query(sock)
        return Address.from_sockaddr(family, raw)

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._socket("bind") as sock:
            sock.bind(address.to_sockaddr())

    def bind_to_device(self, device_name: str) -> None:
        self._setsockopt(socket.SOL_SOCKET, _SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        """Connect to a peer; on a non-blocking socket this may still be in progress."""
        with self._socket("connect") as sock:
            sock.connect(address.to_sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._socket("shutdown") as sock:
            sock.shutdown(how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        return self._address("getsockname", socket.socket.getsockname)

    def peer_address(self) -> Address:
        return self._address("getpeername", socket.socket.getpeername)

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def throw_if_error(self) -> None:
        """Raise UnixError if the socket has a pending error."""
        socket_error = self._getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if socket_error:
            raise UnixError("socket error", socket_error)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self) -> tuple[Address, bytes] | None:
        """Receive a datagram and its sender's address.

        Returns None when a non-blocking socket has nothing waiting. Raises
        RuntimeError if the datagram exceeds READ_BUFFER_SIZE bytes.
        """
        buffer = bytearray(READ_BUFFER_SIZE)
        received: tuple[int, Any] | None = None
        with self._socket("recvfrom") as sock:
            family = int(sock.family)
            received = sock.recvfrom_into(buffer, 0, _MSG_TRUNC)
        if received is None:
            return None
        length, source = received
        if length > len(buffer):
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return Address.from_sockaddr(family, source), bytes(buffer[:length])

    def sendto(self, destination: Address, payload: bytes) -> None:
        with self._socket("sendto") as sock:
            sock.sendto(payload, destination.to_sockaddr())
        self._register_write()

    def send(self, payload: bytes) -> None:
        """Send to the connected peer."""
        with self._socket("send") as sock:
            sock.send(payload)
        self._register_write()


class UDPSocket(DatagramSocket):
    """An unbound, unconnected UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)


class TCPSocket(Socket):
    """An unbound, unconnected TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        with self._socket("listen") as sock:
            sock.listen(backlog)

    def accept(self) -> TCPSocket | None:
        """Accept a connection, blocking until one arrives.

        Returns None when a non-blocking socket has no connection waiting.
        """
        self._register_read()
        new_fd: int | None = None
        with self._socket("accept") as sock:
            connection, _ = sock.accept()
            new_fd = connection.detach()
        if new_fd is None:
            return None
        accepted = TCPSocket._adopt(FileDescriptor(new_fd), socket.AF_INET, socket.SOCK_STREAM)
        assert isinstance(accepted, TCPSocket)
        return accepted


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, socket_type: int, protocol: int) -> None:
        super().__init__(_AF_PACKET, socket_type, protocol)

    def set_promiscuous(self) -> None:
        """Receive every frame seen by the bound interface."""
        address = self.local_address()
        if address.family != _AF_PACKET:
            raise RuntimeError("local address is not a packet address")
        try:
            ifindex = socket.if_nametoindex(address.to_sockaddr()[0])
        except OSError as exc:
            raise UnixError("if_nametoindex", exc.errno or 0) from exc
        request = struct.pack("iHH8s", ifindex, _PACKET_MR_PROMISC, 0, b"")
        self._setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, request)