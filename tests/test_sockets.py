import errno
import select
import socket

import pytest

from minnet.address import Address
from minnet.errors import UnixError
from minnet.file_descriptor import READ_BUFFER_SIZE
from minnet.sockets import PacketSocket, TCPSocket, UDPSocket

LOOPBACK = "127.0.0.1"


@pytest.fixture
def track():
    opened = []

    def register(sock):
        opened.append(sock)
        return sock

    yield register
    for sock in opened:
        if not sock.closed:
            sock.close()


def bound_udp(track):
    sock = track(UDPSocket())
    sock.bind(Address(LOOPBACK, 0))
    return sock


def tcp_pair(track):
    listener = track(TCPSocket())
    listener.set_reuseaddr()
    listener.bind(Address(LOOPBACK, 0))
    listener.listen()
    client = track(TCPSocket())
    client.connect(listener.local_address())
    server = track(listener.accept())
    return listener, client, server


def test_udp_round_trip(track):
    receiver = bound_udp(track)
    sender = bound_udp(track)
    sender.sendto(receiver.local_address(), b"ping")
    source, payload = receiver.recv()
    assert payload == b"ping"
    assert source == sender.local_address()
    assert receiver.read_count == 1
    assert sender.write_count == 1


def test_udp_connected_send(track):
    receiver = bound_udp(track)
    sender = bound_udp(track)
    sender.connect(receiver.local_address())
    assert sender.peer_address() == receiver.local_address()
    sender.send(b"hi")
    assert receiver.recv()[1] == b"hi"


def test_unbound_udp_local_address(track):
    sock = track(UDPSocket())
    assert sock.local_address().ip_port() == ("0.0.0.0", 0)


def test_bound_address_keeps_ip(track):
    sock = bound_udp(track)
    ip, port = sock.local_address().ip_port()
    assert ip == LOOPBACK
    assert 0 < port <= 0xFFFF


def test_nonblocking_recv_with_nothing_waiting(track):
    sock = bound_udp(track)
    sock.set_blocking(False)
    assert sock.recv() is None
    assert sock.read_count == 0


def test_oversized_datagram_is_rejected(track):
    receiver = bound_udp(track)
    sender = bound_udp(track)
    sender.sendto(receiver.local_address(), b"a" * (READ_BUFFER_SIZE + 1))
    with pytest.raises(RuntimeError, match="oversized"):
        receiver.recv()
    assert receiver.read_count == 0


def test_tcp_accept_and_exchange(track):
    listener, client, server = tcp_pair(track)
    assert isinstance(server, TCPSocket)
    assert server.peer_address() == client.local_address()
    assert client.peer_address() == listener.local_address()
    assert listener.read_count == 1
    client.write(b"data")
    assert server.read() == b"data"


def test_shutdown_write_gives_peer_eof(track):
    _, client, server = tcp_pair(track)
    client.shutdown(socket.SHUT_WR)
    assert client.write_count == 1
    assert server.read() == b""
    assert server.eof is True


def test_shutdown_both_counts_read_and_write(track):
    _, client, _ = tcp_pair(track)
    client.shutdown(socket.SHUT_RDWR)
    assert (client.read_count, client.write_count) == (1, 1)


def test_shutdown_with_invalid_how(track):
    _, client, _ = tcp_pair(track)
    with pytest.raises(UnixError) as info:
        client.shutdown(7)
    assert info.value.error_code == errno.EINVAL


def test_nonblocking_accept_with_nothing_pending(track):
    listener = track(TCPSocket())
    listener.bind(Address(LOOPBACK, 0))
    listener.listen()
    listener.set_blocking(False)
    assert listener.accept() is None


def test_peer_address_of_unconnected_socket(track):
    sock = track(TCPSocket())
    with pytest.raises(UnixError) as info:
        sock.peer_address()
    assert info.value.error_code == errno.ENOTCONN


def test_bind_to_address_in_use(track):
    first = track(TCPSocket())
    first.bind(Address(LOOPBACK, 0))
    second = track(TCPSocket())
    with pytest.raises(UnixError) as info:
        second.bind(first.local_address())
    assert info.value.error_code == errno.EADDRINUSE


def test_connection_refused_is_reported(track):
    unused = track(TCPSocket())
    unused.bind(Address(LOOPBACK, 0))
    target = unused.local_address()
    client = track(TCPSocket())
    client.set_blocking(False)
    with pytest.raises(UnixError) as info:
        client.connect(target)
        select.select([], [client.fd_num], [], 5)
        client.throw_if_error()
    assert info.value.error_code == errno.ECONNREFUSED


def test_set_reuseaddr(track):
    sock = track(TCPSocket())
    sock.set_reuseaddr()
    view = socket.fromfd(sock.fd_num, socket.AF_INET, socket.SOCK_STREAM)
    try:
        assert view.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR) == 1
    finally:
        view.close()


def test_duplicate_socket_shares_descriptor(track):
    sock = bound_udp(track)
    twin = sock.duplicate()
    assert isinstance(twin, UDPSocket)
    assert twin.local_address() == sock.local_address()
    twin.close()
    assert sock.closed is True


def test_set_promiscuous_needs_packet_address(track):
    sock = bound_udp(track)
    with pytest.raises(RuntimeError, match="packet") as info:
        PacketSocket.set_promiscuous(sock)
    assert not isinstance(info.value, UnixError)