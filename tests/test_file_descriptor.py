import errno
import os

import pytest

from minnet.errors import UnixError
from minnet.file_descriptor import READ_BUFFER_SIZE, FileDescriptor


@pytest.fixture
def pipe():
    read_end, write_end = os.pipe()
    reader, writer = FileDescriptor(read_end), FileDescriptor(write_end)
    yield reader, writer
    for handle in (reader, writer):
        if not handle.closed:
            handle.close()


def test_single_read_returns_at_most_16384_bytes(pipe):
    reader, writer = pipe
    data = b"q" * 20000
    assert writer.write(data) == len(data)
    first = reader.read()
    assert len(first) == 16384
    assert len(first) == READ_BUFFER_SIZE
    assert reader.read() == b"q" * (20000 - 16384)


def test_write_then_read_round_trip(pipe):
    reader, writer = pipe
    assert writer.write(b"hello") == len(b"hello")
    assert reader.read() == b"hello"
    assert writer.write_count == 1
    assert reader.read_count == 1
    assert reader.eof is False


def test_writev_concatenates_buffers(pipe):
    reader, writer = pipe
    parts = [b"abc", b"", b"defg"]
    assert writer.writev(parts) == sum(len(p) for p in parts)
    assert reader.read() == b"".join(parts)


def test_empty_write_counts_but_writes_nothing(pipe):
    _, writer = pipe
    assert writer.write(b"") == 0
    assert writer.write_count == 1


def test_read_is_limited_to_buffer_size(pipe):
    reader, writer = pipe
    data = bytes(range(256)) * ((READ_BUFFER_SIZE + 512) // 256)
    assert writer.write(data) == len(data)
    first = reader.read()
    assert len(first) == READ_BUFFER_SIZE
    assert first + reader.read() == data


def test_eof_after_writer_closes(pipe):
    reader, writer = pipe
    writer.close()
    assert writer.closed and writer.eof
    assert reader.read() == b""
    assert reader.eof is True
    assert reader.read_count == 1


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    twin = writer.duplicate()
    assert twin.fd_num == writer.fd_num
    twin.write(b"x")
    assert writer.write_count == 1
    assert reader.read() == b"x"
    twin.close()
    assert writer.closed is True


def test_close_twice_raises_ebadf(pipe):
    _, writer = pipe
    writer.close()
    with pytest.raises(UnixError) as info:
        writer.close()
    assert info.value.error_code == errno.EBADF
    assert str(info.value).startswith("close: ")


def test_negative_fd_is_rejected():
    with pytest.raises(ValueError):
        FileDescriptor(-1)


def test_nonblocking_read_of_empty_pipe(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    assert os.get_blocking(reader.fd_num) is False
    assert reader.read() == b""
    assert reader.read_count == 0
    assert reader.eof is False


def test_set_blocking_restores_blocking_mode(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num) is True


def test_nonblocking_write_to_full_pipe(pipe):
    _, writer = pipe
    writer.set_blocking(False)
    chunk = b"z" * 65536
    with pytest.raises(RuntimeError, match="returned 0") as info:
        for _ in range(64):
            writer.write(chunk)
    assert not isinstance(info.value, UnixError)


def test_write_to_broken_pipe(pipe):
    reader, writer = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        writer.write(b"data")
    assert info.value.error_code == errno.EPIPE


def test_context_manager_closes():
    read_end, write_end = os.pipe()
    os.close(read_end)
    with FileDescriptor(write_end) as handle:
        assert handle.closed is False
    assert handle.closed is True
    assert handle.eof is True