"""Reference-counted handles on operating-system file descriptors."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from minnet.errors import UnixError

READ_BUFFER_SIZE = 16384

_WOULD_BLOCK = frozenset({errno.EAGAIN, errno.EWOULDBLOCK, errno.EINPROGRESS})


class _Handle:
    """The kernel descriptor itself, shared by every FileDescriptor that refers to it."""

    __slots__ = ("closed", "fd", "eof", "non_blocking", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        self.closed = True
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.read_count = 0
        self.write_count = 0
        try:
            self.non_blocking = not os.get_blocking(fd)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno or 0) from exc
        self.closed = False

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno or 0) from exc
        self.eof = True
        self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise while being collected
            print(f"Exception closing file descriptor: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a kernel file descriptor.

    Handles made with :meth:`duplicate` share the descriptor, its flags and
    its counters; the descriptor is closed when the last of them goes away
    or when :meth:`close` is called on any of them.
    """

    def __init__(self, fd: int) -> None:
        self._handle = _Handle(fd)

    @classmethod
    def _sharing(cls, handle: _Handle) -> FileDescriptor:
        shared = cls.__new__(cls)
        shared._handle = handle
        return shared

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.closed:
            self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fd={self.fd_num}, closed={self.closed})"

    @property
    def fd_num(self) -> int:
        return self._handle.fd

    @property
    def eof(self) -> bool:
        return self._handle.eof

    @property
    def closed(self) -> bool:
        return self._handle.closed

    @property
    def read_count(self) -> int:
        return self._handle.read_count

    @property
    def write_count(self) -> int:
        return self._handle.write_count

    def _set_eof(self) -> None:
        self._handle.eof = True

    def _register_read(self) -> None:
        self._handle.read_count += 1

    def _register_write(self) -> None:
        self._handle.write_count += 1

    @contextmanager
    def _checked(self, attempt: str) -> Iterator[None]:
        """Turn OSError into UnixError; on a non-blocking descriptor, would-block is silent."""
        try:
            yield
        except OSError as exc:
            if self._handle.non_blocking and exc.errno in _WOULD_BLOCK:
                return
            raise UnixError(attempt, exc.errno or 0) from exc

    def read(self) -> bytes:
        """Read up to READ_BUFFER_SIZE bytes.

        Returns b"" at end of file (setting ``eof``) and also when a
        non-blocking descriptor has nothing to read.
        """
        data: bytes | None = None
        with self._checked("read"):
            data = os.read(self.fd_num, READ_BUFFER_SIZE)
        if data is None:
            return b""
        self._register_read()
        if not data:
            self._set_eof()
        if len(data) > READ_BUFFER_SIZE:
            raise RuntimeError("read() read more than requested")
        return data

    def write(self, data: bytes) -> int:
        """Write ``data``; return the number of bytes written."""
        return self.writev([data])

    def writev(self, buffers: Iterable[bytes]) -> int:
        """Write several buffers in one call; return the number of bytes written."""
        chunks = [bytes(buffer) for buffer in buffers]
        total = sum(len(chunk) for chunk in chunks)
        written = 0
        with self._checked("writev"):
            written = os.writev(self.fd_num, chunks)
        self._register_write()
        if written == 0 and total != 0:
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def close(self) -> None:
        """Close the underlying descriptor for every handle that shares it."""
        self._handle.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle on the same descriptor."""
        return self._sharing(self._handle)

    def set_blocking(self, blocking: bool) -> None:
        try:
            os.set_blocking(self.fd_num, blocking)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno or 0) from exc
        self._handle.non_blocking = not blocking