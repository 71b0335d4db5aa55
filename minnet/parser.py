"""Big-endian parsing and serialization over lists of byte chunks."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Protocol


class Parsable(Protocol):
    def parse(self, parser: "Parser") -> None: ...


class Serializable(Protocol):
    def serialize(self, serializer: "Serializer") -> None: ...


class Parser:
    """Reads big-endian fields from a sequence of byte chunks.

    Running out of input marks the parser as failed; once failed, further
    reads return zero values and leave the input untouched.
    """

    def __init__(self, buffers: Iterable[bytes] | bytes) -> None:
        if isinstance(buffers, (bytes, bytearray, memoryview)):
            buffers = [buffers]
        self._chunks: deque[bytes] = deque(bytes(chunk) for chunk in buffers if len(chunk))
        self._skip = 0
        self._size = sum(len(chunk) for chunk in self._chunks)
        self._error = False

    def has_error(self) -> bool:
        return self._error

    def set_error(self) -> None:
        self._error = True

    def remaining(self) -> int:
        """Number of unread bytes."""
        return self._size

    def remove_prefix(self, n: int) -> None:
        """Discard up to ``n`` bytes without affecting the error state."""
        self._take(n)

    def integer(self, width: int) -> int:
        """Read an unsigned big-endian integer of ``width`` bytes."""
        self._check_size(width)
        if self._error:
            return 0
        return int.from_bytes(self._take(width), "big")

    def string(self, length: int) -> bytes:
        """Read exactly ``length`` raw bytes."""
        self._check_size(length)
        if self._error:
            return b""
        return self._take(length)

    def all_remaining(self) -> list[bytes]:
        """Take every unread byte, keeping the chunk boundaries."""
        out = list(self._chunks)
        if out and self._skip:
            out[0] = out[0][self._skip:]
        self._chunks.clear()
        self._skip = 0
        self._size = 0
        return out

    def all_remaining_joined(self) -> bytes:
        """Take every unread byte as a single bytes object."""
        return b"".join(self.all_remaining())

    def _check_size(self, size: int) -> None:
        if size > self._size:
            self._error = True

    def _take(self, n: int) -> bytes:
        out = bytearray()
        while n > 0 and self._chunks:
            front = self._chunks[0]
            piece = front[self._skip:self._skip + n]
            out += piece
            n -= len(piece)
            self._size -= len(piece)
            self._skip += len(piece)
            if self._skip == len(front):
                self._chunks.popleft()
                self._skip = 0
        return bytes(out)


class Serializer:
    """Writes big-endian fields, collecting output as a list of byte chunks."""

    def __init__(self, initial: bytes = b"") -> None:
        self._output: list[bytes] = []
        self._pending = bytearray(initial)

    def integer(self, value: int, width: int) -> None:
        """Append the low ``width`` bytes of ``value`` in big-endian order."""
        mask = (1 << (8 * width)) - 1
        self._pending += (value & mask).to_bytes(width, "big")

    def buffer(self, data: bytes) -> None:
        """Append ``data`` as its own chunk."""
        self.flush()
        self._output.append(bytes(data))

    def buffers(self, chunks: Iterable[bytes]) -> None:
        for chunk in chunks:
            self.buffer(chunk)

    def flush(self) -> None:
        """Move pending integer bytes into the output as a chunk."""
        if self._pending:
            self._output.append(bytes(self._pending))
            self._pending.clear()

    def output(self) -> list[bytes]:
        self.flush()
        return list(self._output)


def serialize(obj: Serializable) -> list[bytes]:
    """Serialize ``obj`` into a list of byte chunks."""
    serializer = Serializer()
    obj.serialize(serializer)
    return serializer.output()


def parse(obj: Parsable, buffers: Iterable[bytes] | bytes) -> bool:
    """Parse ``buffers`` into ``obj``; return True if parsing succeeded."""
    parser = Parser(buffers)
    obj.parse(parser)
    return not parser.has_error()