"""The Internet checksum (one's-complement sum of 16-bit words)."""

from __future__ import annotations

from collections.abc import Iterable

_MASK32 = 0xFFFFFFFF


class InternetChecksum:
    """Incremental Internet checksum; byte alignment carries across calls."""

    def __init__(self, initial: int = 0) -> None:
        self._sum = initial & _MASK32
        self._low_byte = False

    def add(self, data: bytes) -> None:
        for byte in data:
            self._sum = (self._sum + (byte if self._low_byte else byte << 8)) & _MASK32
            self._low_byte = not self._low_byte

    def add_all(self, chunks: Iterable[bytes]) -> None:
        for chunk in chunks:
            self.add(chunk)

    def value(self) -> int:
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF