"""Exceptions carrying the attempted operation alongside an error code."""

from __future__ import annotations

import os
from typing import TypeVar

T = TypeVar("T")


class TaggedError(RuntimeError):
    """An error code and message, prefixed with the operation that failed."""

    def __init__(self, attempt: str, error_code: int, message: str) -> None:
        self.attempt = attempt
        self.error_code = error_code
        self.message = message
        super().__init__(f"{attempt}: {message}")


class UnixError(TaggedError):
    """A failed system call, described by its error number."""

    def __init__(self, attempt: str, error_code: int) -> None:
        super().__init__(attempt, error_code, os.strerror(error_code))


def check_system_call(attempt: str, return_value: int) -> int:
    """Return ``return_value`` if it is non-negative, otherwise raise UnixError.

    A negative return value is taken to be the negated error number.
    """
    if return_value >= 0:
        return return_value
    raise UnixError(attempt, -return_value)


def notnull(context: str, value: T | None) -> T:
    """Return ``value``, raising RuntimeError if it is None."""
    if value is None:
        raise RuntimeError(f"{context}: returned null pointer")
    return value