"""Exception types raised by cursor, session, and command operations.

Every error is local to the operation that raised it; the session stays
usable afterwards.
"""

from __future__ import annotations


class LookError(Exception):
    """Base class for recoverable lookat errors."""


class UserCancelled(LookError):
    """A prompt was dismissed; the triggering command is aborted."""


class OutOfRange(LookError, IndexError):
    """Absolute index outside ``lower..upper`` (inclusive)."""

    def __init__(self, index: int, lower: int, upper: int) -> None:
        super().__init__(f"index {index} out of range [{lower}, {upper}]")
        self.index = index
        self.lower = lower
        self.upper = upper


class InvalidComparator(LookError, TypeError):
    """Comparator is not callable as ``comparator(a, b) -> int``."""


class InvalidPredicate(LookError, TypeError):
    """Predicate is not callable as ``predicate(path) -> bool``."""


__all__ = [
    "LookError",
    "UserCancelled",
    "OutOfRange",
    "InvalidComparator",
    "InvalidPredicate",
]
