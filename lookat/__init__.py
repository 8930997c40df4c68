"""Public package surface for lookat.

Exports the session facade and its building blocks; ``main`` is imported
lazily to keep package imports lightweight.
"""

from __future__ import annotations

from .cursor import FileListCursor, LoadMode
from .errors import InvalidComparator, InvalidPredicate, LookError, OutOfRange, UserCancelled
from .filters import FilterConfig, PathFilter, build_working_set
from .session import Direction, LookSession, SessionState, SessionStatus
from .view_state import HandlerRegistry, ViewStateStore


def main(*args, **kwargs):
    """Lazily import CLI entrypoint."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "FileListCursor",
    "LoadMode",
    "LookError",
    "UserCancelled",
    "OutOfRange",
    "InvalidComparator",
    "InvalidPredicate",
    "FilterConfig",
    "PathFilter",
    "build_working_set",
    "Direction",
    "LookSession",
    "SessionState",
    "SessionStatus",
    "HandlerRegistry",
    "ViewStateStore",
    "main",
]
