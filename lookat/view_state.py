"""Per-file view state: resume descriptors, their store, and kind handlers.

Descriptors are plain frozen dataclasses tagged by ``kind``. A handler
registry maps the kind tag reported by the host's display step to the object
that captures, restores, and searches the shared ``Viewport``.
"""

from __future__ import annotations

import bisect
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Union

from .cursor import normalize_path

logger = logging.getLogger(__name__)

GENERIC_KIND = "generic"
TEXT_KIND = "text"


@dataclass(frozen=True)
class GenericDescriptor:
    """Fallback resume point: cursor and viewport-top character offsets."""

    cursor_offset: int = 0
    viewport_offset: int = 0
    kind: str = GENERIC_KIND


@dataclass(frozen=True)
class TextDescriptor:
    """Resume point for text views, kept in line/column units."""

    top_line: int = 0
    text_x: int = 0
    cursor_offset: int = 0
    kind: str = TEXT_KIND


Descriptor = Union[GenericDescriptor, TextDescriptor]


@dataclass
class Viewport:
    """The single reusable viewing surface the host draws into.

    ``cursor`` is a character offset into ``text``; ``start`` is the first
    visible line and ``text_x`` the horizontal scroll column.
    """

    text: str = ""
    cursor: int = 0
    start: int = 0
    text_x: int = 0
    rows: int = 24
    _line_starts: list[int] | None = field(default=None, repr=False, compare=False)

    def load(self, text: str) -> None:
        """Replace the content and move to the top."""
        self.text = text
        self._line_starts = None
        self.cursor = 0
        self.start = 0
        self.text_x = 0

    def line_starts(self) -> list[int]:
        if self._line_starts is None:
            starts = [0]
            for match in re.finditer("\n", self.text):
                if match.end() < len(self.text):
                    starts.append(match.end())
            self._line_starts = starts
        return self._line_starts

    @property
    def line_count(self) -> int:
        return len(self.line_starts())

    @property
    def max_start(self) -> int:
        return max(0, self.line_count - max(1, self.rows))

    def line_for_offset(self, offset: int) -> int:
        """Return the zero-based line containing character ``offset``."""
        offset = max(0, min(offset, len(self.text)))
        return bisect.bisect_right(self.line_starts(), offset) - 1

    def offset_for_line(self, line: int) -> int:
        starts = self.line_starts()
        line = max(0, min(line, len(starts) - 1))
        return starts[line]

    def set_start(self, line: int) -> None:
        self.start = max(0, min(line, self.max_start))

    def scroll(self, delta: int) -> None:
        self.set_start(self.start + delta)

    def reveal_cursor(self) -> None:
        """Scroll just enough for the cursor line to be visible."""
        line = self.line_for_offset(self.cursor)
        rows = max(1, self.rows)
        if line < self.start:
            self.set_start(line)
        elif line >= self.start + rows:
            self.set_start(line - rows + 1)

    def move_to_end(self) -> None:
        self.cursor = len(self.text)
        self.reveal_cursor()

    def visible_lines(self) -> list[str]:
        lines = self.text.splitlines()
        return lines[self.start : self.start + max(1, self.rows)]


class ViewKindHandler(Protocol):
    """Capability set the session needs for one kind of file."""

    def capture(self, view: Viewport) -> Descriptor: ...

    def restore(self, view: Viewport, descriptor: Descriptor) -> None: ...

    def search_forward(self, view: Viewport, pattern: str) -> bool: ...

    def search_backward(self, view: Viewport, pattern: str) -> bool: ...


class GenericViewHandler:
    """Default handler working on raw character offsets."""

    kind = GENERIC_KIND

    def capture(self, view: Viewport) -> Descriptor:
        return GenericDescriptor(
            cursor_offset=view.cursor,
            viewport_offset=view.offset_for_line(view.start),
        )

    def restore(self, view: Viewport, descriptor: Descriptor) -> None:
        if not isinstance(descriptor, GenericDescriptor):
            logger.debug("Generic handler ignoring %s descriptor", descriptor.kind)
            return
        view.cursor = max(0, min(descriptor.cursor_offset, len(view.text)))
        view.set_start(view.line_for_offset(descriptor.viewport_offset))

    def search_forward(self, view: Viewport, pattern: str) -> bool:
        """Move the cursor to the end of the next match after it."""
        regex = re.compile(pattern)
        match = regex.search(view.text, view.cursor)
        if match is not None and match.end() == view.cursor and match.start() == match.end():
            match = regex.search(view.text, view.cursor + 1) if view.cursor < len(view.text) else None
        if match is None:
            return False
        view.cursor = match.end()
        view.reveal_cursor()
        return True

    def search_backward(self, view: Viewport, pattern: str) -> bool:
        """Move the cursor to the start of the last match before it."""
        last = None
        for match in re.finditer(pattern, view.text[: view.cursor]):
            if match.start() < view.cursor:
                last = match
        if last is None:
            return False
        view.cursor = last.start()
        view.reveal_cursor()
        return True


class TextViewHandler(GenericViewHandler):
    """Text files resume on the same top line and horizontal scroll."""

    kind = TEXT_KIND

    def capture(self, view: Viewport) -> Descriptor:
        return TextDescriptor(top_line=view.start, text_x=view.text_x, cursor_offset=view.cursor)

    def restore(self, view: Viewport, descriptor: Descriptor) -> None:
        if isinstance(descriptor, GenericDescriptor):
            super().restore(view, descriptor)
            return
        if not isinstance(descriptor, TextDescriptor):
            return
        view.set_start(descriptor.top_line)
        view.text_x = max(0, descriptor.text_x)
        view.cursor = max(0, min(descriptor.cursor_offset, len(view.text)))


class HandlerRegistry:
    """Kind tag -> handler mapping with a generic fallback."""

    def __init__(self, default: ViewKindHandler | None = None) -> None:
        self.default: ViewKindHandler = default or GenericViewHandler()
        self._handlers: dict[str, ViewKindHandler] = {TEXT_KIND: TextViewHandler()}

    def register(self, kind: str, handler: ViewKindHandler) -> None:
        self._handlers[kind] = handler

    def unregister(self, kind: str) -> None:
        self._handlers.pop(kind, None)

    def handler_for(self, kind: str | None) -> ViewKindHandler:
        if kind is None:
            return self.default
        return self._handlers.get(kind, self.default)

    def kinds(self) -> list[str]:
        return sorted(self._handlers)


class ViewStateStore:
    """Path -> descriptor map; entries for dropped files are left in place."""

    def __init__(self) -> None:
        self._entries: dict[Path, Descriptor] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return normalize_path(path) in self._entries

    def save(self, path: str | os.PathLike[str], descriptor: Descriptor) -> None:
        self._entries[normalize_path(path)] = descriptor

    def load(self, path: str | os.PathLike[str]) -> Descriptor | None:
        return self._entries.get(normalize_path(path))

    def discard(self, path: str | os.PathLike[str]) -> None:
        """Forget the entry for ``path``; missing entries are ignored."""
        self._entries.pop(normalize_path(path), None)

    def reset(self) -> None:
        self._entries.clear()


__all__ = [
    "GENERIC_KIND",
    "TEXT_KIND",
    "GenericDescriptor",
    "TextDescriptor",
    "Descriptor",
    "Viewport",
    "ViewKindHandler",
    "GenericViewHandler",
    "TextViewHandler",
    "HandlerRegistry",
    "ViewStateStore",
]
