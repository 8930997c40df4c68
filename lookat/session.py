"""Browsing session: cursor, view-state store, and filters behind one facade.

Every navigation entry point runs the same sequence:
1. capture the outgoing file's view state into the store
2. run the cursor operation
3. display the new current file and restore its saved view state
4. refresh the header text

When the cursor runs off either end nothing is displayed and the session
reports ``EXHAUSTED`` with a hint for where files remain.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .cursor import Comparator, FileListCursor, LoadMode, Predicate, normalize_path
from .errors import OutOfRange
from .filters import FilterConfig, build_working_set
from .header import StatusSnapshot, render_header
from .host import Host
from .view_state import Descriptor, HandlerRegistry, ViewKindHandler, ViewStateStore

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    EMPTY = "empty"
    VIEWING = "viewing"
    EXHAUSTED = "exhausted"


class Direction(Enum):
    """Side of the cursor that still holds files."""

    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus
    path: Path | None = None
    direction: Direction | None = None


EMPTY_STATE = SessionState(SessionStatus.EMPTY)


class LookSession:
    """One browsing session over a filtered, ordered working set."""

    def __init__(
        self,
        host: Host,
        config: FilterConfig | None = None,
        registry: HandlerRegistry | None = None,
        store: ViewStateStore | None = None,
        base_dir: Path | None = None,
    ) -> None:
        self.host = host
        self.config = config or FilterConfig()
        self.registry = registry or HandlerRegistry()
        self.store = store or ViewStateStore()
        self.cursor = FileListCursor()
        self.base_dir = normalize_path(base_dir or getattr(host, "base_dir", None) or Path.cwd())
        self.subdirectories: list[Path] = []
        self.header_text = ""
        self.header_width = 80
        self._state = EMPTY_STATE
        self._displayed_path: Path | None = None
        self._displayed_kind: str | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def displayed_kind(self) -> str | None:
        return self._displayed_kind

    def _relative_name(self, path: Path) -> str:
        try:
            return str(normalize_path(path).relative_to(self.base_dir))
        except ValueError:
            return str(path)

    def status(self) -> StatusSnapshot:
        """Counts, current name, and subdirectory strip for rendering."""
        current = self.cursor.current
        highlighted = None
        if current is not None:
            parent = normalize_path(current).parent
            for idx, directory in enumerate(self.subdirectories):
                if directory == parent:
                    highlighted = idx
                    break
        return StatusSnapshot(
            backward_count=len(self.cursor.before),
            forward_count=len(self.cursor.after),
            current_relative_name=None if current is None else self._relative_name(current),
            subdirectories=tuple(self._relative_name(directory) for directory in self.subdirectories),
            highlighted_subdirectory_index=highlighted,
        )

    def header(self, width: int | None = None) -> str:
        return render_header(
            self.status(),
            self.header_width if width is None else width,
            show_subdirectories=self.config.show_subdirectories,
        )

    def _save_outgoing(self) -> None:
        path = self._displayed_path
        if path is None:
            return
        handler = self.registry.handler_for(self._displayed_kind)
        self.store.save(path, handler.capture(self.host.view))

    def _exhausted_direction(self) -> Direction | None:
        if self.cursor.after:
            return Direction.FORWARD
        if self.cursor.before:
            return Direction.BACKWARD
        return None

    def _settle(self) -> SessionState:
        current = self.cursor.current
        if current is None:
            self._displayed_path = None
            self._displayed_kind = None
            self._state = SessionState(SessionStatus.EXHAUSTED, direction=self._exhausted_direction())
            logger.debug("List exhausted (%s)", self._state.direction)
        else:
            kind = self.host.display_file(current)
            descriptor = self.store.load(current)
            if descriptor is not None:
                self.registry.handler_for(kind).restore(self.host.view, descriptor)
            self._displayed_path = current
            self._displayed_kind = kind
            self._state = SessionState(SessionStatus.VIEWING, path=current)
            logger.debug("Viewing %s as %s", current, kind)
        self.header_text = self.header()
        return self._state

    def _navigate(self, operation: Callable[[], object]) -> SessionState:
        self._save_outgoing()
        operation()
        return self._settle()

    def load_files(
        self,
        raw_paths: Iterable[str | os.PathLike[str]],
        mode: LoadMode | str = LoadMode.REPLACE,
        config: FilterConfig | None = None,
    ) -> SessionState:
        """Filter ``raw_paths`` into the working set and show its first file."""
        mode = LoadMode(mode)
        if config is not None:
            self.config = config
        working_set = build_working_set(raw_paths, self.config)
        if mode is LoadMode.APPEND and not working_set.files:
            logger.info("Nothing new to append")
            return self._state

        self._save_outgoing()
        self.cursor.load_list(working_set.files, mode)
        if mode is LoadMode.REPLACE:
            self.subdirectories = list(working_set.subdirectories)
        else:
            for directory in working_set.subdirectories:
                if directory not in self.subdirectories:
                    self.subdirectories.append(directory)
        self.cursor.advance(1)
        logger.info("Loaded %d files (%s)", len(working_set.files), mode.value)

        if len(self.cursor) == 0:
            self._displayed_path = None
            self._displayed_kind = None
            self._state = EMPTY_STATE
            self.header_text = self.header()
            return self._state
        return self._settle()

    def visit_current(self) -> SessionState:
        """Re-display the current file, keeping its view position."""
        return self._navigate(lambda: None)

    def advance(self, count: int = 1) -> SessionState:
        return self._navigate(lambda: self.cursor.advance(count))

    def retreat(self, count: int = 1) -> SessionState:
        return self._navigate(lambda: self.cursor.retreat(count))

    def jump_to_index(self, index: int) -> SessionState:
        """Show the file at absolute ``index``; raises ``OutOfRange`` unchanged."""
        self._check_index(index)
        return self._navigate(lambda: self.cursor.jump_to_index(index))

    def _check_index(self, index: int) -> None:
        lower, upper = self.cursor.index_bounds()
        if not lower <= index <= upper:
            raise OutOfRange(index, lower, upper)

    def jump_to_path(self, path: str | os.PathLike[str]) -> SessionState:
        """Show ``path`` if it is in the list; otherwise nothing changes."""
        if path not in self.cursor or normalize_path(path) == self._current_normalized():
            return self._state
        return self._navigate(lambda: self.cursor.jump_to_path(path))

    def _current_normalized(self) -> Path | None:
        current = self.cursor.current
        return None if current is None else normalize_path(current)

    def insert_file(self, path: str | os.PathLike[str]) -> SessionState:
        """Show ``path`` now, keeping the previous file just behind it."""
        return self._navigate(lambda: self.cursor.insert_before(normalize_path(path)))

    def remove_current(self) -> SessionState:
        """Drop the current file from the list (the file itself is untouched)."""
        removed = self.cursor.current
        state = self._navigate(self.cursor.remove_current)
        if removed is not None:
            logger.debug("Removed %s from the list", removed)
        return state

    def sort(self, comparator: Comparator) -> SessionState:
        return self._navigate(lambda: self.cursor.sort(comparator))

    def reverse(self) -> SessionState:
        return self._navigate(self.cursor.reverse)

    def move_current_to_index(self, index: int) -> SessionState:
        self._check_index(index)
        return self._navigate(lambda: self.cursor.move_current_to_index(index))

    def keep_matching(self, predicate: Predicate) -> SessionState:
        """Drop every file for which ``predicate`` is false."""
        return self._navigate(lambda: self.cursor.keep_matching(predicate))

    def search_forward(self, pattern: str) -> bool:
        """Find ``pattern`` after the cursor, continuing into following files."""
        return self._search(pattern, forward=True)

    def search_backward(self, pattern: str) -> bool:
        """Find ``pattern`` before the cursor, continuing into preceding files."""
        return self._search(pattern, forward=False)

    def _search(self, pattern: str, *, forward: bool) -> bool:
        re.compile(pattern)
        if self.cursor.current is None:
            return False
        view = self.host.view
        handler = self.registry.handler_for(self._displayed_kind)
        if self._search_in_view(handler, pattern, forward):
            return True

        origin = self.cursor.position
        skipped: list[tuple[Path, Descriptor | None]] = []
        found = False
        while self.cursor.after if forward else self.cursor.before:
            if forward:
                self.advance(1)
            else:
                self.retreat(1)
            path = self.cursor.current
            if path is None:
                break
            previous = self.store.load(path)
            if forward:
                view.cursor = 0
                view.set_start(0)
            else:
                view.move_to_end()
            handler = self.registry.handler_for(self._displayed_kind)
            if self._search_in_view(handler, pattern, forward):
                found = True
                break
            skipped.append((path, previous))

        if not found:
            self.jump_to_index(origin)
        # Files merely passed through keep their earlier resume points.
        for path, previous in skipped:
            if previous is None:
                self.store.discard(path)
            else:
                self.store.save(path, previous)
        logger.debug("Search %r %s", pattern, "found" if found else "not found")
        return found

    def _search_in_view(self, handler: ViewKindHandler, pattern: str, forward: bool) -> bool:
        if forward:
            return handler.search_forward(self.host.view, pattern)
        return handler.search_backward(self.host.view, pattern)

    def reset(self) -> None:
        """Drop the list, the stored view states, and the subdirectory strip."""
        self.cursor.reset()
        self.store.reset()
        self.subdirectories = []
        self._displayed_path = None
        self._displayed_kind = None
        self._state = EMPTY_STATE
        self.header_text = self.header()


__all__ = [
    "SessionStatus",
    "Direction",
    "SessionState",
    "EMPTY_STATE",
    "LookSession",
]
