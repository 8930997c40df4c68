"""Bidirectional cursor over an ordered list of file paths.

The list is split around a single ``current`` path:
- ``before``: already visited paths, nearest-first
- ``after``: upcoming paths, nearest-first

``reverse(before) + [current] + after`` is always the full working order.
This module is pure list bookkeeping; saving view state and displaying files
happen in ``lookat.session``.
"""

from __future__ import annotations

import functools
import os
from collections import deque
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path

from .errors import InvalidComparator, InvalidPredicate, OutOfRange

Comparator = Callable[[Path, Path], int]
Predicate = Callable[[Path], bool]


class LoadMode(Enum):
    """How a freshly loaded batch combines with the existing list."""

    REPLACE = "replace"
    APPEND = "append"


def normalize_path(path: str | os.PathLike[str]) -> Path:
    """Return an absolute, ``..``-collapsed path used for equality checks."""
    return Path(os.path.abspath(os.fspath(path)))


class FileListCursor:
    """Ordered path list with one current position.

    ``before`` and ``after`` are deques whose left end is the element nearest
    to ``current``; each navigation step moves one element across the cursor.
    """

    def __init__(self, paths: Iterable[str | os.PathLike[str]] = ()) -> None:
        self.before: deque[Path] = deque()
        self.current: Path | None = None
        self.after: deque[Path] = deque(Path(p) for p in paths)

    def __len__(self) -> int:
        return self.total + (1 if self.current is not None else 0)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        target = normalize_path(path)
        return any(normalize_path(candidate) == target for candidate in self.paths())

    def __repr__(self) -> str:
        return (
            f"FileListCursor(before={list(self.before)!r}, "
            f"current={self.current!r}, after={list(self.after)!r})"
        )

    @property
    def total(self) -> int:
        """Number of paths on either side of the cursor, excluding ``current``."""
        return len(self.before) + len(self.after)

    @property
    def position(self) -> int:
        """Absolute index of ``current`` (or of the gap when it is absent)."""
        return len(self.before)

    def index_bounds(self) -> tuple[int, int]:
        """Inclusive ``(lower, upper)`` bounds accepted by absolute positioning."""
        return -(self.total + 1), self.total

    def paths(self) -> list[Path]:
        """Return the full working order as a new list."""
        items = list(reversed(self.before))
        if self.current is not None:
            items.append(self.current)
        items.extend(self.after)
        return items

    def reset(self) -> None:
        """Drop every path."""
        self.before.clear()
        self.after.clear()
        self.current = None

    def load_list(
        self,
        paths: Iterable[str | os.PathLike[str]],
        mode: LoadMode | str = LoadMode.REPLACE,
    ) -> None:
        """Install ``paths`` as the upcoming list with no current path.

        ``REPLACE`` discards the existing list. ``APPEND`` keeps the existing
        order behind the cursor so the new batch follows it. Callers advance
        once afterwards to make the first new path current.
        """
        mode = LoadMode(mode)
        incoming = deque(Path(p) for p in paths)
        if mode is LoadMode.APPEND:
            self.before = deque(reversed(self.paths()))
        else:
            self.before = deque()
        self.current = None
        self.after = incoming

    def advance(self, count: int = 1) -> None:
        """Move ``count`` steps forward; running off the end clears ``current``."""
        if count < 0:
            self.retreat(-count)
            return
        for _ in range(count):
            if self.current is None and not self.after:
                break
            if self.current is not None:
                self.before.appendleft(self.current)
            self.current = self.after.popleft() if self.after else None

    def retreat(self, count: int = 1) -> None:
        """Move ``count`` steps backward; running off the start clears ``current``."""
        if count < 0:
            self.advance(-count)
            return
        for _ in range(count):
            if self.current is None and not self.before:
                break
            if self.current is not None:
                self.after.appendleft(self.current)
            self.current = self.before.popleft() if self.before else None

    def remove_current(self) -> Path | None:
        """Drop ``current`` from the list and return it.

        The previous path becomes current when there is one, otherwise the
        next one. Returns ``None`` without changes when nothing is current.
        """
        removed = self.current
        if removed is None:
            return None
        if self.before:
            self.current = self.before.popleft()
        elif self.after:
            self.current = self.after.popleft()
        else:
            self.current = None
        return removed

    def insert_before(self, path: str | os.PathLike[str]) -> None:
        """Make ``path`` current, pushing the old current path behind it."""
        if self.current is not None:
            self.before.appendleft(self.current)
        self.current = Path(path)

    def _absolute_index(self, index: int) -> int:
        lower, upper = self.index_bounds()
        if not lower <= index <= upper:
            raise OutOfRange(index, lower, upper)
        if index < 0:
            # Without a current path the list holds ``total`` paths, so -1 is the last one.
            return index + self.total + (1 if self.current is not None else 0)
        return index

    def jump_to_index(self, index: int) -> None:
        """Move to absolute ``index`` of the full order; negatives count from the end.

        Raises ``OutOfRange`` without moving when ``index`` is outside
        ``index_bounds()``.
        """
        target = self._absolute_index(index)
        distance = target - self.position
        if self.current is None:
            # From the gap, the first forward step lands on after[0] and the
            # first backward step on before[0].
            if distance >= 0:
                self.advance(distance + 1)
            else:
                self.retreat(-distance)
            return
        if distance > 0:
            self.advance(distance)
        elif distance < 0:
            self.retreat(-distance)

    def jump_to_path(self, path: str | os.PathLike[str]) -> bool:
        """Jump to the first occurrence of ``path``; return whether it was found."""
        target = normalize_path(path)
        for offset, candidate in enumerate(self.before):
            if normalize_path(candidate) == target:
                self.jump_to_index(self.position - 1 - offset)
                return True
        skip_current = 0 if self.current is None else 1
        for offset, candidate in enumerate(self.after):
            if normalize_path(candidate) == target:
                self.jump_to_index(self.position + skip_current + offset)
                return True
        return False

    def _keeps_results_behind(self) -> bool:
        return bool(self.before) and not self.after

    def _install(self, items: list[Path], current_index: int | None, keep_behind: bool) -> None:
        """Re-split ``items`` around ``current_index``.

        Without a current index everything goes forward, unless only the
        backward side held paths before the rebuild.
        """
        if current_index is None:
            self.current = None
            if keep_behind:
                self.before = deque(reversed(items))
                self.after = deque()
            else:
                self.before = deque()
                self.after = deque(items)
            return
        self.current = items[current_index]
        self.before = deque(reversed(items[:current_index]))
        self.after = deque(items[current_index + 1 :])

    def _current_index(self) -> int | None:
        return self.position if self.current is not None else None

    def sort(self, comparator: Comparator) -> None:
        """Sort the whole list with ``comparator(a, b) -> int``, keeping ``current``."""
        if not callable(comparator):
            raise InvalidComparator(f"comparator is not callable: {comparator!r}")
        keep_behind = self._keeps_results_behind()
        current_index = self._current_index()
        entries = list(enumerate(self.paths()))
        try:
            ordered = sorted(
                entries,
                key=functools.cmp_to_key(lambda left, right: comparator(left[1], right[1])),
            )
        except TypeError as exc:
            raise InvalidComparator(str(exc)) from exc

        new_index = None
        if current_index is not None:
            new_index = next(idx for idx, (origin, _path) in enumerate(ordered) if origin == current_index)
        self._install([path for _origin, path in ordered], new_index, keep_behind)

    def reverse(self) -> None:
        """Reverse the whole list, keeping ``current``."""
        keep_behind = self._keeps_results_behind()
        current_index = self._current_index()
        items = self.paths()
        items.reverse()
        new_index = None if current_index is None else len(items) - 1 - current_index
        self._install(items, new_index, keep_behind)

    def move_current_to_index(self, index: int) -> bool:
        """Move ``current`` to absolute ``index`` of the list without it.

        Uses the ``jump_to_index`` bounds. Returns ``False`` when nothing is
        current.
        """
        if self.current is None:
            return False
        target = self._absolute_index(index)
        items = self.paths()
        moving = items.pop(self.position)
        items.insert(target, moving)
        self._install(items, target, keep_behind=False)
        return True

    def keep_matching(self, predicate: Predicate) -> int:
        """Drop paths for which ``predicate`` is false; return how many were dropped."""
        if not callable(predicate):
            raise InvalidPredicate(f"predicate is not callable: {predicate!r}")
        keep_behind = self._keeps_results_behind()
        current_index = self._current_index()
        items = self.paths()
        kept: list[Path] = []
        new_index = None
        try:
            for idx, path in enumerate(items):
                if not predicate(path):
                    continue
                if idx == current_index:
                    new_index = len(kept)
                kept.append(path)
        except TypeError as exc:
            raise InvalidPredicate(str(exc)) from exc
        self._install(kept, new_index, keep_behind)
        return len(items) - len(kept)


__all__ = [
    "Comparator",
    "Predicate",
    "LoadMode",
    "normalize_path",
    "FileListCursor",
]
