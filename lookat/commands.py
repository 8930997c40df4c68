"""Interactive commands: each asks the host for input, then drives the session.

Any dismissed prompt raises ``UserCancelled`` before the session is touched.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

from .cursor import Comparator, LoadMode
from .errors import InvalidPredicate, LookError
from .host import PROMPT_COMPARATOR, PROMPT_GLOB, PROMPT_PATH, PROMPT_POSITION, PROMPT_REGEX
from .session import LookSession, SessionState


def _cmp(left: object, right: object) -> int:
    return (left > right) - (left < right)


def _stat_value(path: Path, attribute: str) -> float:
    try:
        return float(getattr(path.stat(), attribute))
    except OSError:
        return 0.0


def compare_by_name(left: Path, right: Path) -> int:
    return _cmp(left.name.lower(), right.name.lower())


def compare_by_name_descending(left: Path, right: Path) -> int:
    return -compare_by_name(left, right)


def compare_by_path(left: Path, right: Path) -> int:
    return _cmp(str(left), str(right))


def compare_by_mtime(left: Path, right: Path) -> int:
    """Oldest first."""
    return _cmp(_stat_value(left, "st_mtime"), _stat_value(right, "st_mtime"))


def compare_by_size(left: Path, right: Path) -> int:
    return _cmp(_stat_value(left, "st_size"), _stat_value(right, "st_size"))


SORT_COMPARATORS: dict[str, Comparator] = {
    "name": compare_by_name,
    "-name": compare_by_name_descending,
    "path": compare_by_path,
    "mtime": compare_by_mtime,
    "size": compare_by_size,
}


def name_matches(pattern: str) -> Callable[[Path], bool]:
    """Predicate keeping paths whose file name matches ``pattern``."""
    try:
        regex = re.compile(pattern)
    except re.error as exc:
        raise InvalidPredicate(f"bad regexp {pattern!r}: {exc}") from exc
    return lambda path: regex.search(path.name) is not None


class LookCommands:
    """Prompting wrappers around ``LookSession`` operations."""

    def __init__(self, session: LookSession) -> None:
        self.session = session
        self.last_search: str | None = None

    @property
    def host(self):
        return self.session.host

    def _parse_int(self, raw: object) -> int:
        try:
            return int(str(raw))
        except ValueError as exc:
            raise LookError(f"not a number: {raw!r}") from exc

    def _resolve(self, raw: object) -> Path:
        path = Path(str(raw)).expanduser()
        if not path.is_absolute():
            path = self.session.base_dir / path
        return path

    def look_at_files(self, append: bool = False) -> SessionState:
        pattern = self.host.prompt(PROMPT_GLOB, "Look at files", default="*")
        paths = self.host.expand_glob(str(pattern))
        mode = LoadMode.APPEND if append else LoadMode.REPLACE
        return self.session.load_files(paths, mode)

    def look_at_marked(self, append: bool = False) -> SessionState:
        mode = LoadMode.APPEND if append else LoadMode.REPLACE
        return self.session.load_files(self.host.list_marked_paths(), mode)

    def jump_to_position(self) -> SessionState:
        index = self._parse_int(self.host.prompt(PROMPT_POSITION, "Go to file number"))
        return self.session.jump_to_index(index)

    def jump_to_file(self) -> SessionState:
        target = self._resolve(self.host.prompt(PROMPT_PATH, "Go to file"))
        return self.session.jump_to_path(target)

    def insert_file(self) -> SessionState:
        target = self._resolve(self.host.prompt(PROMPT_PATH, "Insert file"))
        return self.session.insert_file(target)

    def move_current(self) -> SessionState:
        index = self._parse_int(self.host.prompt(PROMPT_POSITION, "Move current file to"))
        return self.session.move_current_to_index(index)

    def sort_files(self) -> SessionState:
        choice = self.host.prompt(
            PROMPT_COMPARATOR,
            "Sort by",
            choices=tuple(SORT_COMPARATORS),
            default="name",
        )
        return self.session.sort(SORT_COMPARATORS[str(choice)])

    def keep_matching(self) -> SessionState:
        pattern = self.host.prompt(PROMPT_REGEX, "Keep files matching")
        return self.session.keep_matching(name_matches(str(pattern)))

    def _search_pattern(self, message: str) -> str:
        pattern = str(self.host.prompt(PROMPT_REGEX, message, default=self.last_search))
        try:
            re.compile(pattern)
        except re.error as exc:
            raise LookError(f"bad regexp {pattern!r}: {exc}") from exc
        self.last_search = pattern
        return pattern

    def search_forward(self) -> bool:
        return self.session.search_forward(self._search_pattern("Search forward"))

    def search_backward(self) -> bool:
        return self.session.search_backward(self._search_pattern("Search backward"))


__all__ = [
    "SORT_COMPARATORS",
    "compare_by_name",
    "compare_by_name_descending",
    "compare_by_path",
    "compare_by_mtime",
    "compare_by_size",
    "name_matches",
    "LookCommands",
]
