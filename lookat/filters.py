"""Path admission rules and working-set construction.

Exclusion patterns are regular expressions searched against entry names.
Filtering uses the type the filesystem reports for a path, so broken
symlinks and special files are neither files nor directories and are skipped.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_FILE_EXCLUSIONS: tuple[str, ...] = (r"\.zip$",)
DEFAULT_DIRECTORY_EXCLUSIONS: tuple[str, ...] = (r"^\.git$", r"^\.hg$", r"^\.svn$")


class AdmitDecision(Enum):
    """Outcome of checking one candidate path."""

    ADMITTED = "admitted"
    SKIPPED_FILE = "skipped-file"
    SKIPPED_DIRECTORY = "skipped-directory"
    SKIPPED_OTHER = "skipped-other"


@dataclass(frozen=True)
class FilterConfig:
    """Per-session filter settings; replaced, never mutated, between sessions."""

    file_exclusions: tuple[str, ...] = DEFAULT_FILE_EXCLUSIONS
    directory_exclusions: tuple[str, ...] = DEFAULT_DIRECTORY_EXCLUSIONS
    recurse_directories: bool = True
    show_subdirectories: bool = False


@dataclass
class WorkingSet:
    """Admitted files in load order plus the directories they came from."""

    files: list[Path] = field(default_factory=list)
    subdirectories: list[Path] = field(default_factory=list)


def _compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            logger.warning("Ignoring invalid exclusion pattern %r: %s", pattern, exc)
    return tuple(compiled)


def _matches_any(name: str, patterns: tuple[re.Pattern[str], ...]) -> bool:
    return any(pattern.search(name) for pattern in patterns)


class PathFilter:
    """Decides which candidate paths enter the working set."""

    def __init__(self, config: FilterConfig | None = None) -> None:
        self.config = config or FilterConfig()
        self._file_patterns = _compile_patterns(self.config.file_exclusions)
        self._directory_patterns = _compile_patterns(self.config.directory_exclusions)

    def is_excluded_file_name(self, name: str) -> bool:
        return _matches_any(name, self._file_patterns)

    def is_excluded_directory_name(self, name: str) -> bool:
        return _matches_any(name, self._directory_patterns)

    def admit(self, path: Path) -> AdmitDecision:
        """Classify ``path`` by its reported type and its name."""
        try:
            is_file = path.is_file()
            is_dir = not is_file and path.is_dir()
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", path, exc)
            return AdmitDecision.SKIPPED_OTHER

        if is_file:
            if self.is_excluded_file_name(path.name):
                return AdmitDecision.SKIPPED_FILE
            return AdmitDecision.ADMITTED
        if is_dir:
            if self.is_excluded_directory_name(path.name):
                return AdmitDecision.SKIPPED_DIRECTORY
            return AdmitDecision.ADMITTED
        return AdmitDecision.SKIPPED_OTHER

    def _child_directories(self, directory: Path) -> list[Path]:
        try:
            with os.scandir(directory) as entries:
                names = sorted(entry.name for entry in entries if entry.name not in {".", ".."})
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory, exc)
            return []
        children: list[Path] = []
        for name in names:
            child = directory / name
            try:
                # Directory symlinks are not followed so cycles cannot recurse forever.
                if child.is_symlink() or not child.is_dir():
                    continue
            except OSError as exc:
                logger.debug("Skipping %s: %s", child, exc)
                continue
            if self.admit(child) is AdmitDecision.ADMITTED:
                children.append(child)
        return children

    def expand_directory(self, directory: Path) -> list[Path]:
        """Return ``directory`` plus admitted descendants, depth-first pre-order.

        Without recursion only ``[directory]`` is returned.
        """
        if not self.config.recurse_directories:
            return [directory]
        out: list[Path] = []
        stack = [directory]
        while stack:
            current = stack.pop()
            out.append(current)
            stack.extend(reversed(self._child_directories(current)))
        return out

    def directory_files(self, directory: Path) -> list[Path]:
        """Admitted regular files directly inside ``directory``, sorted by name."""
        try:
            with os.scandir(directory) as entries:
                names = sorted(entry.name for entry in entries)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory, exc)
            return []
        files: list[Path] = []
        for name in names:
            child = directory / name
            try:
                if not child.is_file():
                    continue
            except OSError as exc:
                logger.debug("Skipping %s: %s", child, exc)
                continue
            if self.admit(child) is AdmitDecision.ADMITTED:
                files.append(child)
        return files


def build_working_set(
    raw_paths: Iterable[str | os.PathLike[str]],
    config: FilterConfig | None = None,
) -> WorkingSet:
    """Filter and expand ``raw_paths`` into absolute files in input order.

    Directories contribute their own files followed by the files of each
    admitted descendant directory. A path already collected is not added
    again.
    """
    path_filter = PathFilter(config)
    working_set = WorkingSet()
    seen_files: set[Path] = set()
    seen_dirs: set[Path] = set()

    def add_file(path: Path) -> None:
        if path in seen_files:
            return
        seen_files.add(path)
        working_set.files.append(path)

    for raw in raw_paths:
        candidate = Path(os.path.abspath(os.fspath(raw)))
        decision = path_filter.admit(candidate)
        if decision is not AdmitDecision.ADMITTED:
            logger.debug("Not admitted (%s): %s", decision.value, candidate)
            continue
        if candidate.is_file():
            add_file(candidate)
            continue
        for directory in path_filter.expand_directory(candidate):
            if directory in seen_dirs:
                continue
            seen_dirs.add(directory)
            working_set.subdirectories.append(directory)
            for path in path_filter.directory_files(directory):
                add_file(path)

    logger.debug(
        "Working set: %d files from %d directories",
        len(working_set.files),
        len(working_set.subdirectories),
    )
    return working_set


__all__ = [
    "DEFAULT_FILE_EXCLUSIONS",
    "DEFAULT_DIRECTORY_EXCLUSIONS",
    "AdmitDecision",
    "FilterConfig",
    "WorkingSet",
    "PathFilter",
    "build_working_set",
]
