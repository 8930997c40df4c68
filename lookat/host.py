"""Host collaborators the session drives: selection, globbing, display, prompts.

``Host`` is the contract; ``TerminalHost`` renders into a plain terminal and
reads answers with ``input()``.
"""

from __future__ import annotations

import glob
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

from .errors import UserCancelled
from .syntax import DEFAULT_STYLE, RenderedFile, render_file
from .view_state import Viewport

PROMPT_GLOB = "glob"
PROMPT_REGEX = "regex"
PROMPT_POSITION = "position"
PROMPT_COMPARATOR = "comparator"
PROMPT_PATH = "path"


class Host(Protocol):
    """Everything ``LookSession`` needs from its surroundings."""

    view: Viewport

    def list_marked_paths(self) -> list[Path]: ...

    def expand_glob(self, pattern: str | None) -> list[Path]: ...

    def display_file(self, path: Path) -> str: ...

    def prompt(self, kind: str, message: str, **options: object) -> object: ...


class TerminalHost:
    """Host that keeps one rendered file and formats it for a terminal."""

    def __init__(
        self,
        base_dir: Path | None = None,
        *,
        rows: int = 24,
        style: str = DEFAULT_STYLE,
        no_color: bool = False,
        marked: Iterable[Path] = (),
        read_line: Callable[[str], str] = input,
    ) -> None:
        self.base_dir = (base_dir or Path.cwd()).resolve()
        self.view = Viewport(rows=rows)
        self.style = style
        self.no_color = no_color
        self.marked: list[Path] = [Path(p) for p in marked]
        self.rendered: RenderedFile | None = None
        self.displayed_path: Path | None = None
        self._read_line = read_line

    def list_marked_paths(self) -> list[Path]:
        return list(self.marked)

    def mark(self, path: Path) -> None:
        if path not in self.marked:
            self.marked.append(path)

    def expand_glob(self, pattern: str | None) -> list[Path]:
        """Expand ``pattern`` relative to ``base_dir``; empty means ``*``."""
        pattern = os.path.expanduser(pattern or "*")
        if not os.path.isabs(pattern):
            pattern = os.path.join(self.base_dir, pattern)
        return [Path(match) for match in sorted(glob.glob(pattern))]

    def display_file(self, path: Path) -> str:
        self.rendered = render_file(path, style=self.style, no_color=self.no_color)
        self.displayed_path = path
        self.view.load(self.rendered.text)
        return self.rendered.kind

    def clear(self) -> None:
        self.rendered = None
        self.displayed_path = None
        self.view.load("")

    def prompt(self, kind: str, message: str, **options: object) -> object:
        """Ask for one line of input.

        EOF or an empty answer without a ``default`` cancels. A ``choices``
        option restricts accepted answers.
        """
        default = options.get("default")
        suffix = f" [{default}]" if default is not None else ""
        try:
            answer = self._read_line(f"{message}{suffix}: ").strip()
        except (EOFError, KeyboardInterrupt) as exc:
            raise UserCancelled(message) from exc
        if not answer:
            if default is None:
                raise UserCancelled(message)
            answer = str(default)
        choices = options.get("choices")
        if choices is not None and answer not in choices:
            raise UserCancelled(f"{answer!r} is not one of: {', '.join(choices)}")
        return answer

    def screen_lines(self) -> list[str]:
        """Visible rows of the current file, horizontally scrolled when plain."""
        if self.rendered is None:
            return []
        view = self.view
        rows = max(1, view.rows)
        if view.text_x > 0 or self.rendered.display == self.rendered.text:
            lines = self.rendered.text.splitlines()
            return [line[view.text_x :] for line in lines[view.start : view.start + rows]]
        lines = self.rendered.display.splitlines()
        return lines[view.start : view.start + rows]

    def render_screen(self, header: str) -> str:
        return "\n".join([header, *self.screen_lines()])


__all__ = [
    "PROMPT_GLOB",
    "PROMPT_REGEX",
    "PROMPT_POSITION",
    "PROMPT_COMPARATOR",
    "PROMPT_PATH",
    "Host",
    "TerminalHost",
]
