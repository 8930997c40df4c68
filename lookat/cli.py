"""Command-line front door for lookat.

Parses CLI options, builds the filter config, and loads the working set.
Then either prints the list or runs a line-command loop over the session.
"""

from __future__ import annotations

import argparse
import logging
import re
import shutil
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .commands import SORT_COMPARATORS, LookCommands, name_matches
from .config import load_filter_config, load_style_name, save_filter_config
from .cursor import LoadMode
from .errors import LookError
from .filters import FilterConfig, build_working_set
from .host import TerminalHost
from .session import LookSession, SessionStatus
from .syntax import DEFAULT_STYLE

logger = logging.getLogger(__name__)

GLOB_CHARS = "*?["

HELP_TEXT = """\
n [k]     next file          p [k]     previous file
g N       go to index N      G PATH    go to file
i PATH    insert file        d         drop current file from list
m N       move current to N  s [KEY]   sort (name, -name, path, mtime, size)
r         reverse list       f RE      keep files whose name matches RE
/ RE      search forward     ? RE      search backward
j [k]     scroll down        k [k]     scroll up
o [GLOB]  append files       O [GLOB]  replace files
x         reset session      q         quit"""


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _default_rows() -> int:
    """Content rows available below the header in the current terminal."""
    term = shutil.get_terminal_size((80, 24))
    return max(1, term.lines - 2)


def _int_arg(arg: str, default: int = 1) -> int:
    if not arg:
        return default
    try:
        return int(arg)
    except ValueError as exc:
        raise LookError(f"not a number: {arg!r}") from exc


def expand_arguments(host: TerminalHost, raw_args: list[str]) -> list[Path]:
    """Turn CLI arguments into candidate paths; unmatched globs expand to nothing."""
    if not raw_args:
        return host.expand_glob("*")
    out: list[Path] = []
    for raw in raw_args:
        candidate = Path(raw).expanduser()
        if not candidate.exists() and any(ch in raw for ch in GLOB_CHARS):
            out.extend(host.expand_glob(raw))
            continue
        out.append(candidate if candidate.is_absolute() else host.base_dir / candidate)
    return out


def build_filter_config(args: argparse.Namespace) -> FilterConfig:
    """Persisted preferences overridden by command-line flags."""
    base = load_filter_config()
    return FilterConfig(
        file_exclusions=base.file_exclusions + tuple(args.exclude_file),
        directory_exclusions=base.directory_exclusions + tuple(args.exclude_dir),
        recurse_directories=base.recurse_directories and not args.no_recurse,
        show_subdirectories=base.show_subdirectories or args.show_subdirs,
    )


def _command_table(session: LookSession, commands: LookCommands) -> dict[str, Callable[[str], object]]:
    host = session.host

    def sort(arg: str) -> object:
        if not arg:
            return commands.sort_files()
        comparator = SORT_COMPARATORS.get(arg)
        if comparator is None:
            raise LookError(f"unknown sort key: {arg}")
        return session.sort(comparator)

    def search(arg: str, forward: bool) -> bool:
        if arg:
            commands.last_search = arg
            found = session.search_forward(arg) if forward else session.search_backward(arg)
        else:
            found = commands.search_forward() if forward else commands.search_backward()
        if not found:
            raise LookError("search failed")
        return found

    def load(arg: str, mode: LoadMode) -> object:
        if not arg:
            return commands.look_at_files(append=mode is LoadMode.APPEND)
        return session.load_files(host.expand_glob(arg), mode)

    return {
        "n": lambda arg: session.advance(_int_arg(arg)),
        "p": lambda arg: session.retreat(_int_arg(arg)),
        "g": lambda arg: session.jump_to_index(_int_arg(arg)) if arg else commands.jump_to_position(),
        "G": lambda arg: session.jump_to_path(host.base_dir / arg) if arg else commands.jump_to_file(),
        "i": lambda arg: session.insert_file(host.base_dir / arg) if arg else commands.insert_file(),
        "d": lambda arg: session.remove_current(),
        "m": lambda arg: session.move_current_to_index(_int_arg(arg)) if arg else commands.move_current(),
        "s": sort,
        "r": lambda arg: session.reverse(),
        "f": lambda arg: session.keep_matching(name_matches(arg)) if arg else commands.keep_matching(),
        "/": lambda arg: search(arg, True),
        "?": lambda arg: search(arg, False),
        "j": lambda arg: host.view.scroll(_int_arg(arg)),
        "k": lambda arg: host.view.scroll(-_int_arg(arg)),
        "o": lambda arg: load(arg, LoadMode.APPEND),
        "O": lambda arg: load(arg, LoadMode.REPLACE),
        "x": lambda arg: session.reset(),
    }


def run_command_loop(
    session: LookSession,
    read_line: Callable[[str], str] = input,
    out: TextIO | None = None,
) -> None:
    """Show the current file and apply commands until ``q`` or end of input."""
    out = out or sys.stdout
    host = session.host
    commands = LookCommands(session)
    table = _command_table(session, commands)
    while True:
        if session.state.status is SessionStatus.VIEWING:
            out.write(host.render_screen(session.header_text) + "\n")
        else:
            out.write(session.header_text + "\n")
        try:
            line = read_line("> ")
        except (EOFError, KeyboardInterrupt):
            out.write("\n")
            return
        name, _sep, arg = line.strip().partition(" ")
        if not name:
            continue
        if name in {"q", "quit"}:
            return
        if name in {"h", "help"}:
            out.write(HELP_TEXT + "\n")
            continue
        handler = table.get(name)
        if handler is None:
            out.write(f"unknown command: {name} (h for help)\n")
            continue
        try:
            handler(arg.strip())
        except (LookError, re.error) as exc:
            out.write(f"{exc}\n")


def main(default_dir: Path | None = None) -> None:
    """Parse CLI arguments and browse the resulting files.

    ``default_dir`` is primarily for tests; when omitted the current working
    directory is the base for globs and relative names.
    """
    parser = argparse.ArgumentParser(
        description="Browse a filtered list of files one at a time without modifying them."
    )
    parser.add_argument("paths", nargs="*", help="Files, directories, or glob patterns. Defaults to '*'.")
    parser.add_argument("--append", action="store_true", help="Append to marked paths given via --mark.")
    parser.add_argument("--mark", action="append", default=[], metavar="PATH", help="Pre-mark a path.")
    parser.add_argument("--no-recurse", action="store_true", help="Do not descend into subdirectories.")
    parser.add_argument("--exclude-file", action="append", default=[], metavar="RE", help="Skip files matching RE.")
    parser.add_argument("--exclude-dir", action="append", default=[], metavar="RE", help="Skip directories matching RE.")
    parser.add_argument("--show-subdirs", action="store_true", help="Show the subdirectory strip in the header.")
    parser.add_argument("--save-config", action="store_true", help="Persist the effective filter settings.")
    parser.add_argument("--list", action="store_true", help="Print the working set and exit.")
    parser.add_argument("--rows", type=_positive_int, default=None, help="Content rows per screen.")
    parser.add_argument("--style", default=None, help="Pygments style name.")
    parser.add_argument("--no-color", action="store_true", help="Disable syntax colors.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    filter_config = build_filter_config(args)
    if args.save_config:
        save_filter_config(filter_config)

    base_dir = default_dir or Path.cwd()
    host = TerminalHost(
        base_dir,
        rows=args.rows or _default_rows(),
        style=args.style or load_style_name() or DEFAULT_STYLE,
        no_color=args.no_color or not sys.stdout.isatty(),
        marked=[Path(p) for p in args.mark],
    )
    raw_paths = expand_arguments(host, args.paths)
    logger.debug("Expanded %d command-line arguments into %d paths", len(args.paths), len(raw_paths))

    if args.list:
        for path in build_working_set(raw_paths, filter_config).files:
            try:
                sys.stdout.write(f"{path.relative_to(host.base_dir)}\n")
            except ValueError:
                sys.stdout.write(f"{path}\n")
        return

    session = LookSession(host, filter_config)
    if args.mark:
        session.load_files(host.list_marked_paths())
        if args.paths:
            session.load_files(raw_paths, LoadMode.APPEND if args.append else LoadMode.REPLACE)
    else:
        session.load_files(raw_paths)
    run_command_loop(session)


if __name__ == "__main__":
    main()
