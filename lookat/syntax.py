"""File probing, tolerant decoding, and syntax highlighting.

Decides whether a file is shown as text, an image placeholder, or a binary
placeholder. Text is colorized with Pygments and neutralized against
terminal control bytes so viewing a file never has side effects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .view_state import TEXT_KIND

BINARY_PROBE_BYTES = 4_096
COLORIZE_MAX_FILE_BYTES = 256_000
DEFAULT_STYLE = "monokai"

IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpeg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
)

IMAGE_KIND = "image"
BINARY_KIND = "binary"
ERROR_KIND = "error"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


@lru_cache(maxsize=16)
def _formatter_for_style(style: str) -> TerminalFormatter:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        style = DEFAULT_STYLE
    return TerminalFormatter(style=style)


def colorize_source(source: str, path: Path, style: str = DEFAULT_STYLE) -> str:
    """Colorize ``source`` with a lexer chosen from the filename and content."""
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    rendered = highlight(source, lexer, _formatter_for_style(style))
    # Pygments always terminates output with a newline.
    if not source.endswith("\n") and rendered.endswith("\n"):
        rendered = rendered[:-1]
    return rendered


def probe_kind(sample: bytes) -> tuple[str, str | None]:
    """Classify the leading bytes of a file as ``(kind, image_format)``."""
    for signature, image_format in IMAGE_SIGNATURES:
        if sample.startswith(signature):
            return IMAGE_KIND, image_format
    if b"\x00" in sample:
        return BINARY_KIND, None
    return TEXT_KIND, None


@dataclass(frozen=True)
class RenderedFile:
    """Display payload: plain text for searching, display text for output."""

    kind: str
    text: str
    display: str

    @classmethod
    def placeholder(cls, kind: str, message: str) -> RenderedFile:
        return cls(kind=kind, text=message, display=message)

    @classmethod
    def from_path(cls, target: Path, style: str = DEFAULT_STYLE, no_color: bool = False) -> RenderedFile:
        """Build the display payload for ``target``.

        Resolution order:
        1. image signature -> image placeholder
        2. NUL-byte probe -> binary placeholder
        3. sanitized text, colorized unless disabled or too large
        """
        try:
            file_size = target.stat().st_size
        except OSError:
            file_size = -1

        try:
            with target.open("rb") as handle:
                sample = handle.read(BINARY_PROBE_BYTES)
        except OSError as exc:
            return cls.placeholder(ERROR_KIND, f"{target}\n\n<error reading file: {exc}>")

        kind, image_format = probe_kind(sample)
        if kind == IMAGE_KIND:
            return cls.placeholder(kind, f"{target}\n\n<{image_format} image: {file_size} bytes>")
        if kind == BINARY_KIND:
            if file_size >= 0:
                return cls.placeholder(kind, f"{target}\n\n<binary file: {file_size} bytes>")
            return cls.placeholder(kind, f"{target}\n\n<binary file>")

        try:
            source = sanitize_terminal_text(read_text(target))
        except OSError as exc:
            return cls.placeholder(ERROR_KIND, f"{target}\n\n<error reading file: {exc}>")
        if no_color or file_size > COLORIZE_MAX_FILE_BYTES:
            return cls(kind=TEXT_KIND, text=source, display=source)
        return cls(kind=TEXT_KIND, text=source, display=colorize_source(source, target, style))


def render_file(target: Path, style: str = DEFAULT_STYLE, no_color: bool = False) -> RenderedFile:
    return RenderedFile.from_path(target, style=style, no_color=no_color)


__all__ = [
    "BINARY_PROBE_BYTES",
    "COLORIZE_MAX_FILE_BYTES",
    "DEFAULT_STYLE",
    "TEXT_KIND",
    "IMAGE_KIND",
    "BINARY_KIND",
    "ERROR_KIND",
    "read_text",
    "sanitize_terminal_text",
    "colorize_source",
    "probe_kind",
    "RenderedFile",
    "render_file",
]
