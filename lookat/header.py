"""Header line describing the cursor position.

Pure string formatting; no session or filesystem access.
"""

from __future__ import annotations

from dataclasses import dataclass

ELLIPSIS = "…"


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only view of the cursor used for rendering."""

    backward_count: int
    forward_count: int
    current_relative_name: str | None
    subdirectories: tuple[str, ...] = ()
    highlighted_subdirectory_index: int | None = None


def truncate_left(text: str, limit: int) -> str:
    """Keep the tail of ``text`` within ``limit`` columns, marking the cut."""
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    if limit == 1:
        return ELLIPSIS
    return ELLIPSIS + text[-(limit - 1) :]


def _subdirectory_strip(status: StatusSnapshot) -> str:
    parts: list[str] = []
    for idx, name in enumerate(status.subdirectories):
        if idx == status.highlighted_subdirectory_index:
            parts.append(f"[{name}]")
        else:
            parts.append(name)
    return " ".join(parts)


def _exhausted_text(status: StatusSnapshot) -> str:
    back = status.backward_count
    forward = status.forward_count
    if back and forward:
        return f"[{back}<] no current file [>{forward}]"
    if back:
        return f"[{back}<] end of list, go back for more"
    if forward:
        return f"no current file, go forward for more [>{forward}]"
    return "no files"


def render_header(status: StatusSnapshot, width: int = 80, show_subdirectories: bool = False) -> str:
    """Render ``[b<] relative/name [>f]`` clipped to ``width`` columns.

    The filename is shortened from the left when it does not fit. With
    ``show_subdirectories`` the directory strip follows, the directory of the
    current file shown in brackets.
    """
    width = max(1, width)
    if status.current_relative_name is None:
        return _exhausted_text(status)[:width]

    left = f"[{status.backward_count}<] "
    right = f" [>{status.forward_count}]"
    name_budget = max(1, width - len(left) - len(right))
    line = left + truncate_left(status.current_relative_name, name_budget) + right

    if show_subdirectories and status.subdirectories:
        line = f"{line}  {_subdirectory_strip(status)}"
    return line[:width]


__all__ = ["ELLIPSIS", "StatusSnapshot", "truncate_left", "render_header"]
