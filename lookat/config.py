"""Persistent JSON config helpers.

Stores filter preferences between sessions; the file list itself is never
persisted. All access is defensive: malformed or missing config falls back
to defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from .filters import FilterConfig

logger = logging.getLogger(__name__)

APP_NAME = "lookat"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Write failures are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError) as exc:
        logger.warning("Could not write config %s: %s", CONFIG_PATH, exc)


def _coerce_patterns(value: object, default: tuple[str, ...]) -> tuple[str, ...]:
    """Accept a JSON list of strings; anything else means ``default``."""
    if not isinstance(value, list):
        return default
    return tuple(item for item in value if isinstance(item, str) and item)


def _coerce_bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def load_filter_config() -> FilterConfig:
    """Build a ``FilterConfig`` from persisted values over the defaults."""
    data = load_config()
    defaults = FilterConfig()
    return FilterConfig(
        file_exclusions=_coerce_patterns(data.get("file_exclusions"), defaults.file_exclusions),
        directory_exclusions=_coerce_patterns(
            data.get("directory_exclusions"), defaults.directory_exclusions
        ),
        recurse_directories=_coerce_bool(data.get("recurse_directories"), defaults.recurse_directories),
        show_subdirectories=_coerce_bool(data.get("show_subdirectories"), defaults.show_subdirectories),
    )


def save_filter_config(filter_config: FilterConfig) -> None:
    """Persist filter preferences, keeping unrelated keys."""
    config = load_config()
    config["file_exclusions"] = list(filter_config.file_exclusions)
    config["directory_exclusions"] = list(filter_config.directory_exclusions)
    config["recurse_directories"] = bool(filter_config.recurse_directories)
    config["show_subdirectories"] = bool(filter_config.show_subdirectories)
    save_config(config)


def load_style_name() -> str | None:
    """Load persisted Pygments style name, returning ``None`` when unset/invalid."""
    value = load_config().get("style")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def save_style_name(style: str) -> None:
    stripped = str(style).strip()
    if not stripped:
        return
    config = load_config()
    config["style"] = stripped
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "load_config",
    "save_config",
    "load_filter_config",
    "save_filter_config",
    "load_style_name",
    "save_style_name",
]
