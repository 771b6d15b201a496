"""Persistent JSON config helpers.

Stores the preferred interactive viewport size and the last viewed position
of each file. All access is defensive: malformed or missing config falls back
safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "mulberry"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
MAX_REMEMBERED_POSITIONS = 200


@dataclass(frozen=True)
class ResumePosition:
    """Scroll state remembered for one file."""

    top_line: int = 0
    column_offset: int = 0


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem/serialization errors are ignored so a read-only config
    directory never breaks the viewer.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError):
        pass


def _coerce_positive_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def _coerce_nonnegative_int(value: object) -> int:
    """Normalize JSON scalar values for scroll offsets.

    Booleans and non-integers are treated as invalid and coerced to ``0``.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(0, value)


def load_view_size() -> tuple[int | None, int | None]:
    """Return persisted ``(width, height)`` in cells; ``None`` when unset/invalid."""
    data = load_config()
    return _coerce_positive_int(data.get("view_width")), _coerce_positive_int(data.get("view_height"))


def save_view_size(width: int, height: int) -> None:
    if _coerce_positive_int(width) is None or _coerce_positive_int(height) is None:
        return
    config = load_config()
    config["view_width"] = width
    config["view_height"] = height
    save_config(config)


def _position_key(path: Path) -> str:
    return str(path.resolve())


def load_resume_position(path: Path) -> ResumePosition:
    """Return the remembered scroll state for ``path`` (origin when unknown)."""
    positions = load_config().get("positions")
    if not isinstance(positions, dict):
        return ResumePosition()
    raw = positions.get(_position_key(path))
    if not isinstance(raw, dict):
        return ResumePosition()
    return ResumePosition(
        top_line=_coerce_nonnegative_int(raw.get("top_line", 0)),
        column_offset=_coerce_nonnegative_int(raw.get("column_offset", 0)),
    )


def save_resume_position(path: Path, position: ResumePosition) -> None:
    """Remember ``position`` for ``path``, keeping only the most recent entries."""
    config = load_config()
    positions = config.get("positions")
    if not isinstance(positions, dict):
        positions = {}
    key = _position_key(path)
    positions.pop(key, None)
    positions[key] = {
        "top_line": max(0, position.top_line),
        "column_offset": max(0, position.column_offset),
    }
    while len(positions) > MAX_REMEMBERED_POSITIONS:
        positions.pop(next(iter(positions)))
    config["positions"] = positions
    save_config(config)
