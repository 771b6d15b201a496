"""Functional construction options for views.

Options are plain callables that adjust a ``ViewOptions`` record before the
view is built::

    View(stream, dimensions(320, 200), line_metrics(1, 1, 0))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .line_index import DEFAULT_CHUNK_SIZE

DEFAULT_WIDTH = 240
DEFAULT_HEIGHT = 240
DEFAULT_COL_WIDTH = 8
DEFAULT_LINE_HEIGHT = 12
DEFAULT_LINE_BUFFER = 1


@dataclass
class ViewOptions:
    """Construction-time view settings; pixel sizes are fixed afterwards."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    x: float = 0.0
    y: float = 0.0
    col_width: int = DEFAULT_COL_WIDTH
    line_height: int = DEFAULT_LINE_HEIGHT
    line_buffer: int = DEFAULT_LINE_BUFFER
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @property
    def row_pitch(self) -> int:
        """Vertical distance between consecutive rendered lines."""
        return self.line_height + self.line_buffer

    def validate(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("view dimensions must be non-negative")
        if self.col_width < 1 or self.line_height < 1 or self.line_buffer < 0:
            raise ValueError("invalid line metrics")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")


Option = Callable[[ViewOptions], None]


def apply_options(options: tuple[Option, ...] | list[Option]) -> ViewOptions:
    settings = ViewOptions()
    for option in options:
        option(settings)
    settings.validate()
    return settings


def dimensions(width: int, height: int) -> Option:
    """Set the viewport size in pixels."""

    def _apply(settings: ViewOptions) -> None:
        settings.width = int(width)
        settings.height = int(height)

    return _apply


def position(x: float, y: float) -> Option:
    """Set the initial on-screen position."""

    def _apply(settings: ViewOptions) -> None:
        settings.x = float(x)
        settings.y = float(y)

    return _apply


def line_metrics(col_width: int, line_height: int, line_buffer: int) -> Option:
    """Set the horizontal stride, line height and inter-line gap."""

    def _apply(settings: ViewOptions) -> None:
        settings.col_width = int(col_width)
        settings.line_height = int(line_height)
        settings.line_buffer = int(line_buffer)

    return _apply


def chunk_size(size: int) -> Option:
    """Set the read size used while building the line index."""

    def _apply(settings: ViewOptions) -> None:
        settings.chunk_size = int(size)

    return _apply
