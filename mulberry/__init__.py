"""Public package surface for mulberry.

A line-indexed windowed viewer: ``LineIndex`` maps line numbers to byte
offsets of a seekable stream and ``View`` renders only the lines that fit
its viewport.
"""

from __future__ import annotations

from .capabilities import Drawable, Point, Positionable
from .errors import IndexBuildError, LineIndexError, MulberryError, ViewOpenError
from .events import EventBus
from .line_index import LineIndex
from .options import ViewOptions, chunk_size, dimensions, line_metrics, position
from .pixels import PixelBuffer
from .shaping import CellShaper, TextShaper
from .view import View


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "CellShaper",
    "Drawable",
    "EventBus",
    "IndexBuildError",
    "LineIndex",
    "LineIndexError",
    "MulberryError",
    "PixelBuffer",
    "Point",
    "Positionable",
    "TextShaper",
    "View",
    "ViewOpenError",
    "ViewOptions",
    "chunk_size",
    "dimensions",
    "line_metrics",
    "main",
    "position",
]
