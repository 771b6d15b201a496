"""Windowed view over a line-indexed byte stream.

``View`` owns the line index and the viewport state (top line, column
offset, on-screen position, drag state). Input handlers mutate that state
and set ``dirty``; ``render`` then reads only the byte range covering the
visible lines, shapes each line, and caches the assembled buffer until the
next mutation.
"""

from __future__ import annotations

import io
import logging
import math
from pathlib import Path
from typing import BinaryIO

from .capabilities import Point
from .errors import ViewOpenError
from .events import (
    COLUMN_LEFT,
    COLUMN_RIGHT,
    DRAG_MOVE,
    DRAG_PRESS,
    DRAG_RELEASE,
    LINE_DOWN,
    LINE_UP,
    Binding,
    EventBus,
)
from .line_index import LineIndex
from .options import Option, apply_options
from .pixels import PixelBuffer
from .shaping import CellShaper, TextShaper

logger = logging.getLogger(__name__)


def decode_line(raw: bytes) -> str:
    """Decode one line's bytes, dropping its ``\\n`` or ``\\r\\n`` terminator."""
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    # Invalid bytes become U+FFFD; the rest of the line still decodes.
    return raw.decode("utf-8", errors="replace")


class View:
    """A portion of a seekable byte stream represented graphically.

    The stream is borrowed unless the view was created with ``from_file``.
    All methods must be called from a single thread.
    """

    def __init__(
        self,
        stream: BinaryIO,
        *options: Option,
        shaper: TextShaper | None = None,
        bus: EventBus | None = None,
        owns_stream: bool = False,
    ) -> None:
        self.options = apply_options(options)
        self._stream = stream
        self._owns_stream = owns_stream
        self.line_index = LineIndex.build(stream, self.options.chunk_size)

        self.width = self.options.width
        self.height = self.options.height
        self.col_width = self.options.col_width
        self.shaper: TextShaper = (
            shaper if shaper is not None else CellShaper(self.options.col_width, self.options.line_height)
        )

        self.top_line = 0
        self.column_offset = 0
        self._position = Point(self.options.x, self.options.y)
        self.dirty = True
        self._rendered = PixelBuffer(self.width, self.height)
        self.last_start_byte = 0
        self._visible_range = (0, 0)

        self.following = False
        self.drag_offset = Point(0.0, 0.0)

        self._bus: EventBus | None = None
        self._drag_binding: Binding | None = None
        if bus is not None:
            self.bind(bus)

    @classmethod
    def from_file(cls, path: str | Path, *options: Option, **kwargs) -> View:
        """Open ``path`` and build a view that owns the file handle."""
        try:
            stream = Path(path).open("rb")
        except OSError as exc:
            raise ViewOpenError(f"opening file {path}: {exc}") from exc
        try:
            return cls(stream, *options, owns_stream=True, **kwargs)
        except BaseException:
            stream.close()
            raise

    # -- event wiring -----------------------------------------------------

    def bind(self, bus: EventBus) -> None:
        """Register this view's input handlers on ``bus``."""
        if self._bus is not None:
            self.unbind()
        self._bus = bus
        bus.bind(LINE_UP, self.scroll_vertical, -1)
        bus.bind(LINE_DOWN, self.scroll_vertical, 1)
        bus.bind(COLUMN_LEFT, self.scroll_horizontal, -1)
        bus.bind(COLUMN_RIGHT, self.scroll_horizontal, 1)
        bus.bind(DRAG_PRESS, self.press)
        bus.bind(DRAG_RELEASE, self.end_drag)

    def unbind(self) -> None:
        """Remove every handler this view registered."""
        if self._bus is None:
            return
        self._bus.unbind_all(self)
        self._bus = None
        self._drag_binding = None
        self.following = False

    # -- scrolling --------------------------------------------------------

    def line_count(self) -> int:
        return self.line_index.line_count()

    def page_size(self) -> int:
        """Number of lines that fit the viewport height."""
        return self.height // self.options.row_pitch

    def scroll_vertical(self, delta: int) -> bool:
        """Move the top line by ``delta`` lines, clamped to the content."""
        last_line = max(0, self.line_count() - 1)
        top_line = max(0, min(self.top_line + delta, last_line))
        if top_line == self.top_line:
            return False
        self.top_line = top_line
        self.dirty = True
        return True

    def scroll_to_line(self, line_number: int) -> bool:
        return self.scroll_vertical(line_number - self.top_line)

    def scroll_horizontal(self, delta: int) -> bool:
        """Shift the column offset by ``delta`` strides of ``col_width`` pixels.

        There is no right-hand limit: scrolling past the longest line shows
        blank space.
        """
        column_offset = max(0, self.column_offset + delta * self.col_width)
        if column_offset == self.column_offset:
            return False
        self.column_offset = column_offset
        self.dirty = True
        return True

    def scroll_to_column(self, column: int) -> bool:
        """Scroll so that stride ``column`` is the first one shown."""
        return self.scroll_horizontal(column - self.column_offset // self.col_width)

    # -- dragging ---------------------------------------------------------

    def press(self, pointer: Point) -> bool:
        """Start following ``pointer`` if it lands on this view."""
        if not self.contains(pointer):
            return False
        self.begin_drag(pointer)
        return True

    def begin_drag(self, pointer: Point) -> None:
        self.drag_offset = pointer - self._position
        self.following = True
        if self._bus is not None:
            self._drag_binding = self._bus.bind(DRAG_MOVE, self.update_drag)

    def update_drag(self, pointer: Point) -> bool:
        """Move the view so the grabbed point stays under ``pointer``."""
        if not self.following:
            return False
        target = pointer - self.drag_offset
        return self.set_position(target.x, target.y)

    def end_drag(self, _pointer: Point | None = None) -> None:
        if not self.following:
            return
        if self._bus is not None and self._drag_binding is not None:
            self._bus.unbind(self._drag_binding)
        self._drag_binding = None
        self.following = False

    # -- Positionable -----------------------------------------------------

    def position(self) -> Point:
        return self._position

    def set_position(self, x: float, y: float) -> bool:
        if x == self._position.x and y == self._position.y:
            return False
        self._position = Point(x, y)
        self.dirty = True
        return True

    def bounds(self) -> tuple[float, float, float, float]:
        """Return ``(x, y, width, height)`` of the on-screen rectangle."""
        return self._position.x, self._position.y, float(self.width), float(self.height)

    def contains(self, point: Point) -> bool:
        x, y, width, height = self.bounds()
        return x <= point.x < x + width and y <= point.y < y + height

    # -- Drawable ---------------------------------------------------------

    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def visible_range(self) -> tuple[int, int]:
        """``(first, last_exclusive)`` logical lines shown by the last render."""
        return self._visible_range

    def render(self) -> PixelBuffer:
        """Return the viewport pixels, re-rendering only when dirty."""
        if not self.dirty:
            return self._rendered

        index = self.line_index
        row_pitch = self.options.row_pitch
        visible = self.height // row_pitch
        start_byte = index.line_start(self.top_line)
        end_line = min(self.top_line + visible, index.line_count())
        visible = max(0, end_line - self.top_line)
        end_byte = index.line_start(end_line)

        content = self._read_window(start_byte, end_byte - start_byte)

        canvas = PixelBuffer(self.width, self.height)
        for i in range(visible):
            line = self.top_line + i
            begin = index.line_start(line) - start_byte
            end = min(index.line_start(line + 1) - start_byte, len(content))
            text = decode_line(content[begin:end])
            if line == 0:
                text = text.removeprefix("\ufeff")
            glyphs = self.shaper.shape(text, 0)
            canvas.blit(glyphs, 0, i * row_pitch, source_x=self.column_offset)

        self._rendered = canvas
        self.last_start_byte = start_byte
        self._visible_range = (self.top_line, end_line)
        self.dirty = False
        self._rewind()
        return canvas

    def draw(self, target: PixelBuffer) -> None:
        self.draw_offset(target, 0, 0)

    def draw_offset(self, target: PixelBuffer, x_offset: float, y_offset: float) -> None:
        """Composite the viewport into ``target`` at its screen position plus offset."""
        pixels = self.render()
        target.blit(
            pixels,
            math.floor(self._position.x + x_offset),
            math.floor(self._position.y + y_offset),
        )

    # -- stream access ----------------------------------------------------

    def _read_window(self, start_byte: int, byte_count: int) -> bytes:
        chunks: list[bytes] = []
        remaining = byte_count
        try:
            self._stream.seek(start_byte, io.SEEK_SET)
            while remaining > 0:
                chunk = self._stream.read(remaining)
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        except OSError as exc:
            logger.warning("reading %d bytes at offset %d failed: %s", byte_count, start_byte, exc)
        content = b"".join(chunks)
        if len(content) != byte_count:
            logger.warning(
                "unexpected content length at offset %d: read %d of %d bytes",
                start_byte,
                len(content),
                byte_count,
            )
        return content

    def _rewind(self) -> None:
        try:
            self._stream.seek(0, io.SEEK_SET)
        except OSError as exc:
            logger.warning("rewinding stream failed: %s", exc)

    # -- lifecycle --------------------------------------------------------

    def close(self) -> None:
        """Unbind handlers and close the stream when this view owns it."""
        self.unbind()
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> View:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()
