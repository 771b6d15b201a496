"""Cell grids used as render targets and glyph rasters.

A ``PixelBuffer`` is a fixed-size 2D grid of cell values. The terminal front
end treats each cell as one character cell, so cell values are strings:
``BLANK`` for empty space, a single character for a glyph, and
``CONTINUATION`` for the trailing cells covered by a wide glyph.
"""

from __future__ import annotations

from collections.abc import Iterable

BLANK = " "
CONTINUATION = ""


class PixelBuffer:
    """Mutable ``width x height`` grid of cell values."""

    __slots__ = ("width", "height", "_rows")

    def __init__(self, width: int, height: int, fill: str = BLANK) -> None:
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self._rows = [[fill] * self.width for _ in range(self.height)]

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[str]]) -> PixelBuffer:
        """Build a buffer from row iterables, padding short rows with blanks."""
        materialized = [list(row) for row in rows]
        width = max((len(row) for row in materialized), default=0)
        buffer = cls(width, len(materialized))
        for y, row in enumerate(materialized):
            buffer._rows[y][: len(row)] = row
        return buffer

    def get(self, x: int, y: int) -> str:
        return self._rows[y][x]

    def set(self, x: int, y: int, value: str) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self._rows[y][x] = value

    def row(self, y: int) -> list[str]:
        """Return a copy of row ``y``."""
        return list(self._rows[y])

    def clear(self, fill: str = BLANK) -> None:
        for row in self._rows:
            row[:] = [fill] * self.width

    def blit(self, source: PixelBuffer, x: int, y: int, source_x: int = 0) -> None:
        """Copy ``source`` into this buffer with its top-left at ``(x, y)``.

        The first ``source_x`` columns of ``source`` are cropped away. Cells
        falling outside this buffer are clipped.
        """
        source_x = max(0, source_x)
        if x < 0:
            source_x -= x
            x = 0
        span = min(source.width - source_x, self.width - x)
        if span <= 0:
            return
        for src_y in range(source.height):
            dst_y = y + src_y
            if dst_y < 0:
                continue
            if dst_y >= self.height:
                break
            self._rows[dst_y][x : x + span] = source._rows[src_y][source_x : source_x + span]

    def copy(self) -> PixelBuffer:
        clone = PixelBuffer(0, 0)
        clone.width = self.width
        clone.height = self.height
        clone._rows = [list(row) for row in self._rows]
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self._rows == other._rows

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
