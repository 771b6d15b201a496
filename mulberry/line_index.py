"""Line-start table for seekable byte streams.

The index is built by a single forward scan and never changes afterwards.
Each entry is the absolute byte offset where a line begins; the final entry
is the stream length, so every line has both a start and an end offset.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO

from .errors import IndexBuildError, LineIndexError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 256
NEWLINE = b"\n"


class LineIndex:
    """Immutable map from 0-based line number to starting byte offset."""

    __slots__ = ("_positions",)

    def __init__(self, line_positions: list[int]) -> None:
        if not line_positions or line_positions[0] != 0:
            raise ValueError("line positions must start at offset 0")
        self._positions = tuple(line_positions)

    @classmethod
    def build(cls, stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> LineIndex:
        """Scan ``stream`` once and return its line index.

        Newline offsets are converted from chunk-relative to stream-absolute
        before they are stored, so the result does not depend on
        ``chunk_size``. The stream is left positioned at offset 0.
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        positions = [0]
        consumed = 0
        try:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                found = chunk.find(NEWLINE)
                while found != -1:
                    positions.append(consumed + found + 1)
                    found = chunk.find(NEWLINE, found + 1)
                consumed += len(chunk)
        except OSError as exc:
            raise IndexBuildError(f"building line index: read failed after {consumed} bytes: {exc}") from exc

        # Content ending in a newline already has its end recorded.
        if positions[-1] != consumed:
            positions.append(consumed)

        try:
            stream.seek(0, io.SEEK_SET)
        except OSError as exc:
            raise IndexBuildError(f"building line index: rewinding stream: {exc}") from exc

        logger.debug("indexed %d lines over %d bytes", len(positions) - 1, consumed)
        return cls(positions)

    @property
    def line_positions(self) -> tuple[int, ...]:
        return self._positions

    @property
    def total_bytes(self) -> int:
        """Total stream length seen during the scan."""
        return self._positions[-1]

    def line_count(self) -> int:
        """Number of real lines; an unterminated last line counts."""
        return len(self._positions) - 1

    def __len__(self) -> int:
        return self.line_count()

    def line_start(self, line_number: int) -> int:
        """Return the byte offset where ``line_number`` begins.

        ``line_number == line_count()`` is accepted and returns the end
        sentinel.
        """
        if line_number < 0 or line_number >= len(self._positions):
            raise LineIndexError(f"line {line_number} out of range [0, {len(self._positions)})")
        return self._positions[line_number]

    def line_range(self, line_number: int) -> tuple[int, int]:
        """Return ``(start, end)`` bytes of one line, terminator included."""
        if line_number < 0 or line_number >= self.line_count():
            raise LineIndexError(f"line {line_number} out of range [0, {self.line_count()})")
        return self._positions[line_number], self._positions[line_number + 1]

    def __repr__(self) -> str:
        return f"LineIndex(lines={self.line_count()}, bytes={self.total_bytes})"
