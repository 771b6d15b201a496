"""Text shaping for rendered lines.

The view hands each decoded line to a ``TextShaper`` and receives a glyph
raster it can crop and composite. ``CellShaper`` is the monospace shaper used
by the terminal front end: every character occupies one ``col_width x
line_height`` block whose top-left cell carries the character.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Protocol

from .pixels import BLANK, CONTINUATION, PixelBuffer

TAB_STOP = 8
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


class TextShaper(Protocol):
    """Turns one line of text into a croppable glyph raster."""

    def shape(self, line_text: str, start_column: int) -> PixelBuffer: ...


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def sanitize_terminal_text(text: str) -> str:
    """Escape control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(text) is None:
        return text

    out: list[str] = []
    for ch in text:
        code = ord(ch)
        if ch == "\t":
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def display_width(text: str, start_column: int = 0) -> int:
    """Return display columns used by ``text`` when placed at ``start_column``."""
    col = start_column
    for ch in text:
        col += char_display_width(ch, col)
    return col - start_column


class CellShaper:
    """Monospace shaper writing one character per glyph block."""

    def __init__(self, col_width: int = 1, line_height: int = 1) -> None:
        if col_width < 1 or line_height < 1:
            raise ValueError("glyph blocks must be at least 1x1")
        self.col_width = col_width
        self.line_height = line_height

    def shape(self, line_text: str, start_column: int) -> PixelBuffer:
        """Rasterize ``line_text``; tab stops are measured from ``start_column``."""
        text = sanitize_terminal_text(line_text)
        columns = display_width(text, start_column)
        raster = PixelBuffer(columns * self.col_width, self.line_height)
        col = start_column
        last_glyph_x: int | None = None
        for ch in text:
            width = char_display_width(ch, col)
            if width == 0:
                # Combining marks attach to the previous glyph cell.
                if last_glyph_x is not None:
                    raster.set(last_glyph_x, 0, raster.get(last_glyph_x, 0) + ch)
                continue
            x = (col - start_column) * self.col_width
            if ch == "\t":
                # Expanded tabs are plain blanks.
                col += width
                last_glyph_x = None
                continue
            raster.set(x, 0, ch)
            last_glyph_x = x
            for pad in range(x + 1, x + width * self.col_width):
                raster.set(pad, 0, CONTINUATION if self.col_width == 1 else BLANK)
            col += width
        return raster
