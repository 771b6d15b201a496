"""Turn a cell canvas into terminal output.

One canvas cell maps to one terminal cell. ``CONTINUATION`` cells are the
right half of a wide glyph and emit nothing; a continuation without its
glyph (or a glyph without its continuation) is replaced by a blank so rows
never drift.
"""

from __future__ import annotations

from ..pixels import BLANK, CONTINUATION, PixelBuffer
from ..shaping import char_display_width

STATUS_HINT = "│ q quit"


def cell_row_text(canvas: PixelBuffer, y: int) -> str:
    """Return row ``y`` of ``canvas`` as text exactly ``canvas.width`` columns wide."""
    row = canvas.row(y)
    out: list[str] = []
    x = 0
    while x < len(row):
        cell = row[x]
        if cell == CONTINUATION:
            out.append(BLANK)
            x += 1
            continue
        width = char_display_width(cell[0], x) if cell else 1
        if width == 2:
            if x + 1 < len(row) and row[x + 1] == CONTINUATION:
                out.append(cell)
                x += 2
                continue
            out.append(BLANK)
            x += 1
            continue
        out.append(cell)
        x += 1
    return "".join(out)


def build_status_line(left_text: str, width: int, right_text: str = STATUS_HINT) -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def scroll_percent(top_line: int, total_lines: int) -> float:
    """Position of ``top_line`` within the scrollable range, as a percentage."""
    if total_lines <= 1:
        return 0.0
    clamped = max(0, min(top_line, total_lines - 1))
    return (clamped / (total_lines - 1)) * 100.0


def build_frame(canvas: PixelBuffer, status: str) -> str:
    """Build the full-screen payload: canvas rows then a reverse-video status row."""
    out: list[str] = ["\033[H\033[J"]
    for y in range(canvas.height):
        out.append(cell_row_text(canvas, y))
        out.append("\r\n")
    out.append("\033[7m")
    out.append(build_status_line(status, canvas.width))
    out.append("\033[0m")
    return "".join(out)
