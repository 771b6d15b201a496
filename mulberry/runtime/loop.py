"""Main interactive event loop for the terminal viewer.

Decoded key tokens become bus events (or direct view calls for multi-line
jumps); the view is redrawn onto a full-screen canvas only when it is dirty
or the terminal was resized.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..capabilities import Point
from ..events import (
    COLUMN_LEFT,
    COLUMN_RIGHT,
    DRAG_MOVE,
    DRAG_PRESS,
    DRAG_RELEASE,
    LINE_DOWN,
    LINE_UP,
    EventBus,
)
from ..input import parse_mouse_col_row, read_key
from ..pixels import PixelBuffer
from ..view import View
from .keys import KeyComboBinding, KeyComboRegistry
from .screen import build_frame, scroll_percent
from .terminal import TerminalController

logger = logging.getLogger(__name__)

WHEEL_LINES = 3
WHEEL_COLUMNS = 4

_POINTER_EVENTS = {
    "MOUSE_LEFT_DOWN": DRAG_PRESS,
    "MOUSE_LEFT_DRAG": DRAG_MOVE,
    "MOUSE_LEFT_UP": DRAG_RELEASE,
}

_WHEEL_EVENTS = {
    "MOUSE_WHEEL_UP": (LINE_UP, WHEEL_LINES),
    "MOUSE_WHEEL_DOWN": (LINE_DOWN, WHEEL_LINES),
    "MOUSE_WHEEL_LEFT": (COLUMN_LEFT, WHEEL_COLUMNS),
    "MOUSE_WHEEL_RIGHT": (COLUMN_RIGHT, WHEEL_COLUMNS),
}


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    input_poll_ms: int = 100


class InputDispatcher:
    """Route key and mouse tokens to the bus and the view."""

    def __init__(self, view: View, bus: EventBus) -> None:
        self.view = view
        self.bus = bus
        self.quit_requested = False
        self._keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(("UP", "k"), lambda: self._trigger(LINE_UP)),
            KeyComboBinding(("DOWN", "j", "ENTER_CR", "ENTER_LF"), lambda: self._trigger(LINE_DOWN)),
            KeyComboBinding(("LEFT", "h"), lambda: self._trigger(COLUMN_LEFT)),
            KeyComboBinding(("RIGHT", "l"), lambda: self._trigger(COLUMN_RIGHT)),
            KeyComboBinding(("PAGE_UP", "CTRL_U", "b"), lambda: view.scroll_vertical(-max(1, view.page_size()))),
            KeyComboBinding(("PAGE_DOWN", "CTRL_D", " "), lambda: view.scroll_vertical(max(1, view.page_size()))),
            KeyComboBinding(("HOME", "g"), lambda: view.scroll_to_line(0)),
            KeyComboBinding(("END", "G"), lambda: view.scroll_to_line(view.line_count() - 1)),
            KeyComboBinding(("q", "Q", "CTRL_C"), self._request_quit),
        )

    def _trigger(self, event: str, *payload: object) -> bool:
        return self.bus.trigger(event, *payload) > 0

    def _request_quit(self) -> bool:
        self.quit_requested = True
        return True

    def _repeat(self, event: str, times: int) -> bool:
        handled = False
        for _ in range(times):
            handled = self._trigger(event) or handled
        return handled

    def handle_mouse(self, mouse_key: str) -> bool:
        name, _, _ = mouse_key.partition(":")
        col, row = parse_mouse_col_row(mouse_key)
        if col is None or row is None:
            return False
        if name in _POINTER_EVENTS:
            # Terminal coordinates are 1-based; the canvas is 0-based.
            return self._trigger(_POINTER_EVENTS[name], Point(float(col - 1), float(row - 1)))
        if name in _WHEEL_EVENTS:
            event, times = _WHEEL_EVENTS[name]
            return self._repeat(event, times)
        return False

    def handle(self, key: str) -> bool:
        """Handle one key token; return whether a binding exists for it."""
        if key.startswith("MOUSE_"):
            return self.handle_mouse(key)
        return self._keys.dispatch(key)


def status_text(view: View, path: Path) -> str:
    first, last = view.visible_range
    total = view.line_count()
    shown_first = first + 1 if last > first else first
    percent = scroll_percent(view.top_line, total)
    return f"{path} ({shown_first}-{last}/{total} {percent:5.1f}%) col {view.column_offset}"


def run_main_loop(
    view: View,
    bus: EventBus,
    terminal: TerminalController,
    stdin_fd: int,
    path: Path,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
    get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
) -> None:
    """Run the interactive loop until a quit key is pressed."""
    dispatcher = InputDispatcher(view, bus)
    canvas: PixelBuffer | None = None

    with terminal.raw_mode():
        while not dispatcher.quit_requested:
            term = get_terminal_size((80, 24))
            canvas_size = (max(1, term.columns), max(1, term.lines - 1))
            needs_frame = view.dirty
            if canvas is None or (canvas.width, canvas.height) != canvas_size:
                canvas = PixelBuffer(*canvas_size)
                needs_frame = True
            if needs_frame:
                canvas.clear()
                view.draw(canvas)
                terminal.write(build_frame(canvas, status_text(view, path)))

            key = read_key(stdin_fd, timeout_ms=timing.input_poll_ms)
            if not key:
                continue
            if not dispatcher.handle(key):
                logger.debug("unhandled key %r", key)
