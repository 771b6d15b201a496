"""Interactive viewer bootstrap.

Builds the event bus and the view, restores the remembered scroll position,
runs the event loop, and persists the position again on exit.
"""

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

from .. import config
from ..events import EventBus
from ..options import dimensions, line_metrics
from ..view import View
from .loop import RuntimeLoopTiming, run_main_loop
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def resolve_view_size(width: int | None, height: int | None) -> tuple[int, int]:
    """Fill missing sizes from config, then from the terminal (minus the status row)."""
    saved_width, saved_height = config.load_view_size()
    term = shutil.get_terminal_size((80, 24))
    if width is None:
        width = saved_width if saved_width is not None else term.columns
    if height is None:
        height = saved_height if saved_height is not None else max(1, term.lines - 1)
    return max(1, width), max(1, height)


def open_terminal_view(path: Path, width: int, height: int, bus: EventBus | None = None) -> View:
    """Open ``path`` as a view whose pixels are terminal cells."""
    return View.from_file(path, dimensions(width, height), line_metrics(1, 1, 0), bus=bus)


def run_viewer(
    path: Path,
    width: int | None = None,
    height: int | None = None,
    top_line: int | None = None,
    column: int | None = None,
    resume: bool = True,
) -> None:
    """Open ``path`` and run the interactive viewer on the controlling terminal.

    Explicit ``width``/``height`` become the remembered default size. Explicit
    ``top_line``/``column`` override the remembered position of ``path``.
    """
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("mulberry needs an interactive terminal (use --render to print).")

    explicit_size = width is not None or height is not None
    width, height = resolve_view_size(width, height)
    if explicit_size:
        config.save_view_size(width, height)

    bus = EventBus()
    view = open_terminal_view(path, width, height, bus=bus)
    try:
        remembered = config.load_resume_position(path) if resume else config.ResumePosition()
        view.scroll_to_line(remembered.top_line if top_line is None else top_line)
        view.scroll_to_column(remembered.column_offset // view.col_width if column is None else column)
        logger.info("viewing %s: %d lines", path, view.line_count())

        stdin_fd = sys.stdin.fileno()
        terminal = TerminalController(stdin_fd, sys.stdout.fileno())
        run_main_loop(view, bus, terminal, stdin_fd, path, RuntimeLoopTiming())
    finally:
        if resume:
            config.save_resume_position(path, config.ResumePosition(view.top_line, view.column_offset))
        view.close()
