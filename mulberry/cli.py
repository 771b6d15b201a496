"""Command-line front door for mulberry.

Parses CLI options, validates the target file, and either prints one
rendered viewport (``--render``) or launches the interactive viewer.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path

from .errors import MulberryError
from .options import dimensions, line_metrics
from .runtime import run_viewer
from .runtime.screen import cell_row_text
from .view import View


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _nonnegative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def configure_logging(log_file: Path | None) -> None:
    """Send debug logs to ``log_file``; raw-mode terminals cannot show them."""
    if log_file is None:
        return
    try:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"mulberry: cannot open log file {log_file}: {exc}") from exc
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root_logger = logging.getLogger("mulberry")
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)


def render_view_text(path: Path, width: int, height: int, top_line: int = 0, column: int = 0) -> str:
    """Render one viewport of ``path`` as plain text lines (trailing blanks trimmed)."""
    with View.from_file(path, dimensions(width, height), line_metrics(1, 1, 0)) as view:
        view.scroll_to_line(top_line)
        view.scroll_to_column(column)
        pixels = view.render()
        last = view.visible_range[1] - view.visible_range[0]
        rows = [cell_row_text(pixels, y).rstrip() for y in range(last)]
    return "".join(f"{row}\n" for row in rows)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and view a file."""
    parser = argparse.ArgumentParser(
        description="View a large text file through a fixed-size scrollable window."
    )
    parser.add_argument("path", help="Path to file.")
    parser.add_argument("--width", type=_positive_int, default=None, help="Viewport width in columns.")
    parser.add_argument("--height", type=_positive_int, default=None, help="Viewport height in rows.")
    parser.add_argument("--top-line", type=_nonnegative_int, default=None, help="0-based first visible line.")
    parser.add_argument("--column", type=_nonnegative_int, default=None, help="Columns to scroll right.")
    parser.add_argument("--render", action="store_true", help="Print one rendered viewport and exit.")
    parser.add_argument("--no-resume", action="store_true", help="Do not restore or save the last position.")
    parser.add_argument("--log-file", type=Path, default=None, help="Write debug logs to this file.")
    args = parser.parse_args(argv)

    configure_logging(args.log_file)

    path = Path(args.path)
    if not path.is_file():
        raise SystemExit(f"Path not found: {path}")

    try:
        if args.render:
            term = shutil.get_terminal_size((80, 24))
            width = args.width if args.width is not None else max(1, term.columns)
            height = args.height if args.height is not None else max(1, term.lines - 1)
            sys.stdout.write(render_view_text(path, width, height, args.top_line or 0, args.column or 0))
            return
        run_viewer(path, args.width, args.height, args.top_line, args.column, resume=not args.no_resume)
    except MulberryError as exc:
        raise SystemExit(f"mulberry: {exc}") from exc


if __name__ == "__main__":
    main()
