"""Tests for the interactive event loop and screen helpers.

Covers key and mouse routing onto the bus, redraw-on-dirty and resize
behavior, and the status line and frame payloads.
"""

from __future__ import annotations

import io
import os
import unittest
from contextlib import contextmanager
from pathlib import Path
from unittest import mock

from mulberry.capabilities import Point
from mulberry.events import EventBus
from mulberry.options import dimensions, line_metrics, position
from mulberry.pixels import CONTINUATION, PixelBuffer
from mulberry.runtime.loop import InputDispatcher, RuntimeLoopTiming, run_main_loop, status_text
from mulberry.runtime.screen import build_frame, build_status_line, cell_row_text, scroll_percent
from mulberry.view import View

CONTENT = b"first\nsecond\nthird\nfourth\n"


class _FakeTerminal:
    def __init__(self) -> None:
        self.writes: list[str] = []
        self.raw_mode_entered = 0

    @contextmanager
    def raw_mode(self):
        self.raw_mode_entered += 1
        yield

    def write(self, payload: str) -> None:
        self.writes.append(payload)


def _make_view(*options, bus: EventBus | None = None) -> View:
    return View(io.BytesIO(CONTENT), dimensions(10, 2), line_metrics(1, 1, 0), *options, bus=bus)


class InputDispatcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bus = EventBus()
        self.view = _make_view(bus=self.bus)
        self.dispatcher = InputDispatcher(self.view, self.bus)

    def test_line_keys_go_through_bus(self) -> None:
        self.assertTrue(self.dispatcher.handle("j"))
        self.assertEqual(self.view.top_line, 1)
        self.assertTrue(self.dispatcher.handle("UP"))
        self.assertEqual(self.view.top_line, 0)

    def test_boundary_scroll_is_still_handled(self) -> None:
        self.assertTrue(self.dispatcher.handle("k"))
        self.assertEqual(self.view.top_line, 0)

    def test_column_keys_shift_by_stride(self) -> None:
        self.dispatcher.handle("l")
        self.dispatcher.handle("RIGHT")
        self.assertEqual(self.view.column_offset, 2)
        self.dispatcher.handle("h")
        self.assertEqual(self.view.column_offset, 1)

    def test_jump_keys(self) -> None:
        self.dispatcher.handle("G")
        self.assertEqual(self.view.top_line, 3)
        self.dispatcher.handle("g")
        self.assertEqual(self.view.top_line, 0)

    def test_page_keys_scroll_by_viewport(self) -> None:
        self.dispatcher.handle("PAGE_DOWN")
        self.assertEqual(self.view.top_line, 2)
        self.dispatcher.handle("PAGE_UP")
        self.assertEqual(self.view.top_line, 0)

    def test_quit_keys(self) -> None:
        self.assertFalse(self.dispatcher.quit_requested)
        self.dispatcher.handle("q")
        self.assertTrue(self.dispatcher.quit_requested)

    def test_unknown_key_is_not_handled(self) -> None:
        self.assertFalse(self.dispatcher.handle("z"))
        self.assertFalse(self.dispatcher.handle("MOUSE"))

    def test_mouse_drag_moves_view_and_release_stops_following(self) -> None:
        bus = EventBus()
        view = View(io.BytesIO(CONTENT), dimensions(10, 5), line_metrics(1, 1, 0), position(0, 0), bus=bus)
        dispatcher = InputDispatcher(view, bus)

        self.assertTrue(dispatcher.handle("MOUSE_LEFT_DOWN:3:3"))
        self.assertTrue(view.following)
        self.assertTrue(dispatcher.handle("MOUSE_LEFT_DRAG:5:4"))
        self.assertEqual(view.position(), Point(2.0, 1.0))

        dispatcher.handle("MOUSE_LEFT_UP:5:4")
        self.assertFalse(view.following)
        self.assertFalse(dispatcher.handle("MOUSE_LEFT_DRAG:9:9"))
        self.assertEqual(view.position(), Point(2.0, 1.0))

    def test_press_outside_view_does_not_start_drag(self) -> None:
        self.dispatcher.handle("MOUSE_LEFT_DOWN:20:20")

        self.assertFalse(self.view.following)

    def test_wheel_scrolls_several_lines(self) -> None:
        self.dispatcher.handle("MOUSE_WHEEL_DOWN:1:1")
        self.assertEqual(self.view.top_line, 3)
        self.dispatcher.handle("MOUSE_WHEEL_RIGHT:1:1")
        self.assertEqual(self.view.column_offset, 4)


class RunMainLoopTests(unittest.TestCase):
    def test_redraws_only_when_dirty_and_quits(self) -> None:
        bus = EventBus()
        view = View(io.BytesIO(CONTENT), dimensions(20, 3), line_metrics(1, 1, 0), bus=bus)
        terminal = _FakeTerminal()

        with mock.patch("mulberry.runtime.loop.read_key", side_effect=["", "j", "q"]) as read_key_mock:
            run_main_loop(
                view,
                bus,
                terminal,
                stdin_fd=0,
                path=Path("notes.txt"),
                timing=RuntimeLoopTiming(input_poll_ms=5),
                get_terminal_size=lambda _fallback: os.terminal_size((20, 4)),
            )

        self.assertEqual(terminal.raw_mode_entered, 1)
        self.assertEqual(read_key_mock.call_count, 3)
        read_key_mock.assert_called_with(0, timeout_ms=5)
        self.assertEqual(len(terminal.writes), 2)
        self.assertIn("first", terminal.writes[0])
        self.assertNotIn("first", terminal.writes[1])
        self.assertIn("second", terminal.writes[1])
        self.assertIn("fourth", terminal.writes[1])

    def test_resize_forces_a_new_frame(self) -> None:
        bus = EventBus()
        view = _make_view(bus=bus)
        terminal = _FakeTerminal()
        sizes = iter([(20, 4), (30, 6)])

        with mock.patch("mulberry.runtime.loop.read_key", side_effect=["", "q"]):
            run_main_loop(
                view,
                bus,
                terminal,
                stdin_fd=0,
                path=Path("notes.txt"),
                get_terminal_size=lambda _fallback: os.terminal_size(next(sizes)),
            )

        self.assertEqual(len(terminal.writes), 2)
        self.assertEqual(terminal.writes[1].count("\r\n"), 5)


class StatusAndScreenTests(unittest.TestCase):
    def test_status_text_reports_visible_range(self) -> None:
        view = _make_view()
        view.scroll_vertical(1)
        view.render()

        self.assertEqual(status_text(view, Path("a.txt")), "a.txt (2-3/4  33.3%) col 0")

    def test_scroll_percent(self) -> None:
        self.assertEqual(scroll_percent(0, 0), 0.0)
        self.assertEqual(scroll_percent(3, 4), 100.0)
        self.assertEqual(scroll_percent(99, 4), 100.0)

    def test_cell_row_text_keeps_width_for_wide_glyphs(self) -> None:
        canvas = PixelBuffer.from_rows([["界", CONTINUATION, "a"]])
        self.assertEqual(cell_row_text(canvas, 0), "界a")

        orphan_tail = PixelBuffer.from_rows([[CONTINUATION, "a", "b"]])
        self.assertEqual(cell_row_text(orphan_tail, 0), " ab")

        orphan_head = PixelBuffer.from_rows([["a", "b", "界"]])
        self.assertEqual(cell_row_text(orphan_head, 0), "ab ")

    def test_build_status_line_fits_width(self) -> None:
        line = build_status_line("left side", 30)

        self.assertEqual(len(line), 29)
        self.assertTrue(line.startswith("left side"))
        self.assertTrue(line.endswith("q quit"))
        self.assertEqual(build_status_line("x", 5), "quit")

    def test_build_frame_homes_cursor_and_reverses_status(self) -> None:
        frame = build_frame(PixelBuffer.from_rows(["ab", "cd"]), "s")

        self.assertTrue(frame.startswith("\033[H\033[J"))
        self.assertIn("ab\r\ncd\r\n\033[7m", frame)
        self.assertTrue(frame.endswith("\033[0m"))


if __name__ == "__main__":
    unittest.main()
