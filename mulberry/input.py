"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing and SGR mouse events (press, drag, release,
wheel). Mouse tokens carry 1-based terminal coordinates: ``NAME:col:row``.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_MAX_MOUSE_PAYLOAD = 64
_MOUSE_MOTION_BIT = 0b0010_0000
_MOUSE_WHEEL_BIT = 0b0100_0000

_SINGLE_BYTE_KEYS = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x15": "CTRL_U",
    b"\r": "ENTER_CR",
    b"\n": "ENTER_LF",
}

# ESC [ <final>
_CSI_FINAL_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}

# ESC [ <digit> ~
_CSI_TILDE_KEYS = {
    b"1": "HOME",
    b"4": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}

_WHEEL_NAMES = ("MOUSE_WHEEL_UP", "MOUSE_WHEEL_DOWN", "MOUSE_WHEEL_LEFT", "MOUSE_WHEEL_RIGHT")


def _wait_readable(fd: int, timeout_ms: int) -> bool:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    return bool(ready)


def _next_sequence_byte(fd: int) -> bytes | None:
    """Read one byte of an escape sequence, or ``None`` if it never arrives."""
    if not _wait_readable(fd, ESC_SEQUENCE_TIMEOUT_MS):
        return None
    return os.read(fd, 1) or None


def _decode_sgr_mouse(fd: int) -> str:
    # ESC [ < button ; col ; row, then M (press/motion) or m (release).
    payload = bytearray()
    while True:
        part = _next_sequence_byte(fd)
        if part is None or len(payload) > _MAX_MOUSE_PAYLOAD:
            return "ESC"
        if part in (b"M", b"m"):
            released = part == b"m"
            break
        payload += part
    try:
        btn, col, row = (int(field) for field in payload.decode("ascii").split(";"))
    except ValueError:
        return "ESC"

    button = btn & 0b11
    if btn & _MOUSE_WHEEL_BIT:
        return f"{_WHEEL_NAMES[button]}:{col}:{row}"
    if button != 0:
        return "MOUSE"
    if released:
        name = "MOUSE_LEFT_UP"
    elif btn & _MOUSE_MOTION_BIT:
        name = "MOUSE_LEFT_DRAG"
    else:
        name = "MOUSE_LEFT_DOWN"
    return f"{name}:{col}:{row}"


def _decode_csi(fd: int) -> str:
    first = _next_sequence_byte(fd)
    if first is None:
        return "ESC"
    if first == b"<":
        return _decode_sgr_mouse(fd)
    if first in _CSI_FINAL_KEYS:
        return _CSI_FINAL_KEYS[first]
    if first in _CSI_TILDE_KEYS and _next_sequence_byte(fd) == b"~":
        return _CSI_TILDE_KEYS[first]
    return "ESC"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; ``""`` when the timeout expires."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None and not _wait_readable(fd, timeout_ms):
            return ""
        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch in _SINGLE_BYTE_KEYS:
        return _SINGLE_BYTE_KEYS[ch]
    if ch != b"\x1b":
        return ch.decode("utf-8", errors="replace")

    introducer = _next_sequence_byte(fd)
    if introducer is None:
        return "ESC"
    if introducer != b"[":
        # Bare ESC followed by an ordinary key: replay that key next.
        _PENDING_BYTES.append(introducer)
        return "ESC"
    return _decode_csi(fd)


def parse_mouse_col_row(mouse_key: str) -> tuple[int | None, int | None]:
    """Extract ``(col, row)`` from a mouse token, or ``(None, None)``."""
    _name, _, coords = mouse_key.partition(":")
    col_s, _, row_s = coords.partition(":")
    try:
        return int(col_s), int(row_s)
    except ValueError:
        return None, None
