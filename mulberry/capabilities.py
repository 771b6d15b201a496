"""Narrow capability interfaces implemented by views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .pixels import PixelBuffer


@dataclass(frozen=True)
class Point:
    """2D point in pixel space."""

    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)


@runtime_checkable
class Drawable(Protocol):
    def dimensions(self) -> tuple[int, int]: ...

    def draw(self, target: PixelBuffer) -> None: ...

    def draw_offset(self, target: PixelBuffer, x_offset: float, y_offset: float) -> None: ...


@runtime_checkable
class Positionable(Protocol):
    def position(self) -> Point: ...

    def set_position(self, x: float, y: float) -> bool: ...

    def contains(self, point: Point) -> bool: ...
