"""Exception types raised by the viewer core."""

from __future__ import annotations


class MulberryError(Exception):
    """Base class for viewer errors."""


class IndexBuildError(MulberryError, OSError):
    """Reading the stream failed while building the line index."""


class ViewOpenError(MulberryError, OSError):
    """The file backing a view could not be opened."""


class LineIndexError(MulberryError, IndexError):
    """A line number outside the index was requested."""
