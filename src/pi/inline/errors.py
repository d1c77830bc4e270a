"""Error taxonomy for the inline editor and renderer."""

from __future__ import annotations


class InlineError(Exception):
    """Base class for all pi-inline errors."""


class InputTooShort(InlineError):
    """Submit was attempted below the configured minimum length.

    Recoverable: the input session stays active.
    """

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(f"input has {length} characters, minimum is {minimum}")
        self.length = length
        self.minimum = minimum


class Cancelled(InlineError):
    """The user aborted a cancelable input session."""


class GeometryOverflow(InlineError):
    """The terminal is smaller than the minimum usable size."""

    def __init__(self, width: int, height: int) -> None:
        super().__init__(f"terminal too small: {width}x{height}")
        self.width = width
        self.height = height


class AnimationLeak(InlineError):
    """An animation outlived the view that owned it."""
