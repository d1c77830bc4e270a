"""Line styling.

Components never build escape codes themselves: they hand their lines and a
style tag to a ``StyleFn``. The default implementation emits SGR colors;
``plain_style`` is the identity and keeps rendered output easy to assert on.
"""

from __future__ import annotations

from typing import Callable, Literal

StyleTag = Literal["default", "user", "assistant", "gray", "dim", "bold", "error", "success"]

StyleFn = Callable[[list[str], StyleTag], list[str]]

_SGR: dict[str, tuple[str, str]] = {
    "gray": ("\x1b[90m", "\x1b[39m"),
    "user": ("\x1b[90m", "\x1b[39m"),
    "dim": ("\x1b[2m", "\x1b[22m"),
    "bold": ("\x1b[1m", "\x1b[22m"),
    "error": ("\x1b[31m", "\x1b[39m"),
    "success": ("\x1b[32m", "\x1b[39m"),
}


def ansi_style(lines: list[str], tag: StyleTag) -> list[str]:
    """Wrap every non-empty line in the SGR codes for *tag*."""
    codes = _SGR.get(tag)
    if codes is None:
        return list(lines)
    start, end = codes
    return [f"{start}{line}{end}" if line else line for line in lines]


def plain_style(lines: list[str], tag: StyleTag) -> list[str]:
    """Identity styling."""
    return list(lines)
