"""Terminal writer: cursor, erase and line insert/delete primitives.

Every primitive is written straight through ``Terminal.write``; the process
terminal flushes each write, so a partial redraw stays visible even if a
later step fails.
"""

from __future__ import annotations

from typing import Protocol

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_CURSOR_TO_FMT = "\x1b[{};{}H"
_ERASE_LINE_FROM_CURSOR = "\x1b[K"
_ERASE_LINE = "\x1b[2K"
_ERASE_DOWN = "\x1b[J"
_INSERT_LINES_FMT = "\x1b[{}L"
_DELETE_LINES_FMT = "\x1b[{}M"
_CLEAR_VIEWPORT = "\x1b[2J\x1b[H"
_SAVE_CURSOR = "\x1b7"
_RESTORE_CURSOR = "\x1b8"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"


class Output(Protocol):
    """The part of a terminal the writer needs."""

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


class TerminalWriter:
    """Translates screen operations into control sequences.

    Rows and columns are 0-based viewport coordinates.
    """

    def __init__(self, output: Output) -> None:
        self._output = output

    @property
    def width(self) -> int:
        return self._output.columns

    @property
    def height(self) -> int:
        return self._output.rows

    def write_raw(self, text: str) -> None:
        if text:
            self._output.write(text)

    def move_cursor_to(self, row: int, col: int = 0) -> None:
        """Move to (*row*, *col*); a column past the right edge is clamped."""
        row = max(0, row)
        col = max(0, min(col, self.width - 1))
        self._output.write(_CURSOR_TO_FMT.format(row + 1, col + 1))

    def erase_current_line_from_cursor(self) -> None:
        self._output.write(_ERASE_LINE_FROM_CURSOR)

    def erase_line(self) -> None:
        self._output.write(_ERASE_LINE)

    def erase_down(self) -> None:
        self._output.write(_ERASE_DOWN)

    def scroll_region_down(self, n: int) -> None:
        """Insert *n* blank lines at the cursor row, pushing lines below down."""
        if n > 0:
            self._output.write(_INSERT_LINES_FMT.format(n))

    def scroll_region_up(self, n: int) -> None:
        """Delete *n* lines at the cursor row, pulling lines below up."""
        if n > 0:
            self._output.write(_DELETE_LINES_FMT.format(n))

    def newline(self, n: int = 1) -> None:
        """Emit *n* line feeds; at the bottom row each one scrolls the viewport."""
        if n > 0:
            self._output.write("\n" * n)

    def clear_viewport(self) -> None:
        self._output.write(_CLEAR_VIEWPORT)

    def save_cursor(self) -> None:
        self._output.write(_SAVE_CURSOR)

    def restore_cursor(self) -> None:
        self._output.write(_RESTORE_CURSOR)

    def hide_cursor(self) -> None:
        self._output.write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._output.write(_SHOW_CURSOR)

    def write_row(self, row: int, text: str) -> None:
        """Replace the contents of *row* with *text*."""
        self.move_cursor_to(row, 0)
        self.erase_current_line_from_cursor()
        self.write_raw(text)
