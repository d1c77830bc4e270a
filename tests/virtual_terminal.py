"""Virtual terminal for testing -- implements the Terminal protocol in-memory.

This module provides a ``VirtualTerminal`` class that satisfies the
``pi.inline.terminal.Terminal`` protocol without performing any real I/O.
All output is captured in a buffer for assertions, and the handful of
control sequences ``TerminalWriter`` emits are applied to a simple screen
model so tests can look at what would be visible.
"""

from __future__ import annotations

import re
from typing import Callable

_CONTROL_RE = re.compile(r"\x1b\[(\??)([0-9;]*)([A-Za-z])|\x1b([78])|\n|\r")


class VirtualTerminal:
    """In-memory terminal that records all writes for test inspection.

    Implements the ``Terminal`` protocol from ``pi.inline.terminal``.

    Parameters
    ----------
    rows:
        Number of terminal rows (height).
    columns:
        Number of terminal columns (width).
    """

    def __init__(self, rows: int = 24, columns: int = 80) -> None:
        self._rows = rows
        self._columns = columns
        self._buffer: list[str] = []
        self._started = False
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._cursor_visible = True

        # Screen model
        self._screen: list[str] = [""] * rows
        self.cursor_row = 0
        self.cursor_col = 0
        self._saved: tuple[int, int] = (0, 0)

    # -- Terminal protocol: properties --------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @rows.setter
    def rows(self, value: int) -> None:
        self._rows = value
        self._fit_screen()

    @property
    def columns(self) -> int:
        return self._columns

    @columns.setter
    def columns(self, value: int) -> None:
        self._columns = value

    @property
    def started(self) -> bool:
        return self._started

    # -- Terminal protocol: lifecycle ---------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        self._input_handler = on_input
        self._resize_handler = on_resize
        self._started = True

    def stop(self) -> None:
        self._started = False
        self._input_handler = None
        self._resize_handler = None

    # -- Terminal protocol: output ------------------------------------------

    def write(self, data: str) -> None:
        """Append *data* to the internal buffer and apply it to the screen."""
        self._buffer.append(data)
        self._apply(data)

    # -- Test helpers -------------------------------------------------------

    @property
    def output(self) -> str:
        """Return everything written to the terminal as a single string."""
        return "".join(self._buffer)

    @property
    def write_count(self) -> int:
        """Return the number of individual ``write`` calls made."""
        return len(self._buffer)

    @property
    def cursor_visible(self) -> bool:
        return self._cursor_visible

    def clear_buffer(self) -> None:
        """Discard all recorded output (the screen model is kept)."""
        self._buffer.clear()

    def screen_lines(self) -> list[str]:
        """Visible rows with trailing spaces removed."""
        return [line.rstrip() for line in self._screen]

    def simulate_input(self, data: str) -> None:
        """Feed *data* into the registered input handler.

        Raises ``RuntimeError`` if no input handler has been registered
        (i.e. ``start`` was not called).
        """
        if self._input_handler is None:
            raise RuntimeError(
                "No input handler registered -- call start() first"
            )
        self._input_handler(data)

    def simulate_resize(self, rows: int | None = None, columns: int | None = None) -> None:
        """Change terminal dimensions and fire the resize callback.

        If *rows* or *columns* is ``None`` the corresponding dimension
        is left unchanged.
        """
        if rows is not None:
            self.rows = rows
        if columns is not None:
            self._columns = columns
        if self._resize_handler is not None:
            self._resize_handler()

    # -- Screen model -------------------------------------------------------

    def _fit_screen(self) -> None:
        if len(self._screen) < self._rows:
            self._screen.extend([""] * (self._rows - len(self._screen)))
        else:
            del self._screen[self._rows:]
        self.cursor_row = min(self.cursor_row, self._rows - 1)

    def _put_text(self, text: str) -> None:
        line = self._screen[self.cursor_row].ljust(self.cursor_col)
        self._screen[self.cursor_row] = line[: self.cursor_col] + text + line[self.cursor_col + len(text):]
        self.cursor_col += len(text)

    def _apply(self, data: str) -> None:
        pos = 0
        for match in _CONTROL_RE.finditer(data):
            if match.start() > pos:
                self._put_text(data[pos:match.start()])
            pos = match.end()
            self._control(match)
        if pos < len(data):
            self._put_text(data[pos:])

    def _control(self, match: re.Match[str]) -> None:
        token = match.group(0)
        if token == "\n":
            if self.cursor_row == self._rows - 1:
                self._screen.pop(0)
                self._screen.append("")
            else:
                self.cursor_row += 1
            return
        if token == "\r":
            self.cursor_col = 0
            return
        if match.group(4) == "7":
            self._saved = (self.cursor_row, self.cursor_col)
            return
        if match.group(4) == "8":
            self.cursor_row, self.cursor_col = self._saved
            return

        private, params, final = match.group(1), match.group(2), match.group(3)
        if private:
            if params == "25":
                self._cursor_visible = final == "h"
            return
        args = [int(p) for p in params.split(";") if p]
        n = args[0] if args else None
        row = self.cursor_row

        if final == "H":
            r = (args[0] if args else 1) - 1
            c = (args[1] if len(args) > 1 else 1) - 1
            self.cursor_row = max(0, min(r, self._rows - 1))
            self.cursor_col = max(0, min(c, self._columns - 1))
        elif final == "K":
            if n == 2:
                self._screen[row] = ""
            else:
                self._screen[row] = self._screen[row][: self.cursor_col]
        elif final == "J":
            if n == 2:
                self._screen = [""] * self._rows
            else:
                self._screen[row] = self._screen[row][: self.cursor_col]
                for r in range(row + 1, self._rows):
                    self._screen[r] = ""
        elif final == "L":
            count = n or 1
            for _ in range(count):
                self._screen.insert(row, "")
                self._screen.pop()
        elif final == "M":
            count = n or 1
            for _ in range(count):
                self._screen.pop(row)
                self._screen.append("")
