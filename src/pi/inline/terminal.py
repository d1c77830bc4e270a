"""Terminal I/O for the inline editor.

``Terminal`` is the small surface the tree and the session need: start and
stop input, write, and report the size. ``ProcessTerminal`` backs it with the
process's own tty. It puts stdin in raw mode, turns on bracketed paste, and
hands stdin to the event loop. Each read goes through a ``StdinBuffer`` so
handlers get whole escape sequences.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
import termios
import tty
from typing import IO, Callable, Protocol

from pi.inline.config import InlineConfig, get_config
from pi.inline.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

PASTE_ON = "\x1b[?2004h"
PASTE_OFF = "\x1b[?2004l"
CURSOR_ON = "\x1b[?25h"

FALLBACK_SIZE = os.terminal_size((80, 24))

_READ_SIZE = 4096


class Terminal(Protocol):
    """What the tree and the session need from a terminal."""

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


class ProcessTerminal:
    """The controlling terminal, reached through stdin and stdout.

    ``start`` must be called from a running event loop; the stdin reader
    and the SIGWINCH handler are registered on it. When ``config.write_log``
    names a file, every write is also appended there for debugging.
    """

    def __init__(
        self,
        config: InlineConfig | None = None,
        *,
        stdin: IO[str] | None = None,
        stdout: IO[str] | None = None,
    ) -> None:
        self._config = config or get_config()
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

        self._loop: asyncio.AbstractEventLoop | None = None
        self._buffer: StdinBuffer | None = None
        # Holds the lead bytes of a character split across reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._saved_mode: list | None = None
        self._log: IO[str] | None = None

    @property
    def started(self) -> bool:
        return self._loop is not None

    def _size(self) -> os.terminal_size:
        try:
            return os.get_terminal_size(self._stdout.fileno())
        except (AttributeError, ValueError, OSError):
            return FALLBACK_SIZE

    @property
    def columns(self) -> int:
        return self._size().columns

    @property
    def rows(self) -> int:
        return self._size().lines

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None:
        """Enter raw mode and start delivering input and resize events."""
        if self.started:
            raise RuntimeError("terminal already started")
        loop = asyncio.get_running_loop()
        fd = self._stdin.fileno()

        self._open_log()
        self._saved_mode = termios.tcgetattr(fd)
        tty.setraw(fd)
        self._emit(PASTE_ON)

        self._decoder.reset()
        self._buffer = StdinBuffer(timeout=self._config.stdin_timeout)
        self._buffer.on_data(on_input)
        loop.add_reader(fd, self._read_stdin)
        loop.add_signal_handler(signal.SIGWINCH, on_resize)
        self._loop = loop
        logger.debug("Terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Undo ``start``. Does nothing if the terminal is not running."""
        loop, self._loop = self._loop, None
        if loop is None:
            return
        fd = self._stdin.fileno()
        loop.remove_reader(fd)
        loop.remove_signal_handler(signal.SIGWINCH)

        if self._buffer is not None:
            self._buffer.destroy()
            self._buffer = None
        self._decoder.reset()

        self._emit(PASTE_OFF + CURSOR_ON)
        if self._saved_mode is not None:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_mode)
            self._saved_mode = None
        self._close_log()
        logger.debug("Terminal stopped")

    def write(self, data: str) -> None:
        self._emit(data)
        if self._log is not None:
            self._log.write(data)
            self._log.flush()

    def _emit(self, data: str) -> None:
        # A closed or vanished stdout is not worth crashing the editor over
        try:
            self._stdout.write(data)
            self._stdout.flush()
        except (OSError, ValueError):
            pass

    def _read_stdin(self) -> None:
        try:
            raw = os.read(self._stdin.fileno(), _READ_SIZE)
        except OSError as exc:
            logger.debug("stdin read failed: %s", exc)
            return
        if not raw or self._buffer is None:
            return
        data = self._decoder.decode(raw)
        if data:
            self._buffer.process(data)

    def _open_log(self) -> None:
        path = self._config.write_log
        if not path:
            return
        try:
            self._log = open(path, "a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot open write log %s: %s", path, exc)

    def _close_log(self) -> None:
        if self._log is not None:
            self._log.close()
            self._log = None
