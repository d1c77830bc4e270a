"""StdinBuffer splits raw input into complete key sequences.

stdin data can arrive in partial chunks, and an escape sequence split across
two reads would otherwise be decoded as an ESC keypress plus stray
characters. Incomplete escape sequences are held back until more data
arrives or a short timeout flushes them as-is.

Bracketed-paste markers are emitted like any other CSI sequence; the
editor's sequencer decides what they mean.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Literal

logger = logging.getLogger(__name__)

ESC = "\x1b"

SequenceStatus = Literal["complete", "incomplete", "not-escape"]


def _is_complete_sequence(data: str) -> SequenceStatus:
    """Classify *data* as a complete escape sequence, a prefix of one, or text."""
    if not data.startswith(ESC):
        return "not-escape"
    if len(data) == 1:
        return "incomplete"

    introducer = data[1]

    # CSI: ESC [ params final-byte
    if introducer == "[":
        if len(data) < 3:
            return "incomplete"
        return "complete" if 0x40 <= ord(data[-1]) <= 0x7E else "incomplete"

    # SS3: ESC O letter
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"

    # OSC: ESC ] ... BEL | ST
    if introducer == "]":
        if data.endswith("\x07") or data.endswith(f"{ESC}\\"):
            return "complete"
        return "incomplete"

    # Meta key: ESC + one character
    return "complete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences and an incomplete remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            if end > len(buffer):
                return sequences, buffer[pos:]
            status = _is_complete_sequence(buffer[pos:end])
            if status == "incomplete":
                end += 1
                continue
            sequences.append(buffer[pos:end])
            pos = end
            break

    return sequences, ""


class StdinBuffer:
    """Buffers stdin input and emits complete sequences."""

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._buffer: str = ""
        self._timeout: float = timeout
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._on_data: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        """Set the callback receiving each complete sequence."""
        self._on_data = callback

    def _emit(self, sequence: str) -> None:
        if self._on_data:
            self._on_data(sequence)

    def process(self, data: str) -> None:
        """Feed raw input into the buffer."""
        self._cancel_timeout()

        self._buffer += data
        sequences, remainder = _extract_complete_sequences(self._buffer)
        self._buffer = remainder

        for sequence in sequences:
            self._emit(sequence)

        if self._buffer:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # No running loop: nothing will ever complete the sequence
                for sequence in self.flush():
                    self._emit(sequence)
                return
            self._timeout_handle = loop.call_later(self._timeout, self._flush_timeout)

    def _flush_timeout(self) -> None:
        self._timeout_handle = None
        for sequence in self.flush():
            logger.debug("Flushing incomplete sequence %r", sequence)
            self._emit(sequence)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def flush(self) -> list[str]:
        """Return and clear whatever is buffered."""
        self._cancel_timeout()
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def get_buffer(self) -> str:
        return self._buffer

    def clear(self) -> None:
        self._cancel_timeout()
        self._buffer = ""

    def destroy(self) -> None:
        self.clear()
        self._on_data = None


def split_sequences(data: str) -> list[str]:
    """Split already-buffered *data* into sequences, keeping any incomplete tail whole."""
    sequences, remainder = _extract_complete_sequences(data)
    if remainder:
        sequences.append(remainder)
    return sequences
