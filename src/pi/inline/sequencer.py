"""Escape and bracketed-paste disambiguation.

An ESC key can be a real keypress or the first byte of a bracketed-paste
marker (``ESC[200~`` / ``ESC[201~``). ``KeySequencer`` holds ESC and the
characters after it until they either spell a marker, break the marker, or
a short timer expires, and forwards everything else to the session.

States::

    IDLE --ESC--> ACCUMULATING_ESCAPE --"[200~"--> PASTE_MODE
    PASTE_MODE --ESC--> ACCUMULATING_PASTE_END --"[201~"--> IDLE
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Protocol

from pi.inline.keys import ESCAPE_EVENT, KeyCategory, KeyEvent, events_for_text

logger = logging.getLogger(__name__)

PASTE_START = "[200~"
PASTE_END = "[201~"


class SequencerState(enum.Enum):
    IDLE = "idle"
    ACCUMULATING_ESCAPE = "accumulating_escape"
    PASTE_MODE = "paste_mode"
    ACCUMULATING_PASTE_END = "accumulating_paste_end"


class SequencerSink(Protocol):
    """Receiver of the sequencer's output."""

    def on_key(self, event: KeyEvent) -> None: ...

    def on_escape(self) -> None: ...

    def on_paste_start(self) -> None: ...

    def on_paste_end(self) -> None: ...


class KeySequencer:
    """Demultiplexes a key stream into keys, real ESC presses and paste mode."""

    def __init__(self, sink: SequencerSink, *, timeout: float = 0.02) -> None:
        self._sink = sink
        self._timeout = timeout
        self._state = SequencerState.IDLE
        self._accumulator = ""
        self._timer: asyncio.TimerHandle | None = None

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def accumulator(self) -> str:
        """Characters received after a pending ESC."""
        return self._accumulator

    @property
    def in_paste(self) -> bool:
        return self._state in (SequencerState.PASTE_MODE, SequencerState.ACCUMULATING_PASTE_END)

    # -- input ---------------------------------------------------------------

    def feed(self, event: KeyEvent) -> None:
        """Process one decoded key event."""
        self._cancel_timer()

        if self._state is SequencerState.IDLE:
            if event.category is KeyCategory.ESCAPE:
                self._begin(SequencerState.ACCUMULATING_ESCAPE)
                return
            self._sink.on_key(event)
            return

        if self._state is SequencerState.PASTE_MODE:
            if event.category is KeyCategory.ESCAPE:
                self._begin(SequencerState.ACCUMULATING_PASTE_END)
                return
            self._sink.on_key(event)
            return

        if self._state is SequencerState.ACCUMULATING_ESCAPE:
            self._accumulate(event, PASTE_START)
        else:
            self._accumulate(event, PASTE_END)

    def flush(self) -> None:
        """Resolve a pending ESC immediately, as if its timer had fired."""
        if self._state in (SequencerState.ACCUMULATING_ESCAPE, SequencerState.ACCUMULATING_PASTE_END):
            self._cancel_timer()
            self._on_timeout()

    def close(self) -> None:
        self._cancel_timer()
        self._state = SequencerState.IDLE
        self._accumulator = ""

    # -- internals -------------------------------------------------------------

    def _begin(self, state: SequencerState) -> None:
        self._state = state
        self._accumulator = ""
        self._restart_timer()

    def _accumulate(self, event: KeyEvent, marker: str) -> None:
        candidate = self._accumulator + event.text if event.is_character else None

        if candidate is not None and candidate == marker:
            entering = marker == PASTE_START
            self._accumulator = ""
            if entering:
                self._state = SequencerState.PASTE_MODE
                logger.debug("Bracketed paste started")
                self._sink.on_paste_start()
            else:
                self._state = SequencerState.IDLE
                logger.debug("Bracketed paste ended")
                self._sink.on_paste_end()
            return

        if candidate is not None and marker.startswith(candidate):
            self._accumulator = candidate
            self._restart_timer()
            return

        # Prefix broken: replay what was held back, then the breaking key
        held = self._accumulator
        self._accumulator = ""
        if self._state is SequencerState.ACCUMULATING_ESCAPE:
            self._state = SequencerState.IDLE
            self._sink.on_key(ESCAPE_EVENT)
        else:
            # Inside a paste the ESC byte itself is dropped
            self._state = SequencerState.PASTE_MODE
        for held_event in events_for_text(held):
            self._sink.on_key(held_event)
        self.feed(event)

    def _on_timeout(self) -> None:
        self._timer = None
        held = self._accumulator
        self._accumulator = ""
        if self._state is SequencerState.ACCUMULATING_PASTE_END:
            # A lone ESC mid-paste: report it, then keep pasting
            self._state = SequencerState.PASTE_MODE
            logger.debug("ESC timed out inside a paste; staying in paste mode")
        else:
            self._state = SequencerState.IDLE
        self._sink.on_escape()
        for held_event in events_for_text(held):
            self._sink.on_key(held_event)

    def _restart_timer(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the ESC stays pending until flush()
            return
        self._timer = loop.call_later(self._timeout, self._on_timeout)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
