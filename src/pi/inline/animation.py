"""Named periodic callbacks on the asyncio loop.

Each animation is a ``loop.call_later`` handle that re-arms itself after its
callback runs. Stopping an animation, even from inside its own callback,
cancels the pending handle and prevents the re-arm.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from pi.inline.errors import AnimationLeak

logger = logging.getLogger(__name__)


@dataclass
class AnimationEntry:
    id: str
    interval: float
    callback: Callable[[], None]
    handle: asyncio.TimerHandle | None = None


class AnimationManager:
    """Owns the timers of one component tree."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._entries: dict[str, AnimationEntry] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self, animation_id: str, callback: Callable[[], None], interval: float) -> None:
        """Run *callback* every *interval* seconds, replacing any animation with the same id."""
        if self._closed:
            raise AnimationLeak(f"cannot start animation {animation_id!r}: manager is closed")
        self.stop(animation_id)

        entry = AnimationEntry(id=animation_id, interval=interval, callback=callback)
        self._entries[animation_id] = entry
        self._schedule(entry)
        logger.debug("Animation %r started (%.3fs)", animation_id, interval)

    def stop(self, animation_id: str) -> None:
        entry = self._entries.pop(animation_id, None)
        if entry is None:
            return
        if entry.handle is not None:
            entry.handle.cancel()
            entry.handle = None
        logger.debug("Animation %r stopped", animation_id)

    def stop_all(self) -> None:
        for animation_id in list(self._entries):
            self.stop(animation_id)

    def has_animation(self, animation_id: str) -> bool:
        return animation_id in self._entries

    def active_ids(self) -> list[str]:
        return list(self._entries)

    def close(self) -> None:
        """Stop everything and refuse new animations."""
        self.stop_all()
        self._closed = True

    # -- internals -------------------------------------------------------------

    def _schedule(self, entry: AnimationEntry) -> None:
        loop = self._loop or asyncio.get_running_loop()
        entry.handle = loop.call_later(entry.interval, self._tick, entry)

    def _tick(self, entry: AnimationEntry) -> None:
        entry.handle = None
        try:
            entry.callback()
        except Exception:
            # A failing animation is dropped; the loop's handler reports the error
            if self._entries.get(entry.id) is entry:
                del self._entries[entry.id]
            logger.debug("Animation %r dropped after its callback raised", entry.id)
            raise
        # The callback may have stopped or replaced this animation
        if self._entries.get(entry.id) is entry:
            self._schedule(entry)
