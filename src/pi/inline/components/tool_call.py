"""ToolCall component - a tool invocation with a pulsing status marker."""

from __future__ import annotations

from typing import Literal

from pi.inline.components.base import Component
from pi.inline.styles import StyleFn
from pi.inline.utils import truncate_to_width

ToolState = Literal["running", "completed", "error"]

PULSE_FRAMES = ["⋅", "∘", "○", "◯", "⊙", "◉", "⊙", "◯", "○", "∘"]
DONE_MARKER = "⏺"
DETAIL_INDENT = "  "


class ToolCall(Component):
    """A tool call line plus optional detail lines.

    The id starts empty: the caller assigns the tool's own id with
    :meth:`set_id` once it is known.
    """

    def __init__(self, status: str, style: StyleFn | None = None) -> None:
        super().__init__(None, style)
        self._status = status
        self._state: ToolState = "running"
        self._frame = 0

    def set_id(self, tool_id: str) -> None:
        self.id = tool_id

    def get_status(self) -> str:
        return self._status

    def get_state(self) -> ToolState:
        return self._state

    def is_completed(self) -> bool:
        return self._state != "running"

    def update_status(self, status: str) -> None:
        if self._status == status:
            return
        self._status = status
        self.mark_dirty()

    def complete(self, state: ToolState = "completed", final_status: str | None = None) -> None:
        self._state = state
        if final_status is not None:
            self._status = final_status
        self.mark_dirty()

    def advance_animation(self) -> None:
        if self.is_completed():
            return
        self._frame = (self._frame + 1) % len(PULSE_FRAMES)
        self.mark_dirty()

    def _marker(self) -> str:
        if self._state == "completed":
            return self.style([DONE_MARKER], "success")[0]
        if self._state == "error":
            return self.style([DONE_MARKER], "error")[0]
        return self.style([PULSE_FRAMES[self._frame]], "dim")[0]

    def content_lines(self, width: int) -> list[str]:
        first, *details = self._status.split("\n")
        # Marker plus its trailing space take two cells
        head = self.style([truncate_to_width(first, max(1, width - 2))], "bold")[0]
        lines = [f"{self._marker()} {head}"]
        detail_width = max(1, width - len(DETAIL_INDENT))
        for detail in details:
            clipped = truncate_to_width(detail, detail_width)
            lines.append(DETAIL_INDENT + self.style([clipped], "gray")[0])
        return lines

    def calculate_height(self, width: int) -> int:
        return len(self._status.split("\n")) + 1

    def render(self, width: int) -> list[str]:
        return [*self.content_lines(width), ""]
