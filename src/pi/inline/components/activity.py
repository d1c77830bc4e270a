"""ActivityIndicator component - a spinner with a message."""

from __future__ import annotations

from pi.inline.components.base import Component
from pi.inline.styles import StyleFn
from pi.inline.utils import truncate_to_width


class ActivityIndicator(Component):
    """Spinner frame plus text, followed by a blank line."""

    _frames = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

    def __init__(self, text: str = "Working...", id: str | None = None, style: StyleFn | None = None) -> None:
        super().__init__(id, style)
        self._text = text
        self._current_frame = 0

    @property
    def frame(self) -> str:
        return self._frames[self._current_frame]

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if self._text == text:
            return
        self._text = text
        self.mark_dirty()
        self.request_render()

    def advance_animation(self) -> None:
        self._current_frame = (self._current_frame + 1) % len(self._frames)
        self.mark_dirty()

    def calculate_height(self, width: int) -> int:
        return 2

    def render(self, width: int) -> list[str]:
        spinner = self.style([self.frame], "assistant")[0]
        message = self.style([truncate_to_width(self._text, max(1, width - 4))], "gray")[0]
        return [f"{spinner} {message}", ""]
