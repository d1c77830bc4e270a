"""Footer component - the status line under the prompt.

Besides the left/right status text, the footer owns two small pieces of
input policy: ``?`` on an empty input toggles a help view, and the first ESC
on a non-empty input shows a hint that a second ESC clears it.
"""

from __future__ import annotations

import asyncio

from pi.inline.components.base import Component
from pi.inline.keys import KeyCategory, KeyEvent
from pi.inline.styles import StyleFn
from pi.inline.utils import visible_width

FOOTER_ID = "footer"

ESCAPE_HINT = "Press Escape again to clear"
SHORTCUTS_HINT = "? for shortcuts"

_HELP_COL1 = 25
_HELP_COL2 = 30
_HELP_ROWS = [
    ("/ for commands", "double tap esc to clear input"),
    ("", "ctrl + j for newline"),
]


class Footer(Component):
    """Status line with left and right text, or a two-line help view."""

    def __init__(
        self,
        left_text: str = "",
        *,
        double_escape_delay: float = 1.0,
        id: str = FOOTER_ID,
        style: StyleFn | None = None,
    ) -> None:
        super().__init__(id, style)
        self._left_text = left_text
        self._custom_right_text: str | None = None
        self._input_text = ""
        self._showing_help = False
        self._double_escape_delay = double_escape_delay
        self._escape_timer: asyncio.TimerHandle | None = None

    # -- text ---------------------------------------------------------------

    def set_left_text(self, text: str) -> None:
        if self._left_text != text:
            self._left_text = text
            self.mark_dirty()

    def set_right_text(self, text: str | None) -> None:
        """Override the right side; ``None`` restores the computed text."""
        if self._custom_right_text != text:
            self._custom_right_text = text
            self.mark_dirty()

    def set_input_text(self, text: str) -> None:
        if self._input_text != text:
            self._input_text = text
            self.mark_dirty()

    def get_left_text(self) -> str:
        return self._left_text

    def get_right_text(self) -> str:
        if self._custom_right_text is not None:
            return self._custom_right_text
        return "" if self._input_text else SHORTCUTS_HINT

    # -- help ----------------------------------------------------------------

    @property
    def showing_help(self) -> bool:
        return self._showing_help

    def show_help(self) -> None:
        if not self._showing_help:
            self._showing_help = True
            self.mark_dirty()

    def hide_help(self) -> None:
        if self._showing_help:
            self._showing_help = False
            self.mark_dirty()

    # -- escape hint -----------------------------------------------------------

    @property
    def showing_escape_hint(self) -> bool:
        return self._custom_right_text == ESCAPE_HINT

    def show_escape_hint(self) -> None:
        """Show the clear hint until the double-escape window closes."""
        self._cancel_escape_timer()
        self.set_right_text(ESCAPE_HINT)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._escape_timer = loop.call_later(self._double_escape_delay, self._on_escape_timeout)

    def input_cleared(self) -> None:
        """The input was cleared: drop the hint and the tracked text."""
        self._cancel_escape_timer()
        self.set_right_text(None)
        self.set_input_text("")

    def close(self) -> None:
        self._cancel_escape_timer()

    def _on_escape_timeout(self) -> None:
        self._escape_timer = None
        self.set_right_text(None)
        self.request_render()

    def _cancel_escape_timer(self) -> None:
        if self._escape_timer is not None:
            self._escape_timer.cancel()
            self._escape_timer = None

    # -- input policy ------------------------------------------------------------

    def handle_key(self, event: KeyEvent, text: str) -> bool:
        """React to a key pressed while the input holds *text*.

        Returns ``True`` when the key is consumed and must not reach the
        editor.
        """
        if event.category is KeyCategory.ESCAPE:
            if text:
                self.show_escape_hint()
            return False

        if event.is_character and event.text == "?" and text == "":
            self.show_help()
            return True

        self.hide_help()
        return False

    # -- rendering ---------------------------------------------------------------

    def calculate_height(self, width: int) -> int:
        return 2 if self._showing_help else 1

    def render(self, width: int) -> list[str]:
        if self._showing_help:
            lines = [
                "  " + left.ljust(_HELP_COL1) + right.ljust(_HELP_COL2)
                for left, right in _HELP_ROWS
            ]
            return self.style(lines, "gray")

        left = self._left_text
        right = self.get_right_text()
        padding = max(0, width - visible_width(left) - visible_width(right) - 4)
        return self.style([f"  {left}{' ' * padding}{right}  "], "gray")


# The status line under its older name
StatusText = Footer
