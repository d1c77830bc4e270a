"""Prompt component - reserves the rows the input editor draws into."""

from __future__ import annotations

from pi.inline.components.base import Component
from pi.inline.geometry import count_lines
from pi.inline.styles import StyleFn
from pi.inline.utils import visible_width

PROMPT_ID = "prompt"


class Prompt(Component):
    """The prompt marker followed by ``line_count - 1`` blank rows.

    The input session paints the text itself; the prompt only keeps the
    tree's layout in step with how many rows that text needs.
    """

    def __init__(self, prompt_text: str = "> ", id: str = PROMPT_ID, style: StyleFn | None = None) -> None:
        super().__init__(id, style)
        self._prompt_text = prompt_text
        self._line_count = 1

    def get_prompt_text(self) -> str:
        return self._prompt_text

    def set_prompt_text(self, prompt_text: str) -> None:
        if self._prompt_text == prompt_text:
            return
        self._prompt_text = prompt_text
        self.mark_dirty()

    @property
    def prompt_width(self) -> int:
        return visible_width(self._prompt_text)

    def get_line_count(self) -> int:
        return self._line_count

    def set_line_count(self, line_count: int) -> None:
        line_count = max(1, line_count)
        if self._line_count == line_count:
            return
        self._line_count = line_count
        self.mark_dirty()

    def calculate_input_line_count(self, text: str, width: int) -> int:
        """Rows *text* needs when typed after the prompt marker."""
        return count_lines(text, width, self.prompt_width)

    def calculate_height(self, width: int) -> int:
        return max(1, self._line_count)

    def render(self, width: int) -> list[str]:
        return [self._prompt_text] + [""] * (max(1, self._line_count) - 1)
