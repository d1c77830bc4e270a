"""Fixed-layout components: Header, Empty and Separator."""

from __future__ import annotations

from pi.inline.components.base import Component
from pi.inline.styles import StyleFn
from pi.inline.utils import truncate_to_width

HEADER_ID = "header"


class Header(Component):
    """Title line followed by a blank line."""

    def __init__(self, title: str = "", id: str = HEADER_ID, style: StyleFn | None = None) -> None:
        super().__init__(id, style)
        self._title = title

    def get_title(self) -> str:
        return self._title

    def set_title(self, title: str) -> None:
        if self._title != title:
            self._title = title
            self.mark_dirty()

    def calculate_height(self, width: int) -> int:
        return 2

    def render(self, width: int) -> list[str]:
        title = truncate_to_width(self._title, max(1, width - 2))
        return [*self.style([f"  {title}"], "bold"), ""]


class Empty(Component):
    """Blank rows."""

    def __init__(self, lines: int = 1, id: str | None = None, style: StyleFn | None = None) -> None:
        super().__init__(id, style)
        self._lines = max(0, lines)

    def set_lines(self, lines: int) -> None:
        lines = max(0, lines)
        if self._lines != lines:
            self._lines = lines
            self.mark_dirty()

    def calculate_height(self, width: int) -> int:
        return self._lines

    def render(self, width: int) -> list[str]:
        return [""] * self._lines


class Separator(Component):
    """One full-width horizontal rule."""

    def __init__(self, char: str = "─", id: str | None = None, style: StyleFn | None = None) -> None:
        super().__init__(id, style)
        self._char = char

    def calculate_height(self, width: int) -> int:
        return 1

    def render(self, width: int) -> list[str]:
        return self.style([self._char * max(0, width)], "dim")
