"""Menu component - a titled list with one selected item."""

from __future__ import annotations

from dataclasses import dataclass

from pi.inline.components.base import Component
from pi.inline.styles import StyleFn
from pi.inline.utils import truncate_to_width

MENU_ID = "menu"

_SELECTED_PREFIX = "  › "
_PREFIX = "    "


@dataclass
class MenuItem:
    name: str
    value: str
    description: str | None = None


class Menu(Component):
    """Title line plus a scrolling window of items."""

    def __init__(
        self,
        id: str = MENU_ID,
        *,
        title: str = "",
        items: list[MenuItem] | None = None,
        max_visible_items: int = 8,
        style: StyleFn | None = None,
    ) -> None:
        super().__init__(id, style)
        self._title = title
        self._items: list[MenuItem] = list(items or [])
        self._selected_index = 0
        self._max_visible = max(1, max_visible_items)

    # -- title ------------------------------------------------------------------

    def get_title(self) -> str:
        return self._title

    def set_title(self, title: str) -> None:
        if self._title != title:
            self._title = title
            self.mark_dirty()

    # -- items --------------------------------------------------------------------

    def get_items(self) -> list[MenuItem]:
        return list(self._items)

    def set_items(self, items: list[MenuItem]) -> None:
        self._items = list(items)
        self._selected_index = 0
        self.mark_dirty()

    def set_max_visible_items(self, count: int) -> None:
        count = max(1, count)
        if self._max_visible != count:
            self._max_visible = count
            self.mark_dirty()

    # -- selection ----------------------------------------------------------------

    def get_selected_index(self) -> int:
        return self._selected_index

    def set_selected_index(self, index: int) -> None:
        """Select *index*; an index outside the list selects the first item."""
        if index < 0 or index >= len(self._items):
            index = 0
        if self._selected_index != index:
            self._selected_index = index
            self.mark_dirty()

    def get_selected_item(self) -> MenuItem | None:
        if not self._items:
            return None
        return self._items[self._selected_index]

    def move_up(self) -> None:
        if self._items:
            self.set_selected_index((self._selected_index - 1) % len(self._items))

    def move_down(self) -> None:
        if self._items:
            self.set_selected_index((self._selected_index + 1) % len(self._items))

    # -- rendering ----------------------------------------------------------------

    def _visible_range(self) -> tuple[int, int]:
        # Keep the selection near the middle of the window
        start = max(
            0,
            min(
                self._selected_index - self._max_visible // 2,
                len(self._items) - self._max_visible,
            ),
        )
        end = min(start + self._max_visible, len(self._items))
        return start, end

    def calculate_height(self, width: int) -> int:
        return 1 + min(len(self._items), self._max_visible)

    def render(self, width: int) -> list[str]:
        lines = self.style([f"  {truncate_to_width(self._title, max(1, width - 2))}"], "bold")

        text_width = max(1, width - len(_PREFIX) - 2)
        start, end = self._visible_range()
        for index in range(start, end):
            item = self._items[index]
            text = item.name
            if item.description:
                text = f"{item.name}  {item.description}"
            text = truncate_to_width(text, text_width)
            if index == self._selected_index:
                lines.append(_SELECTED_PREFIX + self.style([text], "bold")[0])
            else:
                lines.append(_PREFIX + self.style([text], "gray")[0])
        return lines
