"""Text component - word-wrapped text with a two-space margin."""

from __future__ import annotations

from pi.inline.components.base import Component
from pi.inline.styles import StyleFn, StyleTag
from pi.inline.utils import wrap_padded

_PREFIXES: dict[str, str] = {
    "user": "> ",
    "assistant": "⏺ ",
}


class Text(Component):
    """Text component - word-wrapped text followed by one blank spacing line."""

    def __init__(
        self,
        content: str = "",
        style_tag: StyleTag = "default",
        id: str | None = None,
        style: StyleFn | None = None,
    ) -> None:
        super().__init__(id, style)
        self._content = content
        self._style_tag: StyleTag = style_tag

        # Cache
        self._cached_lines: list[str] = []
        self._cached_width: int | None = None

    def get_content(self) -> str:
        return self._content

    def set_content(self, content: str) -> None:
        if self._content == content:
            return
        self._content = content
        self._cached_width = None
        self.mark_dirty()

    def append_content(self, content: str) -> None:
        if not content:
            return
        self._content += content
        self._cached_width = None
        self.mark_dirty()

    def get_style(self) -> StyleTag:
        return self._style_tag

    def set_style(self, style_tag: StyleTag) -> None:
        if self._style_tag == style_tag:
            return
        self._style_tag = style_tag
        self.mark_dirty()

    def content_lines(self, width: int) -> list[str]:
        """Styled lines without the trailing spacer."""
        self._ensure_cache(width)
        lines = list(self._cached_lines)
        prefix = _PREFIXES.get(self._style_tag)
        if prefix is not None and lines:
            # The prefix takes the place of the left margin
            lines[0] = prefix + lines[0][2:]
        return self.style(lines, self._style_tag)

    def calculate_height(self, width: int) -> int:
        self._ensure_cache(width)
        return len(self._cached_lines) + 1

    def render(self, width: int) -> list[str]:
        return [*self.content_lines(width), ""]

    def _ensure_cache(self, width: int) -> None:
        if self._cached_width != width:
            self._cached_lines = wrap_padded(self._content, width)
            self._cached_width = width


class UserMessage(Text):
    """A user turn: gray text with a ``> `` marker."""

    def __init__(self, content: str = "", id: str | None = None, style: StyleFn | None = None) -> None:
        super().__init__(content, "user", id, style)
