"""AssistantMessage component - one assistant turn made of text and tool calls."""

from __future__ import annotations

from pi.inline.components.base import Component
from pi.inline.components.text import Text
from pi.inline.components.tool_call import ToolCall
from pi.inline.styles import StyleFn


class AssistantMessage(Component):
    """Container of ``Text`` and ``ToolCall`` children.

    Children are separated by one blank line and the message ends with one
    blank line. An empty message takes no rows.
    """

    def __init__(self, id: str | None = None, style: StyleFn | None = None) -> None:
        super().__init__(id, style)

    def add_text(self, content: str) -> Text:
        text = Text(content, "default", style=self.style)
        self.append_child(text)
        return text

    def add_tool_call(self, tool_id: str, status: str) -> ToolCall:
        tool = ToolCall(status, style=self.style)
        tool.set_id(tool_id)
        self.append_child(tool)
        return tool

    def get_tool_calls(self) -> list[ToolCall]:
        return [child for child in self._children if isinstance(child, ToolCall)]

    def get_last_text(self) -> Text | None:
        for child in reversed(self._children):
            if isinstance(child, Text):
                return child
        return None

    def _child_lines(self, child: Component, width: int) -> list[str]:
        # Drop the child's own trailing spacer; the message adds its own
        lines = child.render(width)
        if lines and lines[-1] == "":
            lines = lines[:-1]
        return lines

    def calculate_height(self, width: int) -> int:
        if not self._children:
            return 0
        content = sum(max(0, child.calculate_height(width) - 1) for child in self._children)
        return content + len(self._children)

    def render(self, width: int) -> list[str]:
        if not self._children:
            return []
        lines: list[str] = []
        for index, child in enumerate(self._children):
            if index:
                lines.append("")
            lines.extend(self._child_lines(child, width))
        lines.append("")
        return lines
