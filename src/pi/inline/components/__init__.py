"""Inline renderer components."""

from pi.inline.components.activity import ActivityIndicator
from pi.inline.components.assistant_message import AssistantMessage
from pi.inline.components.base import Component, RenderCallback, SizeChangeCallback
from pi.inline.components.footer import ESCAPE_HINT, FOOTER_ID, Footer, StatusText
from pi.inline.components.menu import MENU_ID, Menu, MenuItem
from pi.inline.components.prompt import PROMPT_ID, Prompt
from pi.inline.components.simple import HEADER_ID, Empty, Header, Separator
from pi.inline.components.text import Text, UserMessage
from pi.inline.components.tool_call import PULSE_FRAMES, ToolCall, ToolState

__all__ = [
    "ActivityIndicator",
    "AssistantMessage",
    "Component",
    "ESCAPE_HINT",
    "Empty",
    "FOOTER_ID",
    "Footer",
    "HEADER_ID",
    "Header",
    "MENU_ID",
    "Menu",
    "MenuItem",
    "PROMPT_ID",
    "PULSE_FRAMES",
    "Prompt",
    "RenderCallback",
    "Separator",
    "SizeChangeCallback",
    "StatusText",
    "Text",
    "ToolCall",
    "ToolState",
    "UserMessage",
]
