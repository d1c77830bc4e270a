"""Standard chat layout on top of a ``ComponentTree``.

The layout is::

    header
    spacer
    ...messages and the activity indicator...
    prompt
    footer

Messages and the activity indicator are always inserted right above the
prompt, so the prompt and footer stay at the bottom.
"""

from __future__ import annotations

import logging
from typing import Callable, cast

from pi.inline.components import (
    FOOTER_ID,
    HEADER_ID,
    PROMPT_ID,
    ActivityIndicator,
    AssistantMessage,
    Component,
    Empty,
    Footer,
    Header,
    Prompt,
    UserMessage,
)
from pi.inline.config import InlineConfig, get_config
from pi.inline.styles import StyleFn
from pi.inline.tree import ComponentTree
from pi.inline.writer import Output

logger = logging.getLogger(__name__)

SPACER_ID = "spacer"
ACTIVITY_ID = "activity"
TOOLS_ANIMATION = "tools"

_FIXED_IDS = frozenset({HEADER_ID, SPACER_ID, PROMPT_ID, FOOTER_ID, ACTIVITY_ID})


def initialize_tree(
    terminal: Output,
    title: str = "",
    *,
    prompt_text: str = "> ",
    status_text: str = "",
    style: StyleFn | None = None,
    config: InlineConfig | None = None,
    id_factory: Callable[[], str] | None = None,
) -> ComponentTree:
    """Build a tree holding the header, spacer, prompt and footer."""
    config = config or get_config()
    tree = ComponentTree(terminal, id_factory=id_factory, style=style, config=config)
    tree.append_child(Header(title))
    tree.append_child(Empty(1, SPACER_ID))
    tree.append_child(Prompt(prompt_text))
    tree.append_child(Footer(status_text, double_escape_delay=config.double_escape_delay))
    return tree


def get_prompt(tree: ComponentTree) -> Prompt | None:
    return cast("Prompt | None", tree.find(PROMPT_ID))


def get_footer(tree: ComponentTree) -> Footer | None:
    return cast("Footer | None", tree.find(FOOTER_ID))


def _insert_above_prompt(tree: ComponentTree, node: Component, id: str | None = None) -> None:
    tree.insert_before(node, get_prompt(tree), id)
    tree.update_component(node)


def update_footer(tree: ComponentTree, input_text: str | None = None) -> None:
    footer = get_footer(tree)
    if footer is None:
        return
    if input_text is not None:
        footer.set_input_text(input_text)
    if footer.dirty:
        tree.update_component(footer)


def add_user_message(tree: ComponentTree, content: str) -> UserMessage:
    message = UserMessage(content)
    _insert_above_prompt(tree, message)
    return message


def add_assistant_message(tree: ComponentTree) -> AssistantMessage:
    """Add an empty assistant message; fill it with ``add_text``/``add_tool_call``."""
    message = AssistantMessage()
    _insert_above_prompt(tree, message)
    return message


def show_activity(tree: ComponentTree, text: str) -> ActivityIndicator:
    """Show a spinning activity indicator above the prompt, replacing any other."""
    hide_activity(tree)
    indicator = ActivityIndicator(text)
    _insert_above_prompt(tree, indicator, ACTIVITY_ID)

    def tick() -> None:
        indicator.advance_animation()
        tree.update_component(indicator)

    tree.start_animation(ACTIVITY_ID, tick)
    return indicator


def hide_activity(tree: ComponentTree) -> None:
    indicator = tree.find(ACTIVITY_ID)
    tree.stop_animation(ACTIVITY_ID)
    if indicator is not None:
        tree.remove_child(indicator)


def update_activity(tree: ComponentTree, text: str) -> None:
    indicator = tree.find(ACTIVITY_ID)
    if isinstance(indicator, ActivityIndicator):
        indicator.set_text(text)


def start_tool_animations(tree: ComponentTree, message: AssistantMessage) -> None:
    """Pulse every running tool call of *message* until stopped."""

    def tick() -> None:
        for tool in message.get_tool_calls():
            if not tool.is_completed():
                tool.advance_animation()
                tree.update_component(tool)

    tree.start_animation(TOOLS_ANIMATION, tick)


def stop_tool_animations(tree: ComponentTree) -> None:
    tree.stop_animation(TOOLS_ANIMATION)


def clear_messages(tree: ComponentTree) -> None:
    """Remove every message, keeping the fixed layout and the activity indicator."""
    for child in tree.children:
        if child.id not in _FIXED_IDS:
            tree.remove_child(child)
    logger.debug("Cleared messages; %d components remain", len(tree.children))


def update_prompt_line_count(tree: ComponentTree, input_text: str) -> bool:
    """Resize the prompt for *input_text*; returns ``True`` if its height changed."""
    prompt = get_prompt(tree)
    if prompt is None:
        return False
    line_count = prompt.calculate_input_line_count(input_text, tree.width)
    if line_count == prompt.get_line_count():
        return False
    prompt.set_line_count(line_count)
    tree.update_component(prompt)
    return True
