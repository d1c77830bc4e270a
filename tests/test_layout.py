"""Tests for pi.inline.layout -- the standard chat layout."""

from __future__ import annotations

import asyncio

import pytest

from pi.inline.components import ActivityIndicator, Footer, Prompt
from pi.inline.config import InlineConfig
from pi.inline.layout import (
    ACTIVITY_ID,
    SPACER_ID,
    TOOLS_ANIMATION,
    add_assistant_message,
    add_user_message,
    clear_messages,
    get_footer,
    get_prompt,
    hide_activity,
    initialize_tree,
    show_activity,
    start_tool_animations,
    stop_tool_animations,
    update_activity,
    update_footer,
    update_prompt_line_count,
)
from pi.inline.styles import plain_style
from pi.inline.tree import ComponentTree, Position

from .virtual_terminal import VirtualTerminal

FAST = InlineConfig(animation_interval=0.01, double_escape_delay=0.05)


def make_layout(rows: int = 20, columns: int = 40) -> tuple[ComponentTree, VirtualTerminal]:
    term = VirtualTerminal(rows=rows, columns=columns)
    tree = initialize_tree(term, "Title", status_text="model", style=plain_style, config=FAST)
    tree.render_full()
    return tree, term


def ids(tree: ComponentTree) -> list[str]:
    return [child.id for child in tree.children]


class TestInitialize:
    def test_fixed_layout(self) -> None:
        tree, term = make_layout()
        assert ids(tree) == ["header", SPACER_ID, "prompt", "footer"]
        assert isinstance(get_prompt(tree), Prompt)
        assert isinstance(get_footer(tree), Footer)
        lines = term.screen_lines()
        assert lines[0] == "  Title"
        assert lines[3] == ">"
        assert lines[4].startswith("  model")

    def test_footer_uses_config_delay(self) -> None:
        tree, _ = make_layout()
        footer = get_footer(tree)
        assert footer is not None
        assert footer._double_escape_delay == FAST.double_escape_delay


class TestMessages:
    def test_user_message_goes_above_prompt(self) -> None:
        tree, term = make_layout()
        message = add_user_message(tree, "hi")
        assert ids(tree)[2] == message.id
        assert ids(tree)[-2:] == ["prompt", "footer"]
        assert term.screen_lines()[3] == "> hi"
        assert tree.positions["prompt"] == Position(5, 1)

    def test_assistant_message_grows_in_place(self) -> None:
        tree, term = make_layout()
        message = add_assistant_message(tree)
        assert tree.position_of(message) == Position(3, 0)
        message.add_text("answer")
        tree.update_component(message)
        assert tree.position_of(message) == Position(3, 2)
        assert term.screen_lines()[3] == "  answer"
        assert tree.positions["prompt"] == Position(5, 1)

    def test_clear_messages_keeps_fixed_components(self) -> None:
        tree, term = make_layout()
        add_user_message(tree, "one")
        add_user_message(tree, "two")
        clear_messages(tree)
        assert ids(tree) == ["header", SPACER_ID, "prompt", "footer"]
        assert tree.positions["prompt"] == Position(3, 1)
        assert term.screen_lines()[3] == ">"


class TestPromptAndFooter:
    def test_prompt_grows_and_footer_moves(self) -> None:
        tree, term = make_layout()
        assert update_prompt_line_count(tree, "a\nb") is True
        assert tree.positions["prompt"] == Position(3, 2)
        assert tree.positions["footer"] == Position(5, 1)
        assert term.screen_lines()[5].startswith("  model")

    def test_unchanged_line_count(self) -> None:
        tree, _ = make_layout()
        assert update_prompt_line_count(tree, "short") is False

    def test_update_footer_hides_shortcuts_while_typing(self) -> None:
        tree, term = make_layout()
        assert "? for shortcuts" in term.screen_lines()[4]
        update_footer(tree, "abc")
        assert "? for shortcuts" not in term.screen_lines()[4]


class TestActivity:
    @pytest.mark.asyncio
    async def test_show_animates_and_hide_removes(self) -> None:
        tree, term = make_layout()
        indicator = show_activity(tree, "Thinking")
        assert tree.find(ACTIVITY_ID) is indicator
        assert tree.has_animation(ACTIVITY_ID)
        await asyncio.sleep(0.03)
        assert term.screen_lines()[3].endswith("Thinking")

        hide_activity(tree)
        assert tree.find(ACTIVITY_ID) is None
        assert not tree.has_animation(ACTIVITY_ID)
        assert tree.positions["prompt"] == Position(3, 1)
        tree.close()

    @pytest.mark.asyncio
    async def test_show_replaces_existing_indicator(self) -> None:
        tree, _ = make_layout()
        show_activity(tree, "one")
        second = show_activity(tree, "two")
        found = [c for c in tree.children if isinstance(c, ActivityIndicator)]
        assert found == [second]
        tree.close()

    @pytest.mark.asyncio
    async def test_update_activity_text(self) -> None:
        tree, term = make_layout()
        show_activity(tree, "one")
        update_activity(tree, "two")
        assert term.screen_lines()[3].endswith("two")
        tree.close()

    def test_hide_without_indicator_is_noop(self) -> None:
        tree, _ = make_layout()
        hide_activity(tree)
        assert ids(tree) == ["header", SPACER_ID, "prompt", "footer"]


class TestToolAnimations:
    @pytest.mark.asyncio
    async def test_running_tools_pulse_until_completed(self) -> None:
        tree, term = make_layout()
        message = add_assistant_message(tree)
        running = message.add_tool_call("t1", "Running")
        done = message.add_tool_call("t2", "Done")
        done.complete()
        tree.update_component(message)

        start_tool_animations(tree, message)
        assert tree.has_animation(TOOLS_ANIMATION)
        before = term.screen_lines()[3]
        await asyncio.sleep(0.035)
        assert term.screen_lines()[3] != before
        assert done.get_state() == "completed"

        stop_tool_animations(tree)
        assert not tree.has_animation(TOOLS_ANIMATION)
        assert running.get_state() == "running"
        tree.close()
