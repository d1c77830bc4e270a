"""Tests for pi.inline.tree -- incremental rendering of the component tree.

Uses the VirtualTerminal screen model to check what would be visible after
each update, not just the escape sequences emitted.
"""

from __future__ import annotations

import asyncio
import re

import pytest

from pi.inline.components.base import Component
from pi.inline.errors import AnimationLeak
from pi.inline.styles import plain_style
from pi.inline.tree import ComponentTree, Position, open_view

from .virtual_terminal import VirtualTerminal


# ---------------------------------------------------------------------------
# Minimal test components
# ---------------------------------------------------------------------------


class Lines(Component):
    """Renders a fixed list of lines."""

    def __init__(self, lines: list[str], id: str | None = None) -> None:
        super().__init__(id=id)
        self.lines = list(lines)
        self.render_count = 0

    def set_lines(self, lines: list[str]) -> None:
        self.lines = list(lines)
        self.mark_dirty()
        self.request_render()

    def calculate_height(self, width: int) -> int:
        return len(self.lines)

    def render(self, width: int) -> list[str]:
        self.render_count += 1
        return list(self.lines)


class Stack(Component):
    """Stacks its children vertically."""

    def calculate_height(self, width: int) -> int:
        return sum(child.calculate_height(width) for child in self.children)

    def render(self, width: int) -> list[str]:
        lines: list[str] = []
        for child in self.children:
            lines.extend(child.render(width))
        return lines


def make_tree(rows: int = 10, columns: int = 20) -> tuple[ComponentTree, VirtualTerminal]:
    term = VirtualTerminal(rows=rows, columns=columns)
    return ComponentTree(term, style=plain_style), term


def abc_tree(rows: int = 10) -> tuple[ComponentTree, VirtualTerminal, Lines, Lines, Lines]:
    tree, term = make_tree(rows=rows)
    a = tree.append_child(Lines(["a"]), "a")
    b = tree.append_child(Lines(["b1", "b2"]), "b")
    c = tree.append_child(Lines(["c"]), "c")
    tree.render_full()
    return tree, term, a, b, c  # type: ignore[return-value]


def scrolled_tree() -> tuple[ComponentTree, VirtualTerminal, Lines, Lines, Lines]:
    """Four rows of viewport with the first child mostly scrolled off the top."""
    tree, term = make_tree(rows=4)
    old = tree.append_child(Lines(["o1", "o2", "o3", "o4"]), "old")
    new = tree.append_child(Lines(["n1", "n2"]), "new")
    prompt = tree.append_child(Lines(["p"]), "prompt")
    tree.render_full()
    assert term.screen_lines() == ["o4", "n1", "n2", "p"]
    assert tree.positions["old"] == Position(-3, 4)
    return tree, term, old, new, prompt  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


class TestStructure:
    def test_ids_are_assigned_per_tree(self) -> None:
        tree, _ = make_tree()
        first = tree.append_child(Lines(["x"]))
        second = tree.append_child(Lines(["y"]))
        assert first.id == "component-1"
        assert second.id == "component-2"

        other, _ = make_tree()
        assert other.append_child(Lines(["z"])).id == "component-1"

    def test_custom_id_factory(self) -> None:
        term = VirtualTerminal()
        tree = ComponentTree(term, id_factory=lambda: "fixed")
        assert tree.append_child(Lines(["x"])).id == "fixed"

    def test_duplicate_id_raises(self) -> None:
        tree, _ = make_tree()
        tree.append_child(Lines(["x"]), "same")
        with pytest.raises(ValueError):
            tree.append_child(Lines(["y"]), "same")

    def test_duplicate_descendant_id_raises(self) -> None:
        tree, _ = make_tree()
        stack = Stack(id="stack")
        stack.append_child(Lines(["x"], id="inner"))
        tree.append_child(stack)
        with pytest.raises(ValueError):
            tree.append_child(Lines(["y"]), "inner")

    def test_insert_before_and_after(self) -> None:
        tree, _ = make_tree()
        a = tree.append_child(Lines(["a"]), "a")
        c = tree.append_child(Lines(["c"]), "c")
        tree.insert_before(Lines(["b"]), c, "b")
        tree.insert_after(Lines(["d"]), c, "d")
        assert [child.id for child in tree.children] == ["a", "b", "c", "d"]
        assert a.id == "a"

    def test_insert_with_missing_anchor_appends(self) -> None:
        tree, _ = make_tree()
        tree.append_child(Lines(["a"]), "a")
        tree.insert_before(Lines(["z"]), Lines(["detached"]), "z")
        assert [child.id for child in tree.children] == ["a", "z"]

    def test_tree_style_is_applied_to_subtree(self) -> None:
        tree, _ = make_tree()
        stack = Stack()
        inner = Lines(["x"])
        stack.append_child(inner)
        tree.append_child(stack)
        assert inner.style is plain_style

    def test_find(self) -> None:
        tree, _ = make_tree()
        stack = Stack(id="stack")
        inner = Lines(["x"], id="inner")
        stack.append_child(inner)
        tree.append_child(stack)
        assert tree.find("inner") is inner
        assert tree.find("missing") is None


# ---------------------------------------------------------------------------
# Full render
# ---------------------------------------------------------------------------


class TestRenderFull:
    def test_lays_children_out_top_to_bottom(self) -> None:
        tree, term, *_ = abc_tree()
        assert tree.positions == {
            "a": Position(0, 1),
            "b": Position(1, 2),
            "c": Position(3, 1),
        }
        assert term.screen_lines()[:5] == ["a", "b1", "b2", "c", ""]
        assert tree.total_height() == 4

    def test_clears_dirty_flags(self) -> None:
        _, _, a, b, c = abc_tree()
        assert not (a.dirty or b.dirty or c.dirty)

    def test_taller_than_viewport_keeps_bottom(self) -> None:
        tree, term = make_tree(rows=3)
        tree.append_child(Lines(["1", "2", "3", "4", "5"]), "tall")
        tree.render_full()
        assert term.screen_lines() == ["3", "4", "5"]
        assert tree.position_of(tree.children[0]) == Position(-2, 5)

    def test_notifies_on_update(self) -> None:
        tree, _ = make_tree()
        seen: list[object] = []
        tree.on_update = seen.append
        tree.append_child(Lines(["a"]))
        tree.render_full()
        assert seen == [None]


# ---------------------------------------------------------------------------
# Incremental updates
# ---------------------------------------------------------------------------


class TestUpdateComponent:
    def test_same_height_repaints_in_place(self) -> None:
        tree, term, a, b, c = abc_tree()
        term.clear_buffer()
        b.set_lines(["B1", "B2"])
        assert term.screen_lines()[:4] == ["a", "B1", "B2", "c"]
        assert tree.positions["c"] == Position(3, 1)
        assert "\x1b[2J" not in term.output
        assert not re.search(r"\x1b\[\d+[LM]", term.output)

    def test_grow_inserts_lines_and_shifts_siblings(self) -> None:
        tree, term, a, b, c = abc_tree()
        term.clear_buffer()
        b.set_lines(["b1", "b2", "b3", "b4"])
        assert "\x1b[2L" in term.output
        assert term.screen_lines()[:7] == ["a", "b1", "b2", "b3", "b4", "c", ""]
        assert tree.positions["b"] == Position(1, 4)
        assert tree.positions["c"] == Position(5, 1)
        assert tree.positions["a"] == Position(0, 1)

    def test_shrink_deletes_lines_and_shifts_siblings(self) -> None:
        tree, term, a, b, c = abc_tree()
        term.clear_buffer()
        b.set_lines(["only"])
        assert "\x1b[1M" in term.output
        assert term.screen_lines()[:4] == ["a", "only", "c", ""]
        assert tree.positions["c"] == Position(2, 1)

    def test_only_the_changed_component_renders(self) -> None:
        _, _, a, b, c = abc_tree()
        before = (a.render_count, c.render_count)
        b.set_lines(["x", "y", "z"])
        assert (a.render_count, c.render_count) == before

    def test_update_is_idempotent(self) -> None:
        tree, term, a, b, c = abc_tree()
        b.set_lines(["b1", "b2", "b3"])
        screen = term.screen_lines()
        positions = tree.positions
        tree.update_component(b)
        assert term.screen_lines() == screen
        assert tree.positions == positions

    def test_cursor_is_restored(self) -> None:
        _, term, a, b, c = abc_tree()
        term.write("\x1b[8;4H")
        b.set_lines(["b1", "b2", "b3"])
        assert (term.cursor_row, term.cursor_col) == (7, 3)

    def test_grow_past_bottom_scrolls_viewport(self) -> None:
        tree, term, a, b, c = abc_tree(rows=5)
        b.set_lines(["b1", "b2", "b3", "b4"])
        assert term.screen_lines() == ["b1", "b2", "b3", "b4", "c"]
        assert tree.positions["a"] == Position(-1, 1)
        assert tree.positions["b"] == Position(0, 4)
        assert tree.positions["c"] == Position(4, 1)

    def test_shrink_above_viewport_keeps_visible_siblings(self) -> None:
        tree, term, old, new, prompt = scrolled_tree()
        old.set_lines(["o1"])
        assert term.screen_lines() == ["n1", "n2", "p", ""]
        assert tree.positions["old"] == Position(-1, 1)
        assert tree.positions["new"] == Position(0, 2)
        assert tree.positions["prompt"] == Position(2, 1)

    def test_grow_above_viewport_inserts_only_visible_rows(self) -> None:
        tree, term, old, new, prompt = scrolled_tree()
        old.set_lines(["o1", "o2", "o3", "o4", "o5"])
        assert term.screen_lines() == ["o5", "n1", "n2", "p"]
        assert tree.positions["old"] == Position(-4, 5)
        assert tree.positions["new"] == Position(1, 2)
        assert tree.positions["prompt"] == Position(3, 1)

    def test_first_appearance_forces_full_render(self) -> None:
        tree, term, *_ = abc_tree()
        d = tree.append_child(Lines(["d"]), "d")
        term.clear_buffer()
        tree.update_component(d)
        assert "\x1b[2J" in term.output
        assert tree.positions["d"] == Position(4, 1)
        assert term.screen_lines()[4] == "d"

    def test_descendant_update_repaints_top_level_ancestor(self) -> None:
        tree, term = make_tree()
        tree.append_child(Lines(["head"]), "head")
        stack = tree.append_child(Stack(), "stack")
        inner = Lines(["one"])
        stack.append_child(inner)
        tree.append_child(Lines(["tail"]), "tail")
        tree.render_full()

        inner.set_lines(["one", "two"])
        assert term.screen_lines()[:4] == ["head", "one", "two", "tail"]
        assert tree.positions["tail"] == Position(3, 1)

    def test_detached_component_is_ignored(self) -> None:
        tree, term, *_ = abc_tree()
        term.clear_buffer()
        tree.update_component(Lines(["stray"]))
        assert term.output == ""

    def test_update_dirty_repaints_only_dirty_subtrees(self) -> None:
        tree, _, a, b, c = abc_tree()
        b.lines = ["new1", "new2"]
        b.mark_dirty()
        before = a.render_count
        tree.update_dirty()
        assert b.render_count == 2
        assert a.render_count == before
        assert not b.dirty


class TestRemoveChild:
    def test_remove_deletes_rows_and_shifts(self) -> None:
        tree, term, a, b, c = abc_tree()
        tree.remove_child(b)
        assert term.screen_lines()[:3] == ["a", "c", ""]
        assert "b" not in tree.positions
        assert tree.positions["c"] == Position(1, 1)
        assert b.parent is None

    def test_removed_component_no_longer_repaints(self) -> None:
        tree, term, a, b, c = abc_tree()
        tree.remove_child(b)
        term.clear_buffer()
        b.set_lines(["ghost"])
        assert term.output == ""

    def test_remove_partly_scrolled_child(self) -> None:
        tree, term, old, new, prompt = scrolled_tree()
        tree.remove_child(old)
        assert term.screen_lines() == ["n1", "n2", "p", ""]
        assert tree.positions["new"] == Position(0, 2)
        assert tree.positions["prompt"] == Position(2, 1)

    def test_remove_fully_scrolled_child_leaves_screen_alone(self) -> None:
        tree, term = make_tree(rows=3)
        gone = tree.append_child(Lines(["g1", "g2"]), "gone")
        tree.append_child(Lines(["t1", "t2", "t3"]), "tail")
        tree.render_full()
        assert tree.positions["gone"] == Position(-2, 2)
        term.clear_buffer()

        tree.remove_child(gone)
        assert not re.search(r"\x1b\[\d+M", term.output)
        assert term.screen_lines() == ["t1", "t2", "t3"]
        assert tree.positions["tail"] == Position(0, 3)

    def test_remove_absent_child_is_noop(self) -> None:
        tree, term, *_ = abc_tree()
        term.clear_buffer()
        tree.remove_child(Lines(["x"]))
        assert term.output == ""


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestOpenView:
    @pytest.mark.asyncio
    async def test_animations_stopped_on_exit(self) -> None:
        term = VirtualTerminal()
        ticks: list[int] = []
        with open_view(term, style=plain_style) as tree:
            tree.start_animation("spin", lambda: ticks.append(1), 0.01)
            assert tree.has_animation("spin")
        assert tree.closed
        assert not tree.has_animation("spin")
        await asyncio.sleep(0.03)
        assert ticks == []

    @pytest.mark.asyncio
    async def test_closed_tree_refuses_animations(self) -> None:
        with open_view(VirtualTerminal()) as tree:
            pass
        with pytest.raises(AnimationLeak):
            tree.start_animation("late", lambda: None)

    @pytest.mark.asyncio
    async def test_closed_even_when_body_raises(self) -> None:
        with pytest.raises(RuntimeError):
            with open_view(VirtualTerminal()) as tree:
                tree.start_animation("spin", lambda: None, 0.01)
                raise RuntimeError("boom")
        assert tree.closed
        assert tree.animations.active_ids() == []

    def test_close_calls_component_close(self) -> None:
        closed: list[str] = []

        class Closable(Lines):
            def close(self) -> None:
                closed.append(self.id)

        with open_view(VirtualTerminal()) as tree:
            tree.append_child(Closable(["x"]), "closable")
        assert closed == ["closable"]
