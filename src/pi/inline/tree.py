"""Component tree with incremental, row-level screen updates.

The tree lays its top-level children out top to bottom and remembers where
each one landed in a position table. When a child changes, only that
child's rows are rewritten. If its height changed, lines are inserted or
deleted below it so everything after it moves with the terminal's own
insert/delete-line operations instead of being redrawn.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable

from pi.inline.animation import AnimationManager
from pi.inline.components.base import Component
from pi.inline.config import InlineConfig, get_config
from pi.inline.errors import AnimationLeak
from pi.inline.styles import StyleFn
from pi.inline.writer import Output, TerminalWriter

logger = logging.getLogger(__name__)


@dataclass
class Position:
    """Where a top-level child sits: its first viewport row and its height."""

    start_row: int
    height: int


PositionTable = dict[str, Position]


def _walk(node: Component) -> Iterator[Component]:
    yield node
    for child in node.children:
        yield from _walk(child)


def _subtree_dirty(node: Component) -> bool:
    return any(n.dirty for n in _walk(node))


def _clear_subtree(node: Component) -> None:
    for n in _walk(node):
        n.clear_dirty()


def _fit(lines: list[str], height: int) -> list[str]:
    """Pad or cut *lines* to exactly *height* rows."""
    if len(lines) >= height:
        return lines[:height]
    return lines + [""] * (height - len(lines))


def _visible_rows(start: int, end: int) -> int:
    """How many of the rows ``[start, end)`` lie below the top of the viewport."""
    return max(0, end - max(0, start))


class ComponentTree:
    """Root of the component tree and owner of its screen region.

    Each tree owns its animation timers and its id counter, so two trees
    never share state.
    """

    def __init__(
        self,
        terminal: Output,
        writer: TerminalWriter | None = None,
        id_factory: Callable[[], str] | None = None,
        style: StyleFn | None = None,
        *,
        config: InlineConfig | None = None,
    ) -> None:
        self.terminal = terminal
        self.writer = writer or TerminalWriter(terminal)
        self.style = style
        self.config = config or get_config()

        self._children: list[Component] = []
        self._positions: PositionTable = {}
        counter = itertools.count(1)
        self._id_factory = id_factory or (lambda: f"component-{next(counter)}")
        self._animations = AnimationManager()

        self._width = self.writer.width
        self._height = self.writer.height

        # Called after every screen update with the node that was painted
        # (None after a full render)
        self.on_update: Callable[[Component | None], None] | None = None

    # -- dimensions -------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def update_dimensions(self) -> None:
        self._width = self.writer.width
        self._height = self.writer.height

    # -- structure ---------------------------------------------------------------

    @property
    def children(self) -> list[Component]:
        return list(self._children)

    def find(self, id: str) -> Component | None:
        for child in self._children:
            found = child.find(id)
            if found is not None:
                return found
        return None

    def append_child(self, child: Component, id: str | None = None) -> Component:
        self._attach(child, id)
        self._children.append(child)
        return child

    def insert_before(self, child: Component, before: Component | None, id: str | None = None) -> Component:
        """Insert *child* ahead of *before*; appends when *before* is not a child."""
        self._attach(child, id)
        index = self._index_of(before)
        if index == -1:
            self._children.append(child)
        else:
            self._children.insert(index, child)
        return child

    def insert_after(self, child: Component, after: Component | None, id: str | None = None) -> Component:
        """Insert *child* behind *after*; appends when *after* is not a child."""
        self._attach(child, id)
        index = self._index_of(after)
        if index == -1:
            self._children.append(child)
        else:
            self._children.insert(index + 1, child)
        return child

    def remove_child(self, child: Component) -> None:
        """Detach *child* and delete its rows from the screen."""
        index = self._index_of(child)
        if index == -1:
            return
        del self._children[index]
        child.set_render_callback(None)
        child.set_size_change_callback(None)
        child.parent = None

        pos = self._positions.pop(child.id, None)
        if pos is None or pos.height == 0:
            return
        # Rows already scrolled off the top stay in scrollback
        shown = _visible_rows(pos.start_row, pos.start_row + pos.height)
        if shown:
            self.writer.save_cursor()
            self._move_to(max(0, pos.start_row))
            self.writer.scroll_region_up(shown)
            self.writer.restore_cursor()
        self._shift(self._children[:index], pos.height - shown)
        self._shift(self._children[index:], -shown)
        self._notify(None)

    def _index_of(self, child: Component | None) -> int:
        for index, existing in enumerate(self._children):
            if existing is child:
                return index
        return -1

    def _attach(self, child: Component, id: str | None) -> None:
        if id:
            child.id = id
        if not child.id:
            child.id = self._id_factory()
        if self.find(child.id) is not None:
            raise ValueError(f"duplicate component id: {child.id!r}")

        child.parent = None
        if self.style is not None:
            for node in _walk(child):
                node.style = self.style
        child.set_render_callback(self.update_component)
        child.set_size_change_callback(lambda node, old, new: self.update_component(node))

    def _top_level(self, node: Component) -> Component | None:
        while node.parent is not None:
            node = node.parent
        return node if self._index_of(node) != -1 else None

    # -- positions ------------------------------------------------------------------

    @property
    def positions(self) -> PositionTable:
        """A copy of the position table."""
        return {key: Position(pos.start_row, pos.height) for key, pos in self._positions.items()}

    def position_of(self, node: Component) -> Position | None:
        pos = self._positions.get(node.id)
        if pos is None:
            return None
        return Position(pos.start_row, pos.height)

    def total_height(self) -> int:
        return sum(pos.height for pos in self._positions.values())

    def _bottom_row(self) -> int:
        """One past the last row the tree occupies."""
        return max((pos.start_row + pos.height for pos in self._positions.values()), default=0)

    def _shift(self, children: list[Component], delta: int) -> None:
        """Shift the start row of each of *children* by *delta*."""
        if delta == 0:
            return
        for child in children:
            pos = self._positions.get(child.id)
            if pos is not None:
                pos.start_row += delta

    def _room_for_growth(self, edge: int, delta: int) -> int:
        """Rows to scroll so *delta* rows inserted at row *edge* fit on screen."""
        bottom = self._bottom_row()
        lines = 0
        while bottom - lines + _visible_rows(edge - lines, edge - lines + delta) > self._height:
            lines += 1
        return lines

    def scroll_viewport(self, lines: int) -> None:
        """Scroll the whole viewport up by *lines* rows."""
        if lines <= 0:
            return
        self.writer.save_cursor()
        self.writer.move_cursor_to(self._height - 1)
        self.writer.newline(lines)
        self.writer.restore_cursor()
        for pos in self._positions.values():
            pos.start_row -= lines

    # -- rendering ----------------------------------------------------------------------

    def render_full(self) -> None:
        """Clear the viewport and lay every child out from the top."""
        self.update_dimensions()
        self.writer.clear_viewport()
        self._positions.clear()

        laid_out: list[tuple[int, list[str]]] = []
        row = 0
        for child in self._children:
            height = child.calculate_height(self._width)
            lines = _fit(child.render(self._width), height)
            self._positions[child.id] = Position(row, height)
            child.cached_height = height
            _clear_subtree(child)
            laid_out.append((row, lines))
            row += height

        # Content taller than the viewport keeps its bottom visible
        overflow = max(0, row - self._height)
        if overflow:
            for pos in self._positions.values():
                pos.start_row -= overflow
        for start_row, lines in laid_out:
            self._paint(start_row - overflow, lines)
        self._notify(None)

    def update_component(self, node: Component) -> None:
        """Repaint *node*, moving later siblings when its height changed."""
        top = self._top_level(node)
        if top is None:
            logger.debug("Ignoring update for detached component %r", node.id)
            return

        pos = self._positions.get(top.id)
        if pos is None:
            logger.debug("Component %r has no position yet; full render", top.id)
            self.render_full()
            return

        old_height = pos.height
        new_height = top.calculate_height(self._width)
        lines = _fit(top.render(self._width), new_height)
        delta = new_height - old_height

        if delta > 0:
            # Make room at the bottom before pushing rows down
            self.scroll_viewport(self._room_for_growth(pos.start_row + old_height, delta))

        # Rows gained or lost at the node's bottom edge; only the part below
        # the top of the viewport touches the screen
        edge = pos.start_row + min(old_height, new_height)
        shown = _visible_rows(edge, edge + abs(delta))
        moved = shown if delta > 0 else -shown
        index = self._index_of(top)

        self.writer.save_cursor()
        if shown:
            self._move_to(max(0, edge))
            if delta > 0:
                self.writer.scroll_region_down(shown)
            else:
                self.writer.scroll_region_up(shown)
        self._shift(self._children[: index + 1], moved - delta)
        self._paint(pos.start_row, lines)
        self.writer.restore_cursor()

        pos.height = new_height
        top.cached_height = new_height
        _clear_subtree(top)
        self._shift(self._children[index + 1 :], moved)
        self._notify(top)

    def update_dirty(self) -> None:
        """Repaint every top-level child with a dirty node in its subtree."""
        for child in list(self._children):
            if child.id not in self._positions:
                self.render_full()
                return
            if _subtree_dirty(child):
                self.update_component(child)

    def resize(self) -> None:
        logger.debug("Terminal resized; full render")
        self.render_full()

    def _move_to(self, row: int) -> None:
        self.writer.move_cursor_to(max(0, min(row, self._height - 1)))

    def _paint(self, start_row: int, lines: list[str]) -> None:
        for offset, line in enumerate(lines):
            row = start_row + offset
            # Rows scrolled off the top are gone
            if 0 <= row < self._height:
                self.writer.write_row(row, line)

    def _notify(self, node: Component | None) -> None:
        if self.on_update is not None:
            self.on_update(node)

    # -- animations ----------------------------------------------------------------------

    @property
    def animations(self) -> AnimationManager:
        return self._animations

    def start_animation(self, id: str, callback: Callable[[], None], interval: float | None = None) -> None:
        if interval is None:
            interval = self.config.animation_interval
        self._animations.start(id, callback, interval)

    def stop_animation(self, id: str) -> None:
        self._animations.stop(id)

    def has_animation(self, id: str) -> bool:
        return self._animations.has_animation(id)

    # -- lifecycle -------------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._animations.closed

    def close(self) -> None:
        """Stop every animation and component timer; later animations are refused."""
        self._animations.close()
        for child in self._children:
            for node in _walk(child):
                close = getattr(node, "close", None)
                if close is not None:
                    close()


@contextmanager
def open_view(
    terminal: Output,
    *,
    writer: TerminalWriter | None = None,
    id_factory: Callable[[], str] | None = None,
    style: StyleFn | None = None,
    config: InlineConfig | None = None,
) -> Iterator[ComponentTree]:
    """Yield a tree that is always closed on exit.

    Raises ``AnimationLeak`` if an animation is still registered after
    teardown.
    """
    tree = ComponentTree(terminal, writer, id_factory, style, config=config)
    failed = False
    try:
        yield tree
    except BaseException:
        failed = True
        raise
    finally:
        tree.close()
        leaked = tree.animations.active_ids()
        if leaked:
            if failed:
                logger.warning("Animations outlived their view: %s", leaked)
            else:
                raise AnimationLeak(f"animations outlived their view: {leaked}")
