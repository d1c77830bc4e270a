"""Component base class for the inline renderer.

A component knows its height at a given width and how to render itself to
that many lines. The ``ComponentTree`` decides where on screen those lines
go; components only mark themselves dirty or ask the tree to repaint them.
"""

from __future__ import annotations

from typing import Callable

from pi.inline.styles import StyleFn, ansi_style

SizeChangeCallback = Callable[["Component", int, int], None]
RenderCallback = Callable[["Component"], None]


class Component:
    """A node in the component tree.

    Subclasses implement ``calculate_height`` and ``render``. ``id`` may be
    left empty; the tree assigns one when the node is attached.
    """

    def __init__(self, id: str | None = None, style: StyleFn | None = None) -> None:
        self.id: str = id or ""
        self.parent: Component | None = None
        self._children: list[Component] = []
        self.dirty: bool = True
        self.cached_height: int = 0
        self.style: StyleFn = style or ansi_style

        self._on_size_change: SizeChangeCallback | None = None
        self._on_request_render: RenderCallback | None = None

    # -- rendering (override) -------------------------------------------------

    def calculate_height(self, width: int) -> int:
        raise NotImplementedError

    def render(self, width: int) -> list[str]:
        raise NotImplementedError

    # -- dirty tracking ---------------------------------------------------------

    def mark_dirty(self) -> None:
        self.dirty = True

    def clear_dirty(self) -> None:
        self.dirty = False

    # -- tree callbacks ---------------------------------------------------------

    def set_size_change_callback(self, callback: SizeChangeCallback | None) -> None:
        self._on_size_change = callback

    def set_render_callback(self, callback: RenderCallback | None) -> None:
        self._on_request_render = callback

    def notify_size_change(self, old_height: int, new_height: int) -> None:
        if old_height == new_height:
            return
        if self._on_size_change is not None:
            self._on_size_change(self, old_height, new_height)
        elif self.parent is not None:
            self.parent.notify_size_change(old_height, new_height)

    def request_render(self) -> None:
        """Ask the owning tree to repaint this node; detached nodes just stay dirty."""
        if self._on_request_render is not None:
            self._on_request_render(self)
        elif self.parent is not None:
            self.parent.request_render()

    # -- structure --------------------------------------------------------------

    @property
    def children(self) -> list[Component]:
        return list(self._children)

    def index_of(self, child: Component) -> int:
        try:
            return self._children.index(child)
        except ValueError:
            return -1

    def append_child(self, child: Component) -> None:
        child.parent = self
        self._children.append(child)
        self.mark_dirty()

    def insert_before(self, child: Component, before: Component) -> None:
        """Insert *child* ahead of *before*, or append when *before* is absent."""
        index = self.index_of(before)
        if index == -1:
            self.append_child(child)
            return
        child.parent = self
        self._children.insert(index, child)
        self.mark_dirty()

    def insert_after(self, child: Component, after: Component) -> None:
        """Insert *child* behind *after*, or append when *after* is absent."""
        index = self.index_of(after)
        if index == -1:
            self.append_child(child)
            return
        child.parent = self
        self._children.insert(index + 1, child)
        self.mark_dirty()

    def remove_child(self, child: Component) -> None:
        index = self.index_of(child)
        if index == -1:
            return
        del self._children[index]
        child.parent = None
        self.mark_dirty()

    def find(self, id: str) -> Component | None:
        """Depth-first search for *id*, starting with this node."""
        if self.id and self.id == id:
            return self
        for child in self._children:
            found = child.find(id)
            if found is not None:
                return found
        return None
