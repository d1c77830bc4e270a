"""Interactive input session: the editor wired to a terminal and a tree.

``InputSession`` receives raw terminal data, decodes it, runs it through the
escape/paste sequencer and the pure editor, and paints the result into the
rows the tree's ``Prompt`` reserves. When the input needs more or fewer
rows, the prompt's height changes and the tree moves everything below it.

``run_input_session`` is the async entry point: it starts the terminal,
awaits the session's result and always restores the terminal.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from pi.inline.components import Component, Footer, Prompt
from pi.inline.config import InlineConfig, get_config
from pi.inline.editor import (
    EditContext,
    EditorState,
    EffectKind,
    clear,
    dispatch,
    set_paste_mode,
)
from pi.inline.errors import Cancelled, GeometryOverflow, InputTooShort
from pi.inline.geometry import Coordinate, compute_extent, layout_rows
from pi.inline.keybindings import EditorKeybindingsManager
from pi.inline.keys import ESCAPE_EVENT, KeyCategory, KeyEvent, decode, events_for_text
from pi.inline.layout import get_footer, get_prompt
from pi.inline.sequencer import KeySequencer
from pi.inline.stdin_buffer import split_sequences
from pi.inline.terminal import Terminal
from pi.inline.tree import ComponentTree

logger = logging.getLogger(__name__)


@dataclass
class InputOptions:
    """Options for one input session.

    ``echo=False`` hides the input entirely; ``echo_char`` masks every
    character with that string (password fields).
    """

    default: str = ""
    max_length: int | None = None
    min_length: int = 0
    cancelable: bool = False
    echo: bool = True
    echo_char: str | None = None
    prompt: str = "> "

    # Return True to keep the character out of the buffer
    on_character_will_insert: Callable[[str, str], bool] | None = None
    # Return True to consume a ctrl/alt/shift key before the editor sees it
    on_special_key: Callable[[KeyEvent, str], bool] | None = None
    on_escape: Callable[[str, int], None] | None = None
    on_text_change: Callable[[str, KeyEvent | None], None] | None = None
    on_tab: Callable[[str, int], None] | None = None

    keybindings: EditorKeybindingsManager | None = None


class InputSession:
    """One prompt's worth of editing. Also the sequencer's sink."""

    def __init__(
        self,
        tree: ComponentTree,
        history: Sequence[str] = (),
        options: InputOptions | None = None,
        *,
        config: InlineConfig | None = None,
    ) -> None:
        self.tree = tree
        self.options = options or InputOptions()
        self.config = config or get_config()

        prompt = get_prompt(tree)
        if prompt is None:
            raise ValueError("component tree has no prompt")
        self._prompt: Prompt = prompt
        self._footer: Footer | None = get_footer(tree)

        self.state = EditorState.create(
            history, self.options.default, max_length=self.options.max_length, echo=self.options.echo
        )
        self.sequencer = KeySequencer(self, timeout=self.config.escape_timeout)
        self.result: asyncio.Future[str] = asyncio.get_running_loop().create_future()

        self._escape_window: asyncio.TimerHandle | None = None
        self._painting = False
        self._paste_changed = False
        self._previous_on_update: Callable[[Component | None], None] | None = None
        self._opened = False

    # -- public ---------------------------------------------------------------------

    @property
    def text(self) -> str:
        return self.state.text

    @property
    def history(self) -> list[str]:
        """History entries as they stand now, including in-place edits."""
        return self.state.history

    @property
    def done(self) -> bool:
        return self.result.done()

    def open(self) -> None:
        """Attach to the tree and draw the input."""
        if self._opened:
            return
        self._opened = True
        self._prompt.set_prompt_text(self.options.prompt)
        if self._footer is not None:
            self._footer.set_input_text(self.text)
        self._previous_on_update = self.tree.on_update
        self.tree.on_update = self._on_tree_update

        if self.tree.position_of(self._prompt) is None:
            self.tree.render_full()
        else:
            self.tree.update_dirty()
            self._paint()

    def close(self) -> None:
        """Stop timers and detach from the tree. Safe to call more than once."""
        self.sequencer.close()
        self._cancel_escape_window()
        if self._opened:
            self._opened = False
            self.tree.on_update = self._previous_on_update

    def feed(self, data: str) -> None:
        """Process raw terminal input."""
        for sequence in split_sequences(data):
            # Pasted bytes are text; only the end marker means anything
            events = events_for_text(sequence) if self.sequencer.in_paste else decode(sequence)
            for event in events:
                if self.done:
                    return
                self.sequencer.feed(event)

    def resize(self) -> None:
        self.tree.resize()

    # -- sequencer sink ---------------------------------------------------------------

    def on_key(self, event: KeyEvent) -> None:
        self.handle_key(event)

    def on_escape(self) -> None:
        if self.state.paste_mode:
            # A lone ESC inside a paste: show what was pasted so far
            self._paint()
        self._handle_escape()

    def on_paste_start(self) -> None:
        self.state = set_paste_mode(self.state, True)
        self._paste_changed = False

    def on_paste_end(self) -> None:
        self.state = set_paste_mode(self.state, False)
        self._paint()
        if self._paste_changed:
            self._paste_changed = False
            self._text_changed(None)

    # -- key handling -----------------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> None:
        """Apply one decoded key (after escape/paste sequencing)."""
        if self.done:
            return

        if not self.state.paste_mode and self._intercept(event):
            return

        ctx = EditContext(
            width=self.tree.width,
            start=self._anchor(),
            max_length=self.options.max_length,
            min_length=self.options.min_length,
            cancelable=self.options.cancelable,
            keybindings=self.options.keybindings,
        )
        try:
            new_state, effect = dispatch(self.state, event, ctx)
        except InputTooShort as exc:
            logger.debug("Submit ignored: %s", exc)
            return

        kind = effect.kind
        if kind is EffectKind.SUBMIT:
            self._finish(effect.value if effect.value is not None else self.text)
            return
        if kind is EffectKind.CANCEL:
            self._fail(Cancelled())
            return
        if kind is EffectKind.ESCAPE:
            self._handle_escape()
            return
        if kind is EffectKind.TAB:
            if self.options.on_tab is not None:
                self.options.on_tab(self.text, self._line_count())
            return
        if kind is EffectKind.NONE:
            return

        self.state = new_state
        if self.state.paste_mode:
            self._paste_changed = self._paste_changed or effect.text_changed
            return

        if kind is EffectKind.REPOSITION:
            logger.debug("Input now spans %+d rows", effect.line_delta)
        if not effect.needs_repaint:
            self._place_cursor()
            return

        if self._footer is not None:
            self._footer.set_input_text(self.text)
        self._paint()
        self.tree.update_dirty()
        if effect.text_changed:
            self._text_changed(event)

    def _intercept(self, event: KeyEvent) -> bool:
        """Run the hooks that may swallow a key before the editor sees it."""
        if self._footer is not None and event.category is not KeyCategory.ESCAPE:
            consumed = self._footer.handle_key(event, self.text)
            if self._footer.dirty:
                self.tree.update_dirty()
            if consumed:
                return True

        if (
            event.category is KeyCategory.MODIFIER
            and event.name != "ctrl+j"
            and self.options.on_special_key is not None
            and self.options.on_special_key(event, self.text)
        ):
            return True

        if (
            event.is_character
            and self.options.on_character_will_insert is not None
            and self.options.on_character_will_insert(event.text, self.text)
        ):
            return True
        return False

    def _handle_escape(self) -> None:
        text = self.text
        line_count = self._line_count()

        if text and self._escape_window is not None:
            # Second ESC inside the window clears the input
            self._cancel_escape_window()
            self.state, _ = clear(self.state)
            if self._footer is not None:
                self._footer.input_cleared()
            self._paint()
            self.tree.update_dirty()
            self._text_changed(ESCAPE_EVENT)
        elif text:
            if self._footer is not None:
                self._footer.handle_key(ESCAPE_EVENT, text)
                self.tree.update_dirty()
            self._open_escape_window()

        if self.options.on_escape is not None:
            self.options.on_escape(text, line_count)

    def _text_changed(self, event: KeyEvent | None) -> None:
        if self.options.on_text_change is not None:
            self.options.on_text_change(self.text, event)

    # -- double-escape window ----------------------------------------------------------

    def _open_escape_window(self) -> None:
        self._cancel_escape_window()
        loop = asyncio.get_running_loop()
        self._escape_window = loop.call_later(self.config.double_escape_delay, self._close_escape_window)

    def _close_escape_window(self) -> None:
        self._escape_window = None

    def _cancel_escape_window(self) -> None:
        if self._escape_window is not None:
            self._escape_window.cancel()
            self._escape_window = None

    # -- ending ------------------------------------------------------------------------------

    def _finish(self, value: str) -> None:
        if self.done:
            return
        logger.debug("Input submitted (%d characters)", len(value))
        self.result.set_result(value)
        self.close()

    def _fail(self, exc: BaseException) -> None:
        if self.done:
            return
        logger.debug("Input session ended with %s", type(exc).__name__)
        self.result.set_exception(exc)
        self.close()

    # -- painting --------------------------------------------------------------------------

    def _display_text(self) -> str:
        if not self.options.echo:
            return ""
        if self.options.echo_char:
            return "".join("\n" if ch == "\n" else self.options.echo_char for ch in self.text)
        return self.text

    def _display_offset(self) -> int:
        return self.state.cursor_offset if self.options.echo else 0

    def _anchor(self) -> Coordinate:
        pos = self.tree.position_of(self._prompt)
        row = pos.start_row if pos is not None else 0
        return Coordinate(row, self._prompt.prompt_width)

    def _line_count(self) -> int:
        return self._prompt.calculate_input_line_count(self._display_text(), self.tree.width)

    def _on_tree_update(self, node: Component | None) -> None:
        if self._previous_on_update is not None:
            self._previous_on_update(node)
        if not self._painting and not self.done:
            self._paint()

    def _paint(self) -> None:
        """Draw the input into the prompt rows and put the cursor in place."""
        if self._painting or self.done:
            return
        self._painting = True
        try:
            display = self._display_text()
            width = self.tree.width

            self._prompt.set_line_count(self._prompt.calculate_input_line_count(display, width))
            if self._prompt.dirty:
                # Moves everything below the prompt
                self.tree.update_component(self._prompt)

            extent = compute_extent(
                self._anchor(),
                display,
                self._display_offset(),
                width,
                self.tree.height,
                min_width=self.config.min_width,
                min_height=self.config.min_height,
            )
            if extent.scroll:
                self.tree.scroll_viewport(extent.scroll)

            writer = self.tree.writer
            rows = layout_rows(display, width, extent.start.col)
            for index, row_text in enumerate(rows):
                row = extent.start.row + index
                if row < 0:
                    continue
                prefix = self._prompt.get_prompt_text() if index == 0 else ""
                writer.write_row(row, prefix + row_text)
            writer.move_cursor_to(extent.cursor.row, extent.cursor.col)
        except GeometryOverflow as exc:
            logger.debug("Cannot draw input: %s", exc)
            self._fail(exc)
        finally:
            self._painting = False

    def _place_cursor(self) -> None:
        try:
            extent = compute_extent(
                self._anchor(),
                self._display_text(),
                self._display_offset(),
                self.tree.width,
                self.tree.height,
                min_width=self.config.min_width,
                min_height=self.config.min_height,
            )
        except GeometryOverflow as exc:
            self._fail(exc)
            return
        self.tree.writer.move_cursor_to(extent.cursor.row, extent.cursor.col)


def _standalone_tree(terminal: Terminal, options: InputOptions, config: InlineConfig) -> ComponentTree:
    tree = ComponentTree(terminal, config=config)
    tree.append_child(Prompt(options.prompt))
    tree.append_child(Footer(double_escape_delay=config.double_escape_delay))
    return tree


async def run_input_session(
    terminal: Terminal,
    history: Sequence[str] = (),
    options: InputOptions | None = None,
    *,
    tree: ComponentTree | None = None,
    config: InlineConfig | None = None,
) -> str:
    """Read one input from *terminal* and return it.

    Raises ``Cancelled`` when a cancelable session is aborted and
    ``GeometryOverflow`` when the terminal is too small to draw into.
    Without a *tree*, a prompt and footer are drawn on their own.
    """
    config = config or get_config()
    options = options or InputOptions()
    owns_tree = tree is None
    if tree is None:
        tree = _standalone_tree(terminal, options, config)

    session = InputSession(tree, history, options, config=config)
    terminal.start(session.feed, session.resize)
    try:
        session.open()
        return await session.result
    finally:
        session.close()
        terminal.stop()
        if owns_tree:
            tree.close()
