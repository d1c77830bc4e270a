"""Input editor state and its pure editing operations.

``EditorState`` is immutable. Every operation takes a state and returns the
next state together with an ``Effect`` describing what the screen needs:
nothing, a cursor move, an in-place repaint, or a repaint that changes the
number of rows the input occupies (a reposition with a line delta).
``dispatch`` maps a ``KeyEvent`` to one of these operations through the
keybindings table and is the transition function the session drives.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Sequence

from pi.inline.errors import InputTooShort
from pi.inline.geometry import Coordinate, count_lines, offset_to_coordinate
from pi.inline.keybindings import EditorKeybindingsManager, get_editor_keybindings
from pi.inline.keys import KeyEvent
from pi.inline.utils import is_word_boundary

PASTE_TAB = "    "


# ---------------------------------------------------------------------------
# State and effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EditorState:
    """Buffers and cursor of one input session.

    ``slots`` holds the history entries followed by the live input.
    ``active_index`` points at the slot being edited and starts on the live
    slot; it moves down while the user browses history.
    """

    slots: tuple[str, ...] = ("",)
    active_index: int = 0
    cursor_offset: int = 0
    echo: bool = True
    paste_mode: bool = False

    @classmethod
    def create(
        cls,
        history: Sequence[str] = (),
        default: str = "",
        *,
        max_length: int | None = None,
        echo: bool = True,
    ) -> EditorState:
        slots = tuple(_clip(entry, max_length) for entry in history) + (_clip(default, max_length),)
        live = len(slots) - 1
        return cls(slots=slots, active_index=live, cursor_offset=len(slots[live]), echo=echo)

    @property
    def text(self) -> str:
        return self.slots[self.active_index]

    @property
    def live_index(self) -> int:
        return len(self.slots) - 1

    @property
    def is_browsing_history(self) -> bool:
        return self.active_index < self.live_index

    @property
    def history(self) -> list[str]:
        """Slots other than the live one, in order."""
        return list(self.slots[:-1])


class EffectKind(enum.Enum):
    NONE = "none"
    MOVE_CURSOR = "move_cursor"
    REPAINT = "repaint"
    REPOSITION = "reposition"
    SUBMIT = "submit"
    CANCEL = "cancel"
    ESCAPE = "escape"
    TAB = "tab"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind = EffectKind.NONE
    # Active slot contents changed (fires the text-change hook)
    text_changed: bool = False
    # Rows gained (positive) or lost (negative) by the input area
    line_delta: int = 0
    value: str | None = None

    @property
    def needs_repaint(self) -> bool:
        return self.kind in (EffectKind.REPAINT, EffectKind.REPOSITION)


NO_EFFECT = Effect()
MOVE = Effect(EffectKind.MOVE_CURSOR)
EDITED = Effect(EffectKind.REPAINT, text_changed=True)
SWITCHED = Effect(EffectKind.REPAINT)


@dataclass(frozen=True)
class EditContext:
    """Session parameters the pure operations need."""

    width: int = 80
    start: Coordinate = field(default_factory=lambda: Coordinate(0, 0))
    max_length: int | None = None
    min_length: int = 0
    cancelable: bool = False
    keybindings: EditorKeybindingsManager | None = None


def _clip(text: str, max_length: int | None) -> str:
    return text if max_length is None else text[:max_length]


# ---------------------------------------------------------------------------
# Slot mutation
# ---------------------------------------------------------------------------


def replace_active_text(state: EditorState, text: str, cursor_offset: int) -> EditorState:
    """Write *text* into the active slot and move the cursor.

    This is the only place a slot is rewritten. While browsing history the
    active slot is the historical entry itself, so edits there change that
    entry in place rather than forking a copy into the live slot.
    """
    slots = list(state.slots)
    slots[state.active_index] = text
    offset = max(0, min(cursor_offset, len(text)))
    return replace(state, slots=tuple(slots), cursor_offset=offset)


def set_paste_mode(state: EditorState, enabled: bool) -> EditorState:
    return replace(state, paste_mode=enabled)


# ---------------------------------------------------------------------------
# Text search helpers
# ---------------------------------------------------------------------------


def find_line_start(text: str, offset: int) -> int:
    while offset > 0 and text[offset - 1] != "\n":
        offset -= 1
    return offset


def find_line_end(text: str, offset: int) -> int:
    while offset < len(text) and text[offset] != "\n":
        offset += 1
    return offset


def find_prev_word_start(text: str, offset: int) -> int:
    if offset <= 0:
        return 0
    offset -= 1
    while offset > 0 and is_word_boundary(text[offset]):
        offset -= 1
    while offset > 0 and not is_word_boundary(text[offset - 1]):
        offset -= 1
    return offset


def find_next_word_start(text: str, offset: int) -> int:
    if offset >= len(text):
        return len(text)
    while offset < len(text) and not is_word_boundary(text[offset]):
        offset += 1
    while offset < len(text) and is_word_boundary(text[offset]):
        offset += 1
    return offset


# ---------------------------------------------------------------------------
# Insertion and deletion
# ---------------------------------------------------------------------------


def insert_text(state: EditorState, chunk: str, max_length: int | None = None) -> tuple[EditorState, Effect]:
    """Insert *chunk* at the cursor, clipped to the remaining capacity."""
    text = state.text
    if max_length is not None:
        chunk = chunk[: max(0, max_length - len(text))]
    if not chunk:
        return state, NO_EFFECT
    offset = state.cursor_offset
    new_text = text[:offset] + chunk + text[offset:]
    return replace_active_text(state, new_text, offset + len(chunk)), EDITED


def insert_character(state: EditorState, ch: str, max_length: int | None = None) -> tuple[EditorState, Effect]:
    if max_length is not None and len(state.text) >= max_length:
        return state, NO_EFFECT
    return insert_text(state, ch)


def insert_newline(state: EditorState, max_length: int | None = None) -> tuple[EditorState, Effect]:
    return insert_character(state, "\n", max_length)


def backspace(state: EditorState) -> tuple[EditorState, Effect]:
    offset = state.cursor_offset
    if offset <= 0:
        return state, NO_EFFECT
    text = state.text
    return replace_active_text(state, text[: offset - 1] + text[offset:], offset - 1), EDITED


def delete(state: EditorState) -> tuple[EditorState, Effect]:
    offset = state.cursor_offset
    text = state.text
    if offset >= len(text):
        return state, NO_EFFECT
    return replace_active_text(state, text[:offset] + text[offset + 1 :], offset), EDITED


def delete_word_left(state: EditorState) -> tuple[EditorState, Effect]:
    offset = state.cursor_offset
    if offset <= 0:
        return state, NO_EFFECT
    text = state.text
    start = find_prev_word_start(text, offset)
    return replace_active_text(state, text[:start] + text[offset:], start), EDITED


def delete_word_right(state: EditorState) -> tuple[EditorState, Effect]:
    offset = state.cursor_offset
    text = state.text
    if offset >= len(text):
        return state, NO_EFFECT
    end = find_next_word_start(text, offset)
    return replace_active_text(state, text[:offset] + text[end:], offset), EDITED


def delete_to_line_start(state: EditorState) -> tuple[EditorState, Effect]:
    """Delete everything before the cursor."""
    if state.cursor_offset <= 0:
        return state, NO_EFFECT
    return replace_active_text(state, state.text[state.cursor_offset :], 0), EDITED


def delete_to_line_end(state: EditorState) -> tuple[EditorState, Effect]:
    """Delete everything after the cursor."""
    if state.cursor_offset >= len(state.text):
        return state, NO_EFFECT
    return replace_active_text(state, state.text[: state.cursor_offset], state.cursor_offset), EDITED


def clear(state: EditorState) -> tuple[EditorState, Effect]:
    if not state.text:
        return state, NO_EFFECT
    return replace_active_text(state, "", 0), EDITED


# ---------------------------------------------------------------------------
# Cursor movement
# ---------------------------------------------------------------------------


def _move_to(state: EditorState, offset: int) -> tuple[EditorState, Effect]:
    offset = max(0, min(offset, len(state.text)))
    if offset == state.cursor_offset:
        return state, NO_EFFECT
    return replace(state, cursor_offset=offset), MOVE


def move_left(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, state.cursor_offset - 1)


def move_right(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, state.cursor_offset + 1)


def move_to_line_start(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, find_line_start(state.text, state.cursor_offset))


def move_to_line_end(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, find_line_end(state.text, state.cursor_offset))


def move_to_input_start(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, 0)


def move_to_input_end(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, len(state.text))


def word_left(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, find_prev_word_start(state.text, state.cursor_offset))


def word_right(state: EditorState) -> tuple[EditorState, Effect]:
    return _move_to(state, find_next_word_start(state.text, state.cursor_offset))


def _switch_slot(state: EditorState, index: int, cursor_offset: int) -> tuple[EditorState, Effect]:
    if index < 0 or index > state.live_index or index == state.active_index:
        return state, NO_EFFECT
    offset = max(0, min(cursor_offset, len(state.slots[index])))
    return replace(state, active_index=index, cursor_offset=offset), SWITCHED


def history_previous(state: EditorState) -> tuple[EditorState, Effect]:
    index = state.active_index - 1
    if index < 0:
        return state, NO_EFFECT
    return _switch_slot(state, index, len(state.slots[index]))


def history_next(state: EditorState) -> tuple[EditorState, Effect]:
    index = state.active_index + 1
    if index > state.live_index:
        return state, NO_EFFECT
    return _switch_slot(state, index, len(state.slots[index]))


def move_up_visual(state: EditorState, start: Coordinate, width: int) -> tuple[EditorState, Effect]:
    """Move up a line, or into history from the very start of the input."""
    text = state.text
    offset = state.cursor_offset
    cursor = offset_to_coordinate(start, text, offset, width)

    if cursor.row == start.row:
        if offset == 0:
            return _switch_slot(state, state.active_index - 1, 0)
        return _move_to(state, 0)

    line_start = find_line_start(text, offset)
    if line_start == 0:
        # Wrapped continuation of the first logical line
        return _move_to(state, 0)

    prev_end = line_start - 1
    prev_start = find_line_start(text, prev_end)
    column = offset - line_start
    return _move_to(state, prev_start + min(column, prev_end - prev_start))


def move_down_visual(state: EditorState, start: Coordinate, width: int) -> tuple[EditorState, Effect]:
    """Move down a line, or into newer history from the very end of the input."""
    text = state.text
    offset = state.cursor_offset
    cursor = offset_to_coordinate(start, text, offset, width)
    end = offset_to_coordinate(start, text, len(text), width)

    if cursor.row == end.row:
        if offset == len(text):
            index = state.active_index + 1
            if index > state.live_index:
                return state, NO_EFFECT
            return _switch_slot(state, index, len(state.slots[index]))
        return _move_to(state, len(text))

    line_end = find_line_end(text, offset)
    if line_end >= len(text):
        # Wrapped continuation of the last logical line
        return _move_to(state, len(text))

    next_start = line_end + 1
    next_end = find_line_end(text, next_start)
    column = offset - find_line_start(text, offset)
    return _move_to(state, next_start + min(column, next_end - next_start))


# ---------------------------------------------------------------------------
# Session ending
# ---------------------------------------------------------------------------


def submit(state: EditorState, min_length: int = 0) -> str:
    """Return the active text, or raise ``InputTooShort``."""
    if len(state.text) < min_length:
        raise InputTooShort(len(state.text), min_length)
    return state.text


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _line_count(state: EditorState, ctx: EditContext) -> int:
    return count_lines(state.text, ctx.width, ctx.start.col)


def _with_line_delta(
    before: EditorState, after: EditorState, effect: Effect, ctx: EditContext
) -> Effect:
    """Upgrade a repaint to a reposition when the row count changes."""
    if effect.kind is not EffectKind.REPAINT:
        return effect
    delta = _line_count(after, ctx) - _line_count(before, ctx)
    if delta == 0:
        return effect
    return replace(effect, kind=EffectKind.REPOSITION, line_delta=delta)


def _dispatch_paste(state: EditorState, event: KeyEvent, ctx: EditContext) -> tuple[EditorState, Effect]:
    """Paste mode inserts verbatim; line breaks never submit."""
    if event.is_character:
        return insert_character(state, event.text, ctx.max_length)
    if event.name in ("enter", "kp_enter", "ctrl+j"):
        return insert_newline(state, ctx.max_length)
    if event.name == "tab":
        return insert_text(state, PASTE_TAB, ctx.max_length)
    return state, NO_EFFECT


def dispatch(state: EditorState, event: KeyEvent, ctx: EditContext | None = None) -> tuple[EditorState, Effect]:
    """Apply one key event: ``(state, event) -> (state, effect)``.

    Raises ``InputTooShort`` when a submit is below ``ctx.min_length``; every
    other transition is total.
    """
    ctx = ctx or EditContext()

    if state.paste_mode:
        new_state, effect = _dispatch_paste(state, event, ctx)
        return new_state, _with_line_delta(state, new_state, effect, ctx)

    if event.is_character:
        new_state, effect = insert_character(state, event.text, ctx.max_length)
        return new_state, _with_line_delta(state, new_state, effect, ctx)

    keybindings = ctx.keybindings or get_editor_keybindings()
    action = keybindings.resolve(event)

    if action is None:
        return state, NO_EFFECT
    if action == "submit":
        return state, Effect(EffectKind.SUBMIT, value=submit(state, ctx.min_length))
    if action == "cancel":
        return state, Effect(EffectKind.CANCEL) if ctx.cancelable else NO_EFFECT
    if action == "escape":
        return state, Effect(EffectKind.ESCAPE)
    if action == "tab":
        return state, Effect(EffectKind.TAB)

    if action == "newLine":
        new_state, effect = insert_newline(state, ctx.max_length)
    elif action == "cursorUp":
        new_state, effect = move_up_visual(state, ctx.start, ctx.width)
    elif action == "cursorDown":
        new_state, effect = move_down_visual(state, ctx.start, ctx.width)
    else:
        new_state, effect = _SIMPLE_ACTIONS[action](state)
    return new_state, _with_line_delta(state, new_state, effect, ctx)


_SIMPLE_ACTIONS = {
    "cursorLeft": move_left,
    "cursorRight": move_right,
    "cursorWordLeft": word_left,
    "cursorWordRight": word_right,
    "cursorLineStart": move_to_line_start,
    "cursorLineEnd": move_to_line_end,
    "inputStart": move_to_input_start,
    "inputEnd": move_to_input_end,
    "historyPrevious": history_previous,
    "historyNext": history_next,
    "deleteCharBackward": backspace,
    "deleteCharForward": delete,
    "deleteWordBackward": delete_word_left,
    "deleteWordForward": delete_word_right,
    "deleteToLineStart": delete_to_line_start,
    "deleteToLineEnd": delete_to_line_end,
}
