"""Key events and raw sequence decoding.

Raw terminal sequences are decoded once, at the input boundary, into
``KeyEvent`` values carrying a key id in ``pi`` notation (``"enter"``,
``"ctrl+left"``, ``"alt+b"``, or the character itself) and a closed
``KeyCategory``. Escape sequences that are not known keys are split into an
``escape`` event followed by one character event per remaining byte, so the
editor's escape/paste state machine sees bracketed-paste markers the same
way whether they arrive whole or in pieces.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

KeyId = str

ESC = "\x1b"


class KeyCategory(enum.Enum):
    """Closed set of key kinds, resolved when the event is created."""

    CHARACTER = "character"
    NAVIGATION = "navigation"
    EDITING = "editing"
    MODIFIER = "modifier"
    ESCAPE = "escape"
    OTHER = "other"


_NAVIGATION_KEYS = frozenset(
    {"up", "down", "left", "right", "home", "end", "pageUp", "pageDown"}
)
_EDITING_KEYS = frozenset(
    {"enter", "kp_enter", "tab", "backspace", "delete", "insert", "space"}
)


def categorize(name: KeyId) -> KeyCategory:
    """Classify a key id."""
    if name == "escape":
        return KeyCategory.ESCAPE
    if name.startswith(("ctrl+", "alt+", "shift+")):
        return KeyCategory.MODIFIER
    if name in _NAVIGATION_KEYS:
        return KeyCategory.NAVIGATION
    if name in _EDITING_KEYS:
        return KeyCategory.EDITING
    return KeyCategory.OTHER


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key: ``{name, is_character, text}`` plus its category."""

    name: KeyId
    text: str = ""
    category: KeyCategory = KeyCategory.OTHER

    @property
    def is_character(self) -> bool:
        return self.category is KeyCategory.CHARACTER

    @property
    def base_name(self) -> KeyId:
        """The key id without modifier prefixes (``"ctrl+left"`` -> ``"left"``)."""
        return self.name.rsplit("+", 1)[-1] if len(self.name) > 1 else self.name

    @classmethod
    def char(cls, ch: str) -> KeyEvent:
        return cls(name=ch, text=ch, category=KeyCategory.CHARACTER)

    @classmethod
    def named(cls, name: KeyId) -> KeyEvent:
        return cls(name=name, category=categorize(name))


ESCAPE_EVENT = KeyEvent.named("escape")


# ---------------------------------------------------------------------------
# Legacy sequences
# ---------------------------------------------------------------------------

_BASE_SEQUENCES: dict[str, KeyId] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1bOM": "kp_enter",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[Z": "shift+tab",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
    "\x1b[15~": "f5",
    "\x1b[17~": "f6",
    "\x1b[18~": "f7",
    "\x1b[19~": "f8",
    "\x1b[20~": "f9",
    "\x1b[21~": "f10",
    "\x1b[23~": "f11",
    "\x1b[24~": "f12",
}

# xterm modifier parameter -> prefix
_MODIFIER_PREFIXES: dict[int, str] = {
    2: "shift+",
    3: "alt+",
    4: "shift+alt+",
    5: "ctrl+",
    6: "ctrl+shift+",
    7: "ctrl+alt+",
    8: "ctrl+shift+alt+",
}

_CSI_LETTER_KEYS: dict[str, KeyId] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CSI_TILDE_KEYS: dict[str, KeyId] = {
    "2": "insert",
    "3": "delete",
    "5": "pageUp",
    "6": "pageDown",
}


def _build_sequences() -> dict[str, KeyId]:
    table = dict(_BASE_SEQUENCES)
    for mod, prefix in _MODIFIER_PREFIXES.items():
        for letter, key in _CSI_LETTER_KEYS.items():
            table[f"\x1b[1;{mod}{letter}"] = prefix + key
        for code, key in _CSI_TILDE_KEYS.items():
            table[f"\x1b[{code};{mod}~"] = prefix + key
    # rxvt-style ctrl/shift arrows
    table.update(
        {
            "\x1bOa": "ctrl+up",
            "\x1bOb": "ctrl+down",
            "\x1bOc": "ctrl+right",
            "\x1bOd": "ctrl+left",
            "\x1b[a": "shift+up",
            "\x1b[b": "shift+down",
            "\x1b[c": "shift+right",
            "\x1b[d": "shift+left",
        }
    )
    return table


KEY_SEQUENCES: dict[str, KeyId] = _build_sequences()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_single(ch: str) -> KeyEvent:
    if ch == ESC:
        return ESCAPE_EVENT
    if ch == "\r":
        return KeyEvent.named("enter")
    if ch == "\n":
        return KeyEvent.named("ctrl+j")
    if ch == "\t":
        return KeyEvent.named("tab")
    if ch in ("\x7f", "\x08"):
        return KeyEvent.named("backspace")
    if ch == "\x00":
        return KeyEvent.named("ctrl+space")
    code = ord(ch)
    if 1 <= code <= 26:
        return KeyEvent.named("ctrl+" + chr(code + ord("a") - 1))
    if code < 0x20:
        return KeyEvent.named("ctrl+" + chr(code + 0x40))
    return KeyEvent.char(ch)


def _decode_meta(ch: str) -> KeyEvent | None:
    """Decode ``ESC`` + *ch* as an alt-modified key."""
    if ch == "\r":
        return KeyEvent.named("alt+enter")
    if ch in ("\x7f", "\x08"):
        return KeyEvent.named("alt+backspace")
    if ch == ESC:
        return KeyEvent.named("alt+escape")
    code = ord(ch)
    if 1 <= code <= 26:
        return KeyEvent.named("ctrl+alt+" + chr(code + ord("a") - 1))
    if ch.isprintable() and ch not in "[O":
        if ch.isupper():
            return KeyEvent.named("shift+alt+" + ch.lower())
        return KeyEvent.named("alt+" + ch)
    return None


def decode(sequence: str) -> list[KeyEvent]:
    """Decode one complete sequence (as emitted by ``StdinBuffer``) to events."""
    if not sequence:
        return []

    name = KEY_SEQUENCES.get(sequence)
    if name is not None:
        return [KeyEvent.named(name)]

    if len(sequence) == 1:
        return [_decode_single(sequence)]

    if sequence[0] == ESC:
        if len(sequence) == 2:
            meta = _decode_meta(sequence[1])
            if meta is not None:
                return [meta]
        logger.debug("Unrecognized escape sequence %r", sequence)
        return [ESCAPE_EVENT, *(_decode_single(ch) for ch in sequence[1:])]

    return [_decode_single(ch) for ch in sequence]


def events_for_text(text: str) -> list[KeyEvent]:
    """Decode a string byte by byte, without sequence recognition."""
    return [_decode_single(ch) for ch in text]
