"""Editor keybindings: a static key -> action table."""

from __future__ import annotations

from typing import Literal

from pi.inline.keys import KeyEvent, KeyId

EditorAction = Literal[
    # Session
    "submit",
    "cancel",
    "escape",
    "tab",
    # Text input
    "newLine",
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorUp",
    "cursorDown",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    "inputStart",
    "inputEnd",
    # History
    "historyPrevious",
    "historyNext",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteWordForward",
    "deleteToLineStart",
    "deleteToLineEnd",
]

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Session
    "submit": ["enter", "kp_enter"],
    "cancel": "ctrl+c",
    "escape": "escape",
    "tab": "tab",
    # Text input
    "newLine": "ctrl+j",
    # Cursor movement
    "cursorLeft": "left",
    "cursorRight": "right",
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorWordLeft": ["ctrl+left", "alt+b"],
    "cursorWordRight": ["ctrl+right", "alt+f"],
    "cursorLineStart": "ctrl+a",
    "cursorLineEnd": "ctrl+e",
    "inputStart": "home",
    "inputEnd": "end",
    # History (plain history stepping has no default key; up/down fall back to it)
    "historyPrevious": [],
    "historyNext": [],
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "deleteWordBackward": "ctrl+w",
    "deleteWordForward": "alt+d",
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
}


class EditorKeybindingsManager:
    """Resolves key events to editor actions.

    *config* maps actions to one key or a list of keys and replaces the
    default keys of every action it names.
    """

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[EditorAction, list[KeyId]] = {}
        self._key_to_action: dict[KeyId, EditorAction] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        bindings = {**DEFAULT_EDITOR_KEYBINDINGS, **config}
        self._action_to_keys = {
            action: list(keys) if isinstance(keys, list) else [keys]
            for action, keys in bindings.items()
        }
        # Configured actions go last so they claim keys shared with a default
        order = [action for action in self._action_to_keys if action not in config]
        order.extend(config)
        self._key_to_action = {
            key: action for action in order for key in self._action_to_keys[action]
        }

    def resolve(self, event: KeyEvent) -> EditorAction | None:
        """Return the action bound to *event*.

        The composite name (``ctrl+left``) is tried before the bare key
        (``left``). Character events never resolve to an action.
        """
        if event.is_character:
            return None
        action = self._key_to_action.get(event.name)
        if action is None and event.base_name != event.name:
            action = self._key_to_action.get(event.base_name)
        return action

    def matches(self, event: KeyEvent, action: EditorAction) -> bool:
        """Check if *event* resolves to *action*."""
        return self.resolve(event) == action

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        """Get keys bound to an action."""
        return self._action_to_keys.get(action, [])

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        """Update configuration."""
        self._build_maps(config)


_global_editor_keybindings: EditorKeybindingsManager | None = None


def get_editor_keybindings() -> EditorKeybindingsManager:
    global _global_editor_keybindings
    if _global_editor_keybindings is None:
        _global_editor_keybindings = EditorKeybindingsManager()
    return _global_editor_keybindings


def set_editor_keybindings(manager: EditorKeybindingsManager) -> None:
    global _global_editor_keybindings
    _global_editor_keybindings = manager
