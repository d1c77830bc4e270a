"""pi-inline: inline terminal line editor with incremental rendering."""

# Animation
from pi.inline.animation import AnimationManager

# Components (re-exported from components package)
from pi.inline.components import (
    ActivityIndicator,
    AssistantMessage,
    Component,
    Empty,
    Footer,
    Header,
    Menu,
    MenuItem,
    Prompt,
    Separator,
    StatusText,
    Text,
    ToolCall,
    UserMessage,
)

# Configuration
from pi.inline.config import InlineConfig, get_config, set_config

# Editor state machine
from pi.inline.editor import EditContext, EditorState, Effect, EffectKind, dispatch

# Errors
from pi.inline.errors import (
    AnimationLeak,
    Cancelled,
    GeometryOverflow,
    InlineError,
    InputTooShort,
)

# Coordinate model
from pi.inline.geometry import Coordinate, Extent, compute_extent, offset_to_coordinate

# Keybindings
from pi.inline.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)

# Keyboard input handling
from pi.inline.keys import KeyCategory, KeyEvent, KeyId, decode

# Escape/paste sequencing
from pi.inline.sequencer import KeySequencer, SequencerState

# Input sessions
from pi.inline.session import InputOptions, InputSession, run_input_session

# Stdin buffering
from pi.inline.stdin_buffer import StdinBuffer

# Styling
from pi.inline.styles import StyleFn, StyleTag, ansi_style, plain_style

# Terminal interface and implementations
from pi.inline.terminal import ProcessTerminal, Terminal

# Component tree
from pi.inline.tree import ComponentTree, Position, open_view

# Utilities
from pi.inline.utils import truncate_to_width, visible_width

# Terminal writer
from pi.inline.writer import TerminalWriter

__all__ = [
    # Animation
    "AnimationManager",
    # Components
    "ActivityIndicator",
    "AssistantMessage",
    "Component",
    "Empty",
    "Footer",
    "Header",
    "Menu",
    "MenuItem",
    "Prompt",
    "Separator",
    "StatusText",
    "Text",
    "ToolCall",
    "UserMessage",
    # Configuration
    "InlineConfig",
    "get_config",
    "set_config",
    # Editor
    "EditContext",
    "EditorState",
    "Effect",
    "EffectKind",
    "dispatch",
    # Errors
    "AnimationLeak",
    "Cancelled",
    "GeometryOverflow",
    "InlineError",
    "InputTooShort",
    # Geometry
    "Coordinate",
    "Extent",
    "compute_extent",
    "offset_to_coordinate",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "EditorAction",
    "EditorKeybindingsManager",
    "get_editor_keybindings",
    "set_editor_keybindings",
    # Keys
    "KeyCategory",
    "KeyEvent",
    "KeyId",
    "decode",
    # Sequencer
    "KeySequencer",
    "SequencerState",
    # Session
    "InputOptions",
    "InputSession",
    "run_input_session",
    # Stdin buffer
    "StdinBuffer",
    # Styles
    "StyleFn",
    "StyleTag",
    "ansi_style",
    "plain_style",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Tree
    "ComponentTree",
    "Position",
    "open_view",
    # Utils
    "truncate_to_width",
    "visible_width",
    # Writer
    "TerminalWriter",
]
