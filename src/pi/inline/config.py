"""Runtime configuration for pi-inline.

Values default to the timings the editor was tuned with and can be
overridden through ``PI_INLINE_*`` environment variables.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

MIN_TERMINAL_WIDTH = 4
MIN_TERMINAL_HEIGHT = 2


@dataclass
class InlineConfig:
    """Timings and limits shared by the editor, tree and terminal."""

    # Window for an ESC byte to turn into a paste marker
    escape_timeout: float = 0.02
    # Window for a second ESC to clear the input
    double_escape_delay: float = 1.0
    # StdinBuffer flush timeout for incomplete sequences
    stdin_timeout: float = 0.01
    animation_interval: float = 0.15
    min_width: int = MIN_TERMINAL_WIDTH
    min_height: int = MIN_TERMINAL_HEIGHT
    write_log: str = field(default="")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InlineConfig:
        """Build a config from defaults plus environment overrides."""
        env = os.environ if environ is None else environ
        config = cls(write_log=env.get("PI_INLINE_WRITE_LOG", ""))

        escape_ms = _read_ms(env, "PI_INLINE_ESCAPE_TIMEOUT_MS")
        if escape_ms is not None:
            config.escape_timeout = escape_ms
        double_ms = _read_ms(env, "PI_INLINE_DOUBLE_ESCAPE_MS")
        if double_ms is not None:
            config.double_escape_delay = double_ms
        animation_ms = _read_ms(env, "PI_INLINE_ANIMATION_MS")
        if animation_ms is not None:
            config.animation_interval = animation_ms
        return config


def _read_ms(env: Mapping[str, str], name: str) -> float | None:
    """Read a millisecond value and return it in seconds."""
    raw = env.get(name)
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return None
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return None
    return value / 1000.0


_config: InlineConfig | None = None


def get_config() -> InlineConfig:
    global _config
    if _config is None:
        _config = InlineConfig.from_env()
    return _config


def set_config(config: InlineConfig) -> None:
    global _config
    _config = config
