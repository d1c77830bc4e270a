"""Text measurement and layout helpers: cell widths, wrapping, truncation."""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth


# ---------------------------------------------------------------------------
# ANSI stripping
# ---------------------------------------------------------------------------

# CSI sequences and OSC sequences terminated by BEL or ST
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
)

# Whitespace plus the punctuation that separates words for cursor movement
_WORD_BOUNDARY_RE = re.compile(r"[\s,.:;!?()\[\]{}<>\"'`~@#$%^&*+=|\\/-]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from *text*."""
    return _STRIP_RE.sub("", text)


# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Cell widths
# ---------------------------------------------------------------------------


def char_width(ch: str) -> int:
    """Return the number of terminal cells a single code point occupies.

    Control characters and combining marks take no cells, East Asian wide
    and full-width characters take two, everything else takes one.
    """
    if not ch:
        return 0
    cp = ord(ch)
    if 0x20 <= cp < 0x7F:
        return 1
    if cp < 0x20 or 0x7F <= cp <= 0x9F:
        return 0
    w = _wcwidth.wcwidth(ch)
    if w < 0:
        return 0
    return min(w, 2)


def _grapheme_width(g: str) -> int:
    """Return the display width of one grapheme cluster."""
    if len(g) == 1:
        return char_width(g)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ sequences, skin tones and regional indicators
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first) in ("Mn", "Me", "Cf"):
        return 0
    return char_width(first)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*, ignoring ANSI codes."""
    if not text:
        return 0

    stripped = strip_ansi(text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(stripped):
        total += _grapheme_width(g)
    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# Wrapping and truncation
# ---------------------------------------------------------------------------


def _split_columns(word: str, max_cols: int) -> list[str]:
    """Break *word* into chunks of at most *max_cols* cells."""
    chunks: list[str] = []
    current = ""
    current_width = 0
    for g in grapheme.graphemes(word):
        w = _grapheme_width(g)
        if current and current_width + w > max_cols:
            chunks.append(current)
            current = ""
            current_width = 0
        current += g
        current_width += w
    if current:
        chunks.append(current)
    return chunks


def wrap_padded(text: str, width: int, margin: int = 2) -> list[str]:
    """Word-wrap *text* into lines with *margin* spaces on both sides.

    Explicit newlines are kept, runs of spaces collapse to one, and words
    wider than the available space are split across lines. Always returns
    at least one line.
    """
    max_line_width = max(1, width - 2 * margin)
    pad = " " * margin
    lines: list[str] = []

    for paragraph in text.split("\n"):
        if paragraph == "":
            lines.append(pad + pad)
            continue

        current = ""
        for word in paragraph.split(" "):
            if word == "":
                continue

            if visible_width(word) > max_line_width:
                if current:
                    lines.append(f"{pad}{current.rstrip()}{pad}")
                    current = ""
                for chunk in _split_columns(word, max_line_width):
                    lines.append(f"{pad}{chunk}{pad}")
                continue

            candidate = f"{current} {word}" if current else word
            if visible_width(candidate) <= max_line_width:
                current = candidate
            else:
                lines.append(f"{pad}{current.rstrip()}{pad}")
                current = word

        if current:
            lines.append(f"{pad}{current.rstrip()}{pad}")

    if not lines:
        lines.append(pad + pad)
    return lines


def truncate_to_width(text: str, max_width: int, ellipsis: str = "…") -> str:
    """Truncate *text* to *max_width* cells, appending *ellipsis* when cut."""
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return _take_columns(ellipsis, max_width)
    return _take_columns(text, target) + ellipsis


def _take_columns(text: str, max_cols: int) -> str:
    """Return the longest grapheme prefix of *text* within *max_cols* cells."""
    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)


def pad_to_width(text: str, width: int) -> str:
    """Right-pad *text* with spaces to *width* visible cells."""
    return text + " " * max(0, width - visible_width(text))


# ---------------------------------------------------------------------------
# Character classification
# ---------------------------------------------------------------------------


def is_word_boundary(char: str | None) -> bool:
    """Return ``True`` if *char* separates words; a missing char counts."""
    if not char:
        return True
    return bool(_WORD_BOUNDARY_RE.match(char))
