"""Coordinate model: maps buffer offsets to terminal cells.

Rows are 0-based viewport rows. ``col`` counts the cells already used on a
row, so a row that is exactly full leaves the cursor at ``col == width`` and
the next character wraps.
"""

from __future__ import annotations

from dataclasses import dataclass

from pi.inline.config import MIN_TERMINAL_HEIGHT, MIN_TERMINAL_WIDTH
from pi.inline.errors import GeometryOverflow
from pi.inline.utils import char_width


@dataclass(frozen=True)
class Coordinate:
    row: int
    col: int

    def shifted(self, rows: int) -> Coordinate:
        return Coordinate(self.row + rows, self.col)


@dataclass(frozen=True)
class Extent:
    """Screen footprint of a buffer rendered from ``start``."""

    start: Coordinate
    cursor: Coordinate
    end: Coordinate
    # Blank-line scrolls the caller must emit before trusting the rows
    scroll: int = 0

    @property
    def line_count(self) -> int:
        return self.end.row - self.start.row + 1


def advance(coord: Coordinate, ch: str, width: int) -> Coordinate:
    """Return the coordinate after placing *ch* at *coord*."""
    if ch == "\n":
        return Coordinate(coord.row + 1, 0)

    w = char_width(ch)
    if coord.col + w > width:
        # Wrap before placing, then place flush left
        return Coordinate(coord.row + 1, w)
    return Coordinate(coord.row, coord.col + w)


def offset_to_coordinate(start: Coordinate, buffer: str, offset: int, width: int) -> Coordinate:
    """Fold the characters of ``buffer[:offset]`` starting from *start*."""
    if width < 1:
        raise GeometryOverflow(width, 0)

    coord = start
    for ch in buffer[: max(0, offset)]:
        coord = advance(coord, ch, width)
    return coord


def compute_extent(
    start: Coordinate,
    buffer: str,
    offset: int,
    width: int,
    height: int,
    *,
    min_width: int = MIN_TERMINAL_WIDTH,
    min_height: int = MIN_TERMINAL_HEIGHT,
) -> Extent:
    """Compute start, cursor and end coordinates plus the scroll delta.

    When the end row falls below the last viewport row, every returned row
    is shifted up by ``scroll`` so it is relative to the scrolled viewport.
    """
    if width < min_width or height < min_height:
        raise GeometryOverflow(width, height)

    cursor = start
    end = start
    for index, ch in enumerate(buffer):
        if index == offset:
            cursor = end
        end = advance(end, ch, width)
    if offset >= len(buffer):
        cursor = end

    scroll = max(0, end.row - (height - 1))
    if scroll:
        start, cursor, end = start.shifted(-scroll), cursor.shifted(-scroll), end.shifted(-scroll)
    return Extent(start=start, cursor=cursor, end=end, scroll=scroll)


def count_lines(buffer: str, width: int, start_col: int = 0) -> int:
    """Number of visual rows *buffer* occupies when it starts at *start_col*."""
    end = offset_to_coordinate(Coordinate(0, start_col), buffer, len(buffer), width)
    return end.row + 1


def layout_rows(buffer: str, width: int, start_col: int = 0) -> list[str]:
    """Split *buffer* into the text of each visual row it occupies.

    Uses the same wrap rule as :func:`advance`, so ``len(result)`` always
    equals :func:`count_lines`. Newlines are not included in the rows.
    """
    rows = [""]
    coord = Coordinate(0, start_col)
    for ch in buffer:
        nxt = advance(coord, ch, width)
        if nxt.row != coord.row:
            rows.append("")
        if ch != "\n":
            rows[-1] += ch
        coord = nxt
    return rows
