"""
Layout Utilities.

Pure functions behind the masonry feed: the deterministic per-pin
display height and the responsive column distribution.  Nothing here
touches Tk, so every rule is unit-testable.
"""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

T = TypeVar("T")

MIN_HEIGHT: int = 280
MAX_HEIGHT: int = 450

_INT32_MAX: int = 2**31 - 1

# (exclusive upper width bound, column count), checked in order.
_COLUMN_BREAKPOINTS: tuple[tuple[int, int], ...] = (
    (640, 1),
    (768, 2),
    (1024, 3),
    (1280, 4),
)
_MAX_COLUMNS: int = 5
MIN_COLUMN_WIDTH: int = 80


def _to_int32(value: int) -> int:
    """Wrap *value* to a signed 32-bit integer."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def string_hash32(text: str) -> int:
    """Polynomial string hash, ``h = h * 31 + code`` wrapped to int32.

    Iterates UTF-16 code units so the value matches the same hash
    computed by a browser over the same id.
    """
    raw = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(raw), 2):
        code_unit = raw[i] | (raw[i + 1] << 8)
        h = _to_int32(h * 31 + code_unit)
    return h


def height_for(item_id: str) -> int:
    """Return the display height for *item_id*, in ``[280, 450]``.

    Pure: the same id always yields the same height, across re-renders
    and across processes.
    """
    normalized = abs(string_hash32(item_id)) / _INT32_MAX
    height = MIN_HEIGHT + math.floor(normalized * (MAX_HEIGHT - MIN_HEIGHT))
    # abs(-2**31) normalises to a hair above 1.0
    return min(height, MAX_HEIGHT)


def column_count_for_width(width: int) -> int:
    """Masonry column count for a viewport *width* in pixels."""
    for bound, columns in _COLUMN_BREAKPOINTS:
        if width < bound:
            return columns
    return _MAX_COLUMNS


def grid_geometry(viewport_width: int, content_width: int, gap: int) -> tuple[int, int]:
    """Column count and per-column width for the masonry.

    The count follows the window (*viewport_width*), so chrome beside the
    grid such as the sidebar does not cost a column.  The width splits
    what the grid itself has (*content_width*) after the gaps.
    """
    columns = column_count_for_width(viewport_width)
    usable = max(content_width - gap * (columns + 1), columns * MIN_COLUMN_WIDTH)
    return columns, usable // columns


def distribute_round_robin(items: Sequence[T], columns: int) -> list[list[T]]:
    """Deal *items* into *columns* lists: item ``i`` goes to column ``i % columns``."""
    if columns < 1:
        raise ValueError(f"columns must be >= 1, got {columns}")
    buckets: list[list[T]] = [[] for _ in range(columns)]
    for index, item in enumerate(items):
        buckets[index % columns].append(item)
    return buckets
