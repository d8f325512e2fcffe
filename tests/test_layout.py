# tests/test_layout.py
"""Masonry height and column rules."""

import pytest

from pinboard.utils.layout import (
    MAX_HEIGHT,
    MIN_HEIGHT,
    column_count_for_width,
    distribute_round_robin,
    grid_geometry,
    height_for,
    string_hash32,
)


def test_hash_matches_browser_values():
    # "a" = 97; "ab" = 97 * 31 + 98
    assert string_hash32("") == 0
    assert string_hash32("a") == 97
    assert string_hash32("ab") == 3105


def test_hash_wraps_to_signed_32_bits():
    value = string_hash32("a-fairly-long-identifier-that-overflows-int32")
    assert -(2**31) <= value <= 2**31 - 1


def test_hash_uses_utf16_code_units():
    # U+1F600 is a surrogate pair: two code units, not one code point.
    assert string_hash32("\U0001F600") == 0xD83D * 31 + 0xDE00


@pytest.mark.parametrize("item_id", ["1", "42", "abc", "d3b07384-d9a0-4c9f", "", "été"])
def test_height_within_bounds(item_id):
    assert MIN_HEIGHT <= height_for(item_id) <= MAX_HEIGHT


def test_height_is_deterministic():
    assert height_for("pin-17") == height_for("pin-17")


def test_height_empty_id_is_minimum():
    assert height_for("") == MIN_HEIGHT


def test_heights_vary_across_ids():
    heights = {height_for(str(i)) for i in range(200)}
    assert len(heights) > 10


@pytest.mark.parametrize(
    "width, columns",
    [(0, 1), (639, 1), (640, 2), (767, 2), (768, 3), (1023, 3), (1024, 4), (1279, 4), (1280, 5), (4000, 5)],
)
def test_column_breakpoints(width, columns):
    assert column_count_for_width(width) == columns


def test_round_robin_distribution():
    assert distribute_round_robin(list(range(7)), 3) == [[0, 3, 6], [1, 4], [2, 5]]


def test_round_robin_more_columns_than_items():
    assert distribute_round_robin(["a"], 4) == [["a"], [], [], []]


def test_round_robin_rejects_zero_columns():
    with pytest.raises(ValueError):
        distribute_round_robin([1, 2], 0)


def test_grid_columns_follow_window_not_content_width():
    # 1300px window with a 220px sidebar beside the grid
    assert grid_geometry(1300, 1080, 8) == (5, 206)


def test_grid_single_column_on_narrow_window():
    assert grid_geometry(500, 280, 8) == (1, 264)


def test_grid_column_width_has_a_floor():
    assert grid_geometry(1300, 300, 8) == (5, 80)
