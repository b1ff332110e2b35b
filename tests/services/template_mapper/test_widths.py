from __future__ import annotations

import math

import pytest

from reportflow.services.template_mapper.mapping import TableColumn
from reportflow.services.template_mapper.widths import (
    allocate_pixel_widths,
    normalize_width_pct,
    normalize_width_pct_keep_index,
    normalize_width_values,
    normalize_width_values_keep_index,
    round_half_up,
)


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([58, 12, 15, 15], [58, 12, 15, 15]),
        ([50, 30, 30], [45, 27, 28]),
        ([1000, 1], [99, 1]),
        ([0, 0, 0], [33, 33, 34]),
        ([math.nan, -5, 10], [1, 1, 98]),
        ([], []),
    ],
)
def test_normalize_width_values(values, expected):
    shares = normalize_width_values(values)
    assert shares == expected
    if shares:
        assert sum(shares) == 100
        assert min(shares) >= 1


def test_normalize_ignores_non_numeric_entries():
    assert normalize_width_values(["abc", None, 50]) == [1, 1, 98]


def test_keep_index_preserves_edited_column():
    assert normalize_width_values_keep_index([40, 12, 15, 15], 0) == [40, 17, 21, 22]


def test_keep_index_caps_value_so_others_keep_minimum():
    assert normalize_width_values_keep_index([150, 1, 1], 0) == [98, 1, 1]


def test_keep_index_single_column_and_out_of_range():
    assert normalize_width_values_keep_index([35], 0) == [100]
    assert normalize_width_values_keep_index([50, 30, 30], 7) == normalize_width_values([50, 30, 30])
    assert normalize_width_values_keep_index([50, 30, 30], -1) == normalize_width_values([50, 30, 30])


def test_allocate_pixel_widths_puts_residue_on_last_column():
    widths = allocate_pixel_widths([58, 12, 15, 15], 480)
    assert widths == [278, 58, 72, 72]
    assert sum(widths) == 480


def test_allocate_pixel_widths_spills_backwards_at_minimum():
    assert allocate_pixel_widths([1, 1, 98], 3) == [1, 1, 1]
    assert allocate_pixel_widths([], 480) == []


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(57.6) == 58
    assert round_half_up(278.4) == 278


def test_column_helpers_return_copies():
    columns = [TableColumn(id="a", width_pct=50), TableColumn(id="b", width_pct=30), TableColumn(id="c", width_pct=30)]

    normalized = normalize_width_pct(columns)
    assert [c.width_pct for c in normalized] == [45, 27, 28]
    assert [c.width_pct for c in columns] == [50, 30, 30]

    kept = normalize_width_pct_keep_index(columns, 1)
    assert kept[1].width_pct == 30
    assert sum(c.width_pct for c in kept) == 100
