"""
Unit tests for grid partitioning and hit testing.
"""

from types import SimpleNamespace

import pytest

from pdfomator.core.errors import InvalidLayout
from pdfomator.core.models import GridSpec, Padding, Rect, Sheet, SpacingConfig
from pdfomator.layout.grid import (
    cell_size,
    content_area,
    hit_test,
    partition_sheet,
    validate_layout,
)

A4 = Sheet.from_paper("A4")
EPS = 1e-9


class TestCellSize:
    def test_scenario_a4_two_by_two(self):
        """210x297 sheet, 10 mm padding, 5 mm gaps, 2x2 grid."""
        width, height = cell_size(A4, GridSpec(rows=2, cols=2), SpacingConfig())
        assert width == pytest.approx(92.5)
        assert height == pytest.approx(136.0)

    @pytest.mark.parametrize("rows", range(1, 6))
    @pytest.mark.parametrize("cols", range(1, 6))
    def test_cells_gaps_and_padding_sum_to_sheet(self, rows, cols):
        spacing = SpacingConfig(
            sheet_padding=Padding(top=7, right=11, bottom=13, left=3),
            column_gap=4,
            row_gap=6,
        )
        for sheet in (A4, Sheet.from_paper("A3").rotated(), Sheet(160, 120)):
            rects = partition_sheet(sheet, GridSpec(rows=rows, cols=cols), spacing)
            first_row = rects[:cols]
            first_col = rects[::cols]
            total_w = sum(r.width for r in first_row) + 4 * (cols - 1) + 3 + 11
            total_h = sum(r.height for r in first_col) + 6 * (rows - 1) + 7 + 13
            assert total_w == pytest.approx(sheet.width, abs=EPS)
            assert total_h == pytest.approx(sheet.height, abs=EPS)
            # Last cell ends exactly at the padded edge
            assert rects[-1].right == pytest.approx(sheet.width - 11, abs=EPS)
            assert rects[-1].bottom == pytest.approx(sheet.height - 13, abs=EPS)

    def test_when_gaps_exceed_sheet_then_invalid_layout(self):
        spacing = SpacingConfig(column_gap=60)
        with pytest.raises(InvalidLayout, match="does not fit"):
            cell_size(A4, GridSpec(rows=1, cols=5), spacing)

    def test_when_padding_consumes_sheet_then_invalid_layout(self):
        spacing = SpacingConfig(sheet_padding=Padding.uniform(105))
        with pytest.raises(InvalidLayout):
            validate_layout(A4, GridSpec(rows=1, cols=1), spacing)

    def test_when_cell_size_is_nan_then_invalid_layout(self):
        spacing = SimpleNamespace(
            sheet_padding=Padding.uniform(10), column_gap=float("nan"), row_gap=5.0
        )
        with pytest.raises(InvalidLayout, match="does not fit"):
            cell_size(A4, GridSpec(rows=2, cols=2), spacing)


class TestPartitionSheet:
    def test_rects_are_row_major(self):
        rects = partition_sheet(A4, GridSpec(rows=2, cols=2), SpacingConfig())
        assert rects[0] == Rect(10, 10, 92.5, 136)
        assert rects[1].x == pytest.approx(10 + 92.5 + 5)
        assert rects[1].y == 10
        assert rects[2].x == 10
        assert rects[2].y == pytest.approx(10 + 136 + 5)

    def test_count_matches_grid(self):
        assert len(partition_sheet(A4, GridSpec(rows=5, cols=4), SpacingConfig())) == 20

    def test_when_cell_padding_leaves_no_content_then_invalid_layout(self):
        spacing = SpacingConfig(cell_padding=30)
        with pytest.raises(InvalidLayout, match="Cell padding"):
            partition_sheet(A4, GridSpec(rows=5, cols=5), spacing)

    def test_content_area_is_inset_by_cell_padding(self):
        cell = Rect(10, 10, 92.5, 136)
        assert content_area(cell, SpacingConfig(cell_padding=2)) == Rect(12, 12, 88.5, 132)


class TestHitTest:
    def test_point_inside_cell_returns_index(self):
        rects = partition_sheet(A4, GridSpec(rows=2, cols=2), SpacingConfig())
        assert hit_test(rects, 20, 20) == 0
        assert hit_test(rects, 150, 200) == 3

    def test_point_in_gap_or_padding_returns_none(self):
        rects = partition_sheet(A4, GridSpec(rows=2, cols=2), SpacingConfig())
        assert hit_test(rects, 5, 5) is None
        assert hit_test(rects, 104, 20) is None  # column gap
        assert hit_test(rects, -1, 50) is None
