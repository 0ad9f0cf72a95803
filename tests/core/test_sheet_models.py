"""
Unit tests for sheet configuration models and the paper table.
"""

import pytest

from pdfomator.common.paper import (
    PAPER_SIZES,
    Orientation,
    canonical_paper_name,
    paper_dimensions,
)
from pdfomator.core.models import GridSpec, Padding, Sheet, SpacingConfig


class TestPaperTable:
    """Tests for paper_dimensions() and canonical_paper_name()."""

    def test_a4_and_a3_match_iso_sizes(self):
        assert PAPER_SIZES["A4"] == (210.0, 297.0)
        assert PAPER_SIZES["A3"] == (297.0, 420.0)

    def test_when_landscape_then_dimensions_swapped(self):
        assert paper_dimensions("A4", Orientation.LANDSCAPE) == (297.0, 210.0)

    def test_lookup_is_case_insensitive(self):
        assert canonical_paper_name(" letter ") == "Letter"
        assert paper_dimensions("a3") == (297.0, 420.0)

    def test_when_unknown_name_then_key_error(self):
        with pytest.raises(KeyError, match="Unknown paper size"):
            paper_dimensions("B7")

    def test_orientation_toggles(self):
        assert Orientation.PORTRAIT.toggled() is Orientation.LANDSCAPE
        assert Orientation.LANDSCAPE.toggled() is Orientation.PORTRAIT


class TestSheet:
    """Tests for Sheet."""

    def test_from_paper_defaults_to_a4_portrait(self):
        sheet = Sheet.from_paper()
        assert sheet.size == (210.0, 297.0)
        assert sheet.orientation is Orientation.PORTRAIT
        assert sheet.paper_size == "A4"

    def test_rotated_swaps_dimensions_only(self):
        sheet = Sheet.from_paper("A3")
        rotated = sheet.rotated()
        assert rotated.size == (420.0, 297.0)
        assert rotated.orientation is Orientation.LANDSCAPE
        assert rotated.paper_size == "A3"
        assert rotated.rotated() == sheet

    def test_with_orientation_when_same_then_unchanged(self):
        sheet = Sheet.from_paper("A4")
        assert sheet.with_orientation(Orientation.PORTRAIT) is sheet

    def test_label_includes_name_and_size(self):
        assert Sheet.from_paper("A4").label == "A4 portrait (210 × 297 mm)"
        assert Sheet(100, 50).label.startswith("Custom")

    @pytest.mark.parametrize(
        "width,height",
        [(0, 100), (100, -1), (float("nan"), 100), (100, float("inf"))],
    )
    def test_when_dimension_not_positive_finite_then_value_error(self, width, height):
        with pytest.raises(ValueError):
            Sheet(width, height)


class TestGridSpec:
    """Tests for GridSpec."""

    def test_default_is_two_rows_one_column(self):
        grid = GridSpec()
        assert (grid.rows, grid.cols) == (2, 1)
        assert grid.cell_count == 2

    @pytest.mark.parametrize("rows,cols", [(0, 1), (1, 0), (6, 1), (1, 6)])
    def test_when_out_of_bounds_then_value_error(self, rows, cols):
        with pytest.raises(ValueError):
            GridSpec(rows=rows, cols=cols)

    def test_position_and_index_are_row_major(self):
        grid = GridSpec(rows=2, cols=3)
        assert grid.position(0) == (0, 0)
        assert grid.position(4) == (1, 1)
        assert grid.index(1, 2) == 5
        for i in range(grid.cell_count):
            assert grid.index(*grid.position(i)) == i

    def test_when_position_out_of_range_then_index_error(self):
        with pytest.raises(IndexError):
            GridSpec(rows=2, cols=2).position(4)

    @pytest.mark.parametrize("text", ["2x3", "2X3", " 2 × 3 "])
    def test_parse_accepts_separators(self, text):
        assert GridSpec.parse(text) == GridSpec(rows=2, cols=3)

    @pytest.mark.parametrize("text", ["2", "axb", "2x", "9x1"])
    def test_parse_when_malformed_then_value_error(self, text):
        with pytest.raises(ValueError):
            GridSpec.parse(text)

    def test_str_round_trips_through_parse(self):
        assert str(GridSpec(rows=4, cols=5)) == "4x5"


class TestSpacingConfig:
    """Tests for Padding and SpacingConfig."""

    def test_defaults(self):
        spacing = SpacingConfig()
        assert spacing.sheet_padding == Padding.uniform(10)
        assert spacing.column_gap == 5
        assert spacing.row_gap == 5
        assert spacing.cell_padding == 2

    def test_padding_sums(self):
        padding = Padding(top=1, right=2, bottom=3, left=4)
        assert padding.horizontal == 6
        assert padding.vertical == 4

    def test_when_negative_values_then_value_error(self):
        with pytest.raises(ValueError):
            Padding(top=-1)
        with pytest.raises(ValueError):
            SpacingConfig(column_gap=-0.5)
        with pytest.raises(ValueError):
            SpacingConfig(cell_padding=-2)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_when_non_finite_values_then_value_error(self, value):
        with pytest.raises(ValueError, match="finite"):
            Padding(left=value)
        with pytest.raises(ValueError, match="finite"):
            SpacingConfig(row_gap=value)
        with pytest.raises(ValueError, match="finite"):
            SpacingConfig.from_dict({"column_gap": value})

    def test_dict_round_trip(self):
        spacing = SpacingConfig(
            sheet_padding=Padding(1, 2, 3, 4), column_gap=6, row_gap=7, cell_padding=0
        )
        assert SpacingConfig.from_dict(spacing.to_dict()) == spacing

    def test_from_dict_when_keys_missing_then_defaults(self):
        assert SpacingConfig.from_dict({"row_gap": 8}) == SpacingConfig(row_gap=8)

    def test_with_cell_padding_keeps_other_values(self):
        spacing = SpacingConfig(column_gap=3).with_cell_padding(0)
        assert spacing.cell_padding == 0
        assert spacing.column_gap == 3
