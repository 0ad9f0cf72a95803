"""
Unit tests for LayoutContext configuration and cell actions.
"""

import pytest

from pdfomator.common.paper import Orientation
from pdfomator.core.errors import InvalidLayout
from pdfomator.core.models import (
    Cover,
    FillMode,
    GridSpec,
    Padding,
    Sheet,
    SpacingConfig,
    Transform,
)
from pdfomator.layout.context import LayoutContext


class TestDefaults:
    def test_new_context_is_a4_portrait_two_by_one(self, context):
        assert context.sheet == Sheet.from_paper("A4")
        assert context.grid == GridSpec(rows=2, cols=1)
        assert len(context.cells) == 2
        assert not context.has_content

    def test_when_initial_layout_invalid_then_invalid_layout(self):
        with pytest.raises(InvalidLayout):
            LayoutContext(spacing=SpacingConfig(sheet_padding=Padding.uniform(150)))

    def test_cell_out_of_range_raises_index_error(self, context):
        with pytest.raises(IndexError):
            context.cell(2)

    def test_content_area_uses_cell_padding(self, context):
        rect = context.cell_rects()[0]
        area = context.content_area(0)
        assert area.x == rect.x + 2
        assert area.width == pytest.approx(rect.width - 4)


class TestSetGrid:
    def test_when_grown_then_new_cells_empty(self, context, make_content):
        content = make_content()
        context.attach_content(1, content)
        discarded = context.set_grid(GridSpec(rows=2, cols=2))
        assert discarded == []
        assert len(context.cells) == 4
        assert context.cell(1).content is content
        assert [c.index for c in context.cells] == [0, 1, 2, 3]

    def test_when_shrunk_then_trailing_content_discarded(self, context, make_content):
        context.set_grid(GridSpec(rows=2, cols=2))
        kept, lost = make_content(title="kept"), make_content(title="lost")
        context.attach_content(0, kept)
        context.attach_content(3, lost)

        assert [c.index for c in context.cells_discarded_by(GridSpec(rows=1, cols=2))] == [3]
        discarded = context.set_grid(GridSpec(rows=1, cols=2))

        assert [c.content for c in discarded] == [lost]
        assert len(context.cells) == 2
        assert context.cell(0).content is kept

    def test_when_grid_invalid_then_nothing_changes(self, make_content):
        ctx = LayoutContext(spacing=SpacingConfig(column_gap=50))
        ctx.attach_content(0, make_content())
        with pytest.raises(InvalidLayout):
            ctx.set_grid(GridSpec(rows=1, cols=5))
        assert ctx.grid == GridSpec(rows=2, cols=1)
        assert len(ctx.cells) == 2
        assert not ctx.cell(0).is_empty


class TestSheetChanges:
    def test_toggle_orientation_swaps_dimensions(self, context):
        context.toggle_orientation()
        assert context.sheet.size == (297.0, 210.0)
        assert context.sheet.orientation is Orientation.LANDSCAPE

    def test_set_paper_keeps_orientation(self, context):
        context.set_orientation(Orientation.LANDSCAPE)
        context.set_paper("A3")
        assert context.sheet.size == (420.0, 297.0)

    def test_set_paper_keeps_cell_content(self, context, make_content):
        content = make_content()
        context.attach_content(0, content)
        context.set_paper("A5")
        assert context.cell(0).content is content

    def test_when_spacing_invalid_then_previous_spacing_kept(self, context):
        before = context.spacing
        with pytest.raises(InvalidLayout):
            context.set_spacing(SpacingConfig(row_gap=300))
        assert context.spacing is before

    def test_when_gap_is_nan_then_spacing_rejected(self, context):
        before = context.spacing
        with pytest.raises(ValueError):
            context.set_spacing(SpacingConfig(column_gap=float("nan"), row_gap=float("nan")))
        assert context.spacing is before
        assert all(rect.width > 0 for rect in context.cell_rects())

    def test_when_sheet_too_small_then_previous_sheet_kept(self, context):
        context.set_grid(GridSpec(rows=5, cols=5))
        with pytest.raises(InvalidLayout):
            context.set_sheet(Sheet(40, 40))
        assert context.sheet == Sheet.from_paper("A4")


class TestCellActions:
    def test_attach_sets_mode(self, context, make_content):
        cell = context.attach_content(0, make_content(), FillMode.COVER)
        assert cell.mode is FillMode.COVER
        assert cell.transform.is_identity
        assert context.populated_cells() == [cell]

    def test_remove_returns_content_and_resets_mode(self, context, make_content):
        content = make_content()
        context.attach_content(0, content, FillMode.FILL)
        assert context.remove_content(0) is content
        assert context.cell(0).is_empty
        assert context.cell(0).mode is FillMode.CONTAIN
        assert context.remove_content(0) is None

    def test_cycle_fill_mode(self, context, make_content):
        context.attach_content(0, make_content())
        assert context.cycle_fill_mode(0) is FillMode.COVER
        assert context.cycle_fill_mode(0) is FillMode.FILL
        assert context.cycle_fill_mode(0) is FillMode.CONTAIN

    def test_set_fill_mode_resets_transform_even_for_cover(self, context, make_content):
        context.attach_content(0, make_content(), FillMode.COVER)
        context.set_transform(0, Transform(2.0, 5.0, 5.0))
        context.set_fill_mode(0, FillMode.COVER)
        assert context.cell(0).transform.is_identity

    def test_set_transform_requires_cover(self, context, make_content):
        context.attach_content(0, make_content(), FillMode.CONTAIN)
        with pytest.raises(ValueError, match="only cover"):
            context.set_transform(0, Transform(2.0))

    @pytest.mark.parametrize("transform", [Transform(0.5, -3, 4), Transform(5.0), Transform(1.0, 0, 9)])
    def test_reset_transform_always_yields_identity(self, context, make_content, transform):
        context.attach_content(0, make_content(), FillMode.COVER)
        context.set_transform(0, transform)
        assert context.reset_transform(0) is True
        assert context.cell(0).policy == Cover()
        assert context.reset_transform(0) is False

    def test_reset_transform_on_non_cover_is_noop(self, context, make_content):
        context.attach_content(0, make_content(), FillMode.FILL)
        assert context.reset_transform(0) is False
