"""
Tests for PDF export via ReportLab.

Output is checked with pypdf: page count, media box in points, drawn
image XObjects and the clip operator for cover cells.
"""

import re
from datetime import datetime

import pytest
from PIL import Image
from pypdf import PdfReader

from pdfomator.common.paper import Orientation
from pdfomator.core.errors import ExportFailure
from pdfomator.core.models import FillMode, GridSpec, Rect, Transform
from pdfomator.layout.coordinates import mm_to_pt
from pdfomator.output import renderer
from pdfomator.output.renderer import default_export_filename, render_to_pdf


def _page_size(path):
    page = PdfReader(str(path)).pages[0]
    return float(page.mediabox.width), float(page.mediabox.height)


def _content_stream(path) -> bytes:
    return PdfReader(str(path)).pages[0].get_contents().get_data()


class TestRenderToPdf:
    def test_single_page_matches_sheet(self, context, make_content, tmp_path):
        context.attach_content(0, make_content())
        out = tmp_path / "a4.pdf"

        result = render_to_pdf(context, out)

        assert out.exists()
        assert len(PdfReader(str(out)).pages) == 1
        width, height = _page_size(out)
        assert width == pytest.approx(595.2756, abs=0.01)
        assert height == pytest.approx(841.8898, abs=0.01)
        assert result.page_size_pt == pytest.approx((width, height), abs=0.01)
        assert result.drawn == (0,)
        assert result.ok

    def test_landscape_a3(self, context, make_content, tmp_path):
        context.set_paper("A3", Orientation.LANDSCAPE)
        context.attach_content(1, make_content())
        out = tmp_path / "a3.pdf"

        render_to_pdf(context, out)

        assert _page_size(out) == pytest.approx((mm_to_pt(420), mm_to_pt(297)), abs=0.01)

    def test_one_image_per_populated_cell(self, context, make_content, tmp_path):
        context.set_grid(GridSpec(rows=2, cols=2))
        context.attach_content(0, make_content(color="red"))
        context.attach_content(3, make_content(color="blue"), FillMode.FILL)
        out = tmp_path / "grid.pdf"

        result = render_to_pdf(context, out)

        assert result.drawn == (0, 3)
        xobjects = PdfReader(str(out)).pages[0]["/Resources"]["/XObject"]
        assert len(xobjects) == 2

    def test_cover_cell_is_clipped(self, context, make_content, tmp_path):
        context.attach_content(0, make_content(400, 100), FillMode.COVER)
        out = tmp_path / "cover.pdf"
        render_to_pdf(context, out)
        assert re.search(rb"W\*? n", _content_stream(out))

    def test_contain_cell_is_not_clipped(self, context, make_content, tmp_path):
        context.attach_content(0, make_content(400, 100), FillMode.CONTAIN)
        out = tmp_path / "contain.pdf"
        render_to_pdf(context, out)
        assert not re.search(rb"W\*? n", _content_stream(out))

    def test_creates_missing_parent_directories(self, context, make_content, tmp_path):
        context.attach_content(0, make_content())
        out = tmp_path / "nested" / "dir" / "out.pdf"
        render_to_pdf(context, out)
        assert out.exists()

    def test_panned_out_cell_is_skipped_silently(self, context, make_content, tmp_path):
        context.attach_content(0, make_content(), FillMode.COVER)
        context.set_transform(0, Transform(1.0, 5000.0, 0.0))
        context.attach_content(1, make_content())

        result = render_to_pdf(context, tmp_path / "out.pdf")

        assert result.drawn == (1,)
        assert result.failures == ()


class TestExportFailures:
    def test_when_every_cell_empty_then_export_failure(self, context, tmp_path):
        out = tmp_path / "empty.pdf"
        with pytest.raises(ExportFailure, match="Nothing to export"):
            render_to_pdf(context, out)
        assert not out.exists()

    def test_when_parent_is_a_file_then_export_failure(self, context, make_content, tmp_path):
        context.attach_content(0, make_content())
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(ExportFailure):
            render_to_pdf(context, blocker / "out.pdf")

    def test_failing_cell_does_not_abort_export(self, context, make_content, tmp_path, monkeypatch):
        context.attach_content(0, make_content(300, 300, title="bad.png"))
        context.attach_content(1, make_content(200, 100, title="good.png"))
        real_reader = renderer._pil_to_reader

        def flaky_reader(img):
            if img.size == (300, 300):
                raise OSError("encoder exploded")
            return real_reader(img)

        monkeypatch.setattr(renderer, "_pil_to_reader", flaky_reader)
        out = tmp_path / "partial.pdf"

        result = render_to_pdf(context, out)

        assert out.exists()
        assert result.drawn == (1,)
        assert not result.ok
        assert result.failures[0].index == 0
        assert result.failures[0].title == "bad.png"
        assert "encoder exploded" in result.failures[0].reason


class TestPrepareImage:
    def test_downsamples_to_export_resolution(self):
        image = Image.new("RGB", (3000, 3000))
        prepared = renderer._prepare_image(image, Rect(0, 0, 25.4, 25.4), 300)
        assert prepared.size == (300, 300)

    def test_never_upsamples(self):
        image = Image.new("RGB", (50, 50))
        assert renderer._prepare_image(image, Rect(0, 0, 100, 100), 300).size == (50, 50)

    def test_zero_dpi_keeps_full_resolution(self):
        image = Image.new("RGB", (3000, 3000))
        assert renderer._prepare_image(image, Rect(0, 0, 25.4, 25.4), 0).size == (3000, 3000)

    @pytest.mark.parametrize("mode,expected", [("P", "RGB"), ("LA", "RGBA"), ("CMYK", "RGB"), ("L", "L")])
    def test_mode_normalized(self, mode, expected):
        image = Image.new(mode, (10, 10))
        assert renderer._prepare_image(image, Rect(0, 0, 10, 10), 0).mode == expected

    def test_export_uses_downsampled_pixels(self, context, make_content, tmp_path, monkeypatch):
        context.attach_content(0, make_content(3000, 3000))
        sizes = []
        real_reader = renderer._pil_to_reader

        def spy(img):
            sizes.append(img.size)
            return real_reader(img)

        monkeypatch.setattr(renderer, "_pil_to_reader", spy)
        render_to_pdf(context, tmp_path / "small.pdf", export_dpi=72)

        # A4 is 595 pt wide, so nothing drawn at 72 dpi can need more pixels
        assert len(sizes) == 1
        assert max(sizes[0]) < 600


class TestHelpers:
    def test_default_export_filename(self):
        name = default_export_filename(datetime(2024, 5, 1, 9, 30, 0))
        assert name == "pdfomator-layout-2024-05-01T09-30-00.pdf"

    def test_default_export_filename_uses_now(self):
        assert default_export_filename().startswith("pdfomator-layout-")

    def test_transform_y_flips_origin(self):
        page_h = mm_to_pt(297)
        assert renderer._transform_y(page_h, 0, 297) == pytest.approx(0)
        assert renderer._transform_y(page_h, 10, 20) == pytest.approx(page_h - mm_to_pt(30))
