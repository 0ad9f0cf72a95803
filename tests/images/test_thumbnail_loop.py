"""
Tests for cancellable thumbnail generation and ThumbnailRunner.
"""

from typing import List

from PIL import Image

from pdfomator.core.errors import DecodeFailure
from pdfomator.images.sources import ContentSource
from pdfomator.images.thumbnails import (
    CancellationToken,
    ThumbnailRunner,
    generate_thumbnails,
)


class FakeSource(ContentSource):
    """In-memory source that records which pages were rendered."""

    def __init__(self, pages: int = 4, failing=(), name: str = "fake.pdf"):
        self._pages = pages
        self._failing = set(failing)
        self._name = name
        self.rendered: List[int] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def page_count(self) -> int:
        return self._pages

    def render_page(self, index: int) -> Image.Image:
        return self.render_thumbnail(index)

    def render_thumbnail(self, index: int) -> Image.Image:
        self._check_index(index)
        self.rendered.append(index)
        if index in self._failing:
            raise DecodeFailure(f"page {index} is broken")
        return Image.new("RGB", (8, 11), "white")


# ─────────────────────────────────────────────────────────────────────────────
# generate_thumbnails
# ─────────────────────────────────────────────────────────────────────────────


class TestGenerateThumbnails:
    def test_renders_every_page_in_order(self):
        source = FakeSource(pages=3)
        yields = []
        batch = generate_thumbnails(source, CancellationToken(), yield_control=lambda: yields.append(1))

        assert not batch.cancelled
        assert [t.page_index for t in batch.thumbnails] == [0, 1, 2]
        assert batch.thumbnails[1].title == "fake.pdf p2"
        assert len(yields) == 3

    def test_when_cancelled_up_front_then_nothing_rendered(self):
        source = FakeSource()
        token = CancellationToken()
        token.cancel()

        batch = generate_thumbnails(source, token)

        assert batch.cancelled
        assert batch.thumbnails == ()
        assert source.rendered == []

    def test_cancel_from_callback_stops_at_next_page(self):
        source = FakeSource(pages=4)
        token = CancellationToken()

        def on_thumbnail(thumb):
            if thumb.page_index == 1:
                token.cancel()

        batch = generate_thumbnails(source, token, on_thumbnail=on_thumbnail)

        assert batch.cancelled
        assert [t.page_index for t in batch.thumbnails] == [0, 1]
        assert source.rendered == [0, 1]

    def test_cancel_before_last_page_is_honoured(self):
        source = FakeSource(pages=3)
        token = CancellationToken()

        def yield_control():
            if len(source.rendered) == 2:
                token.cancel()

        batch = generate_thumbnails(source, token, yield_control=yield_control)

        assert batch.cancelled
        assert source.rendered == [0, 1]

    def test_failed_pages_skipped_and_recorded(self):
        source = FakeSource(pages=3, failing={1})
        batch = generate_thumbnails(source, CancellationToken())

        assert not batch.cancelled
        assert [t.page_index for t in batch.thumbnails] == [0, 2]
        assert batch.failed_pages == (1,)

    def test_page_subset(self):
        source = FakeSource(pages=5)
        batch = generate_thumbnails(source, CancellationToken(), pages=[4, 2])
        assert [t.page_index for t in batch.thumbnails] == [4, 2]

    def test_real_pdf(self, sample_pdf):
        from pdfomator.images.sources import PdfSource

        with PdfSource(sample_pdf) as source:
            batch = generate_thumbnails(source, CancellationToken())
        assert len(batch.thumbnails) == 3
        assert batch.thumbnails[0].image.width < 400


# ─────────────────────────────────────────────────────────────────────────────
# ThumbnailRunner
# ─────────────────────────────────────────────────────────────────────────────


class TestThumbnailRunner:
    def test_idle_runner(self):
        runner = ThumbnailRunner()
        assert not runner.running
        assert runner.cancel() is False

    def test_running_during_job_only(self):
        seen = []
        runner = ThumbnailRunner(yield_control=lambda: seen.append(runner.running))
        batch = runner.start(FakeSource(pages=2))

        assert seen == [True, True]
        assert not batch.cancelled
        assert not runner.running

    def test_cancel_during_job(self):
        runner = ThumbnailRunner()
        source = FakeSource(pages=4)

        def on_thumbnail(thumb):
            assert runner.cancel() is True

        batch = runner.start(source, on_thumbnail=on_thumbnail)

        assert batch.cancelled
        assert source.rendered == [0]

    def test_reentrant_start_supersedes_running_job(self):
        first, second = FakeSource(pages=4, name="first.pdf"), FakeSource(pages=2, name="second.pdf")
        nested = []

        def yield_control():
            if not nested:
                nested.append(None)
                nested[0] = runner.start(second)

        runner = ThumbnailRunner(yield_control=yield_control)
        outer = runner.start(first)

        assert outer.cancelled
        assert first.rendered == [0]
        assert not nested[0].cancelled
        assert [t.title for t in nested[0].thumbnails] == ["second.pdf p1", "second.pdf p2"]
        assert not runner.running
