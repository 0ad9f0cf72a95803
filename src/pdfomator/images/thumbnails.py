"""
Module: images.thumbnails

Purpose:
    Cancellable, cooperative thumbnail generation for the page picker.
    Runs on the UI thread: the loop re-checks its CancellationToken before
    every page (the last one included) and hands control back to the event
    loop after each page so pointer input stays responsive.

Key Classes:
    - CancellationToken: One-shot cancellation flag
    - Thumbnail: One rendered page
    - ThumbnailBatch: Result of a (possibly cancelled) run
    - ThumbnailRunner: Owns the current token; start() supersedes any
      running job

Key Functions:
    - generate_thumbnails(): The cancellable loop

Dependencies:
    - images.sources: ContentSource

Used By:
    - gui.app: Page picker for multi-page PDFs
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from PIL import Image

from pdfomator.core.errors import DecodeFailure

from .sources import ContentSource

logger = logging.getLogger(__name__)


class CancellationToken:
    """Flag set by whoever supersedes a running loop. Never reset."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass(frozen=True)
class Thumbnail:
    page_index: int
    title: str
    image: Image.Image


@dataclass(frozen=True)
class ThumbnailBatch:
    """
    Thumbnails produced by one run.

    Attributes:
        thumbnails: Pages rendered before the run ended, in page order
        cancelled: True if the run stopped because its token was cancelled
        failed_pages: Pages that could not be rendered (skipped)
    """

    thumbnails: Tuple[Thumbnail, ...] = ()
    cancelled: bool = False
    failed_pages: Tuple[int, ...] = field(default_factory=tuple)


def generate_thumbnails(
    source: ContentSource,
    token: CancellationToken,
    *,
    pages: Optional[Iterable[int]] = None,
    on_thumbnail: Optional[Callable[[Thumbnail], None]] = None,
    yield_control: Optional[Callable[[], None]] = None,
) -> ThumbnailBatch:
    """
    Render one thumbnail per page until done or cancelled.

    Args:
        source: Open content source
        token: Checked before each page; once set no further page is rendered
        pages: Page indices to render (default: all, in order)
        on_thumbnail: Called with each thumbnail as soon as it is ready
        yield_control: Called after each page, e.g. QCoreApplication.processEvents

    Returns:
        ThumbnailBatch with whatever was rendered
    """
    indices = list(range(source.page_count)) if pages is None else list(pages)
    thumbnails: List[Thumbnail] = []
    failed: List[int] = []

    for index in indices:
        if token.cancelled:
            logger.debug(
                f"Thumbnail run for {source.name} cancelled after "
                f"{len(thumbnails)}/{len(indices)} pages"
            )
            return ThumbnailBatch(tuple(thumbnails), True, tuple(failed))

        try:
            thumb = Thumbnail(index, source.title_for(index), source.render_thumbnail(index))
        except DecodeFailure as e:
            logger.warning(f"Skipping thumbnail for page {index + 1}: {e}")
            failed.append(index)
        else:
            thumbnails.append(thumb)
            if on_thumbnail is not None:
                on_thumbnail(thumb)

        if yield_control is not None:
            yield_control()

    return ThumbnailBatch(tuple(thumbnails), False, tuple(failed))


class ThumbnailRunner:
    """
    Runs at most one thumbnail job at a time.

    start() cancels the token of any job still running (including one
    that re-entered through yield_control) before starting the new one.
    """

    def __init__(self, yield_control: Optional[Callable[[], None]] = None) -> None:
        self._yield_control = yield_control
        self._token: Optional[CancellationToken] = None

    @property
    def running(self) -> bool:
        return self._token is not None

    def start(
        self,
        source: ContentSource,
        on_thumbnail: Optional[Callable[[Thumbnail], None]] = None,
    ) -> ThumbnailBatch:
        self.cancel()
        token = CancellationToken()
        self._token = token
        try:
            return generate_thumbnails(
                source,
                token,
                on_thumbnail=on_thumbnail,
                yield_control=self._yield_control,
            )
        finally:
            if self._token is token:
                self._token = None

    def cancel(self) -> bool:
        """Cancel the running job, if any. Returns True if one was cancelled."""
        if self._token is None:
            return False
        self._token.cancel()
        self._token = None
        return True
