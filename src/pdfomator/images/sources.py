"""
Module: images.sources

Purpose:
    Decode PDF documents and standalone images into raster pages that can
    be attached to cells. Both kinds are exposed through the same
    ContentSource interface, and become Content once a page is chosen.

Key Classes:
    - ContentSource: Abstract interface (page count, render, thumbnail)
    - PdfSource: PyMuPDF-backed, pages rasterized on demand
    - ImageSource: Pillow-backed, a single page

Key Functions:
    - open_source(): Pick PdfSource or ImageSource for a file
    - load_content(): Render one page of a source into Content
    - load_file(): open_source() + load_content() in one step

Dependencies:
    - fitz (PyMuPDF): PDF rasterization
    - PIL: Image decoding
    - common.thresholds: Render scales

Used By:
    - cli: Headless export
    - gui.app: Attaching files to cells
    - images.thumbnails: Page picker thumbnails
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import fitz
from PIL import Image, ImageOps, UnidentifiedImageError

from pdfomator.common.thresholds import RENDER_THRESHOLDS, RenderThresholds
from pdfomator.core.errors import DecodeFailure
from pdfomator.core.models import Content

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
_PASSTHROUGH_MODES = {"RGB", "RGBA", "L", "LA"}


class ContentSource(ABC):
    """
    A decodable source of one or more raster pages.

    Implementations decode lazily: only page count and name are known up
    front, pixels are produced per request.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name, usually the file name."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages (1 for standalone images)."""

    @abstractmethod
    def render_page(self, index: int) -> Image.Image:
        """
        Rasterize a page at placement resolution.

        Raises:
            IndexError: If index is out of range
            DecodeFailure: If the page cannot be rasterized
        """

    @abstractmethod
    def render_thumbnail(self, index: int) -> Image.Image:
        """Rasterize a page at thumbnail resolution."""

    def title_for(self, index: int) -> str:
        """Title shown for a page, e.g. 'report.pdf p2'."""
        if self.page_count == 1 and not isinstance(self, PdfSource):
            return self.name
        return f"{self.name} p{index + 1}"

    def close(self) -> None:
        """Release decoder resources."""

    def __enter__(self) -> ContentSource:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.page_count:
            raise IndexError(f"Page {index + 1} out of range for {self.name} ({self.page_count} pages)")


class PdfSource(ContentSource):
    """
    PDF document rasterized with PyMuPDF.

    Pages are rendered at `page_render_scale` (2.0, i.e. 144 dpi) for
    placement and `thumbnail_render_scale` (0.5) for the page picker.

    Example:
        >>> with PdfSource(Path("report.pdf")) as source:
        ...     image = source.render_page(0)
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        data: Optional[bytes] = None,
        name: Optional[str] = None,
        thresholds: RenderThresholds = RENDER_THRESHOLDS,
    ) -> None:
        if (path is None) == (data is None):
            raise ValueError("Pass exactly one of path or data")
        self._path = path
        self._name = name or (path.name if path is not None else "document.pdf")
        self._thresholds = thresholds
        try:
            if path is not None:
                self._doc = fitz.open(str(path))
            else:
                self._doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError, OSError) as e:
            raise DecodeFailure(f"Failed to open PDF {self._name}: {e}") from e

        if not self._doc.is_pdf or self._doc.page_count == 0:
            self._doc.close()
            raise DecodeFailure(f"{self._name} is not a PDF with pages")
        logger.debug(f"Opened {self._name}: {self._doc.page_count} pages")

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def render_page(self, index: int) -> Image.Image:
        return self._render(index, self._thresholds.page_render_scale)

    def render_thumbnail(self, index: int) -> Image.Image:
        return self._render(index, self._thresholds.thumbnail_render_scale)

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()

    def _render(self, index: int, scale: float) -> Image.Image:
        self._check_index(index)
        try:
            page = self._doc[index]
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        except (RuntimeError, ValueError) as e:
            raise DecodeFailure(f"Failed to render {self.title_for(index)}: {e}") from e


class ImageSource(ContentSource):
    """
    Standalone image decoded with Pillow. EXIF orientation is applied so
    the natural size matches what viewers show.
    """

    def __init__(
        self,
        path: Path,
        *,
        thresholds: RenderThresholds = RENDER_THRESHOLDS,
    ) -> None:
        self._path = path
        self._thresholds = thresholds
        try:
            with Image.open(path) as img:
                img.load()
                image = ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise DecodeFailure(f"Failed to load image {path.name}: {e}") from e

        if image.mode not in _PASSTHROUGH_MODES:
            has_alpha = "A" in image.getbands() or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")
        self._image = image

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def page_count(self) -> int:
        return 1

    def render_page(self, index: int) -> Image.Image:
        self._check_index(index)
        return self._image.copy()

    def render_thumbnail(self, index: int) -> Image.Image:
        self._check_index(index)
        thumb = self._image.copy()
        edge = self._thresholds.thumbnail_max_px
        thumb.thumbnail((edge, edge))
        return thumb

    def close(self) -> None:
        self._image.close()


def is_pdf(path: Path) -> bool:
    """PDF by suffix, or by magic bytes for files with other suffixes."""
    if path.suffix.lower() == ".pdf":
        return True
    try:
        with path.open("rb") as fh:
            return fh.read(len(PDF_MAGIC)) == PDF_MAGIC
    except OSError:
        return False


def open_source(path: Path, thresholds: RenderThresholds = RENDER_THRESHOLDS) -> ContentSource:
    """
    Open a file as a ContentSource.

    Raises:
        DecodeFailure: If the file is missing or cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise DecodeFailure(f"File not found: {path}")
    if is_pdf(path):
        return PdfSource(path, thresholds=thresholds)
    return ImageSource(path, thresholds=thresholds)


def load_content(source: ContentSource, page_index: int = 0) -> Content:
    """
    Render one page of a source into Content.

    Raises:
        IndexError: If page_index is out of range
        DecodeFailure: If rendering fails
    """
    image = source.render_page(page_index)
    return Content(
        image=image,
        title=source.title_for(page_index),
        source=getattr(source, "path", None),
        page_index=page_index,
    )


def load_file(path: Path, page_index: int = 0) -> Content:
    """Open a file, render one page and close the decoder."""
    with open_source(path) as source:
        content = load_content(source, page_index)
    logger.info(f"Loaded {content.title} ({content.natural_width}×{content.natural_height} px)")
    return content
