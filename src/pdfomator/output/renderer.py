"""
Module: output.renderer

Purpose:
    Render a LayoutContext to a one-page PDF using ReportLab. The page
    size equals the sheet size exactly; each populated cell becomes one
    image draw at its planned rectangle, clipped to the cell's content
    area when the fill policy overflows it.

Key Functions:
    - render_to_pdf(): Main rendering function
    - default_export_filename(): Timestamped output name

Key Classes:
    - ExportResult: What was drawn and which cells were skipped

Dependencies:
    - reportlab: PDF generation
    - PIL: Downsampling and PNG encoding
    - layout.plan: SheetPlan shared with the preview

Used By:
    - cli: export subcommand
    - gui.app: Export action
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from pdfomator.common.thresholds import RENDER_THRESHOLDS
from pdfomator.core.errors import ExportFailure
from pdfomator.core.models import Rect
from pdfomator.layout.context import LayoutContext
from pdfomator.layout.coordinates import export_pixel_size, mm_to_pt
from pdfomator.layout.plan import CellDraw, CellFailure, plan_sheet

logger = logging.getLogger(__name__)

EXPORT_FILENAME_PREFIX = "pdfomator-layout"
_READER_MODES = {"RGB", "RGBA", "L"}


@dataclass(frozen=True)
class ExportResult:
    """
    Outcome of one export.

    Attributes:
        output_path: PDF written
        page_size_pt: (width, height) of the single page in points
        drawn: Indices of cells drawn, in order
        failures: Cells skipped while planning or drawing
    """

    output_path: Path
    page_size_pt: Tuple[float, float]
    drawn: Tuple[int, ...] = ()
    failures: Tuple[CellFailure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def drawn_count(self) -> int:
        return len(self.drawn)


def default_export_filename(now: Optional[datetime] = None) -> str:
    """
    Timestamped file name for an export.

    Example:
        >>> default_export_filename(datetime(2024, 5, 1, 9, 30, 0))
        'pdfomator-layout-2024-05-01T09-30-00.pdf'
    """
    now = now or datetime.now()
    return f"{EXPORT_FILENAME_PREFIX}-{now:%Y-%m-%dT%H-%M-%S}.pdf"


def render_to_pdf(
    context: LayoutContext,
    output_path: Path,
    *,
    export_dpi: int = RENDER_THRESHOLDS.export_dpi,
) -> ExportResult:
    """
    Render the context's sheet to a PDF file.

    A cell that cannot be drawn (corrupt image, encode error) is logged,
    recorded in ExportResult.failures and skipped; the other cells are
    still exported.

    Args:
        context: Layout to export
        output_path: Path to write PDF
        export_dpi: Images larger than needed at this resolution are
            downsampled; 0 keeps full resolution

    Returns:
        ExportResult

    Raises:
        ExportFailure: If the layout has no content, or the document
            cannot be created or saved
        InvalidLayout: If the grid no longer fits the sheet

    Example:
        >>> result = render_to_pdf(ctx, Path("out/layout.pdf"))
        >>> result.drawn_count
        2
    """
    if not context.has_content:
        raise ExportFailure("Nothing to export: every cell is empty")

    output_path = Path(output_path)
    plan = plan_sheet(context)
    sheet = plan.sheet
    page_width_pt = mm_to_pt(sheet.width)
    page_height_pt = mm_to_pt(sheet.height)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        c = canvas.Canvas(str(output_path), pagesize=(page_width_pt, page_height_pt))
    except OSError as e:
        raise ExportFailure(f"Cannot create {output_path}: {e}") from e

    c.setTitle(output_path.stem)
    c.setCreator("PDFomator")

    drawn: List[int] = []
    failures: List[CellFailure] = list(plan.failures)

    for draw in plan.draws:
        if not draw.is_visible:
            logger.debug(f"Cell {draw.index} panned fully out of view, nothing to draw")
            continue
        try:
            _draw_cell(c, draw, page_height_pt, export_dpi)
        except Exception as e:
            logger.warning(f"Skipping cell {draw.index} ({draw.content.title}): {e}")
            failures.append(CellFailure(draw.index, draw.content.title, str(e)))
        else:
            drawn.append(draw.index)

    c.showPage()
    try:
        c.save()
    except OSError as e:
        raise ExportFailure(f"Failed to write {output_path}: {e}") from e

    logger.info(
        f"Exported {len(drawn)} cell(s) on {sheet.label} to {output_path}"
        + (f" ({len(failures)} skipped)" if failures else "")
    )
    return ExportResult(
        output_path=output_path,
        page_size_pt=(page_width_pt, page_height_pt),
        drawn=tuple(drawn),
        failures=tuple(failures),
    )


def _draw_cell(
    c: canvas.Canvas,
    draw: CellDraw,
    page_height_pt: float,
    export_dpi: int,
) -> None:
    """
    Draw one cell: optional clip to the content area, then a single image.

    Args:
        c: ReportLab canvas
        draw: Planned draw in sheet mm
        page_height_pt: Page height for Y flipping
        export_dpi: Downsampling target (0 disables)
    """
    image = _prepare_image(draw.content.image, draw.draw_rect, export_dpi)
    img_reader = _pil_to_reader(image)
    x_pt, y_pt, width_pt, height_pt = _rect_to_pdf(draw.draw_rect, page_height_pt)

    c.saveState()
    try:
        if draw.needs_clip:
            clip_x, clip_y, clip_w, clip_h = _rect_to_pdf(draw.content_area, page_height_pt)
            path = c.beginPath()
            path.rect(clip_x, clip_y, clip_w, clip_h)
            c.clipPath(path, stroke=0, fill=0)
        c.drawImage(img_reader, x_pt, y_pt, width=width_pt, height=height_pt, mask="auto")
    finally:
        c.restoreState()


def _prepare_image(image: Image.Image, draw_rect: Rect, export_dpi: int) -> Image.Image:
    """
    Normalize mode and downsample to the export resolution.

    Images are never upsampled; ReportLab scales them to the draw rect.
    """
    if image.mode not in _READER_MODES:
        has_alpha = "A" in image.getbands() or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")

    if export_dpi > 0:
        target_w, target_h = export_pixel_size(draw_rect.width, draw_rect.height, export_dpi)
        if image.width > target_w and image.height > target_h:
            logger.debug(f"Downsampling {image.width}x{image.height} -> {target_w}x{target_h}")
            image = image.resize((target_w, target_h), Image.Resampling.LANCZOS)
    return image


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _transform_y(page_height_pt: float, y_mm_top: float, height_mm: float) -> float:
    """
    Convert a top-down mm Y coordinate to bottom-up PDF Y.

    Args:
        page_height_pt: Page height in points
        y_mm_top: Top edge in mm from the top of the sheet
        height_mm: Element height in mm

    Returns:
        Bottom edge in points from the bottom of the page
    """
    return page_height_pt - mm_to_pt(y_mm_top + height_mm)


def _rect_to_pdf(rect: Rect, page_height_pt: float) -> Tuple[float, float, float, float]:
    """Sheet-mm rect -> (x, y, width, height) in bottom-up points."""
    return (
        mm_to_pt(rect.x),
        _transform_y(page_height_pt, rect.y, rect.height),
        mm_to_pt(rect.width),
        mm_to_pt(rect.height),
    )
