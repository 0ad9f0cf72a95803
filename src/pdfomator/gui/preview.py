"""
Module: gui.preview

Purpose:
    Paint a SheetPlan with QPainter. Uses the same plan as the PDF
    exporter, so the preview matches the printed page: clipped cells use
    setClipRect on the content area, empty cells get a placeholder outline.

Key Functions:
    - paint_plan(): Paint a plan through a CoordinateMapper
    - render_preview(): Offscreen QImage of a whole context
    - pil_to_qimage(): PIL image -> QImage

Dependencies:
    - PySide6.QtGui: QPainter, QImage
    - layout.plan: plan_sheet()

Used By:
    - gui.sheet_view: SheetView.paintEvent
    - gui.app: Page picker thumbnails
"""

from __future__ import annotations

import weakref
from typing import Optional

from PIL import Image
from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen

from pdfomator.common.thresholds import RENDER_THRESHOLDS
from pdfomator.core.models import Content, Rect
from pdfomator.layout.context import LayoutContext
from pdfomator.layout.coordinates import CoordinateMapper
from pdfomator.layout.plan import SheetPlan, plan_sheet

SHEET_COLOR = QColor("#FFFFFF")
CELL_OUTLINE_COLOR = QColor("#C8C8C8")
PLACEHOLDER_COLOR = QColor("#9E9E9E")


def pil_to_qimage(image: Image.Image) -> QImage:
    """Convert a PIL image to a QImage that owns its pixel data."""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format.Format_RGBA8888)
    return qimage.copy()


class QImageCache:
    """Converted QImages keyed by Content; entries die with their Content."""

    def __init__(self) -> None:
        self._images: "weakref.WeakKeyDictionary[Content, QImage]" = weakref.WeakKeyDictionary()

    def get(self, content: Content) -> QImage:
        qimage = self._images.get(content)
        if qimage is None:
            qimage = pil_to_qimage(content.image)
            self._images[content] = qimage
        return qimage

    def __len__(self) -> int:
        return len(self._images)


def _qrect(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


def paint_plan(
    painter: QPainter,
    plan: SheetPlan,
    mapper: CoordinateMapper,
    cache: Optional[QImageCache] = None,
) -> None:
    """
    Paint a sheet plan.

    Args:
        painter: Active painter
        plan: Plan from plan_sheet()
        mapper: Sheet mm -> painter pixels
        cache: Optional QImage cache shared across paints
    """
    if cache is None:
        cache = QImageCache()
    sheet_rect = mapper.rect_to_screen(Rect(0, 0, plan.sheet.width, plan.sheet.height))
    painter.fillRect(_qrect(sheet_rect), SHEET_COLOR)

    populated = {draw.index for draw in plan.draws}
    populated.update(failure.index for failure in plan.failures)

    painter.save()
    painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
    for draw in plan.draws:
        if not draw.is_visible:
            continue
        painter.save()
        if draw.needs_clip:
            painter.setClipRect(_qrect(mapper.rect_to_screen(draw.content_area)))
        painter.drawImage(_qrect(mapper.rect_to_screen(draw.draw_rect)), cache.get(draw.content))
        painter.restore()
    painter.restore()

    painter.save()
    for index, rect in enumerate(plan.cell_rects):
        screen_rect = _qrect(mapper.rect_to_screen(rect))
        if index in populated:
            painter.setPen(QPen(CELL_OUTLINE_COLOR, 1))
            painter.drawRect(screen_rect)
        else:
            pen = QPen(PLACEHOLDER_COLOR, 1)
            pen.setStyle(Qt.PenStyle.DashLine)
            painter.setPen(pen)
            painter.drawRect(screen_rect)
            painter.drawText(screen_rect, Qt.AlignmentFlag.AlignCenter, "+")
    painter.restore()


def render_preview(
    context: LayoutContext,
    width_px: Optional[int] = None,
    cache: Optional[QImageCache] = None,
) -> QImage:
    """
    Render the context offscreen at a given width.

    The height follows the sheet's aspect ratio.
    """
    width_px = width_px or RENDER_THRESHOLDS.preview_width_px
    sheet = context.sheet
    height_px = max(1, round(width_px * sheet.height / sheet.width))

    image = QImage(width_px, height_px, QImage.Format.Format_ARGB32)
    image.fill(SHEET_COLOR)

    mapper = CoordinateMapper.for_display(sheet, width_px, height_px)
    painter = QPainter(image)
    try:
        paint_plan(painter, plan_sheet(context), mapper, cache)
    finally:
        painter.end()
    return image
