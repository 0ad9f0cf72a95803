"""
Module: layout.coordinates

Purpose:
    Conversions between the three coordinate spaces in play:

    - pointer/screen pixels, as reported live by the input device
    - sheet millimetres, the single authoritative space for placement math
    - export space: PDF points for the document page, and export raster
      pixels when resampling content for the PDF

    Two DPI conventions exist and must never be mixed:

    - 72 points per inch: PDF geometry, and the 1:1 "natural size" of a
      decoded raster (one raster pixel = one point)
    - 96 pixels per inch: on-screen layout measurement of the preview

Key Classes:
    - CoordinateMapper: Screen <-> sheet for one displayed size

Key Functions:
    - mm_to_pt() / pt_to_mm(): Sheet <-> PDF points
    - raster_px_to_mm(): Natural size of a decoded raster
    - screen_px_to_mm() / mm_to_screen_px(): 96 dpi preview layout
    - export_pixel_size(): Raster resolution needed for a rect at a DPI

Used By:
    - interaction.gestures: Pointer deltas -> mm (snapshot per session)
    - gui.sheet_view: Hit-testing and painting
    - output.renderer: Page size and draw coordinates in points
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from pdfomator.core.models import Rect, Sheet

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0
SCREEN_DPI = 96.0

MM_PER_POINT = MM_PER_INCH / POINTS_PER_INCH
MM_PER_SCREEN_PX = MM_PER_INCH / SCREEN_DPI


def mm_to_pt(mm: float) -> float:
    """Millimetres to PDF points (1/72 inch)."""
    return mm / MM_PER_POINT


def pt_to_mm(pt: float) -> float:
    """PDF points to millimetres."""
    return pt * MM_PER_POINT


def raster_px_to_mm(px: float) -> float:
    """
    Physical size of a raster dimension placed at 1:1 natural size.

    A decoded pixel counts as one point (25.4 mm per 72). This is the
    export convention and is unrelated to the 96 dpi screen convention.
    """
    return px * MM_PER_POINT


def screen_px_to_mm(px: float) -> float:
    """On-screen layout pixels (96 dpi) to millimetres."""
    return px * MM_PER_SCREEN_PX


def mm_to_screen_px(mm: float) -> float:
    """Millimetres to on-screen layout pixels (96 dpi)."""
    return mm / MM_PER_SCREEN_PX


def export_pixel_size(width_mm: float, height_mm: float, dpi: float) -> Tuple[int, int]:
    """
    Pixel dimensions needed to draw a rect at `dpi` in the exported PDF.

    Always at least 1x1.
    """
    if dpi <= 0:
        raise ValueError(f"dpi must be positive: {dpi}")
    return (
        max(1, round(width_mm / MM_PER_INCH * dpi)),
        max(1, round(height_mm / MM_PER_INCH * dpi)),
    )


@dataclass(frozen=True)
class CoordinateMapper:
    """
    Screen <-> sheet mapping for one displayed size of the sheet (immutable).

    The displayed size changes independently of the sheet (window resize,
    container zoom), so a mapper is built from the current widget geometry
    at the start of every gesture session and not reused afterwards.

    Attributes:
        sheet_width_mm: Sheet width in mm
        sheet_height_mm: Sheet height in mm
        displayed_width_px: Current on-screen width of the sheet
        displayed_height_px: Current on-screen height of the sheet
        origin_x_px: Screen x of the sheet's top-left corner
        origin_y_px: Screen y of the sheet's top-left corner

    Example:
        >>> m = CoordinateMapper(210, 297, 420, 594)
        >>> m.screen_delta_to_mm(10, 20)
        (5.0, 10.0)
    """

    sheet_width_mm: float
    sheet_height_mm: float
    displayed_width_px: float
    displayed_height_px: float
    origin_x_px: float = 0.0
    origin_y_px: float = 0.0

    def __post_init__(self) -> None:
        if self.sheet_width_mm <= 0 or self.sheet_height_mm <= 0:
            raise ValueError("Sheet dimensions must be positive")
        if self.displayed_width_px <= 0 or self.displayed_height_px <= 0:
            raise ValueError(
                f"Displayed size must be positive: "
                f"{self.displayed_width_px}x{self.displayed_height_px}"
            )

    @classmethod
    def for_display(
        cls,
        sheet: Sheet,
        displayed_width_px: float,
        displayed_height_px: float,
        origin: Tuple[float, float] = (0.0, 0.0),
    ) -> CoordinateMapper:
        return cls(
            sheet.width,
            sheet.height,
            displayed_width_px,
            displayed_height_px,
            origin[0],
            origin[1],
        )

    @property
    def mm_per_px_x(self) -> float:
        return self.sheet_width_mm / self.displayed_width_px

    @property
    def mm_per_px_y(self) -> float:
        return self.sheet_height_mm / self.displayed_height_px

    def screen_delta_to_mm(self, dx_px: float, dy_px: float) -> Tuple[float, float]:
        """Pointer movement in screen pixels to a sheet offset in mm."""
        return dx_px * self.mm_per_px_x, dy_px * self.mm_per_px_y

    def screen_to_sheet(self, x_px: float, y_px: float) -> Tuple[float, float]:
        """Screen point to sheet point (mm)."""
        return self.screen_delta_to_mm(x_px - self.origin_x_px, y_px - self.origin_y_px)

    def sheet_to_screen(self, x_mm: float, y_mm: float) -> Tuple[float, float]:
        """Sheet point (mm) to screen point."""
        return (
            self.origin_x_px + x_mm / self.mm_per_px_x,
            self.origin_y_px + y_mm / self.mm_per_px_y,
        )

    def rect_to_screen(self, rect: Rect) -> Rect:
        """Sheet rect (mm) to screen rect (px)."""
        x, y = self.sheet_to_screen(rect.x, rect.y)
        return Rect(x, y, rect.width / self.mm_per_px_x, rect.height / self.mm_per_px_y)
