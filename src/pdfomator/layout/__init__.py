"""
Module: layout

Purpose:
    Geometry engine: partition a sheet into cells, fit content into each
    cell, convert between coordinate spaces, and plan the draws shared by
    preview and export.

Key Functions:
    - partition_sheet(): Sheet -> cell rects
    - solve_placement(): Fit content under a fill policy
    - plan_sheet(): Context -> SheetPlan

Key Classes:
    - LayoutContext: Explicit layout state
    - CoordinateMapper: Screen <-> sheet conversion
    - SheetPlan, CellDraw: Draw instructions
"""

from .context import LayoutContext
from .coordinates import (
    CoordinateMapper,
    export_pixel_size,
    mm_to_pt,
    mm_to_screen_px,
    pt_to_mm,
    raster_px_to_mm,
    screen_px_to_mm,
)
from .grid import cell_size, content_area, hit_test, partition_sheet, validate_layout
from .placement import Placement, solve_placement
from .plan import CellDraw, CellFailure, SheetPlan, plan_cell, plan_sheet

__all__ = [
    # Context
    "LayoutContext",
    # Coordinates
    "CoordinateMapper",
    "export_pixel_size",
    "mm_to_pt",
    "mm_to_screen_px",
    "pt_to_mm",
    "raster_px_to_mm",
    "screen_px_to_mm",
    # Grid
    "cell_size",
    "content_area",
    "hit_test",
    "partition_sheet",
    "validate_layout",
    # Placement
    "Placement",
    "solve_placement",
    # Plan
    "CellDraw",
    "CellFailure",
    "SheetPlan",
    "plan_cell",
    "plan_sheet",
]
