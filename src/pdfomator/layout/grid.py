"""
Module: layout.grid

Purpose:
    Partition a sheet into a uniform grid of cell rectangles.

Key Functions:
    - partition_sheet(): Sheet + GridSpec + SpacingConfig -> cell rects
    - content_area(): Shrink a cell rect by the per-cell padding
    - validate_layout(): Raise InvalidLayout if the grid does not fit

Algorithm:
    available = sheet - padding on each axis
    cell size = (available - gap * (n - 1)) / n
    cell(i).x = padding.left + col * (cell_width + column_gap)
    cell(i).y = padding.top + row * (cell_height + row_gap)
    With one row or column the gap term is multiplied by zero.

Dependencies:
    - core.models: Sheet, GridSpec, SpacingConfig, Rect

Used By:
    - layout.context: Validation before mutating layout state
    - layout.plan: Cell rects for preview and export
"""

from __future__ import annotations

from typing import Optional, Tuple

from pdfomator.core.errors import InvalidLayout
from pdfomator.core.models import GridSpec, Rect, Sheet, SpacingConfig


def cell_size(sheet: Sheet, grid: GridSpec, spacing: SpacingConfig) -> Tuple[float, float]:
    """
    Uniform (width, height) of every cell in mm.

    Raises:
        InvalidLayout: If either dimension is not positive
    """
    padding = spacing.sheet_padding
    available_width = sheet.width - padding.left - padding.right
    available_height = sheet.height - padding.top - padding.bottom

    width = (available_width - spacing.column_gap * (grid.cols - 1)) / grid.cols
    height = (available_height - spacing.row_gap * (grid.rows - 1)) / grid.rows

    if not (width > 0 and height > 0):
        raise InvalidLayout(
            f"Grid {grid} does not fit {sheet.label}: cells would be "
            f"{width:.2f} × {height:.2f} mm with the current padding and gaps"
        )
    return width, height


def partition_sheet(
    sheet: Sheet,
    grid: GridSpec,
    spacing: SpacingConfig,
) -> Tuple[Rect, ...]:
    """
    Compute one rectangle per cell, in row-major order.

    Args:
        sheet: Physical sheet
        grid: Rows and columns
        spacing: Padding and gaps

    Returns:
        Tuple of Rects, index i = row * cols + col

    Raises:
        InvalidLayout: If the grid does not fit, or the cell padding leaves
            no room for content

    Example:
        >>> rects = partition_sheet(Sheet(210, 297), GridSpec(2, 2), SpacingConfig())
        >>> rects[0].width
        92.5
    """
    width, height = cell_size(sheet, grid, spacing)

    if width - 2 * spacing.cell_padding <= 0 or height - 2 * spacing.cell_padding <= 0:
        raise InvalidLayout(
            f"Cell padding {spacing.cell_padding:g} mm leaves no content area in "
            f"{width:.2f} × {height:.2f} mm cells"
        )

    padding = spacing.sheet_padding
    rects = []
    for index in range(grid.cell_count):
        row, col = grid.position(index)
        rects.append(Rect(
            x=padding.left + col * (width + spacing.column_gap),
            y=padding.top + row * (height + spacing.row_gap),
            width=width,
            height=height,
        ))
    return tuple(rects)


def content_area(cell_rect: Rect, spacing: SpacingConfig) -> Rect:
    """The cell rectangle shrunk by cell_padding on all sides."""
    return cell_rect.inset(spacing.cell_padding)


def validate_layout(sheet: Sheet, grid: GridSpec, spacing: SpacingConfig) -> None:
    """Raise InvalidLayout if the combination cannot be partitioned."""
    partition_sheet(sheet, grid, spacing)


def hit_test(rects: Tuple[Rect, ...], x_mm: float, y_mm: float) -> Optional[int]:
    """Index of the cell containing a sheet point, or None for gaps/padding."""
    for index, rect in enumerate(rects):
        if rect.contains(x_mm, y_mm):
            return index
    return None
