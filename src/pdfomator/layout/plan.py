"""
Module: layout.plan

Purpose:
    Turn a LayoutContext into absolute draw instructions in sheet mm.
    Both the live preview and the PDF exporter consume the same SheetPlan,
    so what is shown is what gets printed.

Key Functions:
    - plan_sheet(): Context -> SheetPlan
    - plan_cell(): One populated cell -> CellDraw

Key Classes:
    - CellDraw: One image draw (absolute rects + clip flag)
    - CellFailure: A cell that could not be resolved, with the reason
    - SheetPlan: Cell rects, draws and failures for one sheet

Algorithm:
    For each populated cell:
    1. Cell rect from the grid partition
    2. Content area = cell rect shrunk by cell_padding
    3. solve_placement() with the cell's policy
    4. Absolute draw rect = content-area origin + placement offset

Dependencies:
    - layout.grid, layout.placement
    - core.models

Used By:
    - output.renderer: render_to_pdf()
    - gui.preview: Preview painting
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pdfomator.core.models import Cell, Content, Rect, Sheet, SpacingConfig

from .context import LayoutContext
from .grid import content_area
from .placement import solve_placement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellDraw:
    """
    Draw instruction for one populated cell (immutable). Rects are absolute
    sheet mm with a top-left origin.

    Attributes:
        index: Cell index
        content: Content to draw
        cell_rect: Full cell rectangle
        content_area: Cell rectangle shrunk by cell padding (the clip region)
        draw_rect: Where the full image is drawn
        needs_clip: Constrain drawing to content_area
    """

    index: int
    content: Content
    cell_rect: Rect
    content_area: Rect
    draw_rect: Rect
    needs_clip: bool

    @property
    def is_visible(self) -> bool:
        """False when a cover transform has moved the image fully out of its clip."""
        if not self.needs_clip:
            return True
        return self.draw_rect.intersects(self.content_area)


@dataclass(frozen=True)
class CellFailure:
    """A cell skipped during planning or export."""

    index: int
    title: str
    reason: str


@dataclass(frozen=True)
class SheetPlan:
    """
    Complete plan for one sheet.

    Attributes:
        sheet: The sheet being planned
        cell_rects: All cell rectangles, row-major, populated or not
        draws: Draws for populated cells in index order
        failures: Cells that could not be placed
    """

    sheet: Sheet
    cell_rects: Tuple[Rect, ...]
    draws: Tuple[CellDraw, ...]
    failures: Tuple[CellFailure, ...] = field(default_factory=tuple)

    @property
    def draw_count(self) -> int:
        return len(self.draws)

    def draw_for(self, index: int) -> Optional[CellDraw]:
        for draw in self.draws:
            if draw.index == index:
                return draw
        return None


def plan_cell(cell: Cell, cell_rect: Rect, spacing: SpacingConfig) -> CellDraw:
    """
    Resolve the absolute draw instruction for one populated cell.

    Raises:
        ValueError: If the cell is empty or the placement cannot be solved
    """
    if cell.content is None:
        raise ValueError(f"Cell {cell.index} has no content")

    area = content_area(cell_rect, spacing)
    placement = solve_placement(
        cell.content.natural_width,
        cell.content.natural_height,
        area.width,
        area.height,
        cell.policy,
    )
    return CellDraw(
        index=cell.index,
        content=cell.content,
        cell_rect=cell_rect,
        content_area=area,
        draw_rect=placement.rect.translated(area.x, area.y),
        needs_clip=placement.needs_clip,
    )


def plan_sheet(context: LayoutContext) -> SheetPlan:
    """
    Plan every populated cell of the context.

    A cell whose placement cannot be resolved is logged and recorded as a
    failure; the remaining cells are still planned.

    Raises:
        InvalidLayout: If the context's grid no longer fits its sheet
    """
    rects = context.cell_rects()
    draws: List[CellDraw] = []
    failures: List[CellFailure] = []

    for cell in context.populated_cells():
        try:
            draws.append(plan_cell(cell, rects[cell.index], context.spacing))
        except ValueError as e:
            title = cell.content.title if cell.content else ""
            logger.warning(f"Skipping cell {cell.index} ({title}): {e}")
            failures.append(CellFailure(cell.index, title, str(e)))

    return SheetPlan(
        sheet=context.sheet,
        cell_rects=rects,
        draws=tuple(draws),
        failures=tuple(failures),
    )
