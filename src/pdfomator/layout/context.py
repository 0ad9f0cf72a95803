"""
Module: layout.context

Purpose:
    Explicit layout state: sheet, grid, spacing and the cells collection.
    Passed by reference to the planner, the gesture controller and the
    exporter instead of living in a global.

Key Classes:
    - LayoutContext: Owns Sheet/GridSpec/SpacingConfig and the cells

Invariants:
    - len(cells) == grid.rows * grid.cols at all times
    - Configuration changes are validated by partitioning first; on
      InvalidLayout nothing is mutated and the last valid layout remains
    - Changing a cell's fill mode always resets its transform

Dependencies:
    - core.models: Cell, Content, policies, sheet configuration
    - layout.grid: Validation and cell rects

Used By:
    - layout.plan: plan_sheet()
    - interaction.gestures: TransformController
    - output.renderer: render_to_pdf()
    - gui: SheetView, SettingsStore
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from pdfomator.common.paper import Orientation
from pdfomator.core.models import (
    IDENTITY,
    Cell,
    Content,
    Cover,
    FillMode,
    GridSpec,
    Rect,
    Sheet,
    SpacingConfig,
    Transform,
)

from .grid import content_area, partition_sheet, validate_layout

logger = logging.getLogger(__name__)


class LayoutContext:
    """
    Mutable layout state for one sheet.

    The defaults match a fresh session: A4 portrait, two rows by one
    column, default spacing, all cells empty.

    Example:
        >>> ctx = LayoutContext()
        >>> ctx.set_grid(GridSpec(rows=2, cols=2))
        []
        >>> len(ctx.cells)
        4
    """

    def __init__(
        self,
        sheet: Optional[Sheet] = None,
        grid: Optional[GridSpec] = None,
        spacing: Optional[SpacingConfig] = None,
    ) -> None:
        sheet = sheet or Sheet.from_paper()
        grid = grid or GridSpec()
        spacing = spacing or SpacingConfig()
        validate_layout(sheet, grid, spacing)

        self._sheet = sheet
        self._grid = grid
        self._spacing = spacing
        self._cells: List[Cell] = [Cell(index=i) for i in range(grid.cell_count)]

    # ─────────────────────────────────────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def sheet(self) -> Sheet:
        return self._sheet

    @property
    def grid(self) -> GridSpec:
        return self._grid

    @property
    def spacing(self) -> SpacingConfig:
        return self._spacing

    @property
    def cells(self) -> Tuple[Cell, ...]:
        return tuple(self._cells)

    @property
    def has_content(self) -> bool:
        return any(not cell.is_empty for cell in self._cells)

    def cell(self, index: int) -> Cell:
        """Cell at a row-major index. Raises IndexError when out of range."""
        if not 0 <= index < len(self._cells):
            raise IndexError(f"Cell index {index} outside grid {self._grid}")
        return self._cells[index]

    def populated_cells(self) -> List[Cell]:
        return [cell for cell in self._cells if not cell.is_empty]

    def cell_rects(self) -> Tuple[Rect, ...]:
        return partition_sheet(self._sheet, self._grid, self._spacing)

    def content_area(self, index: int) -> Rect:
        """Content area of one cell in sheet mm."""
        self.cell(index)
        return content_area(self.cell_rects()[index], self._spacing)

    # ─────────────────────────────────────────────────────────────────────────
    # Configuration actions (validated before mutation)
    # ─────────────────────────────────────────────────────────────────────────

    def cells_discarded_by(self, grid: GridSpec) -> List[Cell]:
        """Populated cells that would be lost by reshaping to `grid`."""
        return [
            cell for cell in self._cells[grid.cell_count:]
            if not cell.is_empty
        ]

    def set_grid(self, grid: GridSpec) -> List[Cell]:
        """
        Reshape the grid, truncating or extending the cells collection.

        Cells keep their linear index, so content stays in the same slot
        number. Cells at or beyond the new cell count are discarded.

        Returns:
            Populated cells that were discarded

        Raises:
            InvalidLayout: If the grid does not fit; nothing changes
        """
        validate_layout(self._sheet, grid, self._spacing)

        discarded = self.cells_discarded_by(grid)
        count = grid.cell_count
        cells = self._cells[:count]
        cells.extend(Cell(index=i) for i in range(len(cells), count))

        self._grid = grid
        self._cells = cells

        if discarded:
            logger.info(
                f"Grid reshaped to {grid}: discarded content in cells "
                f"{[c.index for c in discarded]}"
            )
        else:
            logger.info(f"Grid updated: {grid} ({count} cells)")
        return discarded

    def set_sheet(self, sheet: Sheet) -> None:
        """Replace the sheet. Raises InvalidLayout if the grid no longer fits."""
        validate_layout(sheet, self._grid, self._spacing)
        self._sheet = sheet
        logger.info(f"Paper size: {sheet.label}")

    def set_paper(self, name: str, orientation: Optional[Orientation] = None) -> None:
        """Switch to a named paper size, keeping the orientation unless given."""
        self.set_sheet(Sheet.from_paper(name, orientation or self._sheet.orientation))

    def set_orientation(self, orientation: Orientation) -> None:
        self.set_sheet(self._sheet.with_orientation(orientation))

    def toggle_orientation(self) -> None:
        self.set_sheet(self._sheet.rotated())

    def set_spacing(self, spacing: SpacingConfig) -> None:
        """Replace spacing. Raises InvalidLayout if the grid no longer fits."""
        validate_layout(self._sheet, self._grid, spacing)
        self._spacing = spacing
        logger.debug(f"Spacing updated: {spacing}")

    # ─────────────────────────────────────────────────────────────────────────
    # Cell actions
    # ─────────────────────────────────────────────────────────────────────────

    def attach_content(
        self,
        index: int,
        content: Content,
        mode: FillMode = FillMode.CONTAIN,
    ) -> Cell:
        """Put content into a cell, replacing anything already there."""
        cell = self.cell(index)
        cell.content = content
        cell.policy = FillMode(mode).policy()
        logger.info(f"Added content to cell {index}: {content.title}")
        return cell

    def remove_content(self, index: int) -> Optional[Content]:
        """Empty a cell. Returns the removed content, if any."""
        cell = self.cell(index)
        removed = cell.content
        cell.content = None
        cell.policy = FillMode.CONTAIN.policy()
        if removed is not None:
            logger.info(f"Removed content from cell {index}")
        return removed

    def set_fill_mode(self, index: int, mode: FillMode) -> Cell:
        """Set the fill mode. The transform is reset to identity, even for cover -> cover."""
        cell = self.cell(index)
        cell.policy = FillMode(mode).policy()
        logger.debug(f"Cell {index} fill mode: {cell.mode.value}")
        return cell

    def cycle_fill_mode(self, index: int) -> FillMode:
        """contain -> cover -> fill -> contain. Returns the new mode."""
        cell = self.cell(index)
        return self.set_fill_mode(index, cell.mode.next()).mode

    def set_transform(self, index: int, transform: Transform) -> None:
        """
        Replace the cover transform of a cell.

        Raises:
            ValueError: If the cell is not in cover mode
        """
        cell = self.cell(index)
        if not isinstance(cell.policy, Cover):
            raise ValueError(f"Cell {index} is in {cell.mode.value} mode; only cover has a transform")
        cell.policy = Cover(transform)

    def reset_transform(self, index: int) -> bool:
        """
        Set a cover cell's transform back to identity.

        Returns:
            True if the transform changed
        """
        cell = self.cell(index)
        if not isinstance(cell.policy, Cover) or cell.policy.transform.is_identity:
            return False
        cell.policy = Cover(IDENTITY)
        logger.debug(f"Cell {index} transform reset")
        return True
