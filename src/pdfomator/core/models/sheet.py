"""
Module: core.models.sheet

Purpose:
    Immutable configuration of the sheet being laid out: its physical size,
    the grid shape, and the spacing constants. All three are set by
    configuration actions and persist until changed.

Key Classes:
    - Sheet: Physical page size in mm plus orientation
    - GridSpec: Rows and columns, each in [1, MAX_GRID_SIZE]
    - Padding: Four-sided sheet padding in mm
    - SpacingConfig: Sheet padding, gaps and per-cell padding in mm

Dependencies:
    - dataclasses (std)
    - common.paper: Paper-size table

Used By:
    - layout.grid: Partitioning
    - layout.context: Layout state
    - gui.settings: Persisted preferences
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from pdfomator.common.paper import (
    DEFAULT_PAPER_SIZE,
    Orientation,
    canonical_paper_name,
    paper_dimensions,
)

MAX_GRID_SIZE = 5

DEFAULT_SHEET_PADDING_MM = 10.0
DEFAULT_GAP_MM = 5.0
DEFAULT_CELL_PADDING_MM = 2.0

_GRID_PATTERN = re.compile(r"^\s*(\d+)\s*[xX×]\s*(\d+)\s*$")


def _check_length(name: str, value: float) -> None:
    """Spacing lengths must be finite and >= 0."""
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{name} must be a finite value >= 0: {value}")


@dataclass(frozen=True)
class Sheet:
    """
    Physical sheet (immutable).

    Attributes:
        width: Width in mm (> 0)
        height: Height in mm (> 0)
        orientation: Portrait or landscape
        paper_size: Name in the paper table, or None for custom sizes

    Example:
        >>> sheet = Sheet.from_paper("A4")
        >>> sheet.width, sheet.height
        (210.0, 297.0)
        >>> sheet.rotated().width
        297.0
    """

    width: float
    height: float
    orientation: Orientation = Orientation.PORTRAIT
    paper_size: Optional[str] = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.width) and self.width > 0):
            raise ValueError(f"width must be positive: {self.width}")
        if not (math.isfinite(self.height) and self.height > 0):
            raise ValueError(f"height must be positive: {self.height}")

    @classmethod
    def from_paper(
        cls,
        name: str = DEFAULT_PAPER_SIZE,
        orientation: Orientation = Orientation.PORTRAIT,
    ) -> Sheet:
        """Build a sheet from the paper table. Raises KeyError for unknown names."""
        orientation = Orientation(orientation)
        width, height = paper_dimensions(name, orientation)
        return cls(width, height, orientation, canonical_paper_name(name))

    def rotated(self) -> Sheet:
        """Swap width and height and flip the orientation. Nothing else changes."""
        return Sheet(self.height, self.width, self.orientation.toggled(), self.paper_size)

    def with_orientation(self, orientation: Orientation) -> Sheet:
        if Orientation(orientation) is self.orientation:
            return self
        return self.rotated()

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)

    @property
    def label(self) -> str:
        """Human-readable description, e.g. 'A4 portrait (210 × 297 mm)'."""
        name = self.paper_size or "Custom"
        return f"{name} {self.orientation.value} ({self.width:g} × {self.height:g} mm)"


@dataclass(frozen=True)
class GridSpec:
    """
    Grid shape (immutable). Cells are addressed row-major.

    Example:
        >>> grid = GridSpec(rows=2, cols=3)
        >>> grid.cell_count
        6
        >>> grid.position(4)
        (1, 1)
    """

    rows: int = 2
    cols: int = 1

    def __post_init__(self) -> None:
        if not 1 <= self.rows <= MAX_GRID_SIZE:
            raise ValueError(f"rows must be in [1, {MAX_GRID_SIZE}]: {self.rows}")
        if not 1 <= self.cols <= MAX_GRID_SIZE:
            raise ValueError(f"cols must be in [1, {MAX_GRID_SIZE}]: {self.cols}")

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols

    def position(self, index: int) -> Tuple[int, int]:
        """(row, col) of a linear cell index."""
        if not 0 <= index < self.cell_count:
            raise IndexError(f"Cell index {index} outside grid of {self.cell_count} cells")
        return divmod(index, self.cols)

    def index(self, row: int, col: int) -> int:
        """Linear index of (row, col)."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Cell ({row}, {col}) outside {self}")
        return row * self.cols + col

    @classmethod
    def parse(cls, text: str) -> GridSpec:
        """
        Parse "ROWSxCOLS" (also accepts "X" and "×").

        Raises:
            ValueError: If the text is malformed or out of range
        """
        match = _GRID_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Grid must look like ROWSxCOLS, got {text!r}")
        return cls(rows=int(match.group(1)), cols=int(match.group(2)))

    def __str__(self) -> str:
        return f"{self.rows}x{self.cols}"


@dataclass(frozen=True)
class Padding:
    """Four-sided padding in mm, all >= 0."""

    top: float = DEFAULT_SHEET_PADDING_MM
    right: float = DEFAULT_SHEET_PADDING_MM
    bottom: float = DEFAULT_SHEET_PADDING_MM
    left: float = DEFAULT_SHEET_PADDING_MM

    def __post_init__(self) -> None:
        for name in ("top", "right", "bottom", "left"):
            _check_length(f"padding {name}", getattr(self, name))

    @classmethod
    def uniform(cls, value: float) -> Padding:
        return cls(value, value, value, value)

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


@dataclass(frozen=True)
class SpacingConfig:
    """
    Spacing constants for a layout pass (immutable).

    Attributes:
        sheet_padding: Space between sheet edge and the grid
        column_gap: Horizontal space between adjacent cells
        row_gap: Vertical space between adjacent cells
        cell_padding: Inset of the content area inside each cell

    Example:
        >>> spacing = SpacingConfig(sheet_padding=Padding.uniform(10), column_gap=5, row_gap=5)
        >>> spacing.with_cell_padding(0).cell_padding
        0
    """

    sheet_padding: Padding = field(default_factory=Padding)
    column_gap: float = DEFAULT_GAP_MM
    row_gap: float = DEFAULT_GAP_MM
    cell_padding: float = DEFAULT_CELL_PADDING_MM

    def __post_init__(self) -> None:
        _check_length("column_gap", self.column_gap)
        _check_length("row_gap", self.row_gap)
        _check_length("cell_padding", self.cell_padding)

    def with_cell_padding(self, value: float) -> SpacingConfig:
        return replace(self, cell_padding=value)

    def to_dict(self) -> dict:
        p = self.sheet_padding
        return {
            "sheet_padding": {"top": p.top, "right": p.right, "bottom": p.bottom, "left": p.left},
            "column_gap": self.column_gap,
            "row_gap": self.row_gap,
            "cell_padding": self.cell_padding,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SpacingConfig:
        """
        Build from a dict produced by to_dict().

        Missing keys fall back to defaults.

        Raises:
            ValueError: If a value is negative or not a number
            TypeError: If the structure is wrong
        """
        defaults = cls()
        padding_data = data.get("sheet_padding", {})
        base = defaults.sheet_padding
        padding = Padding(
            top=float(padding_data.get("top", base.top)),
            right=float(padding_data.get("right", base.right)),
            bottom=float(padding_data.get("bottom", base.bottom)),
            left=float(padding_data.get("left", base.left)),
        )
        return cls(
            sheet_padding=padding,
            column_gap=float(data.get("column_gap", defaults.column_gap)),
            row_gap=float(data.get("row_gap", defaults.row_gap)),
            cell_padding=float(data.get("cell_padding", defaults.cell_padding)),
        )
