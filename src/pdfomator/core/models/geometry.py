"""
Module: core.models.geometry

Purpose:
    Axis-aligned rectangle in sheet millimetres. Used for cell rectangles,
    content areas and placement rectangles. Rects are never stored on the
    layout state; they are recomputed from Sheet/GridSpec/SpacingConfig.

Key Classes:
    - Rect: (x, y, width, height) with top-left origin, y growing downwards
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Rectangle in millimetres (immutable).

    The origin is the top-left corner of the sheet and y grows downwards,
    matching the on-screen preview. Conversion to bottom-up PDF
    coordinates happens only in the renderer.

    Width and height may be any float; placement rectangles can be larger
    than their target and translated outside of it.

    Example:
        >>> r = Rect(10, 20, 100, 50)
        >>> r.right, r.bottom
        (110, 70)
        >>> r.inset(5)
        Rect(x=15, y=25, width=90, height=40)
    """

    x: float
    y: float
    width: float
    height: float

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def right(self) -> float:
        """X coordinate of the right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Y coordinate of the bottom edge."""
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        """(x, y) of the rectangle centre."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_empty(self) -> bool:
        """True when either dimension is not positive."""
        return self.width <= 0 or self.height <= 0

    # ─────────────────────────────────────────────────────────────────────────
    # Derived rectangles
    # ─────────────────────────────────────────────────────────────────────────

    def inset(self, amount: float) -> Rect:
        """Shrink by `amount` on all four sides."""
        return Rect(
            self.x + amount,
            self.y + amount,
            self.width - 2 * amount,
            self.height - 2 * amount,
        )

    def translated(self, dx: float, dy: float) -> Rect:
        """Same size, moved by (dx, dy)."""
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def scaled(self, factor: float) -> Rect:
        """All four values multiplied by `factor` (unit conversion)."""
        return Rect(
            self.x * factor,
            self.y * factor,
            self.width * factor,
            self.height * factor,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def contains(self, x: float, y: float) -> bool:
        """Check if a point lies inside. Left/top inclusive, right/bottom exclusive."""
        return self.x <= x < self.right and self.y <= y < self.bottom

    def intersects(self, other: Rect) -> bool:
        """True if the two rectangles share a region of positive area."""
        return not (
            self.right <= other.x
            or other.right <= self.x
            or self.bottom <= other.y
            or other.bottom <= self.y
        )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)
