"""Shared configuration: paper table and tunable thresholds."""

from .paper import (
    DEFAULT_PAPER_SIZE,
    PAPER_SIZES,
    Orientation,
    canonical_paper_name,
    paper_dimensions,
)
from .thresholds import (
    GESTURE_THRESHOLDS,
    RENDER_THRESHOLDS,
    GestureThresholds,
    RenderThresholds,
)

__all__ = [
    "DEFAULT_PAPER_SIZE",
    "PAPER_SIZES",
    "Orientation",
    "canonical_paper_name",
    "paper_dimensions",
    "GESTURE_THRESHOLDS",
    "RENDER_THRESHOLDS",
    "GestureThresholds",
    "RenderThresholds",
]
