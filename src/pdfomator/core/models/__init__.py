"""
Module: core.models

Purpose:
    Data model for the layout engine: sheet configuration, cells, content,
    fill policies, transforms and rectangles.
"""

from .geometry import Rect
from .sheet import (
    MAX_GRID_SIZE,
    GridSpec,
    Padding,
    Sheet,
    SpacingConfig,
)
from .cells import (
    IDENTITY,
    Cell,
    Contain,
    Content,
    Cover,
    Fill,
    FillMode,
    FillPolicy,
    Transform,
)

__all__ = [
    "Rect",
    "MAX_GRID_SIZE",
    "GridSpec",
    "Padding",
    "Sheet",
    "SpacingConfig",
    "IDENTITY",
    "Cell",
    "Contain",
    "Content",
    "Cover",
    "Fill",
    "FillMode",
    "FillPolicy",
    "Transform",
]
