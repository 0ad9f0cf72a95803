"""
Module: core.models.cells

Purpose:
    Per-cell state: attached content, the fill policy and, for cover mode,
    the interactive transform.

    The fill policy is a tagged variant - Contain, Cover(transform), Fill -
    so only Cover can carry a transform. Switching mode always builds a new
    policy, which resets the transform to identity.

Key Classes:
    - Transform: Scale and translate (mm) applied in cover mode
    - Contain, Cover, Fill: Fill policy variants
    - FillMode: Names the variants and cycles between them
    - Content: Decoded raster plus natural pixel size
    - Cell: One grid slot

Dependencies:
    - PIL: Image type
    - dataclasses (std)

Used By:
    - layout.placement: Reads policy and transform
    - layout.context: Owns the cells list
    - interaction.gestures: Replaces Cover transforms
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from PIL import Image


@dataclass(frozen=True)
class Transform:
    """
    Interactive adjustment of a cover-mode placement (immutable).

    Attributes:
        scale: Multiplier on the base cover size (clamped by the gesture
            controller, not here)
        translate_x: Horizontal offset in mm (unbounded)
        translate_y: Vertical offset in mm (unbounded)
    """

    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"scale must be positive: {self.scale}")

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.translate_x == 0.0 and self.translate_y == 0.0

    def translated(self, dx: float, dy: float) -> Transform:
        return Transform(self.scale, self.translate_x + dx, self.translate_y + dy)


IDENTITY = Transform()


class FillMode(str, Enum):
    """Names of the fill policies, in tap-cycle order."""

    CONTAIN = "contain"
    COVER = "cover"
    FILL = "fill"

    def next(self) -> FillMode:
        """contain -> cover -> fill -> contain."""
        order = list(FillMode)
        return order[(order.index(self) + 1) % len(order)]

    def policy(self) -> FillPolicy:
        """Fresh policy for this mode (identity transform for cover)."""
        if self is FillMode.COVER:
            return Cover()
        if self is FillMode.FILL:
            return Fill()
        return Contain()


@dataclass(frozen=True)
class Contain:
    """Scale to fit entirely inside the content area; letterbox the rest."""

    mode = FillMode.CONTAIN


@dataclass(frozen=True)
class Cover:
    """Scale to cover the whole content area; overflow is clipped."""

    transform: Transform = IDENTITY
    mode = FillMode.COVER


@dataclass(frozen=True)
class Fill:
    """Stretch to the content area exactly, ignoring aspect ratio."""

    mode = FillMode.FILL


FillPolicy = Union[Contain, Cover, Fill]


@dataclass(frozen=True, eq=False)
class Content:
    """
    Decoded raster content for one cell (immutable).

    The image is owned by the cell that references it; it is never shared
    between cells.

    Attributes:
        image: Decoded pixel data
        natural_width: Raster width in pixels (defaults to image width)
        natural_height: Raster height in pixels (defaults to image height)
        title: Display name, e.g. "report.pdf p3"
        source: File the content was decoded from, if any
        page_index: 0-based page within the source, if any
    """

    image: Image.Image
    natural_width: int = 0
    natural_height: int = 0
    title: str = ""
    source: Optional[Path] = None
    page_index: Optional[int] = None

    def __post_init__(self) -> None:
        # Frozen dataclass: fill in defaults via object.__setattr__
        if not self.natural_width:
            object.__setattr__(self, "natural_width", self.image.width)
        if not self.natural_height:
            object.__setattr__(self, "natural_height", self.image.height)
        if self.natural_width <= 0 or self.natural_height <= 0:
            raise ValueError(
                f"Content must have positive size: {self.natural_width}x{self.natural_height}"
            )

    @property
    def aspect_ratio(self) -> float:
        return self.natural_width / self.natural_height


@dataclass
class Cell:
    """
    One grid slot, addressed by row-major index.

    Attributes:
        index: 0-based row-major index
        content: Attached content, or None for an empty cell
        policy: Fill policy variant (Contain by default)
    """

    index: int
    content: Optional[Content] = None
    policy: FillPolicy = field(default_factory=Contain)

    @property
    def is_empty(self) -> bool:
        return self.content is None

    @property
    def mode(self) -> FillMode:
        return self.policy.mode

    @property
    def transform(self) -> Transform:
        """Cover transform, or identity for the other modes."""
        if isinstance(self.policy, Cover):
            return self.policy.transform
        return IDENTITY
