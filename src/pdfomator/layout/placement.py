"""
Module: layout.placement

Purpose:
    Resolve where a piece of content is drawn inside its content area under
    the cell's fill policy. Pure and stateless apart from reading the
    Cover transform. Shared by the preview and the exporter.

Key Functions:
    - solve_placement(): natural size + target size + policy -> Placement

Key Classes:
    - Placement: Draw rect relative to the content-area origin + clip flag

Policies:
    - Fill: exactly the target rect, no clip
    - Contain: fit inside, centred on the free axis, no clip
    - Cover: fill both axes, centred, overflow clipped; the transform
      scales about the content-area centre and then translates (mm)

Dependencies:
    - core.models: Rect, Contain, Cover, Fill

Used By:
    - layout.plan: Per-cell draw instructions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from pdfomator.core.models import Contain, Cover, Fill, FillPolicy, Rect, Transform


@dataclass(frozen=True)
class Placement:
    """
    Resolved placement (immutable).

    Attributes:
        rect: Draw rectangle in mm, relative to the content-area origin
        needs_clip: Whether drawing must be constrained to the content area
    """

    rect: Rect
    needs_clip: bool


def solve_placement(
    natural_width: float,
    natural_height: float,
    target_width: float,
    target_height: float,
    policy: FillPolicy,
) -> Placement:
    """
    Compute the draw rectangle for content inside a target area.

    Args:
        natural_width: Content width in raster pixels
        natural_height: Content height in raster pixels
        target_width: Content-area width in mm
        target_height: Content-area height in mm
        policy: Contain(), Cover(transform) or Fill()

    Returns:
        Placement relative to the content-area origin

    Raises:
        ValueError: If any dimension is not positive, or the policy is unknown

    Example:
        >>> solve_placement(1000, 1000, 100, 50, Contain()).rect
        Rect(x=25.0, y=0.0, width=50.0, height=50.0)
    """
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(f"Natural size must be positive: {natural_width}x{natural_height}")
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Target size must be positive: {target_width}x{target_height}")

    if isinstance(policy, Fill):
        return Placement(Rect(0.0, 0.0, target_width, target_height), needs_clip=False)

    image_aspect = natural_width / natural_height
    target_aspect = target_width / target_height

    if isinstance(policy, Contain):
        width, height = _contain_size(image_aspect, target_aspect, target_width, target_height)
        x = (target_width - width) / 2
        y = (target_height - height) / 2
        return Placement(Rect(x, y, width, height), needs_clip=False)

    if isinstance(policy, Cover):
        base_width, base_height = _cover_size(image_aspect, target_aspect, target_width, target_height)
        rect = _apply_transform(base_width, base_height, target_width, target_height, policy.transform)
        return Placement(rect, needs_clip=True)

    raise ValueError(f"Unknown fill policy: {policy!r}")


def _contain_size(
    image_aspect: float,
    target_aspect: float,
    target_width: float,
    target_height: float,
) -> Tuple[float, float]:
    if image_aspect > target_aspect:
        # Wider than the target: fit to width
        width = target_width
        return width, width / image_aspect
    height = target_height
    return height * image_aspect, height


def _cover_size(
    image_aspect: float,
    target_aspect: float,
    target_width: float,
    target_height: float,
) -> Tuple[float, float]:
    if image_aspect > target_aspect:
        # Wider than the target: fit to height, overflow width
        height = target_height
        return height * image_aspect, height
    width = target_width
    return width, width / image_aspect


def _apply_transform(
    base_width: float,
    base_height: float,
    target_width: float,
    target_height: float,
    transform: Transform,
) -> Rect:
    # Identity transform yields the centred base placement exactly.
    center_x = target_width / 2
    center_y = target_height / 2
    width = base_width * transform.scale
    height = base_height * transform.scale
    return Rect(
        center_x - width / 2 + transform.translate_x,
        center_y - height / 2 + transform.translate_y,
        width,
        height,
    )
