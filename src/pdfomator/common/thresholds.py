"""Centralized tunables for gestures and rendering.

Everything here is a tunable, not a contract: tap detection thresholds,
wheel zoom steps and bands, transform scale bounds, and the raster scales
used when decoding PDF pages. Keeping them in one place makes tuning
easier and documents what each value controls.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GestureThresholds:
    """Thresholds for the per-cell gesture state machine."""

    # Transform scale bounds (multiplier on the base cover size)
    min_scale: float = 0.5
    max_scale: float = 5.0

    # Tap vs drag disambiguation
    tap_max_movement_px: float = 6.0  # Also the drag slop before panning starts
    tap_max_duration_s: float = 0.3

    # Wheel zoom: per-tick factor chosen by the current zoom band
    wheel_slow_factor: float = 1.05  # scale < wheel_slow_below
    wheel_normal_factor: float = 1.1
    wheel_fast_factor: float = 1.2  # scale >= wheel_fast_from
    wheel_slow_below: float = 1.0
    wheel_fast_from: float = 2.5

    def __post_init__(self) -> None:
        if self.min_scale <= 0:
            raise ValueError(f"min_scale must be positive: {self.min_scale}")
        if self.max_scale < self.min_scale:
            raise ValueError(
                f"max_scale must be >= min_scale: {self.max_scale} < {self.min_scale}"
            )
        if self.tap_max_movement_px < 0 or self.tap_max_duration_s < 0:
            raise ValueError("Tap thresholds must be non-negative")
        for factor in (self.wheel_slow_factor, self.wheel_normal_factor, self.wheel_fast_factor):
            if factor <= 1.0:
                raise ValueError(f"Wheel factors must be > 1: {factor}")

    def clamp_scale(self, scale: float) -> float:
        """Clamp a scale into [min_scale, max_scale]."""
        return max(self.min_scale, min(self.max_scale, scale))

    def wheel_factor(self, scale: float) -> float:
        """Per-tick zoom factor for the band the current scale falls in."""
        if scale < self.wheel_slow_below:
            return self.wheel_slow_factor
        if scale >= self.wheel_fast_from:
            return self.wheel_fast_factor
        return self.wheel_normal_factor


@dataclass(frozen=True)
class RenderThresholds:
    """Raster scales and resolutions for decoding and export."""

    # PDF pages are rasterized at scale 2 (144 dpi) for placement and at
    # 0.5 (36 dpi) for page-picker thumbnails.
    page_render_scale: float = 2.0
    thumbnail_render_scale: float = 0.5

    # Images larger than needed at this resolution are downsampled on export.
    # 0 disables downsampling.
    export_dpi: int = 300

    # Longest edge of image thumbnails (PDF thumbnails use the scale above)
    thumbnail_max_px: int = 240

    # Preview default width in screen pixels when none is given
    preview_width_px: int = 794  # A4 width at 96 dpi


GESTURE_THRESHOLDS = GestureThresholds()
RENDER_THRESHOLDS = RenderThresholds()
