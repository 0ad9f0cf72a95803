"""
Module: interaction.gestures

Purpose:
    Per-cell gesture state machine that turns pointer, touch and wheel
    input into cover-mode transform updates, and taps into fill-mode
    changes.

Key Classes:
    - TransformController: Routes pointer events to per-cell sessions
    - GestureState: IDLE / INTERACTING
    - GestureOutcome: What changed, so the view knows what to repaint

States:
    IDLE --pointer down on a populated cell--> INTERACTING
    INTERACTING --last pointer up / cancelled--> IDLE

Rules:
    - A session snapshots the transform and pointer positions when it
      starts. Every update is computed as snapshot + delta from the
      session start, never accumulated frame over frame.
    - One pointer pans. Two pointers pinch: scale by the distance ratio,
      pan by the centroid delta.
    - Gaining or losing a pointer re-bases the snapshot (no jump).
    - Movement below the drag slop never mutates the transform. A short
      single-pointer press that stays within the slop is a tap and cycles
      the fill mode instead.
    - Scale is clamped to [min_scale, max_scale] after every update;
      translate is unbounded.
    - One session per cell; sessions on different cells share nothing.

Dependencies:
    - layout.context: LayoutContext (reads cells, writes transforms)
    - layout.coordinates: CoordinateMapper (captured per session)
    - common.thresholds: GestureThresholds

Used By:
    - gui.sheet_view: SheetView event handlers
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pdfomator.common.thresholds import GESTURE_THRESHOLDS, GestureThresholds
from pdfomator.core.errors import GestureSessionConflict
from pdfomator.core.models import Cover, Transform
from pdfomator.layout.context import LayoutContext
from pdfomator.layout.coordinates import CoordinateMapper

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class GestureState(str, Enum):
    IDLE = "idle"
    INTERACTING = "interacting"


class GestureOutcome(str, Enum):
    NONE = "none"
    TRANSFORM_CHANGED = "transform_changed"
    FILL_MODE_CHANGED = "fill_mode_changed"


@dataclass
class _GestureSession:
    """
    Snapshot state for one cell's active gesture.

    Attributes:
        cell_index: Cell the session belongs to
        mapper: Screen -> sheet mapping captured at session start
        started_at: Timestamp of the first pointer down (seconds)
        start_transform: Transform when the session was (re-)based
        start_points: Pointer positions when the session was (re-)based
        points: Current pointer positions, in arrival order
        primary_origin: Where the first pointer went down (tap detection)
        max_pointers: Most pointers seen at once
        dragging: Movement exceeded the drag slop at some point
    """

    cell_index: int
    mapper: CoordinateMapper
    started_at: float
    start_transform: Transform
    start_points: Dict[int, Point] = field(default_factory=dict)
    points: Dict[int, Point] = field(default_factory=dict)
    primary_origin: Point = (0.0, 0.0)
    max_pointers: int = 1
    dragging: bool = False

    def rebase(self, transform: Transform) -> None:
        """Take a fresh snapshot from the current transform and positions."""
        self.start_transform = transform
        self.start_points = dict(self.points)

    def tracked_pair(self) -> List[int]:
        """The (at most two) pointers driving the gesture."""
        return list(self.points)[:2]


class TransformController:
    """
    Gesture state machine over a LayoutContext.

    All methods are synchronous and return a GestureOutcome. Pointer ids
    are opaque integers chosen by the caller (mouse = -1, touch points use
    their device ids); timestamps are seconds on any monotonic clock.

    Example:
        >>> context.attach_content(0, content, FillMode.COVER)
        >>> controller = TransformController(context)
        >>> mapper = CoordinateMapper(210, 297, 420, 594)
        >>> controller.pointer_down(0, pointer_id=1, x=100, y=100, timestamp=0.0, mapper=mapper)
        <GestureOutcome.NONE: 'none'>
        >>> controller.pointer_move(1, 140, 100, timestamp=0.1)
        <GestureOutcome.TRANSFORM_CHANGED: 'transform_changed'>
    """

    def __init__(
        self,
        context: LayoutContext,
        thresholds: GestureThresholds = GESTURE_THRESHOLDS,
    ) -> None:
        self._context = context
        self._thresholds = thresholds
        self._sessions: Dict[int, _GestureSession] = {}
        self._pointer_cells: Dict[int, int] = {}

    @property
    def thresholds(self) -> GestureThresholds:
        return self._thresholds

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def state(self, cell_index: int) -> GestureState:
        if cell_index in self._sessions:
            return GestureState.INTERACTING
        return GestureState.IDLE

    def active_cells(self) -> List[int]:
        return list(self._sessions)

    def cell_for_pointer(self, pointer_id: int) -> Optional[int]:
        return self._pointer_cells.get(pointer_id)

    def pointer_count(self, cell_index: int) -> int:
        session = self._sessions.get(cell_index)
        return len(session.points) if session else 0

    # ─────────────────────────────────────────────────────────────────────────
    # Pointer / touch input
    # ─────────────────────────────────────────────────────────────────────────

    def pointer_down(
        self,
        cell_index: int,
        pointer_id: int,
        x: float,
        y: float,
        timestamp: float,
        mapper: CoordinateMapper,
    ) -> GestureOutcome:
        """
        A pointer went down on a cell.

        Opens a session on populated cells, or joins the cell's session as
        the second pointer of a pinch. Empty cells are ignored.
        """
        cell = self._context.cell(cell_index)
        if cell.is_empty:
            return GestureOutcome.NONE

        if pointer_id in self._pointer_cells:
            # Press without a release for this pointer: the old one is gone.
            self._release_pointer(pointer_id)

        session = self._sessions.get(cell_index)
        if session is not None and len(session.points) == 1:
            session.points[pointer_id] = (x, y)
            session.max_pointers = max(session.max_pointers, len(session.points))
            session.rebase(cell.transform)
            self._pointer_cells[pointer_id] = cell_index
            logger.debug(f"Cell {cell_index}: pointer {pointer_id} joined, session re-based")
            return GestureOutcome.NONE

        try:
            self._open_session(cell_index, pointer_id, (x, y), timestamp, mapper)
        except GestureSessionConflict as e:
            logger.debug(f"{e}; discarding the stale session")
            self._discard_session(cell_index)
            self._open_session(cell_index, pointer_id, (x, y), timestamp, mapper)
        return GestureOutcome.NONE

    def pointer_move(self, pointer_id: int, x: float, y: float, timestamp: float) -> GestureOutcome:
        """A tracked pointer moved. Untracked pointers are ignored."""
        cell_index = self._pointer_cells.get(pointer_id)
        if cell_index is None:
            return GestureOutcome.NONE
        session = self._sessions[cell_index]
        session.points[pointer_id] = (x, y)
        return self._update(session)

    def pointer_up(self, pointer_id: int, x: float, y: float, timestamp: float) -> GestureOutcome:
        """
        A tracked pointer was released.

        Applies the final position, then either re-bases the session on the
        remaining pointer or ends it. Ending a session that never became a
        drag within the tap duration cycles the fill mode.
        """
        cell_index = self._pointer_cells.get(pointer_id)
        if cell_index is None:
            return GestureOutcome.NONE
        session = self._sessions[cell_index]

        outcome = self.pointer_move(pointer_id, x, y, timestamp)
        self._release_pointer(pointer_id)

        if cell_index in self._sessions:
            return outcome

        if self._is_tap(session, timestamp):
            cell = self._context.cell(cell_index)
            if cell.is_empty:
                return outcome
            mode = self._context.cycle_fill_mode(cell_index)
            logger.debug(f"Cell {cell_index}: tap, fill mode -> {mode.value}")
            return GestureOutcome.FILL_MODE_CHANGED
        return outcome

    def pointer_cancel(self, pointer_id: int) -> GestureOutcome:
        """A pointer was lost (touch cancel, focus loss). Never counts as a tap."""
        cell_index = self._pointer_cells.get(pointer_id)
        if cell_index is None:
            return GestureOutcome.NONE
        self._sessions[cell_index].dragging = True
        self._release_pointer(pointer_id)
        return GestureOutcome.NONE

    # ─────────────────────────────────────────────────────────────────────────
    # Wheel / reset
    # ─────────────────────────────────────────────────────────────────────────

    def wheel(self, cell_index: int, steps: float) -> GestureOutcome:
        """
        Zoom a cover cell by wheel ticks.

        Positive steps zoom in, negative zoom out; fractional steps (high
        resolution wheels, trackpads) are allowed. The per-tick factor
        depends on the current zoom band. Translate is untouched.
        """
        cell = self._context.cell(cell_index)
        if cell.is_empty or not isinstance(cell.policy, Cover) or steps == 0:
            return GestureOutcome.NONE

        current = cell.policy.transform
        factor = self._thresholds.wheel_factor(current.scale)
        scale = self._thresholds.clamp_scale(current.scale * factor ** steps)
        if scale == current.scale:
            return GestureOutcome.NONE

        updated = Transform(scale, current.translate_x, current.translate_y)
        self._context.set_transform(cell_index, updated)

        session = self._sessions.get(cell_index)
        if session is not None:
            session.rebase(updated)
        return GestureOutcome.TRANSFORM_CHANGED

    def reset(self, cell_index: int) -> GestureOutcome:
        """Set the cell's transform to identity. Always legal."""
        changed = self._context.reset_transform(cell_index)
        session = self._sessions.get(cell_index)
        if session is not None:
            session.rebase(self._context.cell(cell_index).transform)
        if changed:
            return GestureOutcome.TRANSFORM_CHANGED
        return GestureOutcome.NONE

    def discard(self, cell_index: int) -> None:
        """Drop the cell's session without applying anything."""
        self._discard_session(cell_index)

    def cancel_all(self) -> None:
        """Drop every session, e.g. after the grid was reshaped."""
        for cell_index in list(self._sessions):
            self._discard_session(cell_index)

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _open_session(
        self,
        cell_index: int,
        pointer_id: int,
        point: Point,
        timestamp: float,
        mapper: CoordinateMapper,
    ) -> None:
        if cell_index in self._sessions:
            raise GestureSessionConflict(cell_index)
        cell = self._context.cell(cell_index)
        session = _GestureSession(
            cell_index=cell_index,
            mapper=mapper,
            started_at=timestamp,
            start_transform=cell.transform,
            primary_origin=point,
        )
        session.points[pointer_id] = point
        session.rebase(cell.transform)
        self._sessions[cell_index] = session
        self._pointer_cells[pointer_id] = cell_index
        logger.debug(f"Cell {cell_index}: session started ({cell.mode.value})")

    def _discard_session(self, cell_index: int) -> None:
        session = self._sessions.pop(cell_index, None)
        if session is None:
            return
        for pointer_id in session.points:
            self._pointer_cells.pop(pointer_id, None)

    def _release_pointer(self, pointer_id: int) -> None:
        cell_index = self._pointer_cells.pop(pointer_id)
        session = self._sessions[cell_index]
        session.points.pop(pointer_id, None)
        if session.points:
            session.rebase(self._context.cell(cell_index).transform)
            logger.debug(f"Cell {cell_index}: pointer {pointer_id} lifted, session re-based")
        else:
            del self._sessions[cell_index]
            logger.debug(f"Cell {cell_index}: session ended")

    def _update(self, session: _GestureSession) -> GestureOutcome:
        if not session.dragging:
            if session.max_pointers > 1 or self._primary_travel(session) > self._thresholds.tap_max_movement_px:
                session.dragging = True
            else:
                return GestureOutcome.NONE

        cell = self._context.cell(session.cell_index)
        if cell.is_empty or not isinstance(cell.policy, Cover):
            return GestureOutcome.NONE

        updated = self._compute_transform(session)
        if updated == cell.policy.transform:
            return GestureOutcome.NONE
        self._context.set_transform(session.cell_index, updated)
        return GestureOutcome.TRANSFORM_CHANGED

    def _compute_transform(self, session: _GestureSession) -> Transform:
        ids = session.tracked_pair()
        start = session.start_transform

        if len(ids) >= 2:
            a, b = ids
            start_center, start_distance = _centroid_and_distance(session.start_points[a], session.start_points[b])
            center, distance = _centroid_and_distance(session.points[a], session.points[b])
            ratio = distance / start_distance if start_distance > 0 else 1.0
            dx_px = center[0] - start_center[0]
            dy_px = center[1] - start_center[1]
        else:
            (sx, sy), (x, y) = session.start_points[ids[0]], session.points[ids[0]]
            ratio = 1.0
            dx_px, dy_px = x - sx, y - sy

        dx_mm, dy_mm = session.mapper.screen_delta_to_mm(dx_px, dy_px)
        return Transform(
            self._thresholds.clamp_scale(start.scale * ratio),
            start.translate_x + dx_mm,
            start.translate_y + dy_mm,
        )

    def _primary_travel(self, session: _GestureSession) -> float:
        ids = session.tracked_pair()
        if not ids:
            return 0.0
        x, y = session.points[ids[0]]
        ox, oy = session.primary_origin
        return math.hypot(x - ox, y - oy)

    def _is_tap(self, session: _GestureSession, timestamp: float) -> bool:
        return (
            not session.dragging
            and session.max_pointers == 1
            and timestamp - session.started_at <= self._thresholds.tap_max_duration_s
        )


def _centroid_and_distance(a: Point, b: Point) -> Tuple[Point, float]:
    center = ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)
    return center, math.hypot(b[0] - a[0], b[1] - a[1])
