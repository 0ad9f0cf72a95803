"""
Module: gui.sheet_view

Purpose:
    Interactive sheet widget. Paints the current layout scaled to fit the
    widget and turns mouse, wheel and touch input into TransformController
    calls on the cell under the first pointer.

Key Classes:
    - SheetView: QWidget hosting one LayoutContext

Signals:
    - emptyCellClicked(int): An empty cell was clicked (attach content)
    - layoutEdited(): A transform, fill mode or cell content changed

Dependencies:
    - interaction.gestures: TransformController
    - gui.preview: paint_plan()

Used By:
    - gui.app: MainWindow
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from PySide6.QtCore import QEvent, QPointF, Qt, Signal
from PySide6.QtGui import QAction, QColor, QEventPoint, QPainter, QPen
from PySide6.QtWidgets import QMenu, QSizePolicy, QWidget

from pdfomator.core.models import FillMode
from pdfomator.interaction.gestures import GestureOutcome, TransformController
from pdfomator.layout.context import LayoutContext
from pdfomator.layout.coordinates import CoordinateMapper
from pdfomator.layout.grid import hit_test
from pdfomator.layout.plan import plan_sheet

from .preview import QImageCache, paint_plan

logger = logging.getLogger(__name__)

MOUSE_POINTER_ID = -1
VIEW_MARGIN_PX = 16
BACKGROUND_COLOR = QColor("#E6E6E6")
ACTIVE_OUTLINE_COLOR = QColor("#1E88E5")
WHEEL_STEP = 120.0


class SheetView(QWidget):
    """
    Displays a LayoutContext and edits it through a TransformController.

    The widget never changes grid, paper or spacing; the window does that
    and then calls layout_changed().
    """

    emptyCellClicked = Signal(int)
    layoutEdited = Signal()

    def __init__(
        self,
        context: LayoutContext,
        controller: Optional[TransformController] = None,
        parent: Optional[QWidget] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(parent)
        self._context = context
        self._controller = controller or TransformController(context)
        self._clock = clock
        self._cache = QImageCache()
        self._touch_cell: Optional[int] = None
        self._touch_points: Dict[int, QPointF] = {}

        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents)
        self.setMouseTracking(False)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(200, 200)

    @property
    def context(self) -> LayoutContext:
        return self._context

    @property
    def controller(self) -> TransformController:
        return self._controller

    # ─────────────────────────────────────────────────────────────────────────
    # Geometry
    # ─────────────────────────────────────────────────────────────────────────

    def sheet_mapper(self) -> CoordinateMapper:
        """Mapper for the sheet as currently displayed (fitted, centred)."""
        sheet = self._context.sheet
        avail_w = max(1, self.width() - 2 * VIEW_MARGIN_PX)
        avail_h = max(1, self.height() - 2 * VIEW_MARGIN_PX)
        scale = min(avail_w / sheet.width, avail_h / sheet.height)
        width_px = sheet.width * scale
        height_px = sheet.height * scale
        origin = ((self.width() - width_px) / 2, (self.height() - height_px) / 2)
        return CoordinateMapper.for_display(sheet, width_px, height_px, origin)

    def cell_at(self, x: float, y: float) -> Optional[int]:
        """Index of the cell under a widget point, or None."""
        x_mm, y_mm = self.sheet_mapper().screen_to_sheet(x, y)
        return hit_test(self._context.cell_rects(), x_mm, y_mm)

    def layout_changed(self) -> None:
        """Call after grid, paper or spacing changed. Drops open gestures."""
        self._controller.cancel_all()
        self._touch_cell = None
        self._touch_points.clear()
        self.update()

    # ─────────────────────────────────────────────────────────────────────────
    # Cell actions
    # ─────────────────────────────────────────────────────────────────────────

    def remove_content(self, index: int) -> None:
        self._controller.discard(index)
        if self._context.remove_content(index) is not None:
            self._edited()

    def set_fill_mode(self, index: int, mode: FillMode) -> None:
        self._controller.discard(index)
        self._context.set_fill_mode(index, mode)
        self._edited()

    def reset_transform(self, index: int) -> None:
        self._apply(self._controller.reset(index))

    # ─────────────────────────────────────────────────────────────────────────
    # Painting
    # ─────────────────────────────────────────────────────────────────────────

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), BACKGROUND_COLOR)

        mapper = self.sheet_mapper()
        plan = plan_sheet(self._context)
        paint_plan(painter, plan, mapper, self._cache)

        pen = QPen(ACTIVE_OUTLINE_COLOR, 2)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        for index in self._controller.active_cells():
            r = mapper.rect_to_screen(plan.cell_rects[index])
            painter.drawRect(int(r.x), int(r.y), int(r.width), int(r.height))
        painter.end()

    # ─────────────────────────────────────────────────────────────────────────
    # Mouse
    # ─────────────────────────────────────────────────────────────────────────

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        index = self.cell_at(pos.x(), pos.y())
        if index is None:
            return
        if self._context.cell(index).is_empty:
            self.emptyCellClicked.emit(index)
            return
        self._controller.pointer_down(
            index, MOUSE_POINTER_ID, pos.x(), pos.y(), self._clock(), self.sheet_mapper()
        )
        self.update()

    def mouseMoveEvent(self, event):
        # Mouse tracking is off: moves only arrive while a button is held
        pos = event.position()
        self._apply(self._controller.pointer_move(MOUSE_POINTER_ID, pos.x(), pos.y(), self._clock()))

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        pos = event.position()
        self._apply(self._controller.pointer_up(MOUSE_POINTER_ID, pos.x(), pos.y(), self._clock()))
        self.update()

    def mouseDoubleClickEvent(self, event):
        pos = event.position()
        index = self.cell_at(pos.x(), pos.y())
        if index is None or self._context.cell(index).is_empty:
            return
        self.reset_transform(index)

    def wheelEvent(self, event):
        pos = event.position()
        index = self.cell_at(pos.x(), pos.y())
        steps = event.angleDelta().y() / WHEEL_STEP
        if index is None or steps == 0:
            event.ignore()
            return
        outcome = self._controller.wheel(index, steps)
        if outcome is GestureOutcome.NONE:
            event.ignore()
            return
        event.accept()
        self._apply(outcome)

    def contextMenuEvent(self, event):
        index = self.cell_at(event.pos().x(), event.pos().y())
        if index is None or self._context.cell(index).is_empty:
            return
        cell = self._context.cell(index)

        menu = QMenu(self)
        for mode in FillMode:
            action = QAction(mode.value.capitalize(), menu)
            action.setCheckable(True)
            action.setChecked(cell.mode is mode)
            action.triggered.connect(lambda _=False, m=mode: self.set_fill_mode(index, m))
            menu.addAction(action)
        menu.addSeparator()
        reset_action = menu.addAction("Reset position")
        reset_action.setEnabled(cell.mode is FillMode.COVER and not cell.transform.is_identity)
        reset_action.triggered.connect(lambda: self.reset_transform(index))
        remove_action = menu.addAction("Remove")
        remove_action.triggered.connect(lambda: self.remove_content(index))
        menu.exec(event.globalPos())

    # ─────────────────────────────────────────────────────────────────────────
    # Touch
    # ─────────────────────────────────────────────────────────────────────────

    def event(self, event):
        if event.type() in (
            QEvent.Type.TouchBegin,
            QEvent.Type.TouchUpdate,
            QEvent.Type.TouchEnd,
            QEvent.Type.TouchCancel,
        ):
            self._handle_touch(event)
            event.accept()
            return True
        return super().event(event)

    def _handle_touch(self, event) -> None:
        now = self._clock()
        if event.type() == QEvent.Type.TouchCancel:
            for pointer_id in list(self._touch_points):
                self._controller.pointer_cancel(pointer_id)
            self._touch_points.clear()
            self._touch_cell = None
            self.update()
            return

        for point in event.points():
            pointer_id = point.id()
            pos = point.position()
            state = point.state()

            if state == QEventPoint.State.Pressed:
                self._touch_points[pointer_id] = pos
                self._touch_down(pointer_id, pos, now)
            elif state == QEventPoint.State.Released:
                self._touch_points.pop(pointer_id, None)
                self._apply(self._controller.pointer_up(pointer_id, pos.x(), pos.y(), now))
            elif state == QEventPoint.State.Updated:
                self._touch_points[pointer_id] = pos
                self._apply(self._controller.pointer_move(pointer_id, pos.x(), pos.y(), now))

        if not self._touch_points:
            self._touch_cell = None
        self.update()

    def _touch_down(self, pointer_id: int, pos: QPointF, now: float) -> None:
        index = self._touch_cell
        if index is None or self._controller.pointer_count(index) == 0:
            index = self.cell_at(pos.x(), pos.y())
        if index is None:
            return
        if self._context.cell(index).is_empty:
            if self._touch_cell is None:
                self.emptyCellClicked.emit(index)
            return
        self._touch_cell = index
        self._controller.pointer_down(index, pointer_id, pos.x(), pos.y(), now, self.sheet_mapper())

    def _apply(self, outcome: GestureOutcome) -> None:
        if outcome is GestureOutcome.NONE:
            return
        self._edited()

    def _edited(self) -> None:
        self.update()
        self.layoutEdited.emit()
