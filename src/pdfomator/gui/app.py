"""
Main window and entry point for the PDFomator GUI.

The window owns one LayoutContext and one SheetView. Toolbar actions
change paper, orientation and grid; clicking an empty cell attaches a PDF
page or an image; Ctrl+E exports. Multi-page PDFs open a page picker whose
thumbnails are rendered by a cancellable loop (Esc cancels).
"""
from __future__ import annotations

import logging
import queue
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtCore import QCoreApplication, QSize, Qt, QTimer
from PySide6.QtGui import QAction, QIcon, QKeySequence, QPixmap, QShortcut
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QSpinBox,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from pdfomator import __version__
from pdfomator.common.paper import PAPER_SIZES, Orientation
from pdfomator.core.errors import DecodeFailure, ExportFailure, InvalidLayout
from pdfomator.core.models import MAX_GRID_SIZE, GridSpec
from pdfomator.images.sources import ContentSource, load_content, open_source
from pdfomator.images.thumbnails import Thumbnail, ThumbnailBatch, ThumbnailRunner
from pdfomator.layout.context import LayoutContext
from pdfomator.output.renderer import ExportResult, default_export_filename, render_to_pdf

from .logging_utils import (
    attach_queue_handler,
    detach_queue_handler,
    status_text,
    status_timeout_ms,
)
from .preview import pil_to_qimage
from .settings import SettingsStore, default_settings_path
from .sheet_view import SheetView

logger = logging.getLogger(__name__)

APP_NAME = "PDFomator"
OPEN_FILTER = "PDFs and images (*.pdf *.png *.jpg *.jpeg *.bmp *.gif *.tif *.tiff *.webp);;All files (*)"
THUMBNAIL_ICON_SIZE = QSize(160, 220)


class PagePickerDialog(QDialog):
    """Pick one page of a multi-page source from its thumbnails."""

    def __init__(self, source: ContentSource, runner: ThumbnailRunner, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._source = source
        self._runner = runner
        self.batch: Optional[ThumbnailBatch] = None

        self.setWindowTitle(f"Choose a page: {source.name}")
        self.resize(720, 520)

        layout = QVBoxLayout(self)
        self.status_label = QLabel(f"Rendering {source.page_count} pages...")
        layout.addWidget(self.status_label)

        self.page_list = QListWidget()
        self.page_list.setViewMode(QListWidget.ViewMode.IconMode)
        self.page_list.setIconSize(THUMBNAIL_ICON_SIZE)
        self.page_list.setResizeMode(QListWidget.ResizeMode.Adjust)
        self.page_list.itemDoubleClicked.connect(lambda _item: self.accept())
        layout.addWidget(self.page_list)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def showEvent(self, event):
        super().showEvent(event)
        if self.batch is None and not self._runner.running:
            QTimer.singleShot(0, self.load_thumbnails)

    def load_thumbnails(self) -> ThumbnailBatch:
        self.batch = self._runner.start(self._source, on_thumbnail=self._add_thumbnail)
        if self.batch.cancelled:
            self.status_label.setText("Thumbnail rendering cancelled")
        else:
            self.status_label.setText(f"{self._source.page_count} pages")
        return self.batch

    def selected_page(self) -> Optional[int]:
        item = self.page_list.currentItem()
        if item is None:
            return None
        return item.data(Qt.ItemDataRole.UserRole)

    def done(self, result):
        self._runner.cancel()
        super().done(result)

    def _add_thumbnail(self, thumb: Thumbnail) -> None:
        icon = QIcon(QPixmap.fromImage(pil_to_qimage(thumb.image)))
        item = QListWidgetItem(icon, f"Page {thumb.page_index + 1}")
        item.setData(Qt.ItemDataRole.UserRole, thumb.page_index)
        self.page_list.addItem(item)
        if self.page_list.currentItem() is None:
            self.page_list.setCurrentItem(item)


class MainWindow(QMainWindow):
    def __init__(self, settings: SettingsStore, context: Optional[LayoutContext] = None):
        super().__init__()
        self.settings = settings
        self.context = context or settings.build_context()
        self.thumbnail_runner = ThumbnailRunner(yield_control=QCoreApplication.processEvents)

        self.setWindowTitle(f"{APP_NAME} {__version__}")
        self.resize(1000, 900)

        self.view = SheetView(self.context, parent=self)
        self.view.emptyCellClicked.connect(self._on_empty_cell_clicked)
        self.view.layoutEdited.connect(self._on_layout_edited)
        self.setCentralWidget(self.view)

        self._build_toolbar()

        cancel_shortcut = QShortcut(QKeySequence(Qt.Key.Key_Escape), self)
        cancel_shortcut.activated.connect(self.cancel_thumbnails)

        # Initialize Logging
        self.log_queue: queue.Queue = queue.Queue()
        self._log_handler = attach_queue_handler(self.log_queue)
        self.log_timer = QTimer(self)
        self.log_timer.timeout.connect(self._drain_log_queue)
        self.log_timer.start(100)

        self._sync_controls()

    # ─────────────────────────────────────────────────────────────────────────
    # Toolbar
    # ─────────────────────────────────────────────────────────────────────────

    def _build_toolbar(self) -> None:
        toolbar = QToolBar("Layout")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.paper_combo = QComboBox()
        self.paper_combo.addItems(list(PAPER_SIZES))
        self.paper_combo.currentTextChanged.connect(self.set_paper)
        toolbar.addWidget(QLabel(" Paper "))
        toolbar.addWidget(self.paper_combo)

        self.orientation_action = QAction("Landscape", self)
        self.orientation_action.setCheckable(True)
        self.orientation_action.toggled.connect(self._on_orientation_toggled)
        toolbar.addAction(self.orientation_action)
        toolbar.addSeparator()

        self.rows_spin = QSpinBox()
        self.rows_spin.setRange(1, MAX_GRID_SIZE)
        self.cols_spin = QSpinBox()
        self.cols_spin.setRange(1, MAX_GRID_SIZE)
        self.rows_spin.valueChanged.connect(self._on_grid_spin_changed)
        self.cols_spin.valueChanged.connect(self._on_grid_spin_changed)
        toolbar.addWidget(QLabel(" Rows "))
        toolbar.addWidget(self.rows_spin)
        toolbar.addWidget(QLabel(" Cols "))
        toolbar.addWidget(self.cols_spin)
        toolbar.addSeparator()

        self.export_action = QAction("Export PDF", self)
        self.export_action.setShortcut(QKeySequence("Ctrl+E"))
        self.export_action.triggered.connect(self.export)
        toolbar.addAction(self.export_action)

    def _sync_controls(self) -> None:
        """Reflect the context in the toolbar without re-triggering handlers."""
        sheet = self.context.sheet
        grid = self.context.grid
        for widget in (self.paper_combo, self.orientation_action, self.rows_spin, self.cols_spin):
            widget.blockSignals(True)
        self.paper_combo.setCurrentText(sheet.paper_size or "")
        self.orientation_action.setChecked(sheet.orientation is Orientation.LANDSCAPE)
        self.rows_spin.setValue(grid.rows)
        self.cols_spin.setValue(grid.cols)
        for widget in (self.paper_combo, self.orientation_action, self.rows_spin, self.cols_spin):
            widget.blockSignals(False)
        self.export_action.setEnabled(self.context.has_content)

    # ─────────────────────────────────────────────────────────────────────────
    # Layout actions
    # ─────────────────────────────────────────────────────────────────────────

    def set_paper(self, name: str) -> bool:
        return self._apply_layout_change(lambda: self.context.set_paper(name))

    def set_orientation(self, orientation: Orientation) -> bool:
        return self._apply_layout_change(lambda: self.context.set_orientation(orientation))

    def set_grid(self, grid: GridSpec, confirm: bool = True) -> bool:
        """
        Reshape the grid. Asks before discarding populated cells when
        `confirm` is set. Returns True if the grid changed.
        """
        discarded = self.context.cells_discarded_by(grid)
        if discarded and confirm:
            titles = "\n".join(cell.content.title for cell in discarded if cell.content)
            answer = QMessageBox.question(
                self,
                "Discard content?",
                f"Changing the grid to {grid} removes:\n{titles}",
            )
            if answer != QMessageBox.StandardButton.Yes:
                self._sync_controls()
                return False
        return self._apply_layout_change(lambda: self.context.set_grid(grid))

    def _apply_layout_change(self, change) -> bool:
        try:
            change()
        except InvalidLayout as e:
            logger.warning(f"Layout not changed: {e}")
            self._sync_controls()
            return False
        self.settings.save_layout(self.context)
        self.view.layout_changed()
        self._sync_controls()
        return True

    def _on_orientation_toggled(self, checked: bool) -> None:
        self.set_orientation(Orientation.LANDSCAPE if checked else Orientation.PORTRAIT)

    def _on_grid_spin_changed(self, _value: int) -> None:
        self.set_grid(GridSpec(rows=self.rows_spin.value(), cols=self.cols_spin.value()))

    def _on_layout_edited(self) -> None:
        self._sync_controls()

    # ─────────────────────────────────────────────────────────────────────────
    # Content
    # ─────────────────────────────────────────────────────────────────────────

    def _on_empty_cell_clicked(self, index: int) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Add PDF or image", "", OPEN_FILTER)
        if path:
            self.attach_file(index, Path(path))

    def attach_file(self, index: int, path: Path, page_index: Optional[int] = None) -> bool:
        """
        Decode a file and attach one page to a cell.

        For multi-page sources without an explicit page, the page picker
        is shown. Returns True if content was attached.
        """
        try:
            with open_source(path) as source:
                if page_index is None:
                    page_index = self._choose_page(source)
                    if page_index is None:
                        return False
                content = load_content(source, page_index)
        except (DecodeFailure, IndexError) as e:
            logger.error(f"Could not add {Path(path).name}: {e}")
            QMessageBox.warning(self, "Could not add file", str(e))
            return False

        self.context.attach_content(index, content)
        self.view.update()
        self._sync_controls()
        return True

    def _choose_page(self, source: ContentSource) -> Optional[int]:
        if source.page_count == 1:
            return 0
        dialog = PagePickerDialog(source, self.thumbnail_runner, self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return None
        return dialog.selected_page()

    def cancel_thumbnails(self) -> None:
        if self.thumbnail_runner.cancel():
            logger.info("Thumbnail rendering cancelled")

    # ─────────────────────────────────────────────────────────────────────────
    # Export
    # ─────────────────────────────────────────────────────────────────────────

    def export(self) -> None:
        if not self.context.has_content:
            QMessageBox.information(self, "Nothing to export", "Add a PDF page or image to a cell first.")
            return
        start_dir = self.settings.get_last_export_dir() or str(Path.home())
        suggested = str(Path(start_dir) / default_export_filename())
        path, _ = QFileDialog.getSaveFileName(self, "Export PDF", suggested, "PDF (*.pdf)")
        if not path:
            return
        result = self.export_to(Path(path))
        if result is not None and result.failures:
            skipped = "\n".join(f"Cell {f.index + 1} ({f.title}): {f.reason}" for f in result.failures)
            QMessageBox.warning(self, "Some cells were skipped", skipped)

    def export_to(self, path: Path) -> Optional[ExportResult]:
        """Export without dialogs. Returns None if the export failed."""
        try:
            result = render_to_pdf(self.context, path)
        except (ExportFailure, InvalidLayout) as e:
            logger.error(f"Export failed: {e}")
            QMessageBox.critical(self, "Export failed", str(e))
            return None
        self.settings.set_last_export_dir(str(path.parent))
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────

    def _drain_log_queue(self) -> None:
        while True:
            try:
                message = self.log_queue.get_nowait()
            except queue.Empty:
                break
            self.statusBar().showMessage(status_text(message), status_timeout_ms(message))

    def closeEvent(self, event):
        self.thumbnail_runner.cancel()
        self.log_timer.stop()
        detach_queue_handler(self._log_handler)
        super().closeEvent(event)


def run(paths: Sequence[Path] = ()) -> int:
    """
    Main entry point for the GUI application.

    Files given on the command line fill cells in order (first page of
    each PDF).
    """
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)

    settings = SettingsStore(default_settings_path())
    window = MainWindow(settings)

    paths: List[Path] = [Path(p) for p in paths]
    cell_count = window.context.grid.cell_count
    if len(paths) > cell_count:
        logger.warning(f"Only {cell_count} cells available; ignoring {len(paths) - cell_count} file(s)")
    for index, path in enumerate(paths[:cell_count]):
        window.attach_file(index, path, page_index=0)

    window.show()
    return app.exec()
