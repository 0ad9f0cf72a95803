"""
Settings persistence for the PDFomator window.

Stores the layout preferences (paper, orientation, grid, spacing) and the
last export directory in a JSON file. Any malformed data falls back to
defaults, never crashes.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import QObject, QStandardPaths, Signal

from pdfomator.common.paper import DEFAULT_PAPER_SIZE, Orientation, canonical_paper_name
from pdfomator.core.errors import InvalidLayout
from pdfomator.core.models import GridSpec, Sheet, SpacingConfig
from pdfomator.layout.context import LayoutContext

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"


def default_settings_path() -> Path:
    """settings.json in the per-user application data directory."""
    app_data = Path(QStandardPaths.writableLocation(
        QStandardPaths.StandardLocation.AppLocalDataLocation
    ))
    return app_data / SETTINGS_FILENAME


class SettingsStore(QObject):
    """Lightweight JSON-backed store for persisting layout preferences."""

    layoutChanged = Signal()
    CURRENT_VERSION = 1

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path
        self.data: Dict[str, object] = {}
        self.load_error: Optional[str] = None

        if self.path.exists():
            try:
                self.data = json.loads(self.path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                self.load_error = f"Settings file is corrupted: {e}"
                self.data = {}
            except OSError as e:
                self.load_error = f"Failed to read settings: {e}"
                self.data = {}
            if self.load_error:
                logger.warning(f"{self.load_error}; using defaults")

        if "version" not in self._get_dict():
            self.data["version"] = self.CURRENT_VERSION

    # ─────────────────────────────────────────────────────────────────────────
    # Layout preferences
    # ─────────────────────────────────────────────────────────────────────────

    def get_paper(self) -> str:
        raw = self._get_dict().get("paper")
        try:
            return canonical_paper_name(str(raw)) if raw else DEFAULT_PAPER_SIZE
        except KeyError:
            logger.debug(f"Ignoring unknown paper size in settings: {raw!r}")
            return DEFAULT_PAPER_SIZE

    def get_orientation(self) -> Orientation:
        try:
            return Orientation(self._get_dict().get("orientation", Orientation.PORTRAIT.value))
        except ValueError:
            return Orientation.PORTRAIT

    def get_grid(self) -> GridSpec:
        raw = self._get_dict().get("grid")
        if isinstance(raw, dict):
            try:
                return GridSpec(rows=int(raw.get("rows", 2)), cols=int(raw.get("cols", 1)))
            except (TypeError, ValueError) as e:
                logger.debug(f"Ignoring malformed grid in settings: {e}")
        return GridSpec()

    def get_spacing(self) -> SpacingConfig:
        raw = self._get_dict().get("spacing")
        if isinstance(raw, dict):
            try:
                return SpacingConfig.from_dict(raw)
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug(f"Ignoring malformed spacing in settings: {e}")
        return SpacingConfig()

    def build_context(self) -> LayoutContext:
        """
        LayoutContext from the stored preferences.

        A stored combination that no longer fits falls back to the defaults.
        """
        sheet = Sheet.from_paper(self.get_paper(), self.get_orientation())
        try:
            return LayoutContext(sheet, self.get_grid(), self.get_spacing())
        except InvalidLayout as e:
            logger.warning(f"Stored layout is invalid ({e}); using defaults")
            return LayoutContext()

    def save_layout(self, context: LayoutContext) -> None:
        """Persist the context's sheet, grid and spacing."""
        state = self._get_dict()
        sheet = context.sheet
        state["paper"] = sheet.paper_size or DEFAULT_PAPER_SIZE
        state["orientation"] = sheet.orientation.value
        state["grid"] = {"rows": context.grid.rows, "cols": context.grid.cols}
        state["spacing"] = context.spacing.to_dict()
        self._save()
        self.layoutChanged.emit()

    # ─────────────────────────────────────────────────────────────────────────
    # Export directory
    # ─────────────────────────────────────────────────────────────────────────

    def get_last_export_dir(self) -> Optional[str]:
        value = self._get_dict().get("last_export_dir")
        return value if isinstance(value, str) and value else None

    def set_last_export_dir(self, value: str) -> None:
        self._get_dict()["last_export_dir"] = value
        self._save()

    def _get_dict(self) -> Dict[str, object]:
        if not isinstance(self.data, dict):
            self.data = {}
        return self.data

    def _save(self) -> None:
        """Safely write settings with atomic replacement.

        Uses a temp file to prevent corruption if write is interrupted.
        """
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Failed to save settings: {e}")
            try:
                if temp_path.exists():
                    temp_path.unlink()
            except OSError:
                pass
