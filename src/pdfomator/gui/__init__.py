"""PySide6 front end: preview painting, the interactive sheet view and the main window."""
