"""Top-level package for PDFomator.

Provides subpackages:
- pdfomator.core – data models and error taxonomy
- pdfomator.layout – grid partitioning, placement and sheet planning
- pdfomator.interaction – per-cell gesture state machine
- pdfomator.images – decoding of PDFs and images into cell content
- pdfomator.output – PDF export
- pdfomator.gui – preview painting and pointer input (PySide6)
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    import sys
    from pathlib import Path

    if not getattr(sys, 'frozen', False):
        pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    else:
        pyproject = Path(getattr(sys, "_MEIPASS", ".")) / "pyproject.toml"

    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import version as pkg_version, PackageNotFoundError
        return pkg_version("pdfomator")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
