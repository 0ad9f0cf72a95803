import os
import pytest
import sys
from pathlib import Path

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import fitz
from PIL import Image

# Add src to sys.path so we can import pdfomator
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from pdfomator.core.models import Content
from pdfomator.layout.context import LayoutContext


# Common test fixtures
@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def sample_pdf(tmp_path: Path):
    """Create a three-page A4 PDF (595 x 842 pt)."""
    pdf_path = tmp_path / "sample.pdf"
    doc = fitz.open()
    for i in range(3):
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), f"Page {i + 1}", fontsize=24)
    doc.save(str(pdf_path))
    doc.close()
    return pdf_path


@pytest.fixture
def make_content():
    """Factory for in-memory Content of a given pixel size."""
    def _create(width: int = 200, height: int = 100, title: str = "test.png", color="red"):
        return Content(image=Image.new("RGB", (width, height), color=color), title=title)
    return _create


@pytest.fixture
def context():
    """Fresh default layout: A4 portrait, 2 rows x 1 col."""
    return LayoutContext()
