"""Content decoding: PDF pages and standalone images, plus page thumbnails."""

from .sources import (
    ContentSource,
    ImageSource,
    PdfSource,
    is_pdf,
    load_content,
    load_file,
    open_source,
)
from .thumbnails import (
    CancellationToken,
    Thumbnail,
    ThumbnailBatch,
    ThumbnailRunner,
    generate_thumbnails,
)

__all__ = [
    "ContentSource",
    "ImageSource",
    "PdfSource",
    "is_pdf",
    "load_content",
    "load_file",
    "open_source",
    "CancellationToken",
    "Thumbnail",
    "ThumbnailBatch",
    "ThumbnailRunner",
    "generate_thumbnails",
]
