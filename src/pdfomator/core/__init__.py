"""Core data models and error taxonomy."""

from .errors import (
    DecodeFailure,
    ExportFailure,
    GestureSessionConflict,
    InvalidLayout,
    PdfomatorError,
)

__all__ = [
    "DecodeFailure",
    "ExportFailure",
    "GestureSessionConflict",
    "InvalidLayout",
    "PdfomatorError",
]
