"""
Module: core.errors

Purpose:
    Error taxonomy shared by layout, decoding, gestures and export.

Key Classes:
    - PdfomatorError: Base class for all package errors
    - InvalidLayout: Grid does not fit the sheet under current spacing
    - DecodeFailure: Content could not be rasterized
    - ExportFailure: The PDF document could not be produced
    - GestureSessionConflict: A new gesture session pre-empted a stale one

Used By:
    - layout.grid, layout.context: InvalidLayout
    - images.sources: DecodeFailure
    - output.renderer: ExportFailure
    - interaction.gestures: GestureSessionConflict (internal only)
"""

from __future__ import annotations


class PdfomatorError(Exception):
    """Base class for errors raised by pdfomator."""
    pass


class InvalidLayout(PdfomatorError):
    """
    Grid does not fit the sheet given padding, gaps and cell padding.

    Fatal to the layout attempt that caused it. Raised before any state
    is mutated, so the last valid layout stays in effect.
    """
    pass


class DecodeFailure(PdfomatorError):
    """Content could not be decoded or rasterized. Local to one cell."""
    pass


class ExportFailure(PdfomatorError):
    """The document could not be constructed or saved. Aborts the export."""
    pass


class GestureSessionConflict(PdfomatorError):
    """A gesture session was started on a cell that already had one open."""

    def __init__(self, cell_index: int) -> None:
        super().__init__(f"Cell {cell_index} already has an active gesture session")
        self.cell_index = cell_index
