"""
Module: output

Purpose:
    PDF export. Converts a LayoutContext to a single-page PDF using
    ReportLab.

Key Functions:
    - render_to_pdf(): Render layout to PDF
    - default_export_filename(): Timestamped output name

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - layout.plan: SheetPlan

Used By:
    - cli, gui.app
"""

from .renderer import ExportResult, default_export_filename, render_to_pdf

__all__ = [
    "ExportResult",
    "default_export_filename",
    "render_to_pdf",
]
