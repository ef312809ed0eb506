"""
Document Reporting

Page layout for marksheets and leave letters, and report exports in PDF,
spreadsheet and CSV form.
"""

from .layout import LayoutEngine, PageLayout, RenderedPage
from .service import ExportResult, ExportService

__all__ = [
    'ExportResult',
    'ExportService',
    'LayoutEngine',
    'PageLayout',
    'RenderedPage',
]
