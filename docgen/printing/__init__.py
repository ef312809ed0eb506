"""
Document Delivery

Renders marksheets and leave approval letters to PDF, with optional JPEG
output and cached marksheet PDFs.
"""

from .service import DocumentRenderService
from .dto import RenderResult
from .interfaces import IDocumentSource, IImageConverter
from .image_converter import Pdf2ImageConverter

__all__ = [
    'DocumentRenderService',
    'RenderResult',
    'IDocumentSource',
    'IImageConverter',
    'Pdf2ImageConverter',
]
