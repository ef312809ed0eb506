"""
PDF to JPEG Converter

Adapter for rasterising the first page of a rendered document with
pdf2image (poppler) and encoding it with Pillow.
"""

import logging
from io import BytesIO
from typing import Optional

from pdf2image import convert_from_bytes

from docgen.services.config import RenderConfig, get_render_config
from .interfaces import IImageConverter


logger = logging.getLogger(__name__)


class Pdf2ImageConverter(IImageConverter):
    """
    Image converter using pdf2image.

    Requires the poppler utilities (pdftoppm) on the PATH.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        config = config or get_render_config()
        self.dpi = config.image_dpi
        self.quality = config.image_quality

    def convert(self, pdf_bytes: bytes) -> bytes:
        """
        Convert the first page of a PDF to JPEG.

        Raises:
            ValueError: If the PDF has no pages
            Exception: If poppler fails to rasterise the document
        """
        pages = convert_from_bytes(pdf_bytes, dpi=self.dpi, first_page=1, last_page=1)
        if not pages:
            raise ValueError("PDF has no pages to convert")

        buffer = BytesIO()
        pages[0].convert('RGB').save(buffer, format='JPEG', quality=self.quality)
        jpeg_bytes = buffer.getvalue()

        logger.debug(f"Converted PDF ({len(pdf_bytes)} bytes) to JPEG ({len(jpeg_bytes)} bytes)")
        return jpeg_bytes
