"""
Document Render Service

Central service for delivering marksheets and leave approval letters as PDF
or JPEG.
"""

from typing import Optional
import logging

from docgen.services.cache import ArtifactCache, build_cache_key, get_default_cache
from docgen.services.config import RenderConfig, get_render_config
from docgen.services.documents import resolve_signatories
from docgen.services.exceptions import (
    DocumentNotFound,
    DocumentValidationError,
    GenerationFailed,
    UnsupportedFormat,
)
from docgen.services.filenames import leave_letter_filename, marksheet_filename
from docgen.services.reporting.layout import LayoutEngine

from .dto import RenderResult
from .interfaces import IDocumentSource, IImageConverter
from .image_converter import Pdf2ImageConverter


logger = logging.getLogger(__name__)

PDF = 'pdf'
IMAGE_FORMATS = ('jpeg', 'jpg', 'image')
PDF_CONTENT_TYPE = 'application/pdf'
JPEG_CONTENT_TYPE = 'image/jpeg'


class DocumentRenderService:
    """
    Core service for the document delivery pipeline.

    Responsibilities:
    1. Validate the request and look up the document
    2. Serve marksheets from the artifact cache when fresh
    3. Delegate layout to the LayoutEngine
    4. Optionally rasterise the PDF through an IImageConverter
    5. Return a structured RenderResult

    Usage:
        service = DocumentRenderService(source)
        result = service.render_marksheet('65f1c0...', output_format='jpeg')
    """

    def __init__(
        self,
        source: IDocumentSource,
        *,
        config: Optional[RenderConfig] = None,
        cache: Optional[ArtifactCache] = None,
        layout: Optional[LayoutEngine] = None,
        image_converter: Optional[IImageConverter] = None,
    ):
        """
        Initialize the service.

        Args:
            source: Document lookup implementation
            config: Render configuration (defaults to Django settings)
            cache: Artifact cache (defaults to the process-wide cache)
            layout: Layout engine (defaults to one built from config)
            image_converter: Raster converter. If None, uses Pdf2ImageConverter.
        """
        self.source = source
        self.config = config or get_render_config()
        self.cache = cache if cache is not None else get_default_cache()
        self.layout = layout or LayoutEngine(self.config)
        self.image_converter = image_converter or Pdf2ImageConverter(self.config)

    def render_marksheet(self, marksheet_id: str, output_format: str = PDF) -> RenderResult:
        """
        Render a marksheet.

        Args:
            marksheet_id: Entity id of the marksheet
            output_format: 'pdf', or 'jpeg' / 'jpg' / 'image' for a raster

        Returns:
            RenderResult; cache_hit is True when the PDF came from the cache

        Raises:
            DocumentValidationError: If marksheet_id is missing
            UnsupportedFormat: If output_format is not recognised
            DocumentNotFound: If the marksheet does not exist
            GenerationFailed: If layout raised
        """
        output_format = self._check_request(marksheet_id, output_format, 'marksheet')

        marksheet = self.source.get_marksheet(marksheet_id)
        if marksheet is None:
            raise DocumentNotFound(f"Marksheet not found: {marksheet_id}")

        cache_key = build_cache_key(marksheet_id)
        pdf_bytes = self.cache.get(cache_key)
        cache_hit = pdf_bytes is not None

        if cache_hit:
            logger.debug(f"Serving cached PDF for marksheet {marksheet_id}")
        else:
            logger.debug(f"Cache miss for marksheet {marksheet_id}, rendering")
            try:
                pdf_bytes = self.layout.render_marksheet(marksheet, resolve_signatories(marksheet))
            except Exception as e:
                logger.error(f"Failed to render marksheet {marksheet_id}: {e}", exc_info=True)
                raise GenerationFailed("Failed to generate PDF", str(e)) from e
            self.cache.set(cache_key, pdf_bytes)

        result = self._package(
            pdf_bytes,
            output_format,
            lambda ext: marksheet_filename(marksheet.student.reg_number, marksheet.marksheet_id, ext),
        )
        result.cache_hit = cache_hit

        logger.info(
            f"Delivered marksheet {marksheet_id}: {result.filename} "
            f"({len(result)} bytes, cache {'hit' if cache_hit else 'miss'})"
        )
        return result

    def render_leave_letter(self, leave_id: str, output_format: str = PDF) -> RenderResult:
        """
        Render a leave approval letter. Leave letters are never cached.

        Raises:
            DocumentValidationError: If leave_id is missing
            UnsupportedFormat: If output_format is not recognised
            DocumentNotFound: If the leave request does not exist
            GenerationFailed: If layout raised
        """
        output_format = self._check_request(leave_id, output_format, 'leave')

        leave = self.source.get_leave_request(leave_id)
        if leave is None:
            raise DocumentNotFound(f"Leave request not found: {leave_id}")

        try:
            pdf_bytes = self.layout.render_leave_letter(leave)
        except Exception as e:
            logger.error(f"Failed to render leave letter {leave_id}: {e}", exc_info=True)
            raise GenerationFailed("Failed to generate leave letter", str(e)) from e

        result = self._package(
            pdf_bytes,
            output_format,
            lambda ext: leave_letter_filename(leave.student.reg_number, ext),
        )
        logger.info(f"Delivered leave letter {leave_id}: {result.filename} ({len(result)} bytes)")
        return result

    def invalidate(self, marksheet_id: str) -> bool:
        """Drop the cached PDF of a marksheet so the next request re-renders it."""
        return self.cache.invalidate(build_cache_key(marksheet_id))

    def _check_request(self, entity_id: Optional[str], output_format: Optional[str], kind: str) -> str:
        if not entity_id:
            raise DocumentValidationError(f"{kind}Id is required")

        normalized = (output_format or PDF).strip().lower()
        if normalized != PDF and normalized not in IMAGE_FORMATS:
            raise UnsupportedFormat(output_format)
        return normalized

    def _package(self, pdf_bytes: bytes, output_format: str, filename_for) -> RenderResult:
        """
        Wrap PDF bytes in a RenderResult, rasterising when an image was asked for.

        A failed conversion is logged and the PDF is returned instead.
        """
        if output_format in IMAGE_FORMATS:
            try:
                jpeg_bytes = self.image_converter.convert(pdf_bytes)
            except Exception as e:
                logger.error(f"JPEG conversion failed, returning PDF instead: {e}", exc_info=True)
            else:
                return RenderResult(content=jpeg_bytes, filename=filename_for('jpg'),
                                    content_type=JPEG_CONTENT_TYPE)

        return RenderResult(content=pdf_bytes, filename=filename_for('pdf'),
                            content_type=PDF_CONTENT_TYPE)
