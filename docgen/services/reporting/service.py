"""
Report Export Service

Renders administrative reports to PDF, spreadsheet or CSV.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Union

from django.utils import timezone

from docgen.services.config import RenderConfig, get_render_config
from docgen.services.documents import (
    ExportFormat,
    ReportData,
    ReportMetadata,
    ReportRequest,
)
from docgen.services.exceptions import (
    DocumentValidationError,
    GenerationFailed,
    ServiceError,
)
from docgen.services.filenames import report_filename
from .layout import LayoutEngine
from .registry import find_template
from .writers import DelimitedTextReportWriter, PdfReportWriter, SpreadsheetReportWriter


logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """
    Result of a report export.

    content is bytes for PDF and spreadsheet output and str for CSV.
    """

    content: Union[bytes, str]
    filename: str
    content_type: str

    def __len__(self) -> int:
        return len(self.content)


class ExportService:
    """
    Service for report exports.

    Report types resolve to templates through the report registry; every
    template produces one list of ReportSection objects that feeds the PDF,
    spreadsheet and CSV writers alike.
    """

    def __init__(self, config: Optional[RenderConfig] = None,
                 engine: Optional[LayoutEngine] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.config = config or get_render_config()
        self.clock = clock or timezone.now
        self.engine = engine or LayoutEngine(self.config, clock=self.clock)
        self.spreadsheet_writer = SpreadsheetReportWriter()
        self.text_writer = DelimitedTextReportWriter()
        self.pdf_writer = PdfReportWriter(self.engine)

    def export(
        self,
        report_type: str,
        data: Any,
        export_format: Union[ExportFormat, str],
        metadata: Optional[ReportMetadata] = None,
        department: Optional[str] = None,
    ) -> ExportResult:
        """
        Export a report.

        Args:
            report_type: Registered report type (e.g., 'department-summary')
            data: Report payload, a sequence of records or a keyed mapping
            export_format: ExportFormat or format tag ('pdf', 'excel', 'csv', ...)
            metadata: Presentation metadata (defaults are filled in if omitted)
            department: Department code used in the filename

        Returns:
            ExportResult with content, filename and content type

        Raises:
            UnsupportedFormat: If export_format is outside the closed set
            DocumentValidationError: If report_type, export_format or data is missing
            GenerationFailed: If building the output raised
        """
        if not report_type or not export_format or data is None:
            raise DocumentValidationError("Missing required fields: type, format and data")
        fmt = export_format if isinstance(export_format, ExportFormat) else ExportFormat.parse(export_format)

        if metadata is None:
            metadata = ReportMetadata.from_dict(None, department=department, generated_at=self.clock())
        report_data = ReportData.from_raw(data)

        template = find_template(report_type)
        if template is None:
            logger.warning(f"Unknown report type {report_type!r}, exporting preamble only")

        try:
            sections = template.build_sections(report_data) if template else []
            if fmt == ExportFormat.PDF:
                content = self.pdf_writer.write(sections, metadata, report_type, template=template)
            elif fmt == ExportFormat.EXCEL:
                content = self.spreadsheet_writer.write(sections, metadata)
            else:
                content = self.text_writer.write(sections, metadata)
        except ServiceError:
            raise
        except Exception as e:
            logger.error(f"Failed to generate {report_type} report as {fmt.value}: {e}", exc_info=True)
            raise GenerationFailed(f"Failed to generate {fmt.value} report", str(e)) from e

        filename = report_filename(report_type, department, self.clock(), fmt.extension)
        logger.info(f"Generated {report_type} report as {fmt.value} ({len(content)} bytes): {filename}")
        return ExportResult(content=content, filename=filename, content_type=fmt.content_type)

    def export_request(self, request: ReportRequest) -> ExportResult:
        """Export a report described by a parsed request body."""
        return self.export(
            request.report_type,
            request.data,
            request.export_format,
            metadata=request.metadata,
            department=request.department,
        )
