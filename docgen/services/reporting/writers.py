"""
Report Writers

Serialize report sections into PDF, spreadsheet and delimited-text output.

All three writers consume the same ReportSection list. The spreadsheet and
CSV writers share the row sequence from tabulate(), and the PDF writer hands
the sections to the layout engine, so every format carries the same cells in
the same order.
"""

import csv
import re
from decimal import Decimal
from io import BytesIO, StringIO
from typing import Any, Callable, Optional

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from docgen.services.documents import ReportMetadata
from .registry import ReportTemplate
from .styles import get_sheet_styles
from .tables import ReportSection, format_cell


# Row kinds produced by tabulate()
TITLE = 'title'
META = 'meta'
BLANK = 'blank'
SECTION = 'section'
HEADER = 'header'
DATA = 'data'
MESSAGE = 'message'

SHEET_TITLE_MAX = 31
_SHEET_TITLE_INVALID = re.compile(r'[\\/*?:\[\]]')

# Display format for fractional numbers stored as numbers
DECIMAL_NUMBER_FORMAT = '0.0'


def preamble_rows(metadata: ReportMetadata) -> list[list]:
    """Title, department and generation lines followed by a blank row."""
    return [
        [metadata.report_title],
        [f"Department: {metadata.department_name}"],
        [metadata.generated_line],
        [],
    ]


def tabulate(sections: list[ReportSection], metadata: ReportMetadata,
             formatter: Callable[[Any], Any] = format_cell) -> list[tuple[str, list]]:
    """
    Flatten metadata and sections into (kind, row) pairs.

    Layout per section: [title], [columns], data rows, or [title] and
    [empty_message] when the section has no rows. Sections are separated by
    one blank row. Data cells are passed through formatter.
    """
    preamble = preamble_rows(metadata)
    rows = [(TITLE, preamble[0]), (META, preamble[1]), (META, preamble[2]), (BLANK, [])]

    for index, section in enumerate(sections):
        if index > 0:
            rows.append((BLANK, []))
        if section.title:
            rows.append((SECTION, [section.title]))
        if section.shows_message:
            rows.append((MESSAGE, [section.empty_message]))
            continue
        rows.append((HEADER, list(section.columns)))
        for row in section.rows:
            rows.append((DATA, [formatter(value) for value in row]))
    return rows


def sheet_value(value: Any):
    """
    Cell value for the spreadsheet.

    Fractional numbers stay numeric, rounded to one decimal place; every
    other value is formatted as in the other writers.
    """
    if isinstance(value, (float, Decimal)):
        number = float(value)
        if not number.is_integer():
            return round(number, 1)
    return format_cell(value)


class SpreadsheetReportWriter:
    """Writes report sections to a single-sheet .xlsx workbook"""

    def write(self, sections: list[ReportSection], metadata: ReportMetadata) -> bytes:
        styles = get_sheet_styles()
        wb = Workbook()
        ws = wb.active
        ws.title = self._sheet_title(metadata.report_title)

        widths: dict[int, int] = {}
        for kind, row in tabulate(sections, metadata, formatter=sheet_value):
            ws.append(row)
            row_index = ws.max_row
            if kind == TITLE:
                cell = ws.cell(row=row_index, column=1)
                cell.font = styles['title_font']
            elif kind == SECTION:
                cell = ws.cell(row=row_index, column=1)
                cell.font = styles['section_font']
                cell.fill = styles['section_fill']
            elif kind == HEADER:
                for col in range(1, len(row) + 1):
                    cell = ws.cell(row=row_index, column=col)
                    cell.font = styles['header_font']
                    cell.fill = styles['header_fill']
                    cell.alignment = styles['header_alignment']
            elif kind == DATA:
                for col, value in enumerate(row, start=1):
                    if isinstance(value, float):
                        ws.cell(row=row_index, column=col).number_format = DECIMAL_NUMBER_FORMAT

            # Long preamble lines would blow up the first column width
            if kind in (HEADER, DATA):
                for col, value in enumerate(row, start=1):
                    widths[col] = max(widths.get(col, 10), len(str(value)) + 2)

        for col, width in widths.items():
            ws.column_dimensions[get_column_letter(col)].width = min(width, 50)

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _sheet_title(title: str) -> str:
        cleaned = _SHEET_TITLE_INVALID.sub('', title or '').strip()
        return (cleaned or 'Report')[:SHEET_TITLE_MAX]


class DelimitedTextReportWriter:
    """Writes report sections as comma-separated text"""

    def write(self, sections: list[ReportSection], metadata: ReportMetadata) -> str:
        output = StringIO()
        writer = csv.writer(output, lineterminator='\n')
        for _kind, row in tabulate(sections, metadata):
            writer.writerow(row)
        return output.getvalue()


class PdfReportWriter:
    """Renders report sections as a dashboard page through the layout engine"""

    def __init__(self, engine: Any):
        self.engine = engine

    def write(self, sections: list[ReportSection], metadata: ReportMetadata,
              report_type: str, template: Optional[ReportTemplate] = None) -> bytes:
        rendered = self.engine.layout_report_page(
            report_type, None, metadata, template=template, sections=sections,
        )
        return rendered.pdf_bytes
