"""
Document Layout Engine

Lays out and paints marksheets, leave approval letters and dashboard-style
report pages onto a PageCanvas.

Every render_* operation has a layout_* twin that returns a RenderedPage:
the PDF bytes plus a trace of the layout decisions (title font size, row
heights, result colours, signature slots).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from django.utils import timezone

from docgen.services.config import RenderConfig, get_render_config
from docgen.services.documents import (
    LeaveRequest,
    Marksheet,
    ReportData,
    ReportMetadata,
    SignatureSlot,
    resolve_signatories,
)
from .canvas import (
    PageCanvas,
    decode_image,
    fit_font_size,
    line_height,
    measure_text_height,
    text_width,
)
from .registry import ReportTemplate, find_template
from .styles import (
    DASHBOARD_COLORS,
    FONT_BOLD,
    FONT_REGULAR,
    MUTED_COLOR,
    TABLE_HEADER_FILL,
    TEXT_COLOR,
    classify_result,
    result_color,
)
from .tables import MISSING, ReportSection, format_cell


logger = logging.getLogger(__name__)

EXAM_OFFICE_LINE = 'OFFICE OF THE CONTROLLER OF EXAMINATIONS'
DEFAULT_EXAMINATION_NAME = 'END SEMESTER EXAMINATIONS'
LEAVE_LETTER_TITLE = 'LEAVE APPROVAL LETTER'
LEAVE_CERTIFICATION = (
    "This is to certify that the above student's leave request has been "
    "reviewed and approved by the Head of the Department."
)

# Space kept free above the bottom margin on report pages (signature/footer area)
REPORT_FOOTER_RESERVE = 30

# Smallest size table cells and card labels shrink to
CELL_MIN_FONT_SIZE = 6


@dataclass
class HeaderLine:
    text: str
    size: float
    font: str = FONT_REGULAR
    spacing: float = 3


@dataclass
class TableColumn:
    key: str
    label: str
    width: float
    align: str = 'left'
    x: float = 0


@dataclass
class TableRowLayout:
    values: dict
    height: float
    result_tone: str
    result_color: Any


@dataclass
class SignatureSlotLayout:
    label: str
    name: str
    has_image: bool
    x: float
    width: float


@dataclass
class PageLayout:
    """Trace of the layout decisions taken while painting a document"""

    title_font_size: float = 0
    divider_y: float = 0
    identity_row_heights: list = field(default_factory=list)
    table_rows: list = field(default_factory=list)
    summary_tone: Optional[str] = None
    signature_slots: list = field(default_factory=list)
    page_count: int = 1


@dataclass
class RenderedPage:
    pdf_bytes: bytes
    layout: PageLayout


class LayoutEngine:
    """
    Paints academic documents onto A4 pages.

    Usage:
        engine = LayoutEngine(config)
        pdf_bytes = engine.render_marksheet(marksheet, resolve_signatories(marksheet))
    """

    def __init__(self, config: Optional[RenderConfig] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the engine.

        Args:
            config: Layout configuration (defaults to Django settings)
            clock: Callable returning the generation timestamp (default: timezone.now)
        """
        self.config = config or get_render_config()
        self.clock = clock or timezone.now

    # =========================================================================
    # PUBLIC OPERATIONS
    # =========================================================================

    def render_marksheet(self, marksheet: Marksheet,
                         signatures: Optional[list[SignatureSlot]] = None) -> bytes:
        return self.layout_marksheet(marksheet, signatures).pdf_bytes

    def render_leave_letter(self, leave: LeaveRequest) -> bytes:
        return self.layout_leave_letter(leave).pdf_bytes

    def render_report_page(self, report_type: str, data: Any,
                           metadata: Optional[ReportMetadata] = None) -> bytes:
        return self.layout_report_page(report_type, data, metadata).pdf_bytes

    def layout_marksheet(self, marksheet: Marksheet,
                         signatures: Optional[list[SignatureSlot]] = None) -> RenderedPage:
        """
        Lay out a marksheet: header, identity rows, subject table, summary,
        staff and HOD signatures, footer.

        Args:
            marksheet: The marksheet to render
            signatures: Resolved signature slots (defaults to resolve_signatories())
        """
        if signatures is None:
            signatures = resolve_signatories(marksheet)

        page = PageCanvas(self.config, title=f"Marksheet {marksheet.marksheet_id}")
        trace = PageLayout()

        header_lines = self._institution_lines(after_last=6) + [
            HeaderLine(EXAM_OFFICE_LINE, 11, FONT_BOLD, 6),
            HeaderLine(self._examination_line(marksheet), 10, FONT_BOLD, 0),
        ]
        self._draw_header(page, trace, header_lines, body_gap=22)

        student = marksheet.student
        year_semester = student.year + (f"/{marksheet.semester}" if marksheet.semester else '')
        trace.identity_row_heights = self._draw_identity_rows(page, [
            ('Register Number', student.reg_number),
            ('Student Name', student.name),
            ('Department', student.department_display),
            ('Year/Semester', year_semester),
        ], value_offset=10)

        page.y += line_height(self.config.info_font_size)
        columns = self.marksheet_columns(page.content_width)
        rows = [
            {
                'sno': index,
                'course': subject.subject_name,
                'mark': subject.marks,
                'result': subject.result or MISSING,
            }
            for index, subject in enumerate(marksheet.subjects, start=1)
        ]
        trace.table_rows = self._draw_table(page, columns, rows)

        trace.summary_tone = self._draw_summary(
            page,
            marksheet.overall_result or MISSING,
            f"Total Subjects: {len(marksheet.subjects)}",
        )

        slot_width = page.content_width / 2
        signature_y = self._signature_y(page)
        for index, slot in enumerate(signatures[:2]):
            trace.signature_slots.append(self._draw_signature_slot(
                page, slot,
                x=page.left + index * slot_width,
                width=slot_width,
                top=signature_y,
                inset=12,
                image_box=(15, 50, slot_width - 30, 42),
            ))

        page.on_page_end = self._draw_footer
        pdf_bytes = page.finish()
        trace.page_count = page.page_count

        logger.debug(
            f"Laid out marksheet {marksheet.marksheet_id}: "
            f"{len(trace.table_rows)} rows, title {trace.title_font_size}pt"
        )
        return RenderedPage(pdf_bytes=pdf_bytes, layout=trace)

    def layout_leave_letter(self, leave: LeaveRequest) -> RenderedPage:
        """Lay out a leave approval letter with a single HOD signature slot."""
        page = PageCanvas(self.config, title=f"Leave Approval {leave.student.reg_number}")
        trace = PageLayout()

        header_lines = self._institution_lines(after_last=8) + [
            HeaderLine(LEAVE_LETTER_TITLE, 12, FONT_BOLD, 8),
        ]
        self._draw_header(page, trace, header_lines, body_gap=30)

        student = leave.student
        trace.identity_row_heights = self._draw_identity_rows(page, [
            ('Student Name', student.name),
            ('Register Number', student.reg_number),
            ('Department', student.department_display),
            ('Year/Section', f"{student.year}/{student.section}"),
            ('Leave Period', leave.period_display),
            ('Reason', leave.reason),
        ], value_offset=5)

        page.y += 2 * line_height(self.config.info_font_size)
        page.y += page.text(LEAVE_CERTIFICATION, page.left, page.y, page.content_width,
                            FONT_REGULAR, self.config.info_font_size)

        slot = SignatureSlot(
            label='Signature of HOD',
            name=leave.hod_name or 'HOD Name',
            image=leave.hod_signature,
        )
        slot_width = 170
        trace.signature_slots.append(self._draw_signature_slot(
            page, slot,
            x=page.right - 180,
            width=slot_width,
            top=self._signature_y(page),
            inset=0,
            image_box=(0, 35, slot_width - 10, 35),
        ))

        page.on_page_end = self._draw_footer
        pdf_bytes = page.finish()
        trace.page_count = page.page_count
        return RenderedPage(pdf_bytes=pdf_bytes, layout=trace)

    def layout_report_page(self, report_type: str, data: Any,
                           metadata: Optional[ReportMetadata] = None,
                           template: Optional[ReportTemplate] = None,
                           sections: Optional[list[ReportSection]] = None) -> RenderedPage:
        """
        Lay out a dashboard-style report page.

        The body is composed by the report template registered for
        report_type from the template's report sections, the same sections
        the spreadsheet and CSV writers consume. Pass sections to reuse ones
        already built from data. An unknown type renders the header and a
        placeholder line instead of failing.
        """
        metadata = metadata or ReportMetadata(generated_at=self.clock())
        if template is None:
            template = find_template(report_type)

        page = PageCanvas(self.config, title=metadata.report_title,
                          footer_reserve=REPORT_FOOTER_RESERVE)
        page.on_page_end = self._draw_footer
        trace = PageLayout()

        cfg = self.config
        title_size = fit_font_size(metadata.report_title, FONT_BOLD, 20, 12,
                                   self._header_text_width(page), cfg.title_font_step)
        self._draw_header(page, trace, [
            HeaderLine(metadata.report_title, title_size, FONT_BOLD, 5),
            HeaderLine(f"Department: {metadata.department_name}", 12, FONT_REGULAR, 3),
            HeaderLine(metadata.generated_line, 10, FONT_REGULAR, 0),
        ], body_gap=25, fit_title=False)

        if template is None:
            logger.warning(f"No report template registered for type {report_type!r}, rendering empty body")
            self.draw_note(page, f"No report body available for report type '{report_type}'.")
        else:
            if sections is None:
                report_data = data if isinstance(data, ReportData) else ReportData.from_raw(data)
                sections = template.build_sections(report_data)
            template.draw_body(self, page, sections)

        pdf_bytes = page.finish()
        trace.page_count = page.page_count
        return RenderedPage(pdf_bytes=pdf_bytes, layout=trace)

    # =========================================================================
    # MEASUREMENT
    # =========================================================================

    def marksheet_columns(self, content_width: float) -> list[TableColumn]:
        """Fixed marksheet columns; the course column takes the remaining width."""
        columns = [
            TableColumn('sno', 'S.No', 55, 'center'),
            TableColumn('course', 'Course', content_width - 225, 'left'),
            TableColumn('mark', 'Marks', 85, 'center'),
            TableColumn('result', 'Result', 85, 'center'),
        ]
        x = self.config.margin
        for column in columns:
            column.x = x
            x += column.width
        return columns

    def measure_row_height(self, columns: list[TableColumn], values: dict) -> float:
        """
        Height of a data row: the tallest wrapped cell plus padding, never
        less than the base row height.
        """
        cfg = self.config
        content = max(
            measure_text_height(
                _cell_text(values.get(column.key)), FONT_REGULAR, cfg.row_font_size,
                column.width - 2 * cfg.cell_padding_x,
            )
            for column in columns
        )
        return max(cfg.base_row_height, content + 2 * cfg.cell_padding_y)

    def _header_text_width(self, page: PageCanvas) -> float:
        cfg = self.config
        return page.content_width - cfg.logo_width - cfg.header_gap

    # =========================================================================
    # SHARED PAINTING STEPS
    # =========================================================================

    def _institution_lines(self, after_last: float) -> list[HeaderLine]:
        lines = [HeaderLine(text, 9, FONT_REGULAR, 3) for text in self.config.institution_lines]
        if lines:
            lines[-1].spacing = after_last
        return lines

    def _examination_line(self, marksheet: Marksheet) -> str:
        name = (marksheet.examination_name or DEFAULT_EXAMINATION_NAME).upper()
        exam_date = marksheet.examination_date
        if exam_date is None:
            return name
        return f"{name} - {exam_date.strftime('%B').upper()} - {exam_date.year}"

    def _draw_header(self, page: PageCanvas, trace: PageLayout, lines: list[HeaderLine],
                     body_gap: float, fit_title: bool = True) -> None:
        """
        Logo on the left, centred text block on the right, divider below.

        With fit_title the institution name is drawn first on one line at the
        largest size that fits, followed by lines.
        """
        cfg = self.config
        header_top = page.y
        text_x = page.left + cfg.logo_width + cfg.header_gap
        block_width = self._header_text_width(page)

        if cfg.has_logo():
            page.logo(cfg.logo_path, page.left, header_top, cfg.logo_width, cfg.logo_height)

        cursor = header_top + 5
        if fit_title:
            title_size = fit_font_size(
                cfg.institution_name, FONT_BOLD, cfg.title_font_size,
                cfg.title_min_font_size, block_width, cfg.title_font_step,
            )
            cursor += page.text(cfg.institution_name, text_x, cursor, block_width,
                                FONT_BOLD, title_size, align='center', wrap=False) + 5
        else:
            title_size = lines[0].size if lines else 0
        trace.title_font_size = title_size

        for line in lines:
            cursor += page.text(line.text, text_x, cursor, block_width,
                                line.font, line.size, align='center') + line.spacing

        header_bottom = max(cursor, header_top + cfg.logo_height)
        trace.divider_y = header_bottom + cfg.divider_gap
        page.line(page.left, trace.divider_y, page.right, trace.divider_y, width=1)
        page.y = header_bottom + body_gap

    def _draw_identity_rows(self, page: PageCanvas, rows: list[tuple],
                            value_offset: float) -> list[float]:
        """
        Label/value rows; each row is as tall as the taller of its two
        measured cells so long values never overlap the next row.
        """
        cfg = self.config
        size = cfg.info_font_size
        label_width = cfg.info_label_width
        value_x = page.left + label_width + value_offset
        value_width = page.content_width - label_width - value_offset

        heights = []
        for label, value in rows:
            label_text = f"{label}:"
            value_text = _cell_text(value)
            row_height = max(
                measure_text_height(label_text, FONT_BOLD, size, label_width),
                measure_text_height(value_text, FONT_REGULAR, size, value_width),
            )
            page.text(label_text, page.left, page.y, label_width, FONT_BOLD, size)
            page.text(value_text, value_x, page.y, value_width, FONT_REGULAR, size)
            page.y += row_height + cfg.info_row_gap
            heights.append(row_height)
        return heights

    def _draw_table(self, page: PageCanvas, columns: list[TableColumn],
                    rows: list[dict]) -> list[TableRowLayout]:
        cfg = self.config
        pad_x = cfg.cell_padding_x
        top = page.y + 8
        width = page.content_width

        # Header row
        header_height = cfg.header_row_height
        page.rect(page.left, top, width, header_height, fill=TABLE_HEADER_FILL)
        page.rect(page.left, top, width, header_height, stroke=TEXT_COLOR, line_width=1.5)
        for index, column in enumerate(columns):
            if index < len(columns) - 1:
                page.line(column.x + column.width, top, column.x + column.width, top + header_height)
            label_height = measure_text_height(column.label, FONT_BOLD, 11, column.width - 2 * pad_x)
            page.text(column.label, column.x + pad_x, top + (header_height - label_height) / 2,
                      column.width - 2 * pad_x, FONT_BOLD, 11, align=column.align)

        y = top + header_height
        layouts = []
        for values in rows:
            row_height = self.measure_row_height(columns, values)
            page.rect(page.left, y, width, row_height, stroke=TEXT_COLOR)

            tone = classify_result(values.get('result'))
            for index, column in enumerate(columns):
                if index < len(columns) - 1:
                    page.line(column.x + column.width, y, column.x + column.width, y + row_height)
                cell = _cell_text(values.get(column.key))
                cell_width = column.width - 2 * pad_x
                cell_height = measure_text_height(cell, FONT_REGULAR, cfg.row_font_size, cell_width)
                color = result_color(cell) if column.key == 'result' else TEXT_COLOR
                page.text(cell, column.x + pad_x, y + (row_height - cell_height) / 2, cell_width,
                          FONT_REGULAR, cfg.row_font_size, color=color, align=column.align)

            layouts.append(TableRowLayout(
                values=values,
                height=row_height,
                result_tone=tone,
                result_color=result_color(values.get('result')),
            ))
            y += row_height

        page.y = y
        return layouts

    def _draw_summary(self, page: PageCanvas, result: str, right_text: str) -> str:
        """Overall result on the left half, item count on the right half."""
        top = page.y + 12
        half = page.content_width / 2
        label = 'Overall Result: '

        page.text(label, page.left, top, half, FONT_BOLD, 11, wrap=False)
        page.text(result, page.left + text_width(label, FONT_BOLD, 11), top, half, FONT_BOLD, 11,
                  color=result_color(result), wrap=False)
        page.text(right_text, page.left + half, top, half, FONT_REGULAR, 11, align='right')

        page.y = top + line_height(11)
        return classify_result(result)

    def _signature_y(self, page: PageCanvas) -> float:
        return page.bottom - self.config.signature_offset

    def _draw_signature_slot(self, page: PageCanvas, slot: SignatureSlot, x: float,
                             width: float, top: float, inset: float,
                             image_box: tuple) -> SignatureSlotLayout:
        """
        Optional signature image above a rule, then role label and name.

        An image that fails to decode leaves the slot blank above the rule.
        """
        image_dx, image_rise, image_w, image_h = image_box
        image = decode_image(slot.image)
        if image is not None:
            page.image(image, x + image_dx, top - image_rise, image_w, image_h)

        page.line(x + inset, top, x + width - inset, top, width=0.5)
        text_width_ = width - 2 * inset
        label_gap, name_gap = (5, 18) if inset else (4, 15)
        page.text(slot.label, x + inset, top + label_gap, text_width_, FONT_REGULAR, 8.5, align='center')
        page.text(slot.name, x + inset, top + name_gap, text_width_, FONT_BOLD, 9, align='center')

        return SignatureSlotLayout(label=slot.label, name=slot.name,
                                   has_image=image is not None, x=x, width=width)

    def _draw_footer(self, page: PageCanvas) -> None:
        stamp = self.clock()
        if timezone.is_aware(stamp):
            stamp = timezone.localtime(stamp)
        text = f"Generated on {stamp.strftime('%d %b %Y, %I:%M %p')}"
        page.text(text, page.left, page.bottom - self.config.footer_offset, page.content_width,
                  FONT_REGULAR, 7.5, color=MUTED_COLOR, align='right')

    # =========================================================================
    # DASHBOARD PRIMITIVES (used by report templates)
    # =========================================================================

    def draw_heading(self, page: PageCanvas, text: str) -> None:
        page.ensure_space(40)
        page.y += page.text(text, page.left, page.y, page.content_width, FONT_BOLD, 16,
                            color=DASHBOARD_COLORS['heading'])
        page.y += 12

    def draw_note(self, page: PageCanvas, text: str) -> None:
        page.ensure_space(line_height(11))
        page.y += page.text(text, page.left, page.y, page.content_width, FONT_REGULAR, 11)

    def draw_section_band(self, page: PageCanvas, section: ReportSection) -> bool:
        """
        Draw the section title band and the column captions.

        A section without rows shows its empty message instead of captions.

        Returns:
            True if the section has rows to draw below the band
        """
        if section.title:
            page.ensure_space(28 + line_height(12))
            page.rect(page.left, page.y, page.content_width, 20,
                      fill=DASHBOARD_COLORS['section_fill'], radius=10)
            page.text(section.title, page.left + 16, page.y + 4, page.content_width - 32,
                      FONT_BOLD, 13, color=DASHBOARD_COLORS['section_title'])
            page.y += 28

        if section.shows_message:
            self.draw_note(page, section.empty_message)
            page.y += 12
            return False

        page.ensure_space(line_height(9) + 6)
        self._draw_cells(page, section.columns, page.left + 24, page.content_width - 24,
                         FONT_BOLD, 9, DASHBOARD_COLORS['subtle'])
        page.y += line_height(9) + 6
        return bool(section.rows)

    def draw_metric_cards(self, page: PageCanvas, section: ReportSection, accents: list,
                          height: float = 70, gap: float = 10, per_row: int = 3) -> None:
        """
        Rounded metric cards, one per (label, value) row, per_row to a line.

        Args:
            accents: Accent colours, cycled over the cards
        """
        if not self.draw_section_band(page, section):
            return

        card_width = (page.content_width - gap * (per_row - 1)) / per_row
        rows = section.rows
        for start in range(0, len(rows), per_row):
            page.ensure_space(height)
            x = page.left
            for index, (label, value) in enumerate(rows[start:start + per_row], start=start):
                page.rect(x, page.y, card_width, height, fill=DASHBOARD_COLORS['card_fill'],
                          stroke=DASHBOARD_COLORS['card_border'], radius=12)
                self._fitted_text(page, _cell_text(label), x + 16, page.y + 14, card_width - 48,
                                  FONT_REGULAR, 11, DASHBOARD_COLORS['card_title'])
                page.circle(x + card_width - 26, page.y + 18, 10, fill=accents[index % len(accents)])
                self._fitted_text(page, _cell_text(value), x + 16, page.y + 34, card_width - 32,
                                  FONT_BOLD, 22, DASHBOARD_COLORS['heading'])
                x += card_width + gap
            page.y += height + gap
        page.y += 15

    def draw_list_section(self, page: PageCanvas, section: ReportSection,
                          dot_color=None, numbered: bool = False) -> None:
        """Bullet (or numbered) lines, one per row, cells laid out under the captions."""
        if not self.draw_section_band(page, section):
            return

        dot_color = dot_color or DASHBOARD_COLORS['amber']
        step = line_height(11) + 4
        for index, row in enumerate(section.rows, start=1):
            page.ensure_space(step)
            if numbered:
                page.text(f"{index}.", page.left, page.y, 22, FONT_BOLD, 10,
                          color=dot_color, wrap=False)
            else:
                page.circle(page.left + 10, page.y + 7, 3, fill=dot_color)
            self._draw_cells(page, [_cell_text(value) for value in row], page.left + 24,
                             page.content_width - 24, FONT_REGULAR, 11,
                             DASHBOARD_COLORS['list_value'])
            page.y += step
        page.y += 12

    def draw_record_cards(self, page: PageCanvas, section: ReportSection, accent,
                          height: float = 90) -> None:
        """
        Full-width rounded card per row.

        The first cell is the card title; the remaining cells are laid out
        as label/value metrics along the bottom.
        """
        if not self.draw_section_band(page, section):
            return

        labels = section.columns[1:]
        for row in section.rows:
            page.ensure_space(height)
            x = page.left
            top = page.y
            width = page.content_width
            page.rect(x, top, width, height, fill=DASHBOARD_COLORS['card_fill'],
                      stroke=DASHBOARD_COLORS['card_border'], radius=16)
            page.circle(x + 24, top + 24, 6, fill=accent)
            self._fitted_text(page, _cell_text(row[0]), x + 40, top + 16, width - 60,
                              FONT_BOLD, 13, DASHBOARD_COLORS['heading'])

            step = (width - 40) / max(len(labels), 1)
            metric_x = x + 20
            for label, value in zip(labels, row[1:]):
                self._fitted_text(page, label, metric_x, top + 44, step - 8,
                                  FONT_REGULAR, 9, DASHBOARD_COLORS['subtle'])
                self._fitted_text(page, _cell_text(value), metric_x, top + 58, step - 8,
                                  FONT_BOLD, 15, accent)
                metric_x += step

            page.y = top + height + 14

    def _fitted_text(self, page: PageCanvas, text: str, x: float, top: float, width: float,
                     font: str, size: float, color, align: str = 'left') -> None:
        """One line of text, shrunk until it fits width."""
        size = fit_font_size(text, font, size, min(size, CELL_MIN_FONT_SIZE), width,
                             self.config.title_font_step)
        page.text(text, x, top, width, font, size, color=color, align=align, wrap=False)

    def _draw_cells(self, page: PageCanvas, values: list, x: float, width: float,
                    font: str, size: float, color) -> None:
        """Cells in equal columns; the first left aligned, the rest right aligned."""
        column_width = width / max(len(values), 1)
        for index, value in enumerate(values):
            self._fitted_text(page, str(value), x + index * column_width, page.y,
                              column_width - 4, font, size, color,
                              align='left' if index == 0 else 'right')


def _cell_text(value: Any) -> str:
    return str(format_cell(value))
