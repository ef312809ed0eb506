"""
Tests for the document layout engine and report registry
"""

import base64
from dataclasses import replace
from datetime import datetime
from io import BytesIO
from unittest.mock import patch

from django.test import TestCase
from PIL import Image

from docgen.services.config import RenderConfig
from docgen.services.documents import (
    LeaveRequest,
    Marksheet,
    ReportData,
    ReportMetadata,
    SignatureSlot,
    resolve_signatories,
)
from docgen.services.reporting.canvas import (
    decode_image,
    fit_font_size,
    measure_text_height,
    text_width,
)
from docgen.services.reporting.layout import LayoutEngine
from docgen.services.reporting.registry import ReportRegistry
from docgen.services.reporting.styles import (
    DEFAULT,
    FAILURE,
    FONT_BOLD,
    FONT_REGULAR,
    RESULT_COLORS,
    SUCCESS,
    WARNING,
    classify_result,
    result_color,
)
from docgen.services.reporting.tables import ReportSection, format_cell, format_date
from docgen.services.reporting.writers import BLANK, DATA, HEADER, MESSAGE, SECTION, tabulate
from reports.templates import FailedDispatchesReport, SubjectAnalysisReport


FIXED_NOW = datetime(2024, 12, 2, 9, 15)
METADATA = ReportMetadata(report_title='Report', department_name='CSE',
                          generated_by='HOD', generated_at=FIXED_NOW)


def make_marksheet(subjects=None, **overrides):
    record = {
        '_id': '65f1c0ab',
        'marksheetId': 'MS-2024-001',
        'studentDetails': {
            'name': 'Asha Raman',
            'regNumber': '311521243001',
            'department': 'CSE',
            'year': 'III',
        },
        'subjects': subjects if subjects is not None else [
            {'name': 'Maths', 'mark': 78, 'result': 'Pass'},
            {'name': 'Physics', 'mark': 31, 'result': 'Fail'},
        ],
        'overallResult': 'Fail',
        'semester': '5',
    }
    record.update(overrides)
    return Marksheet.from_record(record)


def png_data_url(size=(40, 20)):
    buffer = BytesIO()
    Image.new('RGB', size, (10, 20, 200)).save(buffer, format='PNG')
    return 'data:image/png;base64,' + base64.b64encode(buffer.getvalue()).decode('ascii')


class ResultClassifierTestCase(TestCase):
    """Test cases for the result colour classifier"""

    def test_classification_is_case_insensitive(self):
        expected = {
            'Pass': SUCCESS,
            'PASS': SUCCESS,
            'fail': FAILURE,
            'Absent': WARNING,
            'absent': WARNING,
            'unknown': DEFAULT,
        }
        for value, tone in expected.items():
            with self.subTest(value=value):
                self.assertEqual(classify_result(value), tone)

    def test_missing_or_padded_values(self):
        self.assertEqual(classify_result(None), DEFAULT)
        self.assertEqual(classify_result('  Pass '), SUCCESS)
        self.assertEqual(classify_result('Passed'), DEFAULT)

    def test_result_color(self):
        self.assertEqual(result_color('FAIL'), RESULT_COLORS[FAILURE])


class CanvasHelpersTestCase(TestCase):
    """Test cases for measurement and font fitting"""

    def test_fit_font_size_stays_within_bounds(self):
        max_width = 300
        texts = [
            'SHORT NAME',
            'MEENAKSHI SUNDARARAJAN ENGINEERING COLLEGE',
            'AN EXTREMELY LONG INSTITUTION NAME THAT CANNOT POSSIBLY FIT ON ONE LINE AT ANY SIZE',
        ]
        for text in texts:
            with self.subTest(text=text):
                size = fit_font_size(text, FONT_BOLD, 15, 9, max_width)
                self.assertLessEqual(size, 15)
                self.assertGreaterEqual(size, 9)
                if size > 9:
                    self.assertLessEqual(text_width(text, FONT_BOLD, size), max_width)

    def test_fit_font_size_keeps_preferred_when_it_fits(self):
        self.assertEqual(fit_font_size('ABC', FONT_BOLD, 15, 9, 500), 15)

    def test_overflow_accepted_at_floor(self):
        text = 'W' * 200
        self.assertEqual(fit_font_size(text, FONT_BOLD, 15, 9, 100), 9)

    def test_measure_text_height_grows_with_wrapping(self):
        one_line = measure_text_height('Maths', FONT_REGULAR, 10.5, 200)
        wrapped = measure_text_height('Engineering Mathematics ' * 10, FONT_REGULAR, 10.5, 200)
        self.assertGreater(wrapped, one_line)

    def test_decode_image(self):
        self.assertIsNotNone(decode_image(png_data_url()))
        self.assertIsNone(decode_image(None))
        self.assertIsNone(decode_image(''))

    def test_decode_failure_returns_none(self):
        with self.assertLogs('docgen.services.reporting.canvas', level='WARNING'):
            self.assertIsNone(decode_image('data:image/png;base64,bm90IGFuIGltYWdl'))


class TableFormattingTestCase(TestCase):

    def test_format_cell(self):
        self.assertEqual(format_cell(None), '')
        self.assertEqual(format_cell(42), 42)
        self.assertEqual(format_cell(42.0), 42)
        self.assertEqual(format_cell(66.666), '66.7')
        self.assertEqual(format_cell(True), 'Yes')
        self.assertEqual(format_cell(datetime(2024, 3, 9)), '09/03/2024')

    def test_format_date(self):
        self.assertEqual(format_date('2024-03-09T10:00:00Z'), '09/03/2024')
        self.assertEqual(format_date(None), '')
        self.assertEqual(format_date('not a date'), 'not a date')

    def test_section_with_empty_message(self):
        section = ReportSection(title='T', columns=['A'], rows=[], empty_message='Nothing here')
        self.assertTrue(section.shows_message)
        self.assertEqual(tabulate([section], METADATA)[4:], [(SECTION, ['T']), (MESSAGE, ['Nothing here'])])

    def test_tabulate_sections(self):
        sections = [
            ReportSection(title='T', columns=['A', 'B'], rows=[[1, 2.26]]),
            ReportSection(title=None, columns=['C'], rows=[[None]]),
        ]
        self.assertFalse(sections[0].shows_message)
        self.assertEqual(tabulate(sections, METADATA)[4:], [
            (SECTION, ['T']),
            (HEADER, ['A', 'B']),
            (DATA, [1, '2.3']),
            (BLANK, []),
            (HEADER, ['C']),
            (DATA, ['']),
        ])


class MarksheetLayoutTestCase(TestCase):
    """Test cases for marksheet layout"""

    def setUp(self):
        self.config = RenderConfig(logo_path=None)
        self.engine = LayoutEngine(self.config, clock=lambda: FIXED_NOW)

    def test_scenario_two_subjects(self):
        marksheet = make_marksheet()
        rendered = self.engine.layout_marksheet(marksheet, resolve_signatories(marksheet))

        self.assertTrue(rendered.pdf_bytes.startswith(b'%PDF'))
        rows = rendered.layout.table_rows
        self.assertEqual(len(rows), 2)
        self.assertEqual([row.values['course'] for row in rows], ['Maths', 'Physics'])
        self.assertEqual(rows[0].result_tone, SUCCESS)
        self.assertEqual(rows[1].result_tone, FAILURE)
        self.assertEqual(rows[1].result_color, RESULT_COLORS[FAILURE])
        self.assertEqual(rendered.layout.summary_tone, FAILURE)

    def test_render_marksheet_returns_bytes(self):
        pdf_bytes = self.engine.render_marksheet(make_marksheet())
        self.assertTrue(pdf_bytes.startswith(b'%PDF'))

    def test_rows_keep_input_order(self):
        subjects = [{'subjectName': f'Subject {i}', 'marks': i, 'result': 'Pass'} for i in range(8)]
        rendered = self.engine.layout_marksheet(make_marksheet(subjects))

        self.assertEqual(
            [row.values['course'] for row in rendered.layout.table_rows],
            [f'Subject {i}' for i in range(8)],
        )
        self.assertEqual([row.values['sno'] for row in rendered.layout.table_rows], list(range(1, 9)))

    def test_row_height_covers_minimum_and_content(self):
        long_name = 'Design and Analysis of Algorithms with Advanced Data Structures ' * 3
        subjects = [
            {'subjectName': 'Maths', 'marks': 78, 'result': 'Pass'},
            {'subjectName': long_name, 'marks': 55, 'result': 'Pass'},
        ]
        rendered = self.engine.layout_marksheet(make_marksheet(subjects))
        columns = self.engine.marksheet_columns(self.config.content_width)
        course = columns[1]

        short_row, long_row = rendered.layout.table_rows
        self.assertEqual(short_row.height, self.config.base_row_height)
        self.assertGreater(long_row.height, self.config.base_row_height)
        content = measure_text_height(
            long_name, FONT_REGULAR, self.config.row_font_size,
            course.width - 2 * self.config.cell_padding_x,
        )
        self.assertGreaterEqual(long_row.height, content + 2 * self.config.cell_padding_y)

    def test_marksheet_columns_fill_content_width(self):
        columns = self.engine.marksheet_columns(self.config.content_width)

        self.assertEqual([c.label for c in columns], ['S.No', 'Course', 'Marks', 'Result'])
        self.assertAlmostEqual(sum(c.width for c in columns), self.config.content_width)
        self.assertEqual(columns[0].x, self.config.margin)

    def test_identity_row_grows_for_long_values(self):
        rendered = self.engine.layout_marksheet(make_marksheet(
            studentDetails={
                'name': 'A ' * 120,
                'regNumber': '311521243001',
                'department': 'ECE',
                'year': 'II',
            },
        ))
        heights = rendered.layout.identity_row_heights

        self.assertEqual(len(heights), 4)
        self.assertGreater(heights[1], heights[0])

    def test_title_shrinks_to_fit(self):
        config = replace(self.config, institution_name='INSTITUTE OF TECHNOLOGY AND SCIENCE ' * 2)
        engine = LayoutEngine(config, clock=lambda: FIXED_NOW)
        rendered = engine.layout_marksheet(make_marksheet())

        size = rendered.layout.title_font_size
        available = config.content_width - config.logo_width - config.header_gap
        self.assertLess(size, config.title_font_size)
        self.assertGreaterEqual(size, config.title_min_font_size)
        if size > config.title_min_font_size:
            self.assertLessEqual(text_width(config.institution_name, FONT_BOLD, size), available)

    def test_divider_below_logo_bottom(self):
        rendered = self.engine.layout_marksheet(make_marksheet())
        self.assertGreaterEqual(
            rendered.layout.divider_y,
            self.config.margin + self.config.logo_height + self.config.divider_gap,
        )

    def test_signature_slots(self):
        marksheet = make_marksheet(hodSignature=png_data_url(), hodName='Dr. Meera')
        rendered = self.engine.layout_marksheet(marksheet)

        staff, hod = rendered.layout.signature_slots
        self.assertEqual(staff.name, 'Staff Name')
        self.assertFalse(staff.has_image)
        self.assertEqual(hod.name, 'Dr. Meera')
        self.assertTrue(hod.has_image)
        self.assertEqual(staff.width, self.config.content_width / 2)

    def test_undecodable_signature_degrades(self):
        signatures = [
            SignatureSlot('Signature of Staff', 'Mr. Kumar', image='%%% not base64 %%%'),
            SignatureSlot('Signature of HOD', 'Dr. Meera', image='data:image/png;base64,AAAA'),
        ]
        with self.assertLogs('docgen.services.reporting.canvas', level='WARNING'):
            rendered = self.engine.layout_marksheet(make_marksheet(), signatures)

        self.assertTrue(rendered.pdf_bytes.startswith(b'%PDF'))
        self.assertFalse(any(slot.has_image for slot in rendered.layout.signature_slots))

    def test_missing_logo_file_is_skipped(self):
        config = replace(self.config, logo_path='/nonexistent/logo.png')
        rendered = LayoutEngine(config, clock=lambda: FIXED_NOW).layout_marksheet(make_marksheet())
        self.assertTrue(rendered.pdf_bytes.startswith(b'%PDF'))

    def test_single_page(self):
        rendered = self.engine.layout_marksheet(make_marksheet())
        self.assertEqual(rendered.layout.page_count, 1)


class LeaveLetterLayoutTestCase(TestCase):
    """Test cases for leave letter layout"""

    def setUp(self):
        self.engine = LayoutEngine(RenderConfig(logo_path=None), clock=lambda: FIXED_NOW)
        self.leave = LeaveRequest.from_record({
            '_id': 'lv1',
            'studentDetails': {
                'name': 'Asha Raman',
                'regNumber': '311521243001',
                'department': 'IT',
                'year': 'II',
                'section': 'B',
            },
            'startDate': '2024-03-04',
            'endDate': '2024-03-06',
            'reason': 'Medical leave',
            'hodName': 'Dr. Meera',
        })

    def test_layout_leave_letter(self):
        rendered = self.engine.layout_leave_letter(self.leave)

        self.assertTrue(rendered.pdf_bytes.startswith(b'%PDF'))
        self.assertEqual(len(rendered.layout.identity_row_heights), 6)
        self.assertEqual(len(rendered.layout.signature_slots), 1)
        slot = rendered.layout.signature_slots[0]
        self.assertEqual(slot.label, 'Signature of HOD')
        self.assertEqual(slot.name, 'Dr. Meera')
        self.assertEqual(slot.width, 170)

    def test_hod_placeholder(self):
        self.leave.hod_name = ''
        rendered = self.engine.layout_leave_letter(self.leave)
        self.assertEqual(rendered.layout.signature_slots[0].name, 'HOD Name')


class ReportPageLayoutTestCase(TestCase):
    """Test cases for dashboard-style report pages"""

    def setUp(self):
        self.engine = LayoutEngine(RenderConfig(logo_path=None), clock=lambda: FIXED_NOW)
        self.metadata = ReportMetadata(report_title='Subject Analysis', department_name='CSE',
                                       generated_by='HOD', generated_at=FIXED_NOW)

    def test_unknown_type_renders_placeholder(self):
        with self.assertLogs('docgen.services.reporting.layout', level='WARNING'):
            pdf_bytes = self.engine.render_report_page('attendance', [], self.metadata)
        self.assertTrue(pdf_bytes.startswith(b'%PDF'))

    def test_many_cards_continue_on_new_pages(self):
        subjects = [
            {'subjectName': f'Subject {i}', 'subjectCode': f'CS{i:03d}', 'average': 61.25,
             'highest': 98, 'lowest': 12, 'passRate': 87.5}
            for i in range(20)
        ]
        rendered = self.engine.layout_report_page(
            'subject-analysis', subjects, self.metadata, template=SubjectAnalysisReport(),
        )
        self.assertGreater(rendered.layout.page_count, 1)

    def test_empty_failed_dispatches(self):
        rendered = self.engine.layout_report_page(
            'failed-dispatches', [], self.metadata, template=FailedDispatchesReport(),
        )
        self.assertEqual(rendered.layout.page_count, 1)

    def test_prebuilt_sections_are_not_rebuilt(self):
        template = SubjectAnalysisReport()
        sections = template.build_sections(ReportData.from_raw([{'subjectName': 'Maths'}]))

        with patch.object(template, 'build_sections') as build_sections:
            rendered = self.engine.layout_report_page(
                'subject-analysis', None, self.metadata, template=template, sections=sections,
            )

        build_sections.assert_not_called()
        self.assertTrue(rendered.pdf_bytes.startswith(b'%PDF'))


class ReportRegistryTestCase(TestCase):
    """Test cases for Report Template Registry"""

    def setUp(self):
        self.registry = ReportRegistry()

    def test_register_template(self):
        self.registry.register('failed-dispatches', FailedDispatchesReport)
        self.assertTrue(self.registry.is_registered('failed-dispatches'))
        self.assertIsInstance(self.registry.get_template('failed-dispatches'), FailedDispatchesReport)

    def test_register_duplicate_raises_error(self):
        self.registry.register('failed-dispatches', FailedDispatchesReport)

        with self.assertRaises(ValueError) as cm:
            self.registry.register('failed-dispatches', FailedDispatchesReport)

        self.assertIn("already registered", str(cm.exception))

    def test_get_unregistered_template_raises_error(self):
        with self.assertRaises(KeyError):
            self.registry.get_template('attendance')

    def test_find_unregistered_template_returns_none(self):
        self.assertIsNone(self.registry.find_template('attendance'))

    def test_list_templates(self):
        self.registry.register('failed-dispatches', FailedDispatchesReport)
        self.registry.register('subject-analysis', SubjectAnalysisReport)
        self.assertEqual(self.registry.list_templates(), ['failed-dispatches', 'subject-analysis'])

    def test_app_registers_all_report_types(self):
        from docgen.services.reporting.registry import list_templates

        self.assertEqual(set(list_templates()), {
            'department-summary',
            'classwise-performance',
            'failed-dispatches',
            'subject-analysis',
        })
