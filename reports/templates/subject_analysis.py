"""
Subject Analysis Report Template

Marks statistics per subject. Input may be a list of subject records or a
mapping keyed by subject; mapping keys arrive as 'subjectKey'.
"""

from docgen.services.documents import ReportData
from docgen.services.reporting.styles import DASHBOARD_COLORS
from docgen.services.reporting.tables import MISSING, ReportSection, first_present

KEY_FIELD = 'subjectKey'
COLUMNS = [
    'Subject Name', 'Subject Code', 'Total Enrollments',
    'Average Marks', 'Highest', 'Lowest', 'Pass Rate (%)',
]
EMPTY_MESSAGE = 'No subject data available'


def _subject_name(record: dict) -> str:
    return record.get('subjectName') or record.get('name') or record.get(KEY_FIELD) or ''


def _average(record: dict):
    return first_present(record, 'average', 'averageMarks', 'averageGrade', default=MISSING)


def _pass_rate(record: dict):
    return first_present(record, 'passRate', 'passingRate', default=0)


class SubjectAnalysisReport:
    """Template for subject analysis reports"""

    title = 'Subject Analysis'

    def build_sections(self, data: ReportData) -> list[ReportSection]:
        rows = [
            [
                _subject_name(record),
                record.get('subjectCode') or MISSING,
                record.get('totalEnrollments', 0),
                _average(record),
                first_present(record, 'highest', default=MISSING),
                first_present(record, 'lowest', default=MISSING),
                _pass_rate(record),
            ]
            for record in data.records(KEY_FIELD)
        ]
        return [ReportSection(title=None, columns=COLUMNS, rows=rows, empty_message=EMPTY_MESSAGE)]

    def draw_body(self, engine, page, sections: list[ReportSection]) -> None:
        engine.draw_heading(page, self.title)
        for section in sections:
            engine.draw_record_cards(page, section, DASHBOARD_COLORS['indigo'])
