"""
Failed Dispatches Report Template

Marksheets whose delivery failed, with attempt counts.
"""

from docgen.services.documents import ReportData
from docgen.services.reporting.styles import DASHBOARD_COLORS
from docgen.services.reporting.tables import ReportSection, format_date

COLUMNS = ['Student Name', 'Register Number', 'Branch', 'Year', 'Attempts', 'Last Attempt']
EMPTY_MESSAGE = 'No failed dispatches found'


class FailedDispatchesReport:
    """Template for failed dispatch reports"""

    title = 'Failed Dispatches Report'

    def build_sections(self, data: ReportData) -> list[ReportSection]:
        rows = [
            [
                record.get('studentName'),
                record.get('registerNumber'),
                record.get('branch'),
                record.get('year'),
                record.get('dispatchAttempts', 0),
                format_date(record.get('lastDispatchAttempt')),
            ]
            for record in data.records()
        ]
        return [ReportSection(title=None, columns=COLUMNS, rows=rows, empty_message=EMPTY_MESSAGE)]

    def draw_body(self, engine, page, sections: list[ReportSection]) -> None:
        engine.draw_heading(page, self.title)
        for section in sections:
            engine.draw_list_section(page, section, dot_color=DASHBOARD_COLORS['red'], numbered=True)
