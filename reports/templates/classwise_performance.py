"""
Class-wise Performance Report Template

Dispatch progress per class section. Input may be a list of class records or
a mapping keyed by class name; mapping keys arrive as 'classKey'.
"""

from docgen.services.documents import ReportData
from docgen.services.reporting.styles import DASHBOARD_COLORS
from docgen.services.reporting.tables import MISSING, ReportSection

KEY_FIELD = 'classKey'
COLUMNS = ['Branch', 'Year', 'Total Students', 'Dispatched', 'Pending', 'Dispatch Rate (%)']
EMPTY_ROW = ['N/A', 'N/A', 0, 0, 0, 0]


class ClasswisePerformanceReport:
    """Template for class-wise performance reports"""

    title = 'Class-wise Performance'

    def build_sections(self, data: ReportData) -> list[ReportSection]:
        classes = data.records(KEY_FIELD)
        rows = [
            [
                record.get('branch') or record.get(KEY_FIELD) or 'Class',
                record.get('year') or MISSING,
                record.get('totalStudents', 0),
                record.get('dispatched', 0),
                record.get('pending', 0),
                record.get('dispatchRate', 0),
            ]
            for record in classes
        ]
        return [ReportSection(title=None, columns=COLUMNS, rows=rows or [EMPTY_ROW])]

    def draw_body(self, engine, page, sections: list[ReportSection]) -> None:
        engine.draw_heading(page, self.title)
        for section in sections:
            engine.draw_record_cards(page, section, DASHBOARD_COLORS['dark_green'])
