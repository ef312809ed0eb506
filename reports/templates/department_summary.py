"""
Department Summary Report Template

Headline dispatch counts, a year-wise breakdown and the overall result
distribution for one department.
"""

from docgen.services.documents import ReportData
from docgen.services.reporting.styles import DASHBOARD_COLORS
from docgen.services.reporting.tables import ReportSection, first_present

SUMMARY_ACCENTS = [
    DASHBOARD_COLORS['orange'],
    DASHBOARD_COLORS['indigo'],
    DASHBOARD_COLORS['green'],
    DASHBOARD_COLORS['amber'],
    DASHBOARD_COLORS['red'],
]


class DepartmentSummaryReport:
    """Template for department summary reports"""

    title = 'Department Summary'

    def _counts(self, summary: dict) -> dict:
        by_status = summary.get('byStatus') or {}

        def count(key):
            return first_present(summary, key, default=by_status.get(key, 0))

        return {
            'Total Students': first_present(summary, 'totalStudents', default=0),
            'Total Marksheets': first_present(summary, 'totalMarksheets', default=0),
            'Dispatched': count('dispatched'),
            'Pending': count('pending'),
            'Failed': count('failed'),
        }

    def _results(self, summary: dict) -> dict:
        return summary.get('overallResults') or summary.get('overallGrades') or {}

    def _years(self, summary: dict) -> list:
        return [year for year in summary.get('yearWiseBreakdown') or [] if isinstance(year, dict)]

    def build_sections(self, data: ReportData) -> list[ReportSection]:
        summary = data.as_mapping()
        sections = [
            ReportSection(
                title='Summary Statistics',
                columns=['Metric', 'Count'],
                rows=[[metric, value] for metric, value in self._counts(summary).items()],
            )
        ]

        years = self._years(summary)
        if years:
            sections.append(ReportSection(
                title='Year-wise Breakdown',
                columns=['Year', 'Students', 'Marksheets'],
                rows=[
                    [year.get('_id', year.get('year')), year.get('count', 0), year.get('marksheets', 0)]
                    for year in years
                ],
            ))

        results = self._results(summary)
        if results:
            sections.append(ReportSection(
                title='Result Distribution',
                columns=['Result', 'Count'],
                rows=[[result, count] for result, count in results.items()],
            ))
        return sections

    def draw_body(self, engine, page, sections: list[ReportSection]) -> None:
        engine.draw_heading(page, self.title)
        summary, *lists = sections
        engine.draw_metric_cards(page, summary, SUMMARY_ACCENTS)

        dots = [DASHBOARD_COLORS['orange'], DASHBOARD_COLORS['purple']]
        for index, section in enumerate(lists):
            engine.draw_list_section(page, section, dot_color=dots[index % len(dots)])
