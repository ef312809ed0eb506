"""
Reports package

Contains report templates for administrative exports.
"""

from docgen.services.documents import ReportType
from docgen.services.reporting.registry import is_registered, register_template
from .templates import (
    ClasswisePerformanceReport,
    DepartmentSummaryReport,
    FailedDispatchesReport,
    SubjectAnalysisReport,
)


def register_all_templates():
    """Register all available report templates"""
    templates = {
        ReportType.DEPARTMENT_SUMMARY: DepartmentSummaryReport,
        ReportType.CLASSWISE_PERFORMANCE: ClasswisePerformanceReport,
        ReportType.FAILED_DISPATCHES: FailedDispatchesReport,
        ReportType.SUBJECT_ANALYSIS: SubjectAnalysisReport,
    }
    for report_type, template in templates.items():
        if not is_registered(report_type.value):
            register_template(report_type.value, template)


# Auto-register templates when module is imported
register_all_templates()
