"""
Report templates for administrative exports.
"""

from .classwise_performance import ClasswisePerformanceReport
from .department_summary import DepartmentSummaryReport
from .failed_dispatches import FailedDispatchesReport
from .subject_analysis import SubjectAnalysisReport

__all__ = [
    'ClasswisePerformanceReport',
    'DepartmentSummaryReport',
    'FailedDispatchesReport',
    'SubjectAnalysisReport',
]
