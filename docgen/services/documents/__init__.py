"""
Academic Document Model

Typed records for marksheets, leave requests and report requests, plus the
normalization step that turns heterogeneous report payloads into a uniform
record list.
"""

from .models import (
    DocumentStatus,
    ExportFormat,
    LeaveRequest,
    Marksheet,
    ReportMetadata,
    ReportRequest,
    ReportType,
    Signatory,
    StudentDetails,
    SubjectLine,
    expand_department_name,
)
from .normalize import (
    MappingData,
    ReportData,
    SequenceData,
    SignatureSlot,
    normalize,
    resolve_signatories,
)

__all__ = [
    'DocumentStatus',
    'ExportFormat',
    'LeaveRequest',
    'Marksheet',
    'ReportMetadata',
    'ReportRequest',
    'ReportType',
    'Signatory',
    'StudentDetails',
    'SubjectLine',
    'expand_department_name',
    'MappingData',
    'ReportData',
    'SequenceData',
    'SignatureSlot',
    'normalize',
    'resolve_signatories',
]
