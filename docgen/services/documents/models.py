"""
Academic Document Records

Typed records for the documents the layout engine renders. Each record has a
from_record() constructor accepting the camelCase document shape emitted by
the upstream store, with related signer records either populated (a dict)
or left as raw reference ids.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from docgen.services.exceptions import DocumentValidationError, UnsupportedFormat


logger = logging.getLogger(__name__)


DEPARTMENT_NAMES = {
    'AI_DS': 'Artificial Intelligence and Data Science',
    'CSE': 'Computer Science and Engineering',
    'HNS': 'Humanities & Science (H&S)',
    'IT': 'Information Technology',
    'ECE': 'Electronics and Communication Engineering',
    'EEE': 'Electrical and Electronics Engineering',
    'MECH': 'Mechanical Engineering',
    'CIVIL': 'Civil Engineering',
}


def expand_department_name(code: Optional[str]) -> str:
    """Expand a department abbreviation; unknown codes pass through."""
    if not code:
        return ''
    return DEPARTMENT_NAMES.get(code, code)


class DocumentStatus(str, Enum):
    """Workflow status of a marksheet or leave request"""

    DRAFT = 'draft'
    PENDING = 'pending'
    VERIFIED_BY_STAFF = 'verified_by_staff'
    APPROVED_BY_HOD = 'approved_by_hod'
    REJECTED_BY_HOD = 'rejected_by_hod'
    DISPATCHED = 'dispatched'
    RESCHEDULED = 'rescheduled'
    ACKNOWLEDGED_BY_STAFF = 'acknowledged_by_staff'
    WAITING_FOR_ARRIVAL_CONFIRMATION = 'waiting_for_arrival_confirmation'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    @classmethod
    def from_value(cls, value: Optional[str]) -> 'DocumentStatus':
        if not value:
            return cls.PENDING
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.warning(f"Unknown document status {value!r}, treating as pending")
            return cls.PENDING


class ReportType(str, Enum):
    """Closed set of administrative report types"""

    DEPARTMENT_SUMMARY = 'department-summary'
    CLASSWISE_PERFORMANCE = 'classwise-performance'
    FAILED_DISPATCHES = 'failed-dispatches'
    SUBJECT_ANALYSIS = 'subject-analysis'


class ExportFormat(str, Enum):
    """Output formats for report exports"""

    PDF = 'pdf'
    EXCEL = 'excel'
    CSV = 'csv'

    @property
    def extension(self) -> str:
        return {'pdf': 'pdf', 'excel': 'xlsx', 'csv': 'csv'}[self.value]

    @property
    def content_type(self) -> str:
        return {
            'pdf': 'application/pdf',
            'excel': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            'csv': 'text/csv',
        }[self.value]

    @classmethod
    def parse(cls, tag: Any) -> 'ExportFormat':
        """
        Parse a format tag case-insensitively.

        Raises:
            UnsupportedFormat: If the tag is outside the closed set
        """
        normalized = str(tag).strip().lower() if tag is not None else ''
        value = FORMAT_ALIASES.get(normalized, normalized)
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFormat(tag)


FORMAT_ALIASES = {
    'document': 'pdf',
    'spreadsheet': 'excel',
    'xlsx': 'excel',
    'delimited-text': 'csv',
}


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    parsed = parse_datetime(text)
    if parsed is not None:
        return parsed.date()
    return parse_date(text[:10])


def _coerce_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return parse_datetime(str(value))


def _text(value: Any) -> str:
    return '' if value is None else str(value)


@dataclass
class StudentDetails:
    """Student identity block printed on every document"""

    name: str = ''
    reg_number: str = ''
    department: str = ''
    year: str = ''
    section: str = ''

    @classmethod
    def from_record(cls, raw: Optional[dict]) -> 'StudentDetails':
        raw = raw or {}
        return cls(
            name=_text(raw.get('name')),
            reg_number=_text(raw.get('regNumber', raw.get('registerNumber'))),
            department=_text(raw.get('department')),
            year=_text(raw.get('year')),
            section=_text(raw.get('section')),
        )

    @property
    def department_display(self) -> str:
        return f"B.Tech {expand_department_name(self.department)}"


@dataclass
class SubjectLine:
    """One subject row of a marksheet"""

    subject_name: str
    marks: Any = None
    result: str = ''

    @classmethod
    def from_record(cls, raw: dict) -> 'SubjectLine':
        return cls(
            subject_name=_text(raw.get('subjectName', raw.get('name'))),
            marks=raw.get('marks', raw.get('mark')),
            result=_text(raw.get('result')),
        )


@dataclass
class Signatory:
    """A resolved signer record (staff member or HOD)"""

    name: str = ''
    signature: Optional[str] = None

    @classmethod
    def from_reference(cls, ref: Any) -> Optional['Signatory']:
        """
        Build a Signatory from a populated reference.

        Raw reference ids (strings, ObjectId-like values) carry no profile
        data and yield None.
        """
        if not isinstance(ref, dict):
            return None
        return cls(
            name=_text(ref.get('name')),
            signature=ref.get('eSignature') or None,
        )


def _entity_id(raw: dict) -> str:
    entity_id = raw.get('_id', raw.get('id'))
    if entity_id is None or entity_id == '':
        raise DocumentValidationError("Document record has no id")
    return str(entity_id)


@dataclass
class Marksheet:
    """A student marksheet ready for rendering"""

    id: str
    student: StudentDetails
    marksheet_id: str = ''
    subjects: list = field(default_factory=list)
    overall_result: str = ''
    status: DocumentStatus = DocumentStatus.DRAFT
    semester: str = ''
    examination_name: str = ''
    examination_date: Optional[date] = None
    staff: Optional[Signatory] = None
    hod: Optional[Signatory] = None
    staff_signature: Optional[str] = None
    hod_signature: Optional[str] = None
    staff_name: str = ''
    hod_name: str = ''
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, raw: dict) -> 'Marksheet':
        """
        Build a Marksheet from a stored document.

        Raises:
            DocumentValidationError: If the record has no id
        """
        entity_id = _entity_id(raw)
        return cls(
            id=entity_id,
            marksheet_id=_text(raw.get('marksheetId')) or entity_id,
            student=StudentDetails.from_record(raw.get('studentDetails')),
            subjects=[
                SubjectLine.from_record(subject)
                for subject in raw.get('subjects') or []
                if isinstance(subject, dict)
            ],
            overall_result=_text(raw.get('overallResult')),
            status=DocumentStatus.from_value(raw.get('status')),
            semester=_text(raw.get('semester')),
            examination_name=_text(raw.get('examinationName')),
            examination_date=_coerce_date(raw.get('examinationDate')),
            staff=Signatory.from_reference(raw.get('staffId')),
            hod=Signatory.from_reference(raw.get('hodId')),
            staff_signature=raw.get('staffSignature') or None,
            hod_signature=raw.get('hodSignature') or None,
            staff_name=_text(raw.get('staffName')),
            hod_name=_text(raw.get('hodName')),
            created_at=_coerce_datetime(raw.get('createdAt')),
            updated_at=_coerce_datetime(raw.get('updatedAt')),
        )


@dataclass
class LeaveRequest:
    """An approved leave (or late arrival) request"""

    id: str
    student: StudentDetails
    request_type: str = 'leave'
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: str = ''
    status: DocumentStatus = DocumentStatus.PENDING
    hod_name: str = ''
    hod_signature: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, raw: dict) -> 'LeaveRequest':
        """
        Build a LeaveRequest from a stored document.

        Raises:
            DocumentValidationError: If the record has no id
        """
        return cls(
            id=_entity_id(raw),
            student=StudentDetails.from_record(raw.get('studentDetails')),
            request_type=_text(raw.get('type')) or 'leave',
            start_date=_coerce_date(raw.get('startDate')),
            end_date=_coerce_date(raw.get('endDate')),
            reason=_text(raw.get('reason')),
            status=DocumentStatus.from_value(raw.get('status')),
            hod_name=_text(raw.get('hodName')),
            hod_signature=raw.get('hodSignature') or None,
            created_at=_coerce_datetime(raw.get('createdAt')),
            updated_at=_coerce_datetime(raw.get('updatedAt')),
        )

    @property
    def period_display(self) -> str:
        """Leave period as 'dd/mm/yyyy to dd/mm/yyyy'"""
        start = self.start_date.strftime('%d/%m/%Y') if self.start_date else '-'
        end = self.end_date.strftime('%d/%m/%Y') if self.end_date else '-'
        return f"{start} to {end}"


@dataclass
class ReportMetadata:
    """Presentation metadata shared by all export formats"""

    report_title: str = 'Report'
    department_name: str = 'Department'
    generated_by: str = 'System'
    generated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, raw: Optional[dict], department: Optional[str] = None,
                  generated_by: Optional[str] = None, generated_at: Any = None) -> 'ReportMetadata':
        raw = raw or {}
        return cls(
            report_title=raw.get('reportTitle') or 'Report',
            department_name=raw.get('departmentName') or department or 'Department',
            generated_by=generated_by or raw.get('generatedBy') or 'System',
            generated_at=_coerce_datetime(generated_at or raw.get('generatedAt')) or timezone.now(),
        )

    @property
    def generated_line(self) -> str:
        stamp = self.generated_at.strftime('%d/%m/%Y, %H:%M:%S') if self.generated_at else ''
        return f"Generated by: {self.generated_by} on {stamp}"


@dataclass
class ReportRequest:
    """A report export request assembled by the upstream aggregation step"""

    report_type: str
    export_format: ExportFormat
    data: Any
    metadata: ReportMetadata
    department: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> 'ReportRequest':
        """
        Build a ReportRequest from a request body.

        Raises:
            DocumentValidationError: If type, format or data is missing
            UnsupportedFormat: If the format tag is outside the closed set
        """
        payload = payload or {}
        report_type = payload.get('type')
        export_format = payload.get('format')
        data = payload.get('data')
        if not report_type or not export_format or data is None:
            raise DocumentValidationError("Missing required fields: type, format and data")

        department = payload.get('department')
        return cls(
            report_type=str(report_type),
            export_format=ExportFormat.parse(export_format),
            data=data,
            metadata=ReportMetadata.from_dict(
                payload.get('metadata'),
                department=department,
                generated_by=payload.get('generatedBy'),
                generated_at=payload.get('generatedAt'),
            ),
            department=department,
        )
