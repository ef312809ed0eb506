"""
Tabular Report Model

One ReportSection list per report feeds every export format, so the
spreadsheet, CSV and PDF renderers present the same fields in the same row
order.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from django.utils.dateparse import parse_datetime

# Shown wherever an optional value is absent
MISSING = '-'


@dataclass
class ReportSection:
    """
    A titled block of rows under a header row.

    A section without rows but with an empty_message renders the message
    alone in place of the header and data rows.
    """

    title: Optional[str]
    columns: list
    rows: list = field(default_factory=list)
    empty_message: Optional[str] = None

    @property
    def shows_message(self) -> bool:
        return not self.rows and bool(self.empty_message)


def format_cell(value: Any):
    """
    Format a value for output.

    Integral numbers stay integers, numbers with a fractional component are
    rendered with one decimal place, dates as dd/mm/yyyy, None as ''.
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        number = float(value)
        if number.is_integer():
            return int(number)
        return f"{number:.1f}"
    if isinstance(value, (datetime, date)):
        return value.strftime('%d/%m/%Y')
    return str(value)


def format_date(value: Any) -> str:
    """Format a date, datetime or ISO string as dd/mm/yyyy."""
    if value is None or value == '':
        return ''
    if isinstance(value, (datetime, date)):
        return value.strftime('%d/%m/%Y')
    parsed = parse_datetime(str(value))
    if parsed is None:
        return str(value)
    return parsed.strftime('%d/%m/%Y')


def first_present(record: dict, *keys, default=None):
    """Return the first value among keys that is not None."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default
