"""
Document Styling

Fonts, colours and the result classifier shared by the PDF layout and the
spreadsheet writer.
"""

from typing import Any

from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors


FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'

TEXT_COLOR = colors.HexColor('#000000')
MUTED_COLOR = colors.HexColor('#666666')
TABLE_HEADER_FILL = colors.HexColor('#e8e8e8')

# Result classifier outcomes
SUCCESS = 'success'
FAILURE = 'failure'
WARNING = 'warning'
DEFAULT = 'default'

RESULT_COLORS = {
    SUCCESS: colors.HexColor('#15803d'),
    FAILURE: colors.HexColor('#b91c1c'),
    WARNING: colors.HexColor('#b45309'),
    DEFAULT: colors.HexColor('#111111'),
}

_RESULT_KEYWORDS = {
    'pass': SUCCESS,
    'fail': FAILURE,
    'absent': WARNING,
}

# Dashboard palette for report pages
DASHBOARD_COLORS = {
    'card_fill': colors.HexColor('#ffffff'),
    'card_border': colors.HexColor('#f1f5f9'),
    'card_title': colors.HexColor('#a1a1aa'),
    'heading': colors.HexColor('#111827'),
    'subtle': colors.HexColor('#6b7280'),
    'section_fill': colors.HexColor('#fff8ee'),
    'section_title': colors.HexColor('#c084fc'),
    'list_value': colors.HexColor('#4338ca'),
    'orange': colors.HexColor('#f97316'),
    'green': colors.HexColor('#10b981'),
    'amber': colors.HexColor('#f59e0b'),
    'red': colors.HexColor('#ef4444'),
    'indigo': colors.HexColor('#6366f1'),
    'purple': colors.HexColor('#a855f7'),
    'dark_green': colors.HexColor('#16a34a'),
}


def classify_result(value: Any) -> str:
    """
    Classify a result string by case-insensitive literal match.

    'pass' -> success, 'fail' -> failure, 'absent' -> warning, anything
    else (including None) -> default.
    """
    normalized = ('' if value is None else str(value)).strip().lower()
    return _RESULT_KEYWORDS.get(normalized, DEFAULT)


def result_color(value: Any):
    """Get the fill colour for a result string."""
    return RESULT_COLORS[classify_result(value)]


def get_sheet_styles():
    """
    Get openpyxl styles for report workbooks.

    Returns:
        Dictionary of style objects keyed by role
    """
    return {
        'title_font': Font(bold=True, size=16),
        'title_alignment': Alignment(horizontal='center'),
        'section_font': Font(bold=True, size=14),
        'section_fill': PatternFill('solid', start_color='E6E6FA'),
        'header_font': Font(bold=True, size=11),
        'header_fill': PatternFill('solid', start_color='E8E8E8'),
        'header_alignment': Alignment(horizontal='center'),
    }
