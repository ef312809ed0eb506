"""
Download filename generation and sanitization
"""

import os
import re
from datetime import datetime
from typing import Optional

# Maximum length for a sanitized filename stem (excluding extension)
MAX_FILENAME_LENGTH = 100


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename for use in a Content-Disposition header.

    Args:
        filename: Proposed filename, possibly containing user data

    Returns:
        Filename made of alphanumerics, dashes and underscores plus extension
    """
    # Get basename to prevent directory traversal
    filename = os.path.basename(filename)

    name_parts = filename.rsplit('.', 1)
    name = name_parts[0]
    ext = f".{name_parts[1]}" if len(name_parts) > 1 else ""

    name = re.sub(r'[^a-zA-Z0-9\-_]', '_', name)
    name = re.sub(r'_+', '_', name).strip('_')

    if not name:
        name = "file"

    if len(name) > MAX_FILENAME_LENGTH:
        name = name[:MAX_FILENAME_LENGTH]

    return f"{name}{ext}"


def marksheet_filename(reg_number: str, marksheet_id: str, extension: str) -> str:
    """marksheet_<register number>_<marksheet id>.<ext>"""
    return sanitize_filename(f"marksheet_{reg_number}_{marksheet_id}.{extension}")


def leave_letter_filename(reg_number: str, extension: str) -> str:
    """leave_<register number>.<ext>"""
    return sanitize_filename(f"leave_{reg_number}.{extension}")


def report_filename(report_type: str, department: Optional[str], generated_at: datetime,
                    extension: str) -> str:
    """<type>_<department or 'report'>_<YYYY-MM-DD>.<ext>"""
    stamp = generated_at.strftime('%Y-%m-%d')
    return sanitize_filename(f"{report_type}_{department or 'report'}_{stamp}.{extension}")
