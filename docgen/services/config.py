"""
Rendering configuration for campusdocs.

This module turns the CAMPUSDOCS_* Django settings into a frozen
RenderConfig. Services receive the config explicitly, so tests can pass
their own instance instead of overriding process-wide state.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from django.conf import settings
from reportlab.lib.pagesizes import A4


# Cache defaults
DEFAULT_CACHE_TTL_SECONDS = 5 * 60
DEFAULT_CACHE_MAX_ENTRIES = 50

DEFAULT_INSTITUTION_NAME = 'MEENAKSHI SUNDARARAJAN ENGINEERING COLLEGE'
DEFAULT_INSTITUTION_LINES = (
    '(AN AUTONOMOUS INSTITUTION AFFILIATED TO ANNA UNIVERSITY)',
    '363, ARCOT ROAD, KODAMBAKKAM, CHENNAI-600024',
)


@dataclass(frozen=True)
class RenderConfig:
    """
    Layout and cache tunables.

    All measurements are PDF points.
    """

    institution_name: str = DEFAULT_INSTITUTION_NAME
    institution_lines: tuple = DEFAULT_INSTITUTION_LINES
    logo_path: Optional[str] = None

    page_size: tuple = A4
    margin: float = 50

    # Header block
    logo_width: float = 85
    logo_height: float = 95
    header_gap: float = 20
    title_font_size: float = 15
    title_min_font_size: float = 9
    title_font_step: float = 0.5
    divider_gap: float = 10

    # Identity rows
    info_label_width: float = 130
    info_font_size: float = 10.5
    info_row_gap: float = 10

    # Table
    base_row_height: float = 32
    header_row_height: float = 35
    row_font_size: float = 10.5
    cell_padding_x: float = 10
    cell_padding_y: float = 8

    # Signature block and footer
    signature_offset: float = 70
    footer_offset: float = 18

    # Caching
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES

    # Raster conversion
    image_dpi: int = 150
    image_quality: int = 90

    @property
    def page_width(self) -> float:
        return self.page_size[0]

    @property
    def page_height(self) -> float:
        return self.page_size[1]

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    def has_logo(self) -> bool:
        """Check whether the configured logo file exists."""
        return bool(self.logo_path) and Path(self.logo_path).is_file()


def get_render_config() -> RenderConfig:
    """
    Build a RenderConfig from Django settings.

    Returns:
        RenderConfig with CAMPUSDOCS_* settings applied over the defaults
    """
    return RenderConfig(
        institution_name=getattr(settings, 'CAMPUSDOCS_INSTITUTION_NAME', DEFAULT_INSTITUTION_NAME),
        institution_lines=tuple(
            getattr(settings, 'CAMPUSDOCS_INSTITUTION_LINES', DEFAULT_INSTITUTION_LINES)
        ),
        logo_path=getattr(settings, 'CAMPUSDOCS_LOGO_PATH', None),
        cache_ttl_seconds=getattr(settings, 'CAMPUSDOCS_PDF_CACHE_TTL', DEFAULT_CACHE_TTL_SECONDS),
        cache_max_entries=getattr(settings, 'CAMPUSDOCS_PDF_CACHE_MAX_ENTRIES', DEFAULT_CACHE_MAX_ENTRIES),
        image_dpi=getattr(settings, 'CAMPUSDOCS_IMAGE_DPI', 150),
        image_quality=getattr(settings, 'CAMPUSDOCS_IMAGE_QUALITY', 90),
    )
