"""
Tests for the render configuration and service exceptions.
"""

from django.test import TestCase, override_settings
from reportlab.lib.pagesizes import A4

from docgen.services import config
from docgen.services.exceptions import (
    DocumentNotFound,
    DocumentValidationError,
    GenerationFailed,
    ServiceError,
    UnsupportedFormat,
)


class RenderConfigTestCase(TestCase):
    """Test cases for the configuration layer."""

    def test_defaults(self):
        render_config = config.RenderConfig()

        self.assertEqual(render_config.page_size, A4)
        self.assertEqual(render_config.margin, 50)
        self.assertEqual(render_config.content_width, A4[0] - 100)
        self.assertEqual(render_config.cache_ttl_seconds, 300)
        self.assertEqual(render_config.cache_max_entries, 50)

    @override_settings(
        CAMPUSDOCS_INSTITUTION_NAME='TEST INSTITUTE',
        CAMPUSDOCS_INSTITUTION_LINES=['Line one'],
        CAMPUSDOCS_PDF_CACHE_TTL=60,
        CAMPUSDOCS_PDF_CACHE_MAX_ENTRIES=5,
        CAMPUSDOCS_IMAGE_DPI=96,
    )
    def test_get_render_config_reads_settings(self):
        render_config = config.get_render_config()

        self.assertEqual(render_config.institution_name, 'TEST INSTITUTE')
        self.assertEqual(render_config.institution_lines, ('Line one',))
        self.assertEqual(render_config.cache_ttl_seconds, 60)
        self.assertEqual(render_config.cache_max_entries, 5)
        self.assertEqual(render_config.image_dpi, 96)

    @override_settings(CAMPUSDOCS_LOGO_PATH='/nonexistent/logo.png')
    def test_missing_logo_file(self):
        self.assertFalse(config.get_render_config().has_logo())

    @override_settings(CAMPUSDOCS_LOGO_PATH=None)
    def test_no_logo_configured(self):
        self.assertFalse(config.get_render_config().has_logo())


class ServiceExceptionsTestCase(TestCase):
    """Test cases for the service exception hierarchy."""

    def test_hierarchy(self):
        for exc_class in (DocumentValidationError, DocumentNotFound, GenerationFailed):
            self.assertTrue(issubclass(exc_class, ServiceError))
        self.assertIsInstance(UnsupportedFormat('xml'), ServiceError)

    def test_unsupported_format_message(self):
        error = UnsupportedFormat('xml')
        self.assertEqual(str(error), "Unsupported format: 'xml'")
        self.assertEqual(error.export_format, 'xml')

    def test_generation_failed_detail(self):
        self.assertEqual(str(GenerationFailed('Failed to generate PDF', 'bad font')),
                         'Failed to generate PDF: bad font')
        self.assertEqual(str(GenerationFailed('Failed to generate PDF')), 'Failed to generate PDF')
