"""
Tests for the ArtifactCache class.
"""

from unittest.mock import patch

from django.test import TestCase

from docgen.services.cache import (
    ArtifactCache,
    build_cache_key,
    invalidate_pdf_cache,
)
from docgen.services.cache import artifact_cache


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class ArtifactCacheTestCase(TestCase):
    """Test cases for ArtifactCache functionality."""

    def setUp(self):
        self.clock = FakeClock()
        self.cache = ArtifactCache(ttl_seconds=300, max_entries=3, clock=self.clock)

    def test_build_cache_key_format(self):
        """Test that cache key is built with correct format."""
        self.assertEqual(build_cache_key('65f1c0ab'), 'pdf_65f1c0ab')

    def test_get_returns_stored_payload_within_ttl(self):
        """Test that a fresh entry is returned byte-for-byte."""
        self.cache.set('pdf_1', b'%PDF-1.4 first')
        self.clock.advance(299)

        self.assertEqual(self.cache.get('pdf_1'), b'%PDF-1.4 first')

    def test_get_missing_key_returns_none(self):
        self.assertIsNone(self.cache.get('pdf_missing'))

    def test_entry_at_ttl_is_stale(self):
        """Test that an entry whose age equals the TTL reads as a miss."""
        self.cache.set('pdf_1', b'payload')
        self.clock.advance(300)

        self.assertIsNone(self.cache.get('pdf_1'))

    def test_stale_entry_is_removed_on_read(self):
        self.cache.set('pdf_1', b'payload')
        self.clock.advance(301)

        self.cache.get('pdf_1')

        self.assertNotIn('pdf_1', self.cache)
        self.assertEqual(len(self.cache), 0)

    def test_stale_entry_is_kept_until_read(self):
        """Test that nothing sweeps expired entries in the background."""
        self.cache.set('pdf_1', b'payload')
        self.clock.advance(1000)

        self.assertEqual(len(self.cache), 1)

    def test_capacity_evicts_earliest_inserted(self):
        """Test FIFO eviction when the cache is full."""
        for index in range(1, 4):
            self.cache.set(f'pdf_{index}', b'x')
            self.clock.advance(1)

        # Reading does not refresh insertion order
        self.cache.get('pdf_1')
        self.cache.set('pdf_4', b'x')

        self.assertEqual(len(self.cache), 3)
        self.assertNotIn('pdf_1', self.cache)
        self.assertEqual(self.cache.keys(), ['pdf_2', 'pdf_3', 'pdf_4'])

    def test_size_never_exceeds_capacity(self):
        for index in range(20):
            self.cache.set(f'pdf_{index}', b'x')
            self.assertLessEqual(len(self.cache), 3)

    def test_overwrite_resets_timestamp_and_position(self):
        self.cache.set('pdf_1', b'old')
        self.cache.set('pdf_2', b'x')
        self.clock.advance(200)
        self.cache.set('pdf_1', b'new')
        self.clock.advance(200)

        self.assertEqual(self.cache.get('pdf_1'), b'new')
        self.assertIsNone(self.cache.get('pdf_2'))

        self.cache.set('pdf_3', b'x')
        self.cache.set('pdf_4', b'x')
        self.cache.set('pdf_5', b'x')
        self.assertNotIn('pdf_1', self.cache)

    def test_overwrite_at_capacity_does_not_evict(self):
        for index in range(1, 4):
            self.cache.set(f'pdf_{index}', b'x')

        self.cache.set('pdf_2', b'y')

        self.assertEqual(self.cache.keys(), ['pdf_1', 'pdf_3', 'pdf_2'])

    def test_invalidate(self):
        self.cache.set('pdf_1', b'payload')

        self.assertTrue(self.cache.invalidate('pdf_1'))
        self.assertIsNone(self.cache.get('pdf_1'))

    def test_invalidate_missing_key_returns_false(self):
        self.assertFalse(self.cache.invalidate('pdf_missing'))

    def test_clear(self):
        self.cache.set('pdf_1', b'x')
        self.cache.set('pdf_2', b'x')

        self.cache.clear()

        self.assertEqual(len(self.cache), 0)

    def test_rejects_zero_capacity(self):
        with self.assertRaises(ValueError):
            ArtifactCache(max_entries=0)


class InvalidatePdfCacheTestCase(TestCase):
    """Test cases for the invalidate_pdf_cache hook."""

    def setUp(self):
        self.cache = ArtifactCache(ttl_seconds=300, max_entries=5)
        patcher = patch.object(artifact_cache, '_default_cache', self.cache)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_invalidates_default_cache_entry(self):
        self.cache.set('pdf_abc', b'payload')

        invalidate_pdf_cache('abc')

        self.assertNotIn('pdf_abc', self.cache)

    def test_missing_entry_is_a_no_op(self):
        invalidate_pdf_cache('nothing-here')

        self.assertEqual(len(self.cache), 0)

    def test_never_raises(self):
        """Test that a failing cache is logged instead of propagated."""
        with patch.object(self.cache, 'invalidate', side_effect=RuntimeError('boom')):
            with self.assertLogs('docgen.services.cache.artifact_cache', level='WARNING'):
                invalidate_pdf_cache('abc')
