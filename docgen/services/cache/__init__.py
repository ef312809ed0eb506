"""
Artifact Cache

Time-limited, capacity-bounded cache for generated document bytes.
"""

from .artifact_cache import (
    ArtifactCache,
    CachedArtifact,
    build_cache_key,
    get_default_cache,
    invalidate_pdf_cache,
)

__all__ = [
    'ArtifactCache',
    'CachedArtifact',
    'build_cache_key',
    'get_default_cache',
    'invalidate_pdf_cache',
]
