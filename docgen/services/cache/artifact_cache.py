"""
In-process cache for generated document artifacts.

Stores rendered PDF bytes keyed by source-entity identity so repeated
requests for the same marksheet do not re-run the layout engine.

Behaviour:
- Staleness is checked lazily on read against a fixed TTL; nothing sweeps
  expired entries in the background.
- Capacity is bounded. When full, the entry inserted earliest is evicted
  (FIFO), regardless of how recently it was read.
- No locking and no single-flight: two concurrent misses for the same key
  may both render and both call set(); the last writer wins.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from docgen.services.config import (
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_CACHE_TTL_SECONDS,
    get_render_config,
)

# Module-level logger
logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "pdf"


def build_cache_key(entity_id) -> str:
    """
    Build the cache key for a source entity.

    Key format: pdf_{entity_id}
    """
    return f"{CACHE_KEY_PREFIX}_{entity_id}"


@dataclass
class CachedArtifact:
    """A cached byte payload and the clock reading it was stored at."""

    key: str
    payload: bytes
    created_at: float


class ArtifactCache:
    """
    Capacity-bounded, TTL-checked artifact cache.

    The clock is injectable so TTL and eviction-order tests do not depend on
    wall-clock time.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Age after which an entry reads as a miss
            max_entries: Maximum number of entries held at once
            clock: Zero-argument callable returning seconds (default: time.monotonic)
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, CachedArtifact]" = OrderedDict()

    def get(self, key: str) -> Optional[bytes]:
        """
        Retrieve a cached payload.

        Args:
            key: Cache key to look up

        Returns:
            The stored bytes, or None if absent or older than the TTL
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache MISS for key: {key}")
            return None

        age = self._clock() - entry.created_at
        if age >= self.ttl_seconds:
            logger.debug(f"Cache STALE for key: {key} (age {age:.1f}s)")
            del self._entries[key]
            return None

        logger.debug(f"Cache HIT for key: {key}")
        return entry.payload

    def set(self, key: str, payload: bytes) -> None:
        """
        Store a payload, overwriting any existing entry at that key.

        Overwriting resets the entry's timestamp and its insertion position.
        If the cache is full, the earliest-inserted entry is evicted first.
        """
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache full, evicted earliest entry: {evicted_key}")

        self._entries[key] = CachedArtifact(key=key, payload=payload, created_at=self._clock())
        logger.debug(f"Cached artifact with key: {key} ({len(payload)} bytes)")

    def invalidate(self, key: str) -> bool:
        """
        Remove an entry ahead of its TTL.

        Returns:
            True if an entry was removed, False if none was stored
        """
        if self._entries.pop(key, None) is None:
            return False
        logger.debug(f"Invalidated cached artifact: {key}")
        return True

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def keys(self) -> list[str]:
        """Keys in insertion order (oldest first)."""
        return list(self._entries.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide instance shared by the document delivery service
_default_cache: Optional[ArtifactCache] = None


def get_default_cache() -> ArtifactCache:
    """Get the process-wide artifact cache, creating it from settings on first use."""
    global _default_cache
    if _default_cache is None:
        config = get_render_config()
        _default_cache = ArtifactCache(
            ttl_seconds=config.cache_ttl_seconds,
            max_entries=config.cache_max_entries,
        )
    return _default_cache


def invalidate_pdf_cache(entity_id) -> None:
    """
    Force the next read of an entity's PDF to regenerate.

    Called by workflows that change rendered fields (signatures, status).
    Never raises.
    """
    try:
        if get_default_cache().invalidate(build_cache_key(entity_id)):
            logger.info(f"Invalidated PDF cache for: {entity_id}")
    except Exception as e:
        logger.warning(f"Failed to invalidate PDF cache for {entity_id}: {e}")
