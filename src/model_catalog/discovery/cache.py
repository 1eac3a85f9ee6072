"""Process-wide key/value cache for catalog listings and schemas."""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value with its insertion time."""

    key: str
    value: Any
    inserted_at: float = field(default_factory=time.monotonic)


class CacheStore:
    """Thread-safe in-memory cache with optional TTL.

    This class provides:
    - Explicit get/set with last-writer-wins semantics per key
    - Key construction that ignores the query for client-filtered providers
    - Optional expiry (``ttl_seconds=None`` keeps entries for the process lifetime)
    """

    def __init__(self, ttl_seconds: Optional[float] = None):
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime in seconds, or None for no expiry.
        """
        self.ttl_seconds = ttl_seconds
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def build_key(provider: str, query: Optional[str] = None, client_filtered: bool = False) -> str:
        """Build a cache key for a provider listing.

        Client-filtered providers cache their unfiltered superset, so the
        query never participates in their key.

        Args:
            provider: Provider tag.
            query: Search query for server-side searchable providers.
            client_filtered: True if the provider filters results locally.

        Returns:
            The cache key.
        """
        if client_filtered or not query:
            return f"models:{provider}"
        return f"models:{provider}:{query.strip().lower()}"

    def _is_expired(self, entry: CacheEntry) -> bool:
        if self.ttl_seconds is None:
            return False
        return time.monotonic() - entry.inserted_at > self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        """Get a value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if self._is_expired(entry):
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous entry for the key."""
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value)

    def delete(self, key: str) -> None:
        """Remove a single key if present."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all entries and statistics."""
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
        logger.info("Cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            size, hits, misses = len(self._entries), self.hits, self.misses
        total_requests = hits + misses
        return {
            "size": size,
            "hits": hits,
            "misses": misses,
            "hit_rate": hits / total_requests if total_requests > 0 else 0,
            "ttl_seconds": self.ttl_seconds,
        }
