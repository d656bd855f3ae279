"""
Result Cache - Bounded LRU memo of ranked search results.

Keys combine the normalized query text, the sorted field list and the
serialized options, so "A.J" searched over (city, name) and "a.j" over
(name, city) share a slot. There is no TTL: the corpus is assumed static
for the life of the cache, and callers clear() after corpus updates.

Not thread-safe. Every get() reorders the access list, so concurrent
callers must serialize access themselves.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections import OrderedDict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from collegematch.config.errors import CacheCorruptionError

from .models import RankedResult, SearchOptions
from .normalizer import normalize

logger = logging.getLogger(__name__)

__all__ = ["CacheEntry", "SearchResultCache"]


@dataclass
class CacheEntry:
    """Cached ranked results for one key."""

    key: str
    results: tuple[RankedResult, ...]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    hit_count: int = 0


class SearchResultCache:
    """
    Least-recently-used cache of search results.

    Features:
    - Capacity-bounded, evicts least recently read or written entry
    - Order-insensitive field keys
    - Hit/miss tracking for analytics
    """

    def __init__(self, capacity: int = 100) -> None:
        """
        Initialize cache.

        Args:
            capacity: Maximum number of cached entries
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._capacity = capacity
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def get(
        self,
        query: str,
        fields: Sequence[str],
        options: SearchOptions | Mapping[str, Any] | None,
    ) -> list[RankedResult] | None:
        """Cached results, or None on a miss."""
        key = self.generate_key(query, fields, options)
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        self._check_entry(key, entry)
        self._entries.move_to_end(key)
        entry.hit_count += 1
        self._hits += 1
        logger.debug("Cache hit: %s (hits: %d)", key[:16], entry.hit_count)
        return list(entry.results)

    def set(
        self,
        query: str,
        fields: Sequence[str],
        options: SearchOptions | Mapping[str, Any] | None,
        results: Sequence[RankedResult],
    ) -> None:
        """Cache results, evicting the least recently used entry when full."""
        key = self.generate_key(query, fields, options)

        if key in self._entries:
            self._entries.move_to_end(key)
        else:
            while len(self._entries) >= self._capacity:
                self._evict_oldest()

        self._entries[key] = CacheEntry(key=key, results=tuple(results))

        if len(self._entries) > self._capacity:
            raise CacheCorruptionError(
                "Cache exceeded its capacity",
                details={"size": len(self._entries), "capacity": self._capacity},
            )
        logger.debug("Cached %d results: %s", len(results), key[:16])

    def clear(self) -> int:
        """Drop every entry. Returns the number removed."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cleared %d cache entries", count)
        return count

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        lookups = self._hits + self._misses
        return {
            "size": len(self._entries),
            "capacity": self._capacity,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "hit_rate": self._hits / lookups if lookups else 0.0,
        }

    def _evict_oldest(self) -> None:
        key, _ = self._entries.popitem(last=False)
        self._evictions += 1
        logger.debug("Evicted cache entry: %s", key[:16])

    @staticmethod
    def _check_entry(key: str, entry: CacheEntry) -> None:
        if entry.key != key:
            raise CacheCorruptionError(
                "Cache entry stored under the wrong key",
                details={"key": key[:16], "entry_key": entry.key[:16]},
            )

    @staticmethod
    def generate_key(
        query: str,
        fields: Sequence[str],
        options: SearchOptions | Mapping[str, Any] | None,
    ) -> str:
        """Generate cache key from query, field set and options."""
        if isinstance(options, SearchOptions):
            option_values: Mapping[str, Any] = options.model_dump()
        else:
            option_values = dict(options or {})

        key_parts = [
            normalize(query).text,
            ",".join(sorted(fields)),
            json.dumps(option_values, sort_keys=True, default=str),
        ]
        key_string = "|".join(key_parts)
        return hashlib.sha256(key_string.encode()).hexdigest()[:32]
