"""Per-session memoization of nearest boundary results.

Results are keyed by a location string (``contig:start-end``) or by a
transcript stable identifier. The first lookup for a key computes and
serializes the result; later lookups return the stored string. "No exon in
range" is stored too, so it is never recomputed.

The cache is unbounded by default, which suits a single batch session. Pass
``max_entries`` to evict least-recently-used keys in long-running use.

Example:
    >>> cache = QueryCache(separator="|")
    >>> cache.lookup_or_compute("chr1:1000-1000", lambda: results)
    'E2|5|end'
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable

import attrs

from nearestexon.core.boundaries import NearestBoundary, format_nearest

logger = logging.getLogger(__name__)

# Stored for keys whose computation found no exon in range
_NO_RESULT = object()


@attrs.define
class CacheStats:
    """Lookup counters for a QueryCache.

    Attributes:
        hits: Lookups answered from the cache.
        misses: Lookups that ran the compute function.
        evictions: Entries dropped by the size limit.
    """

    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def lookups(self) -> int:
        """Total number of lookups."""
        return self.hits + self.misses


class QueryCache:
    """Memoize serialized nearest boundary results by key.

    Attributes:
        separator: Field separator used to serialize results.
        max_entries: Maximum number of keys kept, or None for no limit.
        stats: Hit/miss/eviction counters.
    """

    def __init__(self, separator: str = "|", max_entries: int | None = None) -> None:
        """Initialize an empty cache.

        Args:
            separator: Field separator for serialized results.
            max_entries: Evict least-recently-used keys beyond this size.

        Raises:
            ValueError: If max_entries is less than 1.
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")

        self.separator = separator
        self.max_entries = max_entries
        self.stats = CacheStats()
        self._entries: OrderedDict[str, object] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def lookup_or_compute(
        self,
        key: str,
        compute: Callable[[], list[NearestBoundary]],
    ) -> str | None:
        """Return the cached result for a key, computing it on first use.

        A single lock is held while ``compute`` runs, so computations for
        different keys run one at a time. Each key is computed at most once.

        Args:
            key: Location string or transcript stable identifier.
            compute: Produces the nearest boundaries for this key.

        Returns:
            Serialized results, or None when no exon was within range.
        """
        with self._lock:
            if key in self._entries:
                self.stats.hits += 1
                self._entries.move_to_end(key)
                value = self._entries[key]
                return None if value is _NO_RESULT else value  # type: ignore[return-value]

            self.stats.misses += 1
            serialized = format_nearest(compute(), self.separator)
            self._entries[key] = _NO_RESULT if serialized is None else serialized

            if self.max_entries is not None and len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self.stats.evictions += 1
                logger.debug(f"Evicted cache entry: {evicted}")

            return serialized

    def get(self, key: str) -> str | None:
        """Get a stored result without computing.

        Raises:
            KeyError: If the key has not been computed.
        """
        with self._lock:
            value = self._entries[key]
        return None if value is _NO_RESULT else value  # type: ignore[return-value]

    def clear(self) -> None:
        """Drop all entries and reset counters."""
        with self._lock:
            self._entries.clear()
            self.stats = CacheStats()
