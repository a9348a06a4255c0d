"""Process-wide store of generated feeds keyed by company identifier."""
from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional

__all__ = ["CacheEntry", "CacheStats", "FeedCache", "SynthesizedDocument"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesizedDocument:
    """A generated feed together with its provenance."""

    content: str
    generated_at: datetime
    source_company_id: str


@dataclass(frozen=True)
class CacheEntry:
    document: SynthesizedDocument
    stored_at: float


@dataclass(frozen=True)
class CacheStats:
    total_entries: int
    hits: int
    misses: int
    hit_rate: float
    miss_rate: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "total_entries": self.total_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "miss_rate": self.miss_rate,
        }


class FeedCache:
    """At most one document per company, with immediate invalidation.

    Every key has its own lock, so operations on one company never wait on
    another. Each :meth:`evict` bumps the key's generation; a writer that read
    the generation before regenerating can use :meth:`put_if_current` to make
    sure a document built from pre-invalidation data is never stored.

    ``ttl`` (seconds) and ``max_entries`` are optional bounds. Expiry is
    checked lazily on :meth:`get`; the size bound is enforced inside
    :meth:`put` by dropping the oldest entries.
    """

    def __init__(
        self,
        ttl: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._generations: Dict[str, int] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._prune_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, company_id: str) -> Optional[SynthesizedDocument]:
        with self._lock_for(company_id):
            entry = self._entries.get(company_id)
            if entry is not None and self._is_expired(entry):
                del self._entries[company_id]
                entry = None
        self._record(hit=entry is not None)
        return entry.document if entry is not None else None

    def put(self, company_id: str, document: SynthesizedDocument) -> None:
        with self._lock_for(company_id):
            self._entries[company_id] = CacheEntry(document, self._clock())
        self._enforce_capacity()

    def generation(self, company_id: str) -> int:
        with self._lock_for(company_id):
            return self._generations.get(company_id, 0)

    def put_if_current(
        self, company_id: str, document: SynthesizedDocument, generation: int
    ) -> bool:
        """Store ``document`` unless the key was evicted since ``generation``."""

        with self._lock_for(company_id):
            if self._generations.get(company_id, 0) != generation:
                logger.debug("Discarding superseded feed for company %s", company_id)
                return False
            self._entries[company_id] = CacheEntry(document, self._clock())
        self._enforce_capacity()
        return True

    def evict(self, company_id: str) -> None:
        with self._lock_for(company_id):
            self._entries.pop(company_id, None)
            self._generations[company_id] = self._generations.get(company_id, 0) + 1

    def evict_all(self) -> None:
        for company_id in list(self._locks):
            self.evict(company_id)

    def stats(self) -> CacheStats:
        with self._stats_lock:
            hits, misses = self._hits, self._misses
        total = hits + misses
        hit_rate = round(hits / total * 100, 2) if total else 0.0
        miss_rate = round(misses / total * 100, 2) if total else 0.0
        return CacheStats(
            total_entries=len(self._entries),
            hits=hits,
            misses=misses,
            hit_rate=hit_rate,
            miss_rate=miss_rate,
        )

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, company_id: object) -> bool:
        return company_id in self._entries

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _lock_for(self, company_id: str) -> threading.Lock:
        lock = self._locks.get(company_id)
        if lock is None:
            lock = self._locks.setdefault(company_id, threading.Lock())
        return lock

    def _is_expired(self, entry: CacheEntry) -> bool:
        if self.ttl is None:
            return False
        return self._clock() - entry.stored_at > self.ttl

    def _record(self, *, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1

    def _enforce_capacity(self) -> None:
        if self.max_entries is None or len(self._entries) <= self.max_entries:
            return
        with self._prune_lock:
            snapshot = list(self._entries.items())
            overflow = len(snapshot) - self.max_entries
            if overflow <= 0:
                return
            # Oldest first, at least a tenth of the cache per pass.
            count = max(overflow, math.ceil(len(snapshot) * 0.1))
            snapshot.sort(key=lambda item: item[1].stored_at)
            for company_id, entry in snapshot[:count]:
                with self._lock_for(company_id):
                    if self._entries.get(company_id) is entry:
                        del self._entries[company_id]
            logger.info("Pruned %d feed cache entries (limit %d)", count, self.max_entries)
