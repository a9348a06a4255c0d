"""Read and invalidation entry points for company calendar feeds."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, NamedTuple, Optional, Protocol, Sequence

from calshare.config import FeedSettings
from calshare.feed.cache import CacheStats, FeedCache, SynthesizedDocument
from calshare.feed.encoder import FeedEvent, encode_feed

__all__ = ["EventStore", "FeedOrchestrator", "FeedResult"]

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    """Source of truth for a company's events.

    Both methods raise :class:`~calshare.feed.errors.CompanyNotFoundError`
    for unknown companies.
    """

    def list_public_events(self, company_id: str) -> Sequence[FeedEvent]:  # pragma: no cover - typing protocol
        ...

    def company_display_name(self, company_id: str) -> str:  # pragma: no cover - typing protocol
        ...


class FeedResult(NamedTuple):
    content: str
    served_from_cache: bool


class FeedOrchestrator:
    """Serve cached feeds and regenerate them after invalidation."""

    def __init__(
        self,
        cache: FeedCache,
        event_store: EventStore,
        *,
        settings: Optional[FeedSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.cache = cache
        self.event_store = event_store
        self.settings = settings or FeedSettings()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def get_feed(self, company_id: str) -> FeedResult:
        cached = self.cache.get(company_id)
        if cached is not None:
            logger.debug("Feed cache hit for company %s", company_id)
            return FeedResult(cached.content, True)

        logger.debug("Feed cache miss for company %s", company_id)
        document = self._regenerate(company_id)
        return FeedResult(document.content, False)

    def invalidate(self, company_id: str) -> None:
        self.cache.evict(company_id)
        logger.info("Feed cache invalidated for company %s", company_id)

    def invalidate_all(self) -> None:
        self.cache.evict_all()
        logger.info("All feed cache entries invalidated")

    def warm_up(self, company_id: str) -> SynthesizedDocument:
        """Regenerate and store the feed for ``company_id`` ahead of requests."""

        return self._regenerate(company_id)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def _regenerate(self, company_id: str) -> SynthesizedDocument:
        # Read before fetching: an invalidation racing with this regeneration
        # bumps the generation and the result below is not stored.
        generation = self.cache.generation(company_id)
        display_name = self.event_store.company_display_name(company_id)
        events = self.event_store.list_public_events(company_id)

        generated_at = self._clock()
        content = encode_feed(
            display_name, events, generated_at=generated_at, settings=self.settings
        )
        document = SynthesizedDocument(
            content=content,
            generated_at=generated_at,
            source_company_id=company_id,
        )
        stored = self.cache.put_if_current(company_id, document, generation)
        logger.info(
            "Generated feed for company %s with %d events%s",
            company_id,
            len(events),
            "" if stored else " (superseded, not cached)",
        )
        return document
