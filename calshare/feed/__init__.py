"""Calendar feed synthesis and cache consistency engine."""
from __future__ import annotations

from .cache import CacheStats, FeedCache, SynthesizedDocument
from .encoder import FeedEvent, encode_feed, feed_filename
from .errors import CompanyNotFoundError, FeedContractError
from .orchestrator import EventStore, FeedOrchestrator, FeedResult
from .text import escape_text, fold_line, format_utc, unescape_text, unfold_lines

__all__ = [
    "CacheStats",
    "CompanyNotFoundError",
    "EventStore",
    "FeedCache",
    "FeedContractError",
    "FeedEvent",
    "FeedOrchestrator",
    "FeedResult",
    "SynthesizedDocument",
    "encode_feed",
    "escape_text",
    "feed_filename",
    "fold_line",
    "format_utc",
    "unescape_text",
    "unfold_lines",
]
