"""Centralised configuration management for feed synthesis and caching."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

__all__ = [
    "AppConfig",
    "CacheSettings",
    "FeedSettings",
    "get_config",
    "load_config",
]


@dataclass(frozen=True)
class FeedSettings:
    """Fixed declarations and identity rules for generated feeds."""

    product_id: str = "-//Company Calendar Platform//Calendar Feed//EN"
    uid_domain: str = "company-calendar-platform.com"
    include_calendar_name: bool = True
    http_max_age: int = 900


@dataclass(frozen=True)
class CacheSettings:
    """Optional bounds for the in-memory feed cache.

    ``None`` disables the corresponding bound: entries then live until they
    are explicitly invalidated.
    """

    ttl_seconds: Optional[float] = None
    max_entries: Optional[int] = None


@dataclass(frozen=True)
class AppConfig:
    """Aggregate application configuration."""

    feed: FeedSettings = field(default_factory=FeedSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    public_base_url: str = "http://localhost:5003"
    log_level: str = "INFO"


def _get_int(var: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(var)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _get_float(var: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(var)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _get_bool(var: str, default: bool) -> bool:
    value = os.getenv(var)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _load_feed_settings() -> FeedSettings:
    defaults = FeedSettings()
    return FeedSettings(
        product_id=os.getenv("FEED_PRODUCT_ID", defaults.product_id),
        uid_domain=os.getenv("FEED_UID_DOMAIN", defaults.uid_domain),
        include_calendar_name=_get_bool(
            "FEED_INCLUDE_CALENDAR_NAME", defaults.include_calendar_name
        ),
        http_max_age=_get_int("FEED_HTTP_MAX_AGE", defaults.http_max_age),
    )


def _load_cache_settings() -> CacheSettings:
    return CacheSettings(
        ttl_seconds=_get_float("FEED_CACHE_TTL_SECONDS", None),
        max_entries=_get_int("FEED_CACHE_MAX_ENTRIES", None),
    )


def load_config() -> AppConfig:
    """Build a fresh configuration from the current environment."""

    return AppConfig(
        feed=_load_feed_settings(),
        cache=_load_cache_settings(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:5003").rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache()
def get_config() -> AppConfig:
    """Return the lazily initialised application configuration."""

    return load_config()
