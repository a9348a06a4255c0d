"""Synthesis of iCalendar subscription documents from event records."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from calshare.config import FeedSettings
from calshare.feed.errors import FeedContractError
from calshare.feed.text import CRLF, escape_text, fold_line, format_utc

__all__ = [
    "FeedEvent",
    "build_calendar_lines",
    "build_event_lines",
    "encode_feed",
    "feed_filename",
]

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class FeedEvent:
    """Read-only snapshot of an event as seen by the encoder."""

    id: str
    company_id: str
    title: str
    start: datetime
    end: datetime
    description: str = ""
    location: Optional[str] = None
    is_public: bool = True


def encode_feed(
    company_display_name: str,
    events: Iterable[FeedEvent],
    *,
    generated_at: Optional[datetime] = None,
    settings: Optional[FeedSettings] = None,
) -> str:
    """Generate the subscription document for a company's events.

    Private events are dropped before encoding and the caller's ordering is
    kept. With a fixed ``generated_at`` the output is byte-for-byte
    reproducible.
    """

    settings = settings or FeedSettings()
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    public_events = [event for event in events if event.is_public]

    physical: List[str] = []
    for line in build_calendar_lines(
        company_display_name, public_events, generated_at=generated_at, settings=settings
    ):
        physical.extend(fold_line(line))
    return CRLF.join(physical) + CRLF


def build_calendar_lines(
    company_display_name: str,
    events: Iterable[FeedEvent],
    *,
    generated_at: datetime,
    settings: FeedSettings,
) -> List[str]:
    """Return the unfolded content lines of a whole calendar."""

    dtstamp = _format_instant(generated_at, "generated_at")
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{settings.product_id}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]
    if settings.include_calendar_name and company_display_name:
        lines.append(f"X-WR-CALNAME:{escape_text(company_display_name)}")
    for event in events:
        lines.extend(build_event_lines(event, dtstamp, settings))
    lines.append("END:VCALENDAR")
    return lines


def build_event_lines(event: FeedEvent, dtstamp: str, settings: FeedSettings) -> List[str]:
    """Return the unfolded content lines of a single ``VEVENT`` block."""

    lines = [
        "BEGIN:VEVENT",
        f"UID:{event_uid(event, settings)}",
        f"DTSTAMP:{dtstamp}",
        f"DTSTART:{_format_instant(event.start, 'start')}",
        f"DTEND:{_format_instant(event.end, 'end')}",
        f"SUMMARY:{escape_text(event.title or '')}",
    ]
    if event.description:
        lines.append(f"DESCRIPTION:{escape_text(event.description)}")
    if event.location:
        lines.append(f"LOCATION:{escape_text(event.location)}")
    lines.append("END:VEVENT")
    return lines


def event_uid(event: FeedEvent, settings: FeedSettings) -> str:
    return f"{escape_text(str(event.id))}@{settings.uid_domain}"


def feed_filename(company_display_name: str) -> str:
    """Build a download file name such as ``acme-corp-calendar.ics``."""

    stem = _FILENAME_UNSAFE.sub("-", company_display_name.strip()).strip("-._").lower()
    return f"{stem or 'company'}-calendar.ics"


def _format_instant(value: datetime, field: str) -> str:
    if not isinstance(value, datetime):
        raise FeedContractError(
            f"Expected a datetime for {field!r}, got {type(value).__name__}"
        )
    return format_utc(value)
