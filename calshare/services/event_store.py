"""SQLAlchemy-backed event store feeding the calendar feed engine."""
from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Callable, List

from sqlalchemy.orm import Session

from calshare.database import session_scope
from calshare.feed.encoder import FeedEvent
from calshare.feed.errors import CompanyNotFoundError
from calshare.models import Event
from calshare.repositories import CompanyRepository, EventRepository

__all__ = ["SqlEventStore", "as_utc", "to_feed_event"]


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values (SQLite drops tzinfo) and normalise aware ones."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_feed_event(event: Event) -> FeedEvent:
    return FeedEvent(
        id=event.id,
        company_id=event.company_id,
        title=event.title,
        description=event.description or "",
        location=event.location if event.location else None,
        start=as_utc(event.start_at),
        end=as_utc(event.end_at),
        is_public=event.is_public,
    )


class SqlEventStore:
    """Read side of the event database, one short-lived session per call."""

    def __init__(
        self, session_factory: Callable[[], AbstractContextManager[Session]] = session_scope
    ) -> None:
        self._session_factory = session_factory

    def list_public_events(self, company_id: str) -> List[FeedEvent]:
        with self._session_factory() as session:
            if not CompanyRepository(session).exists(company_id):
                raise CompanyNotFoundError(company_id)
            events = EventRepository(session).list_by_company(company_id, public_only=True)
            return [to_feed_event(event) for event in events]

    def company_display_name(self, company_id: str) -> str:
        with self._session_factory() as session:
            try:
                company = CompanyRepository(session).get(company_id)
            except LookupError as exc:
                raise CompanyNotFoundError(company_id) from exc
            return company.name
