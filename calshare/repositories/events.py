"""Repository objects for managing event persistence."""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session

from calshare.models import Event

__all__ = ["EventRepository"]


class EventRepository:
    """Persistence operations for company events."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_by_company(
        self,
        company_id: str,
        *,
        public_only: bool = False,
        after: Optional[datetime] = None,
        before: Optional[datetime] = None,
    ) -> Sequence[Event]:
        query = (
            select(Event)
            .where(Event.company_id == company_id)
            .order_by(Event.start_at.asc(), Event.id.asc())
        )
        if public_only:
            query = query.where(Event.is_public.is_(True))
        if after:
            query = query.where(Event.end_at >= after)
        if before:
            query = query.where(Event.start_at <= before)
        return self.session.scalars(query).all()

    def get_event(self, company_id: str, event_id: str) -> Event:
        query = select(Event).where(
            Event.id == event_id, Event.company_id == company_id
        )
        try:
            return self.session.execute(query).scalar_one()
        except NoResultFound as exc:
            raise LookupError(f"Event {event_id} not found") from exc

    def create_event(
        self,
        *,
        company_id: str,
        title: str,
        description: str,
        start_at: datetime,
        end_at: datetime,
        location: Optional[str],
        is_public: bool,
    ) -> Event:
        event = Event(
            company_id=company_id,
            title=title,
            description=description,
            start_at=start_at,
            end_at=end_at,
            location=location,
            is_public=is_public,
        )
        self.session.add(event)
        self.session.flush()
        self.session.refresh(event)
        return event

    def update_event(self, event: Event, updates: dict) -> Event:
        for key, value in updates.items():
            setattr(event, key, value)
        self.session.flush()
        self.session.refresh(event)
        return event

    def remove_event(self, event: Event) -> None:
        self.session.delete(event)
        self.session.flush()
