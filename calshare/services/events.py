"""Service layer for event validation, persistence and feed invalidation."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from calshare.feed.errors import CompanyNotFoundError
from calshare.repositories import CompanyRepository, EventRepository
from calshare.services.event_store import as_utc

__all__ = [
    "EventNotFoundError",
    "EventService",
    "FeedInvalidator",
    "ValidationError",
    "parse_datetime",
]

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
LOCATION_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000


class ValidationError(Exception):
    """Raised when incoming payload validation fails."""

    def __init__(self, errors: Dict[str, List[str]], message: str = "Validation failed."):
        super().__init__(message)
        self.errors = errors
        self.message = message


class EventNotFoundError(Exception):
    """Raised when an event could not be located."""


class FeedInvalidator(Protocol):
    def invalidate(self, company_id: str) -> None:  # pragma: no cover - typing protocol
        ...


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into an aware UTC datetime, or ``None``."""

    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return as_utc(parsed)


class EventService:
    """High level operations for managing a company's events.

    Every successful create, update or delete invalidates the company's
    cached feed after the transaction has been committed. Failed mutations
    leave the cache untouched.
    """

    def __init__(self, session: Session, feed: FeedInvalidator) -> None:
        self.session = session
        self.feed = feed
        self.repository = EventRepository(session)
        self.company_repository = CompanyRepository(session)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def list_events(
        self,
        company_id: str,
        *,
        public_only: bool = False,
        after: Optional[str] = None,
        before: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        self._ensure_company(company_id)
        after_value = self._parse_filter(after, "after")
        before_value = self._parse_filter(before, "before")
        events = self.repository.list_by_company(
            company_id, public_only=public_only, after=after_value, before=before_value
        )
        return [self._serialize_event(event) for event in events]

    def get_event(self, company_id: str, event_id: str) -> Dict[str, Any]:
        try:
            event = self.repository.get_event(company_id, event_id)
        except LookupError as exc:
            raise EventNotFoundError(str(exc)) from exc
        return self._serialize_event(event)

    def create_event(self, company_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._ensure_company(company_id)
        clean = self._validate_event_payload(payload, partial=False)
        self._ensure_time_range(clean["start_at"], clean["end_at"])

        event = self.repository.create_event(
            company_id=company_id,
            title=clean["title"],
            description=clean.get("description", ""),
            start_at=clean["start_at"],
            end_at=clean["end_at"],
            location=clean.get("location"),
            is_public=clean.get("is_public", True),
        )
        self.session.commit()
        self.feed.invalidate(company_id)
        logger.info("Created event %s for company %s", event.id, company_id)
        return self._serialize_event(event)

    def update_event(
        self, company_id: str, event_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        clean = self._validate_event_payload(payload, partial=True)
        try:
            event = self.repository.get_event(company_id, event_id)
        except LookupError as exc:
            raise EventNotFoundError(str(exc)) from exc
        if not clean:
            return self._serialize_event(event)

        self._ensure_time_range(
            clean.get("start_at", as_utc(event.start_at)),
            clean.get("end_at", as_utc(event.end_at)),
        )
        event = self.repository.update_event(event, clean)
        self.session.commit()
        self.feed.invalidate(company_id)
        logger.info("Updated event %s for company %s", event_id, company_id)
        return self._serialize_event(event)

    def delete_event(self, company_id: str, event_id: str) -> None:
        try:
            event = self.repository.get_event(company_id, event_id)
        except LookupError as exc:
            raise EventNotFoundError(str(exc)) from exc
        self.repository.remove_event(event)
        self.session.commit()
        self.feed.invalidate(company_id)
        logger.info("Deleted event %s for company %s", event_id, company_id)

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------
    def _validate_event_payload(
        self, data: Dict[str, Any], *, partial: bool
    ) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValidationError(
                {"_schema": ["Invalid JSON payload: an object is required."]}
            )

        errors: Dict[str, List[str]] = {}
        clean: Dict[str, Any] = {}

        if "title" in data or not partial:
            title = data.get("title")
            if not isinstance(title, str) or not title.strip():
                errors.setdefault("title", []).append("Required (non-empty string).")
            elif not TITLE_MIN_LENGTH <= len(title.strip()) <= TITLE_MAX_LENGTH:
                errors.setdefault("title", []).append(
                    f"Must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters."
                )
            else:
                clean["title"] = title.strip()

        if "description" in data:
            description = data.get("description")
            if description is None:
                clean["description"] = ""
            elif not isinstance(description, str):
                errors.setdefault("description", []).append("Must be a string.")
            elif len(description) > DESCRIPTION_MAX_LENGTH:
                errors.setdefault("description", []).append(
                    f"Must be at most {DESCRIPTION_MAX_LENGTH} characters."
                )
            else:
                clean["description"] = description

        if "location" in data:
            location = data.get("location")
            if location is None:
                clean["location"] = None
            elif not isinstance(location, str):
                errors.setdefault("location", []).append("Must be a string or null.")
            elif len(location.strip()) > LOCATION_MAX_LENGTH:
                errors.setdefault("location", []).append(
                    f"Must be at most {LOCATION_MAX_LENGTH} characters."
                )
            else:
                clean["location"] = location.strip() or None

        for field, column in (("start", "start_at"), ("end", "end_at")):
            if field in data or not partial:
                parsed = parse_datetime(data.get(field))
                if parsed is None:
                    errors.setdefault(field, []).append(
                        "Invalid date-time, expected ISO 8601 (e.g. 2025-05-01T09:00:00Z)."
                    )
                else:
                    clean[column] = parsed

        if "is_public" in data:
            is_public = data.get("is_public")
            if not isinstance(is_public, bool):
                errors.setdefault("is_public", []).append("Must be a boolean.")
            else:
                clean["is_public"] = is_public

        if errors:
            raise ValidationError(errors)
        return clean

    @staticmethod
    def _ensure_time_range(start_at: datetime, end_at: datetime) -> None:
        if start_at >= end_at:
            raise ValidationError({"end": ["Must be after the start date-time."]})

    def _ensure_company(self, company_id: str) -> None:
        if not self.company_repository.exists(company_id):
            raise CompanyNotFoundError(company_id)

    @staticmethod
    def _parse_filter(value: Optional[str], field: str) -> Optional[datetime]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        parsed = parse_datetime(value)
        if parsed is None:
            raise ValidationError({field: ["Invalid filter date-time, expected ISO 8601."]})
        return parsed

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    @staticmethod
    def _serialize_event(event) -> Dict[str, Any]:
        return {
            "id": event.id,
            "company_id": event.company_id,
            "title": event.title,
            "description": event.description,
            "location": event.location,
            "start": _serialize_datetime(event.start_at),
            "end": _serialize_datetime(event.end_at),
            "is_public": event.is_public,
            "created_at": _serialize_datetime(event.created_at),
            "updated_at": _serialize_datetime(event.updated_at),
        }


def _serialize_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")
