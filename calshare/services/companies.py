"""Company registration and shareable calendar links."""
from __future__ import annotations

import logging
import re
import secrets
import time
from typing import Any, Dict, Optional
from urllib.parse import quote, urlsplit

from sqlalchemy.orm import Session

from calshare.repositories import CompanyRepository
from calshare.services.events import ValidationError

__all__ = [
    "CompanyNotFoundError",
    "CompanyService",
    "build_subscription_urls",
    "is_valid_share_token",
]

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
SHARE_TOKEN_PATTERN = re.compile(r"^cal-[a-z0-9-]+$", re.IGNORECASE)
MAX_TOKEN_ATTEMPTS = 5


class CompanyNotFoundError(LookupError):
    """Raised when a company could not be located."""


def is_valid_share_token(token: Optional[str]) -> bool:
    if not isinstance(token, str) or not 10 <= len(token) <= 200:
        return False
    return bool(SHARE_TOKEN_PATTERN.match(token))


def new_share_token() -> str:
    stamp = _base36(int(time.time() * 1000))
    return f"cal-{stamp}-{secrets.token_hex(8)}"


def build_subscription_urls(base_url: str, share_token: str) -> Dict[str, str]:
    """Subscription links for the common calendar applications."""

    feed_url = f"{base_url.rstrip('/')}/calendar/{share_token}/feed.ics"
    encoded = quote(feed_url, safe="")
    parts = urlsplit(feed_url)
    return {
        "ical_feed": feed_url,
        "google_calendar": f"https://calendar.google.com/calendar/render?cid={encoded}",
        "outlook_calendar": f"https://outlook.live.com/calendar/0/addcalendar?url={encoded}",
        "apple_calendar": f"webcal://{parts.netloc}{parts.path}",
    }


class CompanyService:
    """Create companies and manage their shareable calendar token."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.repository = CompanyRepository(session)

    def create_company(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise ValidationError({"_schema": ["Invalid JSON payload: an object is required."]})
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError({"name": ["Required (non-empty string)."]})
        name = name.strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise ValidationError(
                {"name": [f"Must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."]}
            )

        company = self.repository.create(name=name, shareable_url=self._unique_token())
        self.session.commit()
        logger.info("Created company %s", company.id)
        return self._serialize(company)

    def get_company(self, company_id: str) -> Dict[str, Any]:
        return self._serialize(self._get(company_id))

    def get_by_share_token(self, share_token: str) -> Dict[str, Any]:
        if not is_valid_share_token(share_token):
            raise CompanyNotFoundError(f"Calendar {share_token} not found")
        company = self.repository.find_by_shareable_url(share_token)
        if company is None:
            raise CompanyNotFoundError(f"Calendar {share_token} not found")
        return self._serialize(company)

    def rotate_share_token(self, company_id: str) -> Dict[str, Any]:
        company = self._get(company_id)
        self.repository.update_shareable_url(company, self._unique_token())
        self.session.commit()
        logger.info("Rotated share token for company %s", company_id)
        return self._serialize(company)

    def _get(self, company_id: str):
        try:
            return self.repository.get(company_id)
        except LookupError as exc:
            raise CompanyNotFoundError(str(exc)) from exc

    def _unique_token(self) -> str:
        for _ in range(MAX_TOKEN_ATTEMPTS):
            token = new_share_token()
            if self.repository.find_by_shareable_url(token) is None:
                return token
        raise RuntimeError("Failed to generate a unique share token")

    @staticmethod
    def _serialize(company) -> Dict[str, Any]:
        return {
            "id": company.id,
            "name": company.name,
            "shareable_url": company.shareable_url,
        }


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while value:
        value, remainder = divmod(value, 36)
        out = digits[remainder] + out
    return out or "0"
