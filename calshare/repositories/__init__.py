"""Persistence helpers for companies and events."""

from .companies import CompanyRepository
from .events import EventRepository

__all__ = ["CompanyRepository", "EventRepository"]
