"""Utilities for accessing services within Flask request context."""
from __future__ import annotations

from flask import current_app, g

from calshare.config import AppConfig
from calshare.database import get_session
from calshare.feed import FeedOrchestrator
from calshare.services.companies import CompanyService
from calshare.services.events import EventService

FEED_EXTENSION = "calshare.feed"
CONFIG_EXTENSION = "calshare.config"

SERVICE_KEYS = ("event_service", "company_service")


def get_db_session():
    if "db_session" not in g:
        g.db_session = get_session()
    return g.db_session


def get_feed_orchestrator() -> FeedOrchestrator:
    return current_app.extensions[FEED_EXTENSION]


def get_app_config() -> AppConfig:
    return current_app.extensions[CONFIG_EXTENSION]


def get_event_service() -> EventService:
    if "event_service" not in g:
        g.event_service = EventService(get_db_session(), get_feed_orchestrator())
    return g.event_service


def get_company_service() -> CompanyService:
    if "company_service" not in g:
        g.company_service = CompanyService(get_db_session())
    return g.company_service


def cleanup_services(exception):
    session = g.pop("db_session", None)
    for key in SERVICE_KEYS:
        g.pop(key, None)
    if session is not None:
        try:
            if exception is not None:
                session.rollback()
        finally:
            session.close()
