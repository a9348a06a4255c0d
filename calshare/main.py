"""Calendar sharing service application entrypoint."""
from __future__ import annotations

import logging
from typing import Optional

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from calshare.config import AppConfig, get_config
from calshare.database import create_schema, init_engine
from calshare.feed import FeedCache, FeedOrchestrator
from calshare.logging_config import configure_logging
from calshare.routes import register_blueprints
from calshare.routes.dependencies import (
    CONFIG_EXTENSION,
    FEED_EXTENSION,
    cleanup_services,
)
from calshare.routes.utils import error_response
from calshare.services.event_store import SqlEventStore

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    *,
    database_url: Optional[str] = None,
    orchestrator: Optional[FeedOrchestrator] = None,
) -> Flask:
    """Build the Flask application and its process-wide feed orchestrator."""

    config = config or get_config()
    configure_logging(config.log_level)
    init_engine(database_url)

    app = Flask(__name__)
    app.extensions[CONFIG_EXTENSION] = config
    app.extensions[FEED_EXTENSION] = orchestrator or build_orchestrator(config)

    register_blueprints(app)
    app.teardown_appcontext(cleanup_services)
    register_error_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "calendar-feed"}

    return app


def build_orchestrator(config: AppConfig) -> FeedOrchestrator:
    cache = FeedCache(
        ttl=config.cache.ttl_seconds,
        max_entries=config.cache.max_entries,
    )
    return FeedOrchestrator(cache, SqlEventStore(), settings=config.feed)


def register_error_handlers(flask_app: Flask) -> None:
    @flask_app.errorhandler(404)
    def handle_404(e):
        return error_response(404, "Resource not found.")

    @flask_app.errorhandler(405)
    def handle_405(e):
        return error_response(405, "Method not allowed for this resource.")

    @flask_app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        logger.warning("Database failure while handling request: %s", e)
        return error_response(503, "Calendar storage temporarily unavailable.")

    @flask_app.errorhandler(500)
    def handle_500(e):
        return error_response(500, "Internal server error.")


if __name__ == "__main__":
    application = create_app()
    create_schema()
    application.run(debug=True, port=5003)
