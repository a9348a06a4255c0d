"""Blueprint registration helpers."""
from __future__ import annotations

from flask import Flask

from .calendar import calendar_bp
from .companies import companies_bp
from .events import events_bp

__all__ = ["register_blueprints"]


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(companies_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(calendar_bp)
