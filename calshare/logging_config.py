"""Centralised logging configuration.

Modules log through ``logging.getLogger(__name__)``; the application factory
calls :func:`configure_logging` once at start-up.
"""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

__all__ = ["LOG_FORMAT", "configure_logging"]


def configure_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("calshare").setLevel(resolved)
