"""SQLAlchemy engine and session helpers for the calendar store."""
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

__all__ = [
    "Base",
    "create_schema",
    "dispose_engine",
    "get_engine",
    "get_session",
    "init_engine",
    "session_scope",
]

Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def database_url_from_env() -> str:
    """Resolve the database URL, preferring ``DATABASE_URL`` over ``DB_*`` parts."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    parts = {key: os.getenv(f"DB_{key.upper()}") for key in ("user", "password", "host", "port", "name")}
    if all(parts.values()):
        return (
            "postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}".format(**parts)
        )

    return "sqlite:///./calshare.db"


def init_engine(database_url: Optional[str] = None, **engine_kwargs) -> Engine:
    """(Re)create the engine and bind a fresh session factory to it."""
    global _engine, _session_factory

    database_url = database_url or database_url_from_env()
    dispose_engine()

    options = {"future": True, "pool_pre_ping": True, **engine_kwargs}
    if database_url.startswith("sqlite"):
        options.setdefault("connect_args", {"check_same_thread": False})
    else:
        options.setdefault("pool_size", int(os.getenv("DB_POOL_SIZE", "5")))
        options.setdefault("max_overflow", int(os.getenv("DB_MAX_OVERFLOW", "10")))

    _engine = create_engine(database_url, **options)
    _session_factory = sessionmaker(
        bind=_engine,
        autoflush=False,
        expire_on_commit=False,
        class_=Session,
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        return init_engine()
    return _engine


def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def create_schema() -> None:
    """Create missing tables; migrations remain the source of truth in production."""
    import calshare.models  # noqa: F401 - register mappers on Base.metadata

    Base.metadata.create_all(bind=get_engine())


def get_session() -> Session:
    if _session_factory is None:
        init_engine()
    assert _session_factory is not None  # For mypy
    return _session_factory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope for database operations."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
