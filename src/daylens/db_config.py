"""SQLAlchemy engine and session configuration."""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool


DEFAULT_SQLITE_URL = "sqlite:///daylens.db"


class Base(DeclarativeBase):
    """Declarative base for all daylens tables."""


def _build_engine_kwargs(database_url: str) -> dict[str, Any]:
    normalized = database_url.lower()
    kwargs: dict[str, Any] = {}

    echo_env = os.getenv("DB_ECHO", "").strip().lower()
    kwargs["echo"] = echo_env in {"1", "true", "yes", "on"}

    if normalized.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in normalized or normalized in {"sqlite://", "sqlite:///"}:
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["poolclass"] = NullPool

    return kwargs


def create_db_engine(database_url: str | None = None) -> Engine:
    """Create an engine for ``database_url`` or ``DATABASE_URL``."""
    url = database_url or os.getenv("DATABASE_URL", DEFAULT_SQLITE_URL)
    return create_engine(url, **_build_engine_kwargs(url))


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    """Create all tables if they do not exist."""
    # Importing the module registers the table classes on Base.metadata.
    from daylens import storage  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
