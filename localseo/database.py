"""SQLite + SQLAlchemy engine and session handling for saved analyses."""

import os
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///data/local_seo.db"


class Base(DeclarativeBase):
    """Declarative base for the ORM models."""
    pass


_engine = None
_SessionFactory: sessionmaker | None = None


def _sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute("PRAGMA busy_timeout=5000;")
    cursor.close()


def get_engine(database_url: str | None = None, echo: bool = False):
    """Return the process-wide engine, creating it on first use.

    Args:
        database_url: SQLAlchemy URL.  Defaults to ``DATABASE_URL`` from the
                      environment, then ``sqlite:///data/local_seo.db``.
        echo: Log every SQL statement.
    """
    global _engine
    if _engine is not None:
        return _engine

    if database_url is None:
        database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        Path(database_url.replace("sqlite:///", "")).parent.mkdir(parents=True, exist_ok=True)

    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    _engine = create_engine(database_url, echo=echo, connect_args=connect_args, pool_pre_ping=True)
    if database_url.startswith("sqlite"):
        event.listen(_engine, "connect", _sqlite_pragmas)
    logger.info("Database engine created: %s", database_url)
    return _engine


def get_session_factory(engine=None) -> sessionmaker:
    global _SessionFactory
    if _SessionFactory is not None:
        return _SessionFactory
    if engine is None:
        engine = get_engine()
    _SessionFactory = sessionmaker(bind=engine, expire_on_commit=False)
    return _SessionFactory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Transactional session scope; commits on success, rolls back on error.

    Usage::

        with get_session() as session:
            session.add(row)
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(database_url: str | None = None, echo: bool = False) -> None:
    """Create any missing tables."""
    engine = get_engine(database_url=database_url, echo=echo)
    import localseo.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created / verified.")


def reset_engine() -> None:
    """Dispose of the cached engine and session factory (used by tests)."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None
