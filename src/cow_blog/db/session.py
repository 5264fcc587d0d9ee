"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from cow_blog.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import cow_blog.models  # noqa: E402,F401


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for ``url``.

    SQLite connections may be used from the request thread pool and enforce
    foreign keys, so ``ON DELETE`` rules hold outside the ORM as well.
    """
    connect_args = {"check_same_thread": False} if _is_sqlite(url) else {}
    new_engine = create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)
    if _is_sqlite(url):
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = build_engine(settings.effective_database_url, echo=settings.sql_debug)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: sessionmaker[Session] = SessionLocal) -> Iterator[Session]:
    """Provide a transactional scope for scripts and background jobs.

    Commits when the block exits cleanly, rolls back when it raises, and
    always closes the session.
    """
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
