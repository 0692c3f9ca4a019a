"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from parley_stage.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import parley_stage.models  # noqa: E402,F401

# SQLSTATE query_canceled, raised by PostgreSQL when statement_timeout fires.
_PG_QUERY_CANCELED = "57014"
_TIMEOUT_MESSAGES = ("database is locked", "statement timeout", "timed out", "timeout expired")


def connect_args_for(url: str, timeout_seconds: float) -> dict[str, Any]:
    """Return DBAPI connect arguments bounding how long one statement may wait."""
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        return {"timeout": timeout_seconds}
    if backend == "postgresql":
        return {
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c statement_timeout={int(timeout_seconds * 1000)}",
        }
    return {}


def is_storage_timeout(exc: SQLAlchemyError) -> bool:
    """Return True if ``exc`` means storage did not answer in time."""
    if isinstance(exc, PoolTimeoutError):
        return True
    if not isinstance(exc, OperationalError):
        return False
    if getattr(exc.orig, "pgcode", None) == _PG_QUERY_CANCELED:
        return True
    message = str(exc.orig).lower()
    return any(marker in message for marker in _TIMEOUT_MESSAGES)


engine = create_engine(
    settings.effective_database_url,
    connect_args=connect_args_for(
        settings.effective_database_url, settings.db_statement_timeout_seconds
    ),
    pool_pre_ping=True,
    pool_timeout=settings.db_pool_timeout_seconds,
    isolation_level=settings.db_isolation_level,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection.

    The request handler commits; anything raised before that rolls the whole
    unit of work back.
    """
    db = SessionLocal()
    try:
        yield db
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
