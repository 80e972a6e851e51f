"""Database configuration with lazy engine initialization.

The engine is only created when a database session is first needed, so the
in-memory registry backend never opens a connection.
"""

from contextlib import contextmanager
from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from artsfest.common.config import get_settings

# Base class for all ORM models - this is safe to initialize at import time
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False):
    """
    Create a sync engine for the given URL.

    SQLite connections are shared across threadpool workers; an in-memory
    SQLite database keeps a single connection alive for its whole lifetime.
    Every other backend uses NullPool.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            return create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        echo=echo,
        future=True,
        poolclass=NullPool,
    )


@lru_cache(maxsize=1)
def get_sync_engine():
    """Lazily create sync engine on first database access."""
    settings = get_settings()
    return build_engine(settings.database_url, echo=settings.debug)


def create_tables() -> None:
    """Create all tables for the registered models (dev/test only)."""
    # Import models so their tables are registered on Base.metadata
    from artsfest.registration import models  # noqa: F401

    Base.metadata.create_all(bind=get_sync_engine())


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context manager for sync database sessions."""
    SessionLocal = sessionmaker(
        bind=get_sync_engine(),
        autoflush=False,
        autocommit=False,
        expire_on_commit=False
    )
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
