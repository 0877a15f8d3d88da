"""Database session management."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _to_sync_url(url: str) -> str:
    """Convert async DB URL to sync URL."""
    if url.startswith("sqlite+aiosqlite://"):
        return "sqlite://" + url[19:]
    if url.startswith("postgresql+asyncpg://"):
        return "postgresql://" + url[21:]
    return url


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a thread pool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


_database_url = _to_sync_url(settings.DATABASE_URL)
engine = create_engine(_database_url, **_engine_kwargs(_database_url))
SessionLocal = sessionmaker(engine, autocommit=False, autoflush=False)


def init_db() -> None:
    """Create all database tables."""
    # Register models on the metadata before create_all
    from app.db import models  # noqa: F401

    Base.metadata.create_all(engine)


@contextmanager
def get_db() -> Iterator[Session]:
    """Unit of work: commit on success, roll back on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db_dependency() -> Iterator[Session]:
    """FastAPI dependency wrapping one request in a unit of work."""
    with get_db() as db:
        yield db


# Worker activities use the same unit of work
get_sync_db = get_db
