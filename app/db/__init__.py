"""Database package."""

from app.db.session import (
    Base,
    SessionLocal,
    engine,
    get_db,
    get_db_dependency,
    get_sync_db,
    init_db,
)

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "get_db_dependency",
    "get_sync_db",
    "init_db",
]
