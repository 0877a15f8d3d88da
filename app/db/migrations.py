"""Alembic helper utilities for programmatic migrations."""
from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

_BASE_PATH = Path(__file__).resolve().parents[2]


def _alembic_config(database_url: str) -> Config:
    alembic_cfg = Config(str(_BASE_PATH / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(_BASE_PATH / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    alembic_cfg.attributes["database_url_override"] = database_url
    return alembic_cfg


def run_migrations(database_url: str, revision: str = "head") -> None:
    """Upgrade the lifecycle schema to `revision` (latest by default)."""
    command.upgrade(_alembic_config(database_url), revision)


def revert_migrations(database_url: str, revision: str = "base") -> None:
    """Downgrade the lifecycle schema, dropping every table at `base`."""
    command.downgrade(_alembic_config(database_url), revision)
