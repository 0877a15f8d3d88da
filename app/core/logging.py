"""Logging configuration."""

import logging
from typing import Optional

from app.core.config import settings

# Libraries that log every statement or poll at INFO
_QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "temporalio": logging.WARNING,
    "httpx": logging.WARNING,
}


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging; `level` overrides LOG_LEVEL."""
    level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger().setLevel(level)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
