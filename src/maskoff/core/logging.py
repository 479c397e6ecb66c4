"""Centralized logging configuration for the application."""

from __future__ import annotations

import logging
import sys

from maskoff.core.settings import Settings, settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: Settings | None = None) -> None:
    """Configure the root logger from the application settings.

    Args:
        config: Settings instance, uses the module-level settings if None
    """
    config = config or settings
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQLAlchemy echo is controlled separately through SQL_DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if config.sql_debug else logging.WARNING
    )
