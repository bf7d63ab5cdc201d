"""Logging setup."""

import logging

from athletica.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once at startup from ``LOG_LEVEL``."""
    logging.basicConfig(level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
                        format=LOG_FORMAT)
