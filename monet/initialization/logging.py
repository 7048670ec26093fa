"""
Initialization - Logging Module.

Configures loguru logger with file rotation and retention.
"""

import sys

from loguru import logger

from monet.config.settings import Settings


def setup_logging(settings: Settings) -> None:
    """Configure logger with file rotation."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if settings.debug else settings.log_level,
    )
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
        # extra={...} fields of every call end up in the JSON record
        serialize=settings.is_production,
    )

    logger.info(
        "Logging configured",
        extra={"environment": settings.environment, "level": settings.log_level},
    )
