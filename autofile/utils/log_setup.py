"""
Logging setup for AutoFile.

Routes everything through loguru: a coloured stdout sink and, when
configured, a daily rotated log file.
"""

import sys

from loguru import logger

from autofile.utils.config import Settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(settings: Settings) -> None:
    """Replace loguru's default sink with the application sinks."""
    level = settings.log_level.upper()

    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level)

    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(settings.log_file),
            format=LOG_FORMAT,
            level=level,
            rotation="00:00",
            retention="14 days",
            encoding="utf-8",
            colorize=False,
        )
