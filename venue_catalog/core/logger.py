"""Logging Configuration

Console plus two rotating files under ``settings.LOG_DIR``:

- ``<LOG_FILE_NAME>.log``: rotated by size (``LOG_MAX_BYTES`` x ``LOG_BACKUP_COUNT``)
- ``<LOG_FILE_NAME>_daily.log``: rotated at midnight, kept ``LOG_RETENTION_DAYS`` days

``LOG_LEVELS`` overrides ``LOG_LEVEL`` for individual loggers, so one noisy
component (say the catalog service during a reload investigation) can run at
DEBUG while the rest stays at INFO.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler

from .config import settings

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"


def level_for(name: str) -> str:
    """Effective level name for ``name``; the longest matching dotted prefix wins."""
    overrides = {key: value.upper() for key, value in settings.LOG_LEVELS.items()}
    parts = name.split(".")
    for end in range(len(parts), 0, -1):
        level = overrides.get(".".join(parts[:end]))
        if level:
            return level
    return settings.LOG_LEVEL.upper()


def get_logger(name: str = "venue_catalog") -> logging.Logger:
    """Configure and return a logger writing to console and the catalog log files.

    Args:
        name: Logger identifier, defaults to "venue_catalog"

    Returns:
        logging.Logger: Configured logger instance
    """
    level = level_for(name)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated calls reuse the handlers attached the first time.
    if logger.handlers:
        return logger

    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    log_dir = settings.log_dir_path
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            log_dir / f"{settings.LOG_FILE_NAME}.log",
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
        TimedRotatingFileHandler(
            log_dir / f"{settings.LOG_FILE_NAME}_daily.log",
            when="midnight",
            interval=1,
            backupCount=settings.LOG_RETENTION_DAYS,
            encoding="utf-8",
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)

    return logger


__all__ = ["get_logger", "level_for"]
