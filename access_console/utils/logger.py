# access_console/utils/logger.py
"""
Logging setup shared by every module: console output plus a rotating
file under logs/ holding fetch failures, skipped records and every
check-in / check-out decision.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from access_console.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# httpx logs one INFO line per backend call; keep those out of the access log
QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True
    os.makedirs(LOG_DIR, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [
        logging.StreamHandler(),
        RotatingFileHandler(
            filename=os.path.join(LOG_DIR, settings.LOG_FILE),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
    ]

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for handler in handlers:
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


def get_logger(name: str) -> logging.Logger:
    """Named logger; the first call configures logging for the process."""
    _configure_root_logger()
    return logging.getLogger(name)
