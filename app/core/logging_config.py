"""
Logging setup - one stream handler shared by every "smartcal.*" logger.

Modules only call logging.getLogger("smartcal.<area>"); configure_logging()
is invoked once from app.main at import time.
"""

import logging
import sys

from app.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Attach a stdout handler to the root "smartcal" logger.

    Safe to call more than once; a handler is only added the first time.
    """
    logger = logging.getLogger("smartcal")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
