import logging
import sys
from typing import Optional

from price_catalog.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s] - %(message)s"


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    logger = logging.getLogger(name)

    logger.setLevel(level or logging.getLevelName(settings.LOG_LEVEL.upper()))

    # Avoid stacking handlers when a module is re-imported
    logger.handlers = []

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
