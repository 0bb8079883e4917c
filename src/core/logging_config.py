"""
Logging setup.

Every module grabs its own logger with `logging.getLogger(__name__)`; nothing in the domain layer configures handlers.
Call `setup_logging()` once from the entrypoint (CLI, web app, ...) to actually see the output.
"""

import logging
import sys
from typing import Optional

from src.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
ROOT_LOGGER_NAME = "src"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single stream handler to the package logger. Safe to call more than once."""
    level_name = (level or get_settings().log_level).upper()
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level_name)

    # avoid stacking handlers when called repeatedly (ex. in tests)
    for handler in list(package_logger.handlers):
        if getattr(handler, "_chess_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._chess_handler = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
    return package_logger
