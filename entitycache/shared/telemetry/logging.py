"""Logging configuration for processes that embed the entity cache."""

import logging
import sys

from entitycache.core.config import get_settings


def setup_logging(level: int | None = None) -> None:
    """Configure process-wide logging.

    Level is DEBUG when settings.debug is True (cache hit/miss lines are
    logged at DEBUG), otherwise INFO. An explicit level wins over settings.
    Output goes to stdout.
    """
    if level is None:
        level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.
    """
    return logging.getLogger(name)
