"""
Logger utility for consistent logging across the roster package.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed by the entry point (the init_db CLI) through ``setup_logging``.
"""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_HANDLER_NAME = "roster-console"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the ``roster`` logger hierarchy.

    Safe to call more than once: the console handler is only installed the
    first time, later calls just adjust the level.

    Args:
        level: Log level name; defaults to ``settings.log_level``

    Returns:
        logging.Logger: the configured ``roster`` logger
    """
    if level is None:
        from roster.config import settings
        level = settings.log_level

    logger = logging.getLogger("roster")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))
        logger.addHandler(handler)

    return logger
