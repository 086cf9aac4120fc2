"""
Provides support for logging
"""

import logging
import time
from typing import Any


def configure_logging(
    level: int = logging.WARNING,
    handlers: list[logging.Handler] | None = None,
):
    """
    Configures logging format and log level.

    :param level: default = logging.WARNING
    :param handlers: root handlers - if not specified, then logging.basicConfig() defaults apply
    :return: None

    - log format: %(asctime)s [%(levelname)s] [%(name)s] %(message)s
    - timestamps are UTC
    - orchestrators and clients log using their class name:

    >>> configure_logging(level=logging.DEBUG)
    >>> logger = logging.getLogger('BidderRegistration')
    >>> logger.info('bidder is registered') # doctest: +SKIP
    2026-10-19 14:48:20,594 [INFO] [BidderRegistration] bidder is registered

    """
    logging.Formatter.converter = time.gmtime
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        level=level,
        handlers=handlers,
        force=True,
    )
    logging.captureWarnings(True)


def get_logger(obj: Any, name: str | None = None) -> logging.Logger:
    """
    Returns a logger using the class name as the logger name.
    If `name` is specified, then it is appended to the class name: `{obj.__class__.__name__}.{name}`
    """
    logger = logging.getLogger(obj.__class__.__name__)
    if name is None:
        return logger

    return logger.getChild(name)
