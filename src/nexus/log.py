from __future__ import annotations

import logging
import sys

LOGGER_NAME = "nexus"
LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"

_LEVEL_MAP: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_HANDLER_ATTR = "_nexus_handler"


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Safe to call repeatedly; later calls adjust the level and re-point the
    handler at the current ``sys.stderr``.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_LEVEL_MAP.get(level.upper(), logging.WARNING))
    for handler in logger.handlers:
        if getattr(handler, _HANDLER_ATTR, False) and isinstance(handler, logging.StreamHandler):
            handler.stream = sys.stderr
            return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    logger.addHandler(handler)
    return logger
