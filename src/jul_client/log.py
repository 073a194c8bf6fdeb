"""Logging setup for the ``jul_client`` logger hierarchy."""

from __future__ import annotations

import logging

from jul_client.config import ClientSettings

LOGGER_NAME = "jul_client"
HANDLER_NAME = "jul_client.stream"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    ``level`` defaults to ``JUL_LOG_LEVEL``. Calling this again only updates
    the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level if level is not None else ClientSettings().log_level)
    if not any(handler.name == HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    return logger
