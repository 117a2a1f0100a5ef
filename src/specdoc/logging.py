"""Logging utilities for specdoc."""

from __future__ import annotations

import logging

_LOGGER_NAME = "specdoc"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the specdoc hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send specdoc records to stderr, at debug level when ``verbose``."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[specdoc] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
