"""Logger setup shared by the app, the services and the CLI scripts."""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER = "users_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.
    Calling it again only updates the level.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if not any(getattr(h, "_users_api", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._users_api = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
