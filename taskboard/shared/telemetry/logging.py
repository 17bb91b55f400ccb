"""Logging configuration for the application."""

import logging
import sys

from taskboard.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers kept at WARNING unless debug is on.
_QUIET_LOGGERS = ("httpx", "httpcore", "google.auth")


def setup_logging() -> None:
    """Configure root logging once: stdout, DEBUG when settings.debug else INFO."""
    settings = get_settings()
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(level if settings.debug else logging.WARNING)
