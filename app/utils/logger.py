"""
Logging setup.
"""

import logging

from app.config import get_settings


def setup_logging() -> None:
    """Configure the root logger from ``LOG_LEVEL`` and ``LOG_FORMAT``.

    Safe to call more than once: handlers are only attached the first time.
    """
    settings = get_settings()
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Evitar duplicar handlers
    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
    root.addHandler(handler)
