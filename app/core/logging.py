# file: app/core/logging.py

import logging

from app.core.settings import settings


def setup_logging() -> None:
    """
    Configures the root logger once, from LOG_LEVEL / LOG_FORMAT.
    Module loggers (logging.getLogger("webhook"), ...) inherit from it.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(level=level, format=settings.LOG_FORMAT)

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))

    logging.getLogger("app").info(f"Logging configured level={logging.getLevelName(level)}")
