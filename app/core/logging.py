"""Structured logging configuration.

Configures the root logger with a structured format including timestamp,
level, and module name.  The log level is controlled by ``settings.LOG_LEVEL``.
Events are logged as snake_case messages with their context passed through
``extra=``.
"""

import logging
import sys

from app.core.config import settings

_NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "uvicorn.access", "apscheduler")


def setup_logging() -> None:
    """Install a single stdout handler on the root logger.

    Safe to call more than once (the FastAPI lifespan runs on every
    ``TestClient`` context): existing handlers are replaced, not stacked.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
