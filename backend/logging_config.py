"""Centralized logging configuration."""

import logging

from config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"

# Calculator, service and batch-script loggers all live under these names
ENGINE_LOGGERS = ("corporate_actions", "services", "scripts")

NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "httpcore",
    "urllib3",
)


def setup_logging() -> None:
    """Configure logging for the API and the batch scripts.

    Sets the root level from settings.LOG_LEVEL. ENGINE_LOG_LEVEL, when
    set, overrides it for the engine loggers so apply/reverse activity can
    be traced without SQL noise. LOG_FILE adds a file handler next to
    stderr.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding="utf-8"))

    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        level=getattr(logging, settings.LOG_LEVEL),
        handlers=handlers,
        force=True,
    )

    engine_level = getattr(logging, settings.ENGINE_LOG_LEVEL or settings.LOG_LEVEL)
    for name in ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(engine_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
