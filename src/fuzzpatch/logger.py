from __future__ import annotations

import logging
from typing import Optional

import structlog

from .settings import LoggingSettings

LOGGER_NAME = "fuzzpatch"

# Library use stays silent until an entry point calls configure_logging.
logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _to_level(level: object) -> int:
    return logging.getLevelName(str(getattr(level, "value", level)).upper())


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Set levels and handlers for the fuzzpatch logger. Library code never calls
    this; entry points such as the CLI do.
    """
    settings = settings or LoggingSettings()
    pkg_logger = logging.getLogger(LOGGER_NAME)
    pkg_logger.setLevel(_to_level(settings.default_level))

    if not any(getattr(h, "_fuzzpatch_owned", False) for h in pkg_logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(message)s"))
        stream._fuzzpatch_owned = True  # type: ignore[attr-defined]
        pkg_logger.addHandler(stream)

        if settings.log_file:
            file_handler = logging.FileHandler(
                settings.log_file, mode="w", encoding="utf-8"
            )
            file_handler.setFormatter(logging.Formatter("%(message)s"))
            file_handler._fuzzpatch_owned = True  # type: ignore[attr-defined]
            pkg_logger.addHandler(file_handler)

    for name, level in settings.enabled_loggers.items():
        logging.getLogger(name).setLevel(_to_level(level))


def reset_logging() -> None:
    """Undo configure_logging: drop the handlers it added and clear the level."""
    pkg_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(pkg_logger.handlers):
        if getattr(handler, "_fuzzpatch_owned", False):
            pkg_logger.removeHandler(handler)
            handler.close()
    pkg_logger.setLevel(logging.NOTSET)


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
)

logger: structlog.BoundLogger = structlog.get_logger(LOGGER_NAME)
