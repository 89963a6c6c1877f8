"""Logging setup for the ``keel`` logger hierarchy."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .config import AppConfig

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_MARKER = "_keel_handler"


def configure_logging(config: AppConfig, *, debug: bool | None = None) -> logging.Logger:
    """Attach file and console handlers to the ``keel`` logger.

    Lines are always appended to ``config.log_file`` when one is set; they are
    echoed to stderr only in debug mode. Handlers installed by an earlier call
    are replaced.
    """

    debug = config.debug if debug is None else debug
    logger = logging.getLogger("keel")
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = []
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    if debug:
        handlers.append(logging.StreamHandler(sys.stderr))
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARKER, True)
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger


__all__ = ["DATE_FORMAT", "LOG_FORMAT", "configure_logging"]
