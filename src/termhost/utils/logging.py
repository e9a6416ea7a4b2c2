"""Logging setup for termhost.

Both the CLI and the endpoint server call ``setup_logging``; calling it
again replaces the handlers it installed earlier instead of adding more.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from termhost.config.settings import LoggingConfig

PACKAGE_LOGGER = "termhost"

_HANDLER_MARK = "_termhost_handler"


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARK, True)
    return handler


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the ``termhost`` logger.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).

    Returns:
        The configured package logger.
    """
    if config is None:
        config = LoggingConfig()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            package_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        path = Path(config.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(_mark(handler))

    # Per-request chatter from the HTTP stack
    for name in config.quiet_libraries:
        logging.getLogger(name).setLevel(logging.WARNING)

    package_logger.debug("Logging initialized at %s level", config.level)
    return package_logger
