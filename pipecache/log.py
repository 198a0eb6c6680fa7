"""Logging setup for the pipecache command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "pipecache"
_HANDLER_FLAG_ATTR = "_pipecache_handler"


def configure_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    """Attach a RichHandler to the package logger; repeated calls only change the level."""

    logger = logging.getLogger(LOGGER_NAME)
    level_int = logging.getLevelName(level.upper())
    if not isinstance(level_int, int):
        level_int = logging.WARNING
    logger.setLevel(level_int)
    for handler in logger.handlers:
        if getattr(handler, _HANDLER_FLAG_ATTR, False):
            handler.setLevel(level_int)
            return logger
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setLevel(level_int)
    setattr(handler, _HANDLER_FLAG_ATTR, True)
    logger.addHandler(handler)
    return logger
