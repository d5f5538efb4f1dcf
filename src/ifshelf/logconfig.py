"""Logging setup for the ifshelf command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from ifshelf.config.models import LoggingSettings


def configure_logging(settings: LoggingSettings, *, console: Console | None = None) -> None:
    """Route ``ifshelf`` loggers through a rich handler at the configured level.

    Args:
        settings: Logging section of the loaded configuration.
        console: Console to render records on; stderr when omitted.
    """
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logger = logging.getLogger("ifshelf")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
