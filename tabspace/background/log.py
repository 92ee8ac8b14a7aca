"""Loguru setup for the background engine and the ``tabspace`` CLI.

Engine transitions log at DEBUG, recoverable storage and host failures at
WARNING.  A browser bridge embedding the engine usually brings its own
stdlib-logging libraries (websockets, native messaging); their records are
routed into the same loguru sink.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable

from loguru import logger

_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

NOISY_LOGGERS = ("asyncio", "websockets")
"""Stdlib loggers held at WARNING unless the engine itself runs at DEBUG."""


class _InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", *, quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    """Send engine and library logs to stderr at *level*.

    Safe to call more than once; each call replaces the previous sink.
    """
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    if level != "DEBUG":
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging configured (level={})", level)
