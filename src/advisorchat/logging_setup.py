"""Logging configuration built on loguru."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as loguru_logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]} - {message}"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Replace loguru's default sink with the console (and optional file) sinks.

    Args:
        level: Minimum level emitted (DEBUG, INFO, WARNING, ...).
        log_file: Optional path of a rotating log file.
    """
    loguru_logger.remove()
    loguru_logger.configure(extra={"name": "advisorchat"})
    loguru_logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper(), colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        loguru_logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level.upper(),
            rotation="10 MB",
            retention="30 days",
        )

    loguru_logger.bind(name=__name__).debug("Logging initialized: level={} file={}", level, log_file)


def get_logger(name: str):
    """Get a logger bound to a module name."""
    return loguru_logger.bind(name=name)
