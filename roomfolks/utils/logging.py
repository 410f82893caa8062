"""Centralized logging configuration for roomfolks."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

PRETTY_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "{extra[plugin]: <10} <level>{message}</level>"
)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    pretty: bool = False,
) -> None:
    """
    Configure global logging sinks.

    Args:
        level: Minimum level for console output
        log_file: Optional path for a rotating log file
        pretty: Coloured human format instead of JSON lines
    """
    # Remove default loguru sink
    logger.remove()
    logger.configure(extra={"plugin": ""})

    level = level.upper()
    if pretty:
        logger.add(
            sys.stderr,
            level=level,
            format=PRETTY_FORMAT,
            backtrace=True,
            diagnose=False,
        )
    else:
        logger.add(sys.stderr, level=level, serialize=True)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            enqueue=True,  # Safe for multi-threaded/async
        )

    logger.debug(f"Logging initialized. Console level: {level}, pretty: {pretty}, file: {log_file}")
