"""
Loguru setup for the daybook CLI.

Library modules only ever ``from loguru import logger``; handlers are
installed here, once, by whatever front end is running.
"""

import sys

from loguru import logger

CONSOLE_FORMAT = "<level>{level: <8}</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    verbose: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Replace loguru's default handler with daybook's console (and file) sinks.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Also log to this file at DEBUG, rotated by size.
        verbose: Force the console to DEBUG regardless of ``level``.
        rotation: Size at which the log file rotates.
        retention: How long rotated files are kept.
    """
    console_level = "DEBUG" if verbose else level.upper()

    logger.remove()
    logger.add(sys.stderr, level=console_level, format=CONSOLE_FORMAT)

    if log_file:
        logger.add(log_file, level="DEBUG", format=FILE_FORMAT, rotation=rotation, retention=retention)
