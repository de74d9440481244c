"""
Logging configuration for minver-build.

Centralized logging setup so the CLI and build scripts share one
loguru configuration.
"""

import sys
from loguru import logger
from rich.console import Console

LOG_FORMAT = '<green>{time:YYYY/MM/DD HH:mm:ss}</green> | {level.icon}  - <level>{message}</level>'


def setup_logging(log_level: str = 'INFO', console: Console = None) -> None:
    """
    Set up logging configuration with an optional shared Rich console.

    Records are written synchronously from the calling thread (no ``enqueue``),
    so every MinVer output line is flushed before the version is printed.

    Args:
        log_level: Logging level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console: Rich Console instance for coordinated output (optional)
    """
    logger.remove()

    if console:
        logger.add(
            lambda msg: console.print(msg, end=''),
            level=log_level,
            format=LOG_FORMAT,
        )
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=LOG_FORMAT,
            colorize=True,
        )
