"""
================================================================================
Suite Tools Common Utilities
================================================================================

Shared logging setup and filesystem helpers.

Exports:
    - init_logger: Initialize loguru with the suite's standard sinks
    - ensure_directory: Create a directory if missing

Usage:
    from suite_tools.common import init_logger

    init_logger(level="DEBUG", log_file="test-results/suite.log")

================================================================================
"""

import os
import sys
from typing import Optional

from loguru import logger


DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

_logger_initialized = False


def init_logger(
    level: str = "INFO",
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    force: bool = False,
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_string: Log format string. Uses DEFAULT_FORMAT if not provided.
        log_file: Optional file path to write logs to.
        rotation: Rotation policy for the file sink
        retention: Retention policy for the file sink
        force: Re-initialize even if already initialized

    Example:
        init_logger()
        init_logger(level="DEBUG", log_file="test-results/suite.log")
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    logger.remove()
    format_string = format_string or DEFAULT_FORMAT

    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=rotation,
            retention=retention,
        )

    _logger_initialized = True
    logger.debug("Logger initialized successfully")


def ensure_directory(path: str) -> str:
    """
    Ensures a directory exists, creating it if necessary.

    Returns:
        The path (for chaining)
    """
    os.makedirs(path, exist_ok=True)
    return path


__all__ = [
    "ensure_directory",
    "init_logger",
]
