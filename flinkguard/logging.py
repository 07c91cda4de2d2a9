"""Logging configuration for the flinkguard package."""
import logging
import sys
from typing import Optional

from flinkguard.config import Config

def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with the specified name and log level.

    Args:
        name: The name of the logger
        level: The logging level name (default: Config.LOG_LEVEL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or Config.LOG_LEVEL)

    # Don't add handlers if they're already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(Config.LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(handler)
        # Root handlers installed by the CLI would print every record twice
        logger.propagate = False

    return logger
