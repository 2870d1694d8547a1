"""
Logging configuration for the analyzer.

Modules obtain loggers with ``get_logger(__name__)``; the CLI calls
``setup_logging`` once per command so handlers are never duplicated.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from benford_analyzer.core.constants import LOG_FORMAT, LOG_DATE_FORMAT, DEFAULT_LOG_LEVEL

PACKAGE_LOGGER_NAME = 'benford_analyzer'


def setup_logging(level: str = DEFAULT_LOG_LEVEL, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Console output goes to stderr so it never mixes with command output.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file that receives the same records

    Returns:
        The configured package logger
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(numeric_level)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module inside the package."""
    return logging.getLogger(name)
