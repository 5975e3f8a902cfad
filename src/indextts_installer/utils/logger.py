"""Centralized logging configuration for the IndexTTS installer.

This module provides a unified logging setup with colorized console output
and optional file logging. Usage:

    from indextts_installer.utils.logger import get_logger

    logger = get_logger("indextts.core.controller")
    logger.info("Installation started")

Entry points call ``initialize()`` once before doing anything else.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog

# Color scheme for different log levels
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    enable_colors: bool = True,
) -> None:
    """Setup root logging configuration.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file
        enable_colors: Whether to enable colored console output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    root_logger.handlers.clear()

    # Console handler
    if enable_colors:
        console_handler = colorlog.StreamHandler(sys.stdout)
        console_formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)8s] %(name)s:%(reset)s %(message)s",
            datefmt=DATE_FORMAT,
            log_colors=LOG_COLORS,
        )
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    _suppress_third_party_loggers()


def _suppress_third_party_loggers() -> None:
    """Suppress verbose debug logging from third-party libraries."""
    suppressed_loggers = {
        "flet": logging.WARNING,
        "flet_core": logging.WARNING,
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "uvicorn.access": logging.WARNING,
        "asyncio": logging.WARNING,
    }

    for logger_name, logger_level in suppressed_loggers.items():
        logging.getLogger(logger_name).setLevel(logger_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: Dotted logger name under the ``indextts`` hierarchy

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def initialize(
    level: int | str = logging.INFO,
    log_file: Optional[Path] = None,
    log_dir: Optional[Path] = None,
    enable_colors: bool = True,
) -> None:
    """Initialize logging system.

    Args:
        level: Logging level, as a number or a level name such as "DEBUG"
        log_file: Specific log file path
        log_dir: Directory for timestamped log files (alternative to log_file)
        enable_colors: Whether to colorize console output

    Example:
        initialize(level="DEBUG", log_dir=Path("~/.indextts/logs").expanduser())
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if log_file is None and log_dir is not None:
        from datetime import datetime

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"indextts_installer_{timestamp}.log"

    setup_logging(level=level, log_file=log_file, enable_colors=enable_colors)
