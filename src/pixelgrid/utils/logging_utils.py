"""
Logging utilities with a time-since-start formatter.

The package itself only creates module loggers; applications call
configure_logging() to get output on a stream.
"""

import logging
import time
from typing import Optional, TextIO

from ..config import PixelGridConfig, get_config
from ..const import PACKAGE_LOGGER_NAME


class ElapsedTimeFormatter(logging.Formatter):
    """Formatter that adds ``%(app_time)s``: mm:ss.xxx since start_time."""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, start_time: Optional[float] = None):
        """
        Initialize the formatter.

        Args:
            fmt: Log format string
            datefmt: Date format string
            start_time: Reference time (time.time()). If None, uses current time.
        """
        super().__init__(fmt, datefmt)
        self.start_time = start_time or time.time()

    def format(self, record):
        elapsed_seconds = max(record.created - self.start_time, 0.0)
        minutes = int(elapsed_seconds // 60)
        seconds = elapsed_seconds % 60
        record.app_time = f"{minutes:02d}:{seconds:06.3f}"
        return super().format(record)


def configure_logging(config: Optional[PixelGridConfig] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling this again replaces the handler installed by the previous call
    instead of adding a second one.

    Args:
        config: Settings for level and format (active config if None)
        stream: Output stream (stderr if None)

    Returns:
        The package logger
    """
    config = config or get_config()
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    for handler in list(package_logger.handlers):
        if getattr(handler, "_pixelgrid_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ElapsedTimeFormatter(fmt=config.log_format))
    handler._pixelgrid_handler = True
    package_logger.addHandler(handler)
    package_logger.setLevel(config.log_level)
    return package_logger
