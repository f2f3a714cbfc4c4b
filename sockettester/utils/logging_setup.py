"""Logging setup for Socket Tester.

Every module logs through ``logging.getLogger(__name__)``; this module attaches
the handlers to the ``sockettester`` package logger once, at startup.
"""
import os
import sys
import logging
from typing import Optional

from .path_config import get_logs_dir

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "sockettester"


def setup_logging(level: str = "INFO",
                  log_file: Optional[str] = "socket_tester.log",
                  fmt: str = DEFAULT_FORMAT,
                  console: bool = False,
                  library_debug: bool = False) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name for the package logger.
        log_file: File name inside the logs directory, or None for no file.
        fmt: Formatter string shared by all handlers.
        console: Also log to stderr.
        library_debug: Let python-socketio/engineio log at DEBUG as well.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(fmt)
    logger.handlers = []  # Remove any existing handlers

    if log_file:
        file_handler = logging.FileHandler(os.path.join(get_logs_dir(), log_file))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.propagate = False

    for name in ("socketio", "engineio"):
        lib_logger = logging.getLogger(name)
        lib_logger.setLevel(logging.DEBUG if library_debug else logging.WARNING)
        if library_debug:
            lib_logger.handlers = list(logger.handlers)
            lib_logger.propagate = False

    return logger
