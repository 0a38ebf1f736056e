"""Logging setup for the command line client.

The library modules only create named loggers; handlers are attached here,
by whoever runs the client as a program.
"""
import os
import sys
import logging

from .path_config import get_logs_dir

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_to_file: bool = False,
                  fmt: str = DEFAULT_FORMAT, name: str = "socketio_client") -> logging.Logger:
    """Configure the `socketio_client` logger hierarchy.

    Args:
        level: Minimum level name, e.g. "DEBUG"
        log_to_file: Also write to logs/<name>.log
        fmt: Formatter string
        name: Logger (and log file) name
    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    formatter = logging.Formatter(fmt)
    logger.handlers = []  # Remove any existing handlers

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_to_file:
        log_file = os.path.join(get_logs_dir(), f"{name}.log")
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
