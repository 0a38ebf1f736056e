"""Path configuration utilities for the Socket.IO client.

Centralizes where the client looks for its configuration and where the
command line entry point writes log files.
"""
import os
from pathlib import Path


def get_app_root():
    """Get the root directory of the application."""
    return str(Path(__file__).parent.parent.absolute())


def get_config_dir():
    """Get the configuration directory path."""
    return os.path.join(get_app_root(), "config")


def get_logs_dir():
    """Get the logs directory path, creating it if needed."""
    logs_dir = os.path.join(get_app_root(), "logs")
    os.makedirs(logs_dir, exist_ok=True)
    return logs_dir
