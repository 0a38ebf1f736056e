"""Utility functions and helpers for the Socket.IO client"""
from .path_config import (
    get_app_root,
    get_config_dir,
    get_logs_dir
)
from .config_loader import ConfigManager, get_config
from .log_config import setup_logging

__all__ = [
    'get_app_root',
    'get_config_dir',
    'get_logs_dir',
    'ConfigManager',
    'get_config',
    'setup_logging'
]
