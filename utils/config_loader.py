#!/usr/bin/env python3
"""Configuration loader for the Socket.IO client.

Settings are layered, later sources winning:
1. Built-in defaults
2. config/client_config.json
3. Environment variables (SOCKETIO_CLIENT_*), including a local .env file

Key Features:
- Default configuration values
- JSON file-based configuration with deep merging
- Environment variable overrides loaded through python-dotenv
- Configuration validation
- Runtime configuration updates
"""
import os
import json
import logging
import threading
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .path_config import get_config_dir

logger = logging.getLogger(__name__)

ENV_PREFIX = "SOCKETIO_CLIENT_"

# Environment variable suffix -> (section, key, type)
ENV_OVERRIDES = {
    "URL": ("client", "url", str),
    "RESOURCE": ("client", "resource", str),
    "HANDSHAKE_TIMEOUT": ("client", "handshake_timeout", float),
    "LOG_LEVEL": ("logging", "level", str),
}

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigManager:
    def __init__(self, config_dir: Optional[str] = None, use_env: bool = True):
        """Initialize the configuration manager."""
        self._config_dir = config_dir or get_config_dir()
        self._config: Dict[str, Any] = {}
        self._load_defaults()
        self._load_config_files()
        if use_env:
            self._load_env_overrides()

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        self._config = {
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "log_to_file": False
            },
            "client": {
                "url": "http://localhost:3000",
                "resource": "/socket.io",
                "transport": "websocket",
                "handshake_timeout": None,
                "open_timeout": 10,
                "close_timeout": 10,
                "close_reason": "Ended by user"
            }
        }

    def _load_config_files(self) -> None:
        """Load configuration from JSON files in the config directory."""
        config_files = [
            "client_config.json"
        ]

        for filename in config_files:
            filepath = os.path.join(self._config_dir, filename)
            if not os.path.exists(filepath):
                continue
            try:
                with open(filepath, 'r') as f:
                    file_config = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Error loading config file {filename}: {e}")
                continue
            self._validate_config(filename, file_config)
            self._merge_config(self._config, file_config)

    def _load_env_overrides(self) -> None:
        """Apply SOCKETIO_CLIENT_* environment variables (and .env) on top."""
        load_dotenv()
        for suffix, (section, key, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(ENV_PREFIX + suffix)
            if raw is None or raw == "":
                continue
            try:
                value = cast(raw)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_PREFIX + suffix}={raw!r}")
                continue
            if key == "level":
                value = value.upper()
            self.set(section, key, value)

    def _merge_config(self, base: Dict, update: Dict) -> None:
        """
        Recursively merge two configuration dictionaries.
        Args:
            base: Base configuration dictionary
            update: Dictionary with updates to merge
        """
        for key, value in update.items():
            if (
                key in base and
                isinstance(base[key], dict) and
                isinstance(value, dict)
            ):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _validate_config(self, filename: str, config: Any) -> None:
        """Validate a configuration file before it is merged."""
        if not isinstance(config, dict):
            raise ValueError(f"{filename} must contain a JSON object")

        client = config.get("client", {})
        if not isinstance(client, dict):
            raise ValueError(f"'client' section in {filename} must be an object")
        if "resource" in client and not str(client["resource"]).startswith("/"):
            raise ValueError("Client resource must start with '/'")
        for key in ("handshake_timeout", "open_timeout", "close_timeout"):
            value = client.get(key)
            if value is not None and (not isinstance(value, (int, float)) or value < 0):
                raise ValueError(f"Client {key} must be a non-negative number")

        logging_section = config.get("logging", {})
        if not isinstance(logging_section, dict):
            raise ValueError(f"'logging' section in {filename} must be an object")
        level = logging_section.get("level")
        if level is not None and str(level).upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Args:
            section: Configuration section
            key: Configuration key
            default: Default value if not found
        Returns:
            Configuration value or default
        """
        try:
            return self._config[section][key]
        except KeyError:
            return default

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value."""
        if section not in self._config:
            self._config[section] = {}
        self._config[section][key] = value

    def save(self, filename: str = "client_config.json") -> bool:
        """
        Save current configuration to a file.
        Returns:
            bool: True if save was successful, False otherwise
        """
        try:
            filepath = os.path.join(self._config_dir, filename)
            os.makedirs(os.path.dirname(filepath), exist_ok=True)

            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving config to {filename}: {e}")
            return False

    @property
    def config(self) -> Dict[str, Any]:
        """Get the complete configuration dictionary."""
        return self._config.copy()


_shared_config: Optional[ConfigManager] = None
_shared_lock = threading.Lock()


def get_config() -> ConfigManager:
    """Return the shared configuration, loading it on first use."""
    global _shared_config
    with _shared_lock:
        if _shared_config is None:
            _shared_config = ConfigManager()
        return _shared_config
