"""Configuration loader for Socket Tester.

This module provides the configuration management system for the application.
It loads defaults, merges the user's JSON configuration file over them and
validates each section before the values are used.

Key Features:
- Default configuration values
- JSON file-based configuration
- Deep merging of configuration updates
- Per-section validation
- Runtime configuration updates and saving
"""
import os
import copy
import json
import logging
from typing import Any, Dict, Optional

from .path_config import get_config_dir, CONFIG_FILENAME

logger = logging.getLogger(__name__)

DEFAULT_LISTENERS = ["connect", "disconnect", "error", "message", "notification"]

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "file": "socket_tester.log"
    },
    "connection": {
        "default_url": "ws://localhost:3000",
        "default_event": "message"
    },
    "transport": {
        "transports": ["websocket"],
        "wait_timeout": 20,
        "reconnection": True,
        "reconnection_attempts": 0,
        "reconnection_delay": 1,
        "retry_initial_connect": True
    },
    "listeners": {
        "defaults": list(DEFAULT_LISTENERS),
        "default_description": "Default Socket.IO event"
    }
}

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
VALID_TRANSPORTS = {"websocket", "polling"}


class ConfigManager:
    def __init__(self, config_dir: Optional[str] = None, load_files: bool = True):
        """Initialize the configuration manager."""
        self._config_dir = config_dir
        self._config: Dict[str, Any] = {}
        self._load_defaults()
        if load_files:
            self._load_config_files()

    @property
    def config_dir(self) -> str:
        return self._config_dir or get_config_dir()

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

    def _load_config_files(self) -> None:
        """Load configuration from the JSON file in the config directory."""
        filepath = os.path.join(self.config_dir, CONFIG_FILENAME)
        if not os.path.exists(filepath):
            logger.debug(f"No config file at {filepath}, using defaults")
            return
        try:
            with open(filepath, 'r') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading config file {filepath}: {e}")
            return
        try:
            self.update(file_config)
        except ValueError as e:
            logger.error(f"Invalid config file {filepath}, using defaults: {e}")
            self._load_defaults()

    def update(self, file_config: Dict[str, Any]) -> None:
        """Validate and merge a (partial) configuration dictionary."""
        for section, values in file_config.items():
            self._validate_section(section, values)
        self._merge_config(self._config, file_config)

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

    def _validate_section(self, section: str, values: Any) -> None:
        """Validate configuration based on the section name."""
        if not isinstance(values, dict):
            raise ValueError(f"Config section '{section}' must be an object")
        if section == "logging":
            self._validate_logging_config(values)
        elif section == "transport":
            self._validate_transport_config(values)
        elif section == "listeners":
            self._validate_listeners_config(values)

    def _validate_logging_config(self, config: Dict[str, Any]) -> None:
        level = config.get("level")
        if level is not None and str(level).upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid logging level '{level}' in section 'logging'")

    def _validate_transport_config(self, config: Dict[str, Any]) -> None:
        transports = config.get("transports")
        if transports is not None:
            if not transports or not set(transports) <= VALID_TRANSPORTS:
                raise ValueError(
                    f"Section 'transport': transports must be a non-empty subset of {sorted(VALID_TRANSPORTS)}")
        for key in ("wait_timeout", "reconnection_delay"):
            if key in config and (not isinstance(config[key], (int, float)) or config[key] <= 0):
                raise ValueError(f"Section 'transport': {key} must be a positive number")
        attempts = config.get("reconnection_attempts")
        if attempts is not None and (not isinstance(attempts, int) or attempts < 0):
            raise ValueError("Section 'transport': reconnection_attempts must be a non-negative integer")

    def _validate_listeners_config(self, config: Dict[str, Any]) -> None:
        defaults = config.get("defaults")
        if defaults is None:
            return
        if not all(isinstance(name, str) and name.strip() for name in defaults):
            raise ValueError("Section 'listeners': defaults must be non-empty event names")
        if len(set(defaults)) != len(defaults):
            raise ValueError("Section 'listeners': defaults contain duplicate event names")

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
        """Set a configuration value (validated like a file entry)."""
        self.update({section: {key: value}})

    def section(self, section: str) -> Dict[str, Any]:
        """Get a copy of a whole configuration section."""
        return copy.deepcopy(self._config.get(section, {}))

    def save(self, filename: str = CONFIG_FILENAME) -> bool:
        """
        Save current configuration to a file.
        Returns:
            bool: True if save was successful, False otherwise
        """
        try:
            filepath = os.path.join(self.config_dir, filename)
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
        return copy.deepcopy(self._config)
