"""Path configuration utilities for Socket Tester.

This module provides centralized path management for the application's
configuration and log directories. Directories are created on first access.

Key Features:
- Application root path resolution
- ``SOCKET_TESTER_HOME`` override for the root directory
- Automatic directory creation
"""
import os
from pathlib import Path

HOME_ENV_VAR = "SOCKET_TESTER_HOME"
CONFIG_FILENAME = "socket_tester.json"


def get_app_root():
    """Get the root directory of the application."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return str(Path(override).expanduser().absolute())
    return str(Path(__file__).parent.parent.parent.absolute())


def get_config_dir():
    """Get the configuration directory path."""
    config_dir = os.path.join(get_app_root(), "config")
    os.makedirs(config_dir, exist_ok=True)
    return config_dir


def get_logs_dir():
    """Get the logs directory path."""
    logs_dir = os.path.join(get_app_root(), "logs")
    os.makedirs(logs_dir, exist_ok=True)
    return logs_dir
