"""Utility functions and helpers for Socket Tester"""
from .path_config import (
    get_app_root,
    get_config_dir,
    get_logs_dir
)

__all__ = [
    'get_app_root',
    'get_config_dir',
    'get_logs_dir'
]
