"""Utility functions for Veille RSS."""

from .paths import (
    get_config_file_path,
    get_data_dir,
    get_log_dir,
)

__all__ = [
    "get_config_file_path",
    "get_data_dir",
    "get_log_dir",
]
