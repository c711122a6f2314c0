"""Path utilities for Veille RSS."""

import os
from pathlib import Path


DATA_DIR_ENV = "VEILLE_RSS_HOME"


def get_data_dir() -> Path:
    """
    Get the data directory.

    `$VEILLE_RSS_HOME` wins when set, otherwise `~/.veille-rss` is used.

    Returns:
        Path to the data directory (created if missing)
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        data_dir = Path(override).expanduser()
    else:
        data_dir = Path.home() / ".veille-rss"

    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_config_file_path() -> Path:
    """Get the path to the configuration file."""
    # Look for config.yaml in the working directory first
    local_config = Path.cwd() / "config.yaml"
    if local_config.exists():
        return local_config

    # Fallback to data directory
    return get_data_dir() / "config.yaml"


def get_log_dir() -> Path:
    """Get the log directory path."""
    log_dir = get_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir
