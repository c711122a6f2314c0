"""Configuration management for Veille RSS."""

import logging
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, validator
from pydantic import ConfigDict, model_validator

from .utils.paths import get_config_file_path, get_data_dir


DEFAULT_FAVORITES_NAMESPACE = "veille_favs_v1"


class ClassificationConfig(BaseModel):
    """Keyword tables for topic classification."""

    model_config = ConfigDict(extra="ignore")

    angular_keywords: List[str] = Field(default_factory=lambda: [
        "angular", "signals", "rxjs", "standalone", "zone", "zoneless",
        "angular material", "cdk", "ngrx", "esbuild", "vite", "hydration", "ssr",
    ])
    java_keywords: List[str] = Field(default_factory=lambda: [
        "java", "jdk", "openjdk", "spring", "spring boot", "hibernate", "jpa",
        "maven", "gradle", "junit", "testcontainers", "micrometer", "tomcat",
    ])


class Config(BaseModel):
    """Main configuration for Veille RSS."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _apply_legacy_keys(cls, data: Any) -> Any:
        """Support the key names of the original dashboard."""
        if not isinstance(data, dict):
            return data

        data = data.copy()

        legacy = {
            "data_url": "entries_file",
            "feeds_url": "feeds_file",
            "fav_key": "favorites_namespace",
        }
        for old, new in legacy.items():
            if new not in data and old in data:
                data[new] = data[old]

        return data

    feeds_file: Optional[str] = Field(default=None, description="Path or URL of the feed source list")
    entries_file: Optional[str] = Field(default=None, description="Path or URL of the entries snapshot")
    favorites_file: Optional[str] = Field(default=None, description="Path of the favorites store")
    favorites_namespace: str = DEFAULT_FAVORITES_NAMESPACE

    request_timeout: float = Field(default=20.0, description="HTTP timeout in seconds")
    retry_attempts: int = Field(default=3, description="Number of retry attempts for failed requests")
    max_workers: int = Field(default=4, description="Concurrent feed fetches during live ingestion")
    user_agent: str = "veille-rss/1.0 (+https://github.com/veille-rss/veille-rss)"

    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    log_level: str = Field(default="INFO", description="Logging level")

    @validator('log_level')
    def validate_log_level(cls, v):
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v.upper()

    @validator('max_workers', 'retry_attempts')
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Must not be negative")
        return v

    def resolve_feeds_location(self) -> str:
        """Feed source list location, defaulting to the data directory."""
        return self.feeds_file or str(get_data_dir() / "feeds.json")

    def resolve_entries_location(self) -> str:
        """Snapshot location, defaulting to the data directory."""
        return self.entries_file or str(get_data_dir() / "entries.json")

    def resolve_favorites_path(self) -> Path:
        """Favorites store path, defaulting to the data directory."""
        if self.favorites_file:
            return Path(self.favorites_file).expanduser()
        return get_data_dir() / "favorites.json"


def load_config(config_file: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_file: Optional path to config file. If None, uses default path.

    Returns:
        Config object
    """
    if config_file is None:
        config_file = get_config_file_path()

    if not config_file.exists():
        config = Config()
        save_config(config, config_file)
        logging.info(f"Created default config at {config_file}")
        return config

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        config = Config(**data)
        logging.debug(f"Loaded config from {config_file}")
        return config

    except (yaml.YAMLError, ValueError, TypeError) as e:
        logging.error(f"Error loading config from {config_file}: {e}")
        raise


def save_config(config: Config, config_file: Optional[Path] = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_file: Optional path to config file. If None, uses default path.
    """
    if config_file is None:
        config_file = get_config_file_path()

    config_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config.model_dump(), f, default_flow_style=False, indent=2)

        logging.debug(f"Saved config to {config_file}")

    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Error saving config to {config_file}: {e}")
        raise


def create_example_config() -> str:
    """Create an example configuration YAML string."""
    example_config = Config(
        feeds_file="data/feeds.json",
        entries_file="data/entries.json",
        favorites_file="~/.veille-rss/favorites.json",
        max_workers=8,
        log_level="INFO",
    )

    return yaml.safe_dump(example_config.model_dump(), default_flow_style=False, indent=2)
