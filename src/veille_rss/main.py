"""Main Veille RSS application."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import load_config
from .core.classify import TopicClassifier
from .core.feeds import FeedFetcher
from .models import IngestionReport
from .services.favorites import JsonFavoritesStore
from .services.snapshot import load_sources
from .session import Session
from .utils.paths import get_data_dir, get_log_dir


class VeilleApp:
    """Main Veille RSS application."""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize the application.

        Args:
            config_file: Optional path to configuration file
        """
        self.config = load_config(config_file)

        self._setup_logging()

        self.fetcher = FeedFetcher(self.config)
        self.favorites_store = JsonFavoritesStore(
            self.config.resolve_favorites_path(),
            self.config.favorites_namespace,
        )
        self.session = Session(
            favorites_store=self.favorites_store,
            classifier=TopicClassifier(self.config.classification),
            fetcher=self.fetcher,
        )

        logging.debug("Veille RSS initialized")

    def _setup_logging(self) -> None:
        """Setup logging configuration."""
        log_file = get_log_dir() / "veille-rss.log"

        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)

        # Console output stays quiet so command output remains readable
        console_handler = logging.StreamHandler()
        console_handler.setLevel(max(log_level, logging.WARNING))
        console_handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

    def set_verbose(self) -> None:
        """Switch every handler to DEBUG."""
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers:
            handler.setLevel(logging.DEBUG)

    def load(self, live: bool = False) -> IngestionReport:
        """
        Run one ingestion.

        Args:
            live: Fetch the feeds directly instead of reading the snapshot

        Returns:
            Ingestion report

        Raises:
            SnapshotLoadError: If the snapshot or the source list cannot be loaded
        """
        feeds_location = self.config.resolve_feeds_location()

        if live:
            sources = load_sources(feeds_location, self.fetcher.session)
            report = self.session.refresh_live(sources)
            for source_id, message in report.errors.items():
                logging.warning(f"Source {source_id} skipped: {message}")
            return report

        return self.session.load_snapshot(self.config.resolve_entries_location(), feeds_location)

    def get_info(self) -> Dict[str, Any]:
        """
        Get application information.

        Returns:
            Dictionary with application info
        """
        from . import __version__

        return {
            "version": __version__,
            "data_dir": str(get_data_dir()),
            "feeds_file": self.config.resolve_feeds_location(),
            "entries_file": self.config.resolve_entries_location(),
            "favorites_file": str(self.config.resolve_favorites_path()),
            "favorites": len(self.session.favorites),
            "log_level": self.config.log_level,
        }
