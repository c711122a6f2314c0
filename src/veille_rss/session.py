"""Session state: the current collection, filters and favorites."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .core.classify import TopicClassifier
from .core.dedupe import dedupe
from .core.feeds import FeedFetcher
from .core.normalize import normalize_item, source_from_raw
from .core.query import compute_stats, query
from .core.text import format_timestamp
from .exceptions import VeilleError
from .models import CollectionStats, FeedSource, FilterState, IngestionReport, NormalizedItem
from .services.favorites import FavoritesStore, MemoryFavoritesStore
from .services.snapshot import Location, load_snapshot, load_sources


logger = logging.getLogger(__name__)


class Session:
    """
    Holds everything a consumer needs between user actions.

    Each ingestion builds a complete new collection and swaps it in with a
    single assignment; a failed snapshot load leaves the previous state as it
    was. Favorites are written to their store before the in-memory set changes.
    """

    def __init__(
        self,
        favorites_store: Optional[FavoritesStore] = None,
        classifier: Optional[TopicClassifier] = None,
        fetcher: Optional[FeedFetcher] = None,
    ):
        """
        Initialize the session.

        Args:
            favorites_store: Favorites persistence (in-memory if None)
            classifier: Topic classifier (built-in keyword tables if None)
            fetcher: Feed fetcher for live ingestion and remote snapshots
        """
        self.favorites_store = favorites_store or MemoryFavoritesStore()
        self.classifier = classifier or TopicClassifier()
        self.fetcher = fetcher

        self.sources: List[FeedSource] = []
        self.items: List[NormalizedItem] = []
        self.generated_at: Optional[str] = None
        self.filters = FilterState()
        self.favorites: Set[str] = self.favorites_store.load()
        self.last_report: Optional[IngestionReport] = None

    # Ingestion

    def ingest(self, batches: Iterable[Tuple[FeedSource, Iterable[Mapping[str, Any]]]]) -> List[NormalizedItem]:
        """
        Normalize and deduplicate raw entries.

        Batches are processed in the given order, which decides which
        duplicate survives.
        """
        normalized = [
            normalize_item(raw, source, self.classifier)
            for source, entries in batches
            for raw in entries
        ]
        return dedupe(normalized)

    def load_snapshot(self, entries_location: Location, feeds_location: Location) -> IngestionReport:
        """
        Replace the collection with the contents of a snapshot.

        Args:
            entries_location: Path or URL of the `{generatedAt, items}` document
            feeds_location: Path or URL of the feed source list

        Returns:
            Ingestion report

        Raises:
            SnapshotLoadError: If either document cannot be loaded; the
                current collection is kept
        """
        http = self.fetcher.session if self.fetcher else None
        sources = load_sources(feeds_location, http)
        snapshot = load_snapshot(entries_location, http)

        by_id: Dict[str, FeedSource] = {source.id: source for source in sources}
        batches = []
        for raw in snapshot.items:
            source_id = str(raw.get('sourceId') or '').strip()
            source = by_id.get(source_id) or source_from_raw(raw)
            batches.append((source, [raw]))

        items = self.ingest(batches)

        self.sources, self.items, self.generated_at = sources, items, snapshot.generated_at
        self.last_report = IngestionReport(
            mode="snapshot",
            generated_at=snapshot.generated_at,
            raw_count=len(snapshot.items),
            item_count=len(items),
        )
        logger.info(f"Loaded {len(items)} unique items from snapshot ({len(snapshot.items)} raw)")
        return self.last_report

    def refresh_live(self, sources: Optional[Sequence[FeedSource]] = None) -> IngestionReport:
        """
        Replace the collection with freshly fetched feeds.

        Sources are fetched concurrently; normalization starts once all of
        them have completed or failed. Failed sources contribute nothing and
        are listed in the report.

        Args:
            sources: Sources to fetch (the session's sources if None)

        Returns:
            Ingestion report
        """
        if self.fetcher is None:
            raise VeilleError("Live ingestion requires a feed fetcher")

        sources = list(sources if sources is not None else self.sources)
        if not sources:
            raise VeilleError("No feed sources to fetch")

        results, errors = self.fetcher.fetch_all(sources)
        items = self.ingest(results)
        generated_at = format_timestamp(datetime.now(timezone.utc))

        self.sources, self.items, self.generated_at = sources, items, generated_at
        self.last_report = IngestionReport(
            mode="live",
            generated_at=generated_at,
            raw_count=sum(len(entries) for _, entries in results),
            item_count=len(items),
            errors=errors,
        )
        logger.info(
            f"Live refresh: {len(items)} unique items from {len(sources)} sources "
            f"({len(errors)} failed)"
        )
        return self.last_report

    # Query

    def view(self, now: Optional[datetime] = None) -> List[NormalizedItem]:
        """Filtered, sorted view of the current collection."""
        return query(self.items, self.filters, self.favorites, now)

    def stats(self, now: Optional[datetime] = None) -> CollectionStats:
        """Aggregate counts over the unfiltered collection."""
        return compute_stats(self.items, now)

    def update_filters(self, **changes: Any) -> List[NormalizedItem]:
        """
        Change some filter fields and return the recomputed view.

        Raises:
            pydantic.ValidationError: If a value is invalid; filters are unchanged
        """
        self.filters = self.filters.update(**changes)
        logger.debug(f"Filters: {self.filters}")
        return self.view()

    def reset_filters(self) -> List[NormalizedItem]:
        self.filters = FilterState()
        return self.view()

    # Favorites

    def is_favorite(self, item_id: str) -> bool:
        return item_id in self.favorites

    def add_favorite(self, item_id: str) -> List[NormalizedItem]:
        self._store_favorites(self.favorites | {item_id})
        return self.view()

    def remove_favorite(self, item_id: str) -> List[NormalizedItem]:
        self._store_favorites(self.favorites - {item_id})
        return self.view()

    def toggle_favorite(self, item_id: str) -> List[NormalizedItem]:
        """
        Flip the favorite state of an item.

        The store is written before the in-memory set changes.

        Returns:
            The recomputed view
        """
        if item_id in self.favorites:
            return self.remove_favorite(item_id)
        return self.add_favorite(item_id)

    def _store_favorites(self, favorites: Set[str]) -> None:
        self.favorites_store.save(favorites)
        self.favorites = favorites
