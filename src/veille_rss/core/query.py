"""Filtering, sorting and statistics over the item collection."""

import logging
from datetime import datetime
from typing import AbstractSet, Iterable, List, Optional

from .text import days_since
from ..models import (
    ALL,
    ANGULAR,
    JAVA,
    OTHER,
    CollectionStats,
    FilterState,
    NormalizedItem,
)


logger = logging.getLogger(__name__)

NEW_ITEM_DAYS = 7


def search_text(item: NormalizedItem) -> str:
    """Lower-cased text matched by free-text search."""
    return f"{item.title} {item.summary} {item.source_name} {' '.join(item.tags)}".lower()


def matches(
    item: NormalizedItem,
    filters: FilterState,
    favorites: AbstractSet[str] = frozenset(),
    now: Optional[datetime] = None,
) -> bool:
    """
    Check whether an item passes every active predicate.

    Predicates run in order: favorites-only, topic, source, recency, text.
    An item with an unknown publication date fails any finite age filter.
    """
    if filters.favorites_only and item.id not in favorites:
        return False

    if filters.tech != ALL and item.tech != filters.tech:
        return False

    if filters.source_id != ALL and item.source_id != filters.source_id:
        return False

    if filters.max_age_days != ALL and days_since(item.published_at, now) > filters.max_age_days:
        return False

    needle = filters.query.strip().lower()
    if needle and needle not in search_text(item):
        return False

    return True


def sort_items(items: Iterable[NormalizedItem]) -> List[NormalizedItem]:
    """
    Sort newest first.

    Timestamps compare as strings; unknown dates come last. Equal timestamps
    are ordered by title (case-insensitive), then id.
    """
    ordered = sorted(items, key=lambda item: (item.title.lower(), item.id))
    # sorted() is stable under reverse=True, so the secondary order survives.
    ordered.sort(key=lambda item: item.published_at or '', reverse=True)
    return ordered


def query(
    items: Iterable[NormalizedItem],
    filters: Optional[FilterState] = None,
    favorites: AbstractSet[str] = frozenset(),
    now: Optional[datetime] = None,
) -> List[NormalizedItem]:
    """
    Produce the filtered, sorted view of a collection.

    Args:
        items: Deduplicated collection
        filters: Filter state (no filtering if None)
        favorites: Favorite item ids
        now: Reference time for the recency filter (defaults to current UTC time)

    Returns:
        Matching items, newest first
    """
    filters = filters or FilterState()
    selected = [item for item in items if matches(item, filters, favorites, now)]
    logger.debug(f"Query matched {len(selected)} items")
    return sort_items(selected)


def compute_stats(items: Iterable[NormalizedItem], now: Optional[datetime] = None) -> CollectionStats:
    """Aggregate counts over the unfiltered collection."""
    stats = {"total": 0, ANGULAR: 0, JAVA: 0, OTHER: 0, "new_7d": 0}

    for item in items:
        stats["total"] += 1
        stats[item.tech] += 1
        if days_since(item.published_at, now) <= NEW_ITEM_DAYS:
            stats["new_7d"] += 1

    return CollectionStats(
        total=stats["total"],
        angular=stats[ANGULAR],
        java=stats[JAVA],
        other=stats[OTHER],
        new_7d=stats["new_7d"],
    )
