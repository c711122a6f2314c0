"""Core ingestion, classification and query pipeline."""

from .classify import TopicClassifier, classify
from .dedupe import dedupe
from .feeds import FeedFetcher, parse_feed
from .normalize import normalize_item
from .query import compute_stats, query
from .text import normalize_date, sanitize

__all__ = [
    "FeedFetcher",
    "TopicClassifier",
    "classify",
    "compute_stats",
    "dedupe",
    "normalize_date",
    "normalize_item",
    "parse_feed",
    "query",
    "sanitize",
]
