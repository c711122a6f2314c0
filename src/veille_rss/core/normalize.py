"""Mapping of raw feed entries onto the canonical item record."""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from .classify import TopicClassifier, default_classifier
from .text import normalize_date, sanitize, truncate
from ..models import (
    MAX_TAGS,
    OTHER,
    SUMMARY_MAX_LENGTH,
    FeedSource,
    NormalizedItem,
    coerce_topic,
)


logger = logging.getLogger(__name__)

TITLE_FIELDS = ('title',)
URL_FIELDS = ('url', 'link')
SUMMARY_FIELDS = ('summary', 'contentSnippet', 'content', 'description')
DATE_FIELDS = ('publishedAt', 'isoDate', 'pubDate', 'date', 'published', 'updated')
ID_FIELDS = ('id', 'guid', 'uid')
TECH_FIELDS = ('tech', 'defaultTech')


def normalize_item(
    raw: Mapping[str, Any],
    source: FeedSource,
    classifier: Optional[TopicClassifier] = None,
) -> NormalizedItem:
    """
    Build a NormalizedItem from one raw entry and its owning source.

    Missing fields never raise; they degrade to "" / None / "Other".

    Args:
        raw: Dialect-specific entry (snapshot row or parsed RSS/Atom entry)
        source: Feed the entry belongs to
        classifier: Topic classifier (built-in keyword tables if None)

    Returns:
        Normalized item
    """
    if not isinstance(raw, Mapping):
        raise TypeError(f"Raw entry must be a mapping, got {type(raw).__name__}")

    classifier = classifier or default_classifier

    title = _first_text(raw, TITLE_FIELDS).strip()
    url = _first_text(raw, URL_FIELDS).strip()
    summary = truncate(sanitize(_first_text(raw, SUMMARY_FIELDS)), SUMMARY_MAX_LENGTH)
    published_at = normalize_date(_first_value(raw, DATE_FIELDS))
    tags = extract_tags(raw)

    item_id = _first_text(raw, ID_FIELDS).strip() or url or f"{source.id}:{title}"

    tech = classifier.classify(
        title=title,
        summary=summary,
        tags=tags,
        declared_tech=_declared_tech(raw, source),
    )

    return NormalizedItem(
        id=item_id,
        title=title,
        url=url,
        summary=summary,
        published_at=published_at,
        source_id=source.id,
        source_name=source.name or source.id,
        tags=tuple(tags),
        tech=tech,
    )


def extract_tags(raw: Mapping[str, Any]) -> List[str]:
    """
    Extract the tag list of a raw entry.

    `tags` wins over `categories`; entries may be strings or feedparser-style
    `{"term": ...}` mappings. Empty values are dropped and order is kept.
    """
    values = raw.get('tags')
    if not isinstance(values, (list, tuple)):
        values = raw.get('categories')
    if not isinstance(values, (list, tuple)):
        return []

    tags = []
    for value in values:
        if isinstance(value, Mapping):
            value = value.get('term')
        if value is None:
            continue
        text = str(value).strip()
        if text:
            tags.append(text)
        if len(tags) >= MAX_TAGS:
            break

    return tags


def source_from_raw(raw: Mapping[str, Any]) -> FeedSource:
    """Build an ad-hoc source for a snapshot row whose source is not declared."""
    source_id = str(raw.get('sourceId') or '').strip() or 'unknown'
    return FeedSource(
        id=source_id,
        name=str(raw.get('sourceName') or source_id),
        url='',
        default_tech=OTHER,
    )


def _declared_tech(raw: Mapping[str, Any], source: FeedSource) -> str:
    candidates: Iterable[Any] = [raw.get(key) for key in TECH_FIELDS] + [source.default_tech]
    for candidate in candidates:
        topic = coerce_topic(candidate)
        if topic != OTHER:
            return topic
    return OTHER


def _first_value(raw: Mapping[str, Any], fields: Iterable[str]) -> Any:
    for field in fields:
        value = raw.get(field)
        if value is not None and value != '':
            return value
    return None


def _first_text(raw: Mapping[str, Any], fields: Iterable[str]) -> str:
    for field in fields:
        value = raw.get(field)
        if value is None:
            continue
        text = str(value)
        if text.strip():
            return text
    return ''
