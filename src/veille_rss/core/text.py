"""Markup stripping and date normalization for feed content."""

import logging
import math
import re
import time
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser


logger = logging.getLogger(__name__)

_SCRIPT_RE = re.compile(r'<script\b[\s\S]*?>[\s\S]*?</script\s*>', re.IGNORECASE)
_STYLE_RE = re.compile(r'<style\b[\s\S]*?>[\s\S]*?</style\s*>', re.IGNORECASE)
# An unterminated tag runs to the end of the string.
_TAG_RE = re.compile(r'</?[^>]+(?:>|$)')
_WHITESPACE_RE = re.compile(r'\s+')

# North American zone names allowed by RFC 822, as UTC offsets in seconds.
RFC822_ZONES = {
    "UT": 0,
    "EST": -5 * 3600,
    "EDT": -4 * 3600,
    "CST": -6 * 3600,
    "CDT": -5 * 3600,
    "MST": -7 * 3600,
    "MDT": -6 * 3600,
    "PST": -8 * 3600,
    "PDT": -7 * 3600,
}

# Missing date parts are taken from here rather than from today.
_DEFAULT_DATE = datetime(1970, 1, 1)


def sanitize(html: Any) -> str:
    """
    Reduce an HTML fragment to plain text.

    Script and style blocks are dropped together with their content, every
    other tag is replaced by a space, and whitespace runs are collapsed.

    Args:
        html: Raw HTML fragment (None or empty yields "")

    Returns:
        Markup-free, trimmed text
    """
    if not html:
        return ''

    text = str(html)
    text = _SCRIPT_RE.sub('', text)
    text = _STYLE_RE.sub('', text)
    text = _TAG_RE.sub(' ', text)
    text = _WHITESPACE_RE.sub(' ', text).strip()

    return text


def truncate(text: str, limit: int) -> str:
    """Cut text to at most `limit` characters."""
    if len(text) <= limit:
        return text
    return text[:limit]


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as a fixed-width UTC string (millisecond precision)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S') + f'.{dt.microsecond // 1000:03d}Z'


def normalize_date(raw: Any) -> Optional[str]:
    """
    Parse a date in any of the usual feed representations.

    Accepts strings (RFC 822, ISO 8601 and most free-form dates), datetime
    objects and `time.struct_time` values as produced by feedparser. Naive
    values are taken as UTC.

    Args:
        raw: Date value from a feed entry

    Returns:
        Canonical UTC timestamp string, or None if empty or unparseable
    """
    if raw is None or raw == '':
        return None

    if isinstance(raw, datetime):
        return format_timestamp(raw)

    if isinstance(raw, time.struct_time):
        try:
            return format_timestamp(datetime(*raw[:6], tzinfo=timezone.utc))
        except (ValueError, TypeError):
            return None

    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not text:
        return None

    try:
        parsed = date_parser.parse(text, default=_DEFAULT_DATE, tzinfos=RFC822_ZONES)
        return format_timestamp(parsed)
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"Unparseable date: {text!r}")
        return None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a canonical timestamp string back into an aware datetime."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def days_since(value: Optional[str], now: Optional[datetime] = None) -> float:
    """
    Age in days of a canonical timestamp.

    Unknown timestamps are infinitely old.
    """
    published = parse_timestamp(value)
    if published is None:
        return math.inf

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return (now - published).total_seconds() / 86400
