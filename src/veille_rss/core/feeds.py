"""Live feed fetching and RSS/Atom entry extraction."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

import feedparser
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .text import normalize_date
from ..config import Config
from ..exceptions import FeedFetchError, FeedParseError
from ..models import FeedSource


logger = logging.getLogger(__name__)

RSS = "rss"
ATOM = "atom"

RawEntry = Dict[str, Any]


def detect_dialect(parsed: feedparser.FeedParserDict) -> Optional[str]:
    """
    Identify the dialect of a parsed feed document.

    feedparser records the root construct it found: an Atom `feed` element
    yields an "atom*" version, an RSS `channel`/`item` structure an "rss*"
    version.

    Returns:
        "atom", "rss", or None when the document is neither
    """
    version = parsed.get('version') or ''
    if version.startswith('atom'):
        return ATOM
    if version.startswith('rss'):
        return RSS
    return None


def extract_rss_entry(entry: feedparser.FeedParserDict) -> RawEntry:
    """Map an RSS 2.0 `item` onto the raw entry shape."""
    summary = entry.get('description') or entry.get('summary') or _content_value(entry)
    return {
        'id': (entry.get('guid') or entry.get('id') or '').strip(),
        'title': (entry.get('title') or '').strip(),
        'url': (entry.get('link') or '').strip(),
        'publishedAt': _entry_date(entry, ('published',)),
        'summary': (summary or '').strip(),
        'categories': _categories(entry),
    }


def extract_atom_entry(entry: feedparser.FeedParserDict) -> RawEntry:
    """Map an Atom `entry` onto the raw entry shape."""
    summary = entry.get('summary') or _content_value(entry)
    return {
        'id': (entry.get('id') or '').strip(),
        'title': (entry.get('title') or '').strip(),
        'url': _alternate_link(entry),
        'publishedAt': _entry_date(entry, ('published', 'updated')),
        'summary': (summary or '').strip(),
        'categories': _categories(entry),
    }


EXTRACTORS = {
    RSS: extract_rss_entry,
    ATOM: extract_atom_entry,
}


def parse_feed(content: Any) -> List[RawEntry]:
    """
    Parse a feed payload into raw entries.

    Args:
        content: Feed markup (bytes or str)

    Returns:
        Raw entries in document order

    Raises:
        FeedParseError: If the payload is neither RSS nor Atom
    """
    # feedparser treats str input as a URL or file name when it looks like one
    if isinstance(content, str):
        content = content.encode('utf-8')

    parsed = feedparser.parse(content)
    dialect = detect_dialect(parsed)

    if dialect is None:
        reason = parsed.get('bozo_exception') or "unrecognized feed format"
        raise FeedParseError(f"Not an RSS or Atom document: {reason}")

    if parsed.get('bozo') and parsed.get('bozo_exception'):
        logger.warning(f"Feed parsing warning: {parsed.bozo_exception}")

    extract = EXTRACTORS[dialect]
    return [extract(entry) for entry in parsed.entries]


def _alternate_link(entry: feedparser.FeedParserDict) -> str:
    links = entry.get('links') or []
    for link in links:
        if link.get('rel') == 'alternate' and link.get('href'):
            return link['href'].strip()
    for link in links:
        if link.get('href'):
            return link['href'].strip()
    return (entry.get('link') or '').strip()


def _content_value(entry: feedparser.FeedParserDict) -> str:
    for content in entry.get('content') or []:
        value = content.get('value')
        if value:
            return value
    return ''


def _entry_date(entry: feedparser.FeedParserDict, fields: Sequence[str]) -> Optional[str]:
    """Prefer feedparser's parsed UTC tuple, then the literal date text."""
    for field in fields:
        value = normalize_date(entry.get(f'{field}_parsed'))
        if value:
            return value
        text = entry.get(field)
        if text:
            return text
    return None


def _categories(entry: feedparser.FeedParserDict) -> List[str]:
    categories = []
    for tag in entry.get('tags') or []:
        term = (tag.get('term') or '').strip()
        if term:
            categories.append(term)
    return categories


class FeedFetcher:
    """Fetches and parses feed sources over HTTP."""

    def __init__(self, config: Optional[Config] = None, session: Optional[requests.Session] = None):
        """
        Initialize the fetcher.

        Args:
            config: Application configuration
            session: Optional pre-built HTTP session
        """
        self.config = config or Config()
        self._shared_session = session
        self._local = threading.local()
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session with retry strategy."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.config.retry_attempts,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'User-Agent': self.config.user_agent,
        })

        return session

    def thread_session(self) -> requests.Session:
        """
        HTTP session for the calling thread.

        An injected session is shared by every thread; otherwise each
        thread lazily gets its own session with the same retry setup.
        """
        if self._shared_session is not None:
            return self._shared_session

        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._create_session()
            self._local.session = session
        return session

    def fetch(self, source: FeedSource) -> List[RawEntry]:
        """
        Fetch and parse a single source.

        Args:
            source: Feed source

        Returns:
            Raw entries of the feed

        Raises:
            FeedFetchError: If the feed is unreachable or answers with an error status
            FeedParseError: If the payload is neither RSS nor Atom
        """
        logger.info(f"Fetching feed: {source.name} ({source.url})")

        try:
            response = self.thread_session().get(source.url, timeout=self.config.request_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FeedFetchError(f"HTTP error fetching feed {source.url}: {e}") from e

        entries = parse_feed(response.content)
        logger.info(f"Parsed {len(entries)} entries from {source.id}")
        return entries

    def fetch_all(
        self,
        sources: Sequence[FeedSource],
    ) -> Tuple[List[Tuple[FeedSource, List[RawEntry]]], Dict[str, str]]:
        """
        Fetch every source concurrently and wait for all of them.

        A failing source contributes no entries and is reported in the error
        map; it never aborts the batch.

        Args:
            sources: Feed sources in declaration order

        Returns:
            Tuple of (per-source entries in declaration order, errors by source id)
        """
        results: List[Tuple[FeedSource, List[RawEntry]]] = []
        errors: Dict[str, str] = {}

        if not sources:
            return results, errors

        workers = max(1, min(self.config.max_workers or 1, len(sources)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(source, executor.submit(self.fetch, source)) for source in sources]

            for source, future in futures:
                try:
                    entries = future.result()
                except (FeedFetchError, FeedParseError) as e:
                    logger.error(f"Feed error ({source.id}): {e}")
                    errors[source.id] = str(e)
                    entries = []
                except Exception as e:
                    logger.error(f"Unexpected error processing feed {source.id}: {e}")
                    errors[source.id] = str(e)
                    entries = []
                results.append((source, entries))

        return results, errors
