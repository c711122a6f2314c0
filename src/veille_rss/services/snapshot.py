"""Loading of the snapshot document and the feed source list."""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import requests
from pydantic import ValidationError

from ..exceptions import SnapshotLoadError
from ..models import FeedSource, Snapshot


logger = logging.getLogger(__name__)

Location = Union[str, Path]


def is_url(location: Location) -> bool:
    return isinstance(location, str) and location.startswith(("http://", "https://"))


def read_json(location: Location, http: Optional[requests.Session] = None, timeout: float = 20.0) -> Any:
    """
    Read a JSON document from a local path or an http(s) URL.

    Raises:
        SnapshotLoadError: If the document is unreachable or not valid JSON
    """
    if is_url(location):
        client = http or requests
        try:
            response = client.get(location, timeout=timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise SnapshotLoadError(f"Cannot load {location}: {e}") from e
        except ValueError as e:
            raise SnapshotLoadError(f"Invalid JSON in {location}: {e}") from e

    path = Path(location).expanduser()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotLoadError(f"Cannot load {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(f"Invalid JSON in {path}: {e}") from e


def load_sources(location: Location, http: Optional[requests.Session] = None) -> List[FeedSource]:
    """
    Load the feed source list.

    Args:
        location: Path or URL of a JSON array of feed sources
        http: Optional HTTP session for URL locations

    Returns:
        Feed sources in declaration order (first declaration of an id wins)

    Raises:
        SnapshotLoadError: If the list is unreachable or malformed
    """
    data = read_json(location, http)
    if not isinstance(data, list):
        raise SnapshotLoadError(f"Feed source list must be a JSON array: {location}")

    sources: List[FeedSource] = []
    seen = set()
    for index, row in enumerate(data):
        try:
            source = FeedSource.model_validate(row)
        except ValidationError as e:
            raise SnapshotLoadError(f"Invalid feed source #{index} in {location}: {e}") from e

        if source.id in seen:
            logger.warning(f"Duplicate feed source id '{source.id}' ignored")
            continue
        seen.add(source.id)
        sources.append(source)

    logger.debug(f"Loaded {len(sources)} feed sources from {location}")
    return sources


def load_snapshot(location: Location, http: Optional[requests.Session] = None) -> Snapshot:
    """
    Load an entries snapshot `{generatedAt, items}`.

    Raises:
        SnapshotLoadError: If the document is unreachable or malformed
    """
    data = read_json(location, http)
    if not isinstance(data, dict):
        raise SnapshotLoadError(f"Snapshot must be a JSON object: {location}")

    items = data.get('items')
    if items is None:
        items = []
    if not isinstance(items, list):
        raise SnapshotLoadError(f"Snapshot 'items' must be an array: {location}")

    raw_items = [item for item in items if isinstance(item, dict)]
    if len(raw_items) != len(items):
        logger.warning(f"Skipped {len(items) - len(raw_items)} non-object snapshot rows")

    generated_at = data.get('generatedAt')
    return Snapshot(
        generated_at=str(generated_at) if generated_at else None,
        items=raw_items,
    )
