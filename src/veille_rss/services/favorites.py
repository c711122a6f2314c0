"""Persistent favorites set."""

import logging
from pathlib import Path
from typing import AbstractSet, Iterable, Optional, Set

from typing_extensions import Protocol

from .writer import StateWriter
from ..config import DEFAULT_FAVORITES_NAMESPACE


logger = logging.getLogger(__name__)


class FavoritesStore(Protocol):
    """Key-value service holding the favorite item ids."""

    def load(self) -> Set[str]:
        ...

    def save(self, ids: AbstractSet[str]) -> None:
        ...


class JsonFavoritesStore:
    """Favorites stored as a list of ids under a fixed key of a JSON file."""

    def __init__(self, path: Path, namespace: str = DEFAULT_FAVORITES_NAMESPACE):
        """
        Initialize the store.

        Args:
            path: JSON file holding the favorites
            namespace: Key under which the ids are stored
        """
        self.writer = StateWriter(path)
        self.namespace = namespace

    def load(self) -> Set[str]:
        """
        Load the favorite ids.

        Missing or corrupt data yields an empty set.
        """
        value = self.writer.get_key(self.namespace)
        if value is None:
            return set()

        if not isinstance(value, list):
            logger.warning(f"Ignoring malformed favorites under '{self.namespace}'")
            return set()

        return {item for item in value if isinstance(item, str) and item}

    def save(self, ids: AbstractSet[str]) -> None:
        """Persist the favorite ids (atomic replace)."""
        self.writer.write_key(self.namespace, sorted(ids))
        logger.debug(f"Saved {len(ids)} favorites to {self.writer.state_file}")


class MemoryFavoritesStore:
    """In-process favorites, for sessions without persistence."""

    def __init__(self, ids: Optional[Iterable[str]] = None):
        self._ids: Set[str] = set(ids or ())

    def load(self) -> Set[str]:
        return set(self._ids)

    def save(self, ids: AbstractSet[str]) -> None:
        self._ids = set(ids)
