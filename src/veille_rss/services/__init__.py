"""Service layer for Veille RSS."""

from .favorites import FavoritesStore, JsonFavoritesStore, MemoryFavoritesStore
from .snapshot import load_snapshot, load_sources
from .writer import StateWriter

__all__ = [
    "FavoritesStore",
    "JsonFavoritesStore",
    "MemoryFavoritesStore",
    "StateWriter",
    "load_snapshot",
    "load_sources",
]
