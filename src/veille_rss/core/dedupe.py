"""Collapse of duplicate items across sources."""

import logging
from typing import Iterable, List, Set

from ..models import NormalizedItem


logger = logging.getLogger(__name__)


def dedupe_key(item: NormalizedItem) -> str:
    """Dedup key: the item id, else its URL."""
    return item.id or item.url


def dedupe(items: Iterable[NormalizedItem]) -> List[NormalizedItem]:
    """
    Remove duplicate items in a single left-to-right pass.

    The first occurrence of each key wins and survivors keep their order, so
    callers present items in precedence order. Items without a key are dropped.

    Args:
        items: Normalized items in precedence order

    Returns:
        Deduplicated list of items
    """
    seen: Set[str] = set()
    deduplicated: List[NormalizedItem] = []
    dropped = 0

    for item in items:
        key = dedupe_key(item)
        if not key or key in seen:
            dropped += 1
            continue
        seen.add(key)
        deduplicated.append(item)

    if dropped:
        logger.debug(f"Dropped {dropped} duplicate entries")

    return deduplicated
