from __future__ import annotations

from veille_rss.core.dedupe import dedupe, dedupe_key
from veille_rss.models import NormalizedItem

from conftest import make_item


def test_first_occurrence_wins_and_order_is_kept() -> None:
    items = [
        make_item("x", title="first x"),
        make_item("y", title="first y"),
        make_item("x", title="second x"),
        make_item("z", title="z"),
        make_item("y", title="second y"),
    ]

    result = dedupe(items)

    assert [item.title for item in result] == ["first x", "first y", "z"]


def test_same_url_with_different_ids_is_kept() -> None:
    items = [
        make_item("a", url="https://example.com/post"),
        make_item("b", url="https://example.com/post"),
    ]
    assert len(dedupe(items)) == 2


def test_key_falls_back_to_url_and_keyless_items_are_dropped() -> None:
    no_id = NormalizedItem.model_construct(id="", url="https://example.com/1", source_id="s", title="no id")
    no_id_again = NormalizedItem.model_construct(id="", url="https://example.com/1", source_id="s", title="dup")
    keyless = NormalizedItem.model_construct(id="", url="", source_id="s", title="keyless")

    assert dedupe_key(no_id) == "https://example.com/1"

    result = dedupe([no_id, keyless, no_id_again])
    assert [item.title for item in result] == ["no id"]


def test_dedupe_is_idempotent(catalog) -> None:
    doubled = catalog + list(reversed(catalog)) + catalog[:3]
    once = dedupe(doubled)

    assert dedupe(once) == once
    assert [item.id for item in once] == [item.id for item in catalog]


def test_empty_input() -> None:
    assert dedupe([]) == []
