from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from veille_rss.core.query import compute_stats, query, sort_items
from veille_rss.models import FilterState

from conftest import make_item


NOW = datetime(2024, 3, 10, tzinfo=timezone.utc)


def ids(items):
    return [item.id for item in items]


def test_no_filters_returns_everything_newest_first(catalog, favorites) -> None:
    result = query(catalog, FilterState(), favorites, NOW)
    assert ids(result) == ["a1", "j1", "a2", "j2", "j3", "j4", "o1"]


def test_filter_composition(catalog, favorites) -> None:
    filters = FilterState(favorites_only=True, tech="Java", query="spring")

    result = query(catalog, filters, favorites, NOW)

    expected = [
        item for item in catalog
        if item.id in favorites
        and item.tech == "Java"
        and "spring" in f"{item.title} {item.summary} {item.source_name} {' '.join(item.tags)}".lower()
    ]
    assert ids(result) == ["j1", "j4"]
    assert set(ids(result)) == set(ids(expected))


def test_favorites_only(catalog) -> None:
    result = query(catalog, FilterState(favorites_only=True), {"j2", "o1", "missing"}, NOW)
    assert ids(result) == ["j2", "o1"]


def test_favorites_only_with_no_favorites(catalog) -> None:
    assert query(catalog, FilterState(favorites_only=True), set(), NOW) == []


def test_topic_filter(catalog) -> None:
    assert ids(query(catalog, FilterState(tech="Angular"), now=NOW)) == ["a1", "a2"]
    assert ids(query(catalog, FilterState(tech="Other"), now=NOW)) == ["o1"]


def test_source_filter(catalog) -> None:
    assert ids(query(catalog, FilterState(source_id="blog-c"), now=NOW)) == ["j2", "j3"]
    assert query(catalog, FilterState(source_id="nope"), now=NOW) == []


def test_recency_filter(catalog) -> None:
    assert ids(query(catalog, FilterState(max_age_days=10), now=NOW)) == ["a1"]
    assert ids(query(catalog, FilterState(max_age_days=30), now=NOW)) == ["a1", "j1"]


def test_unknown_date_fails_any_finite_age_filter(catalog) -> None:
    result = query(catalog, FilterState(max_age_days=100000), now=NOW)
    assert "o1" not in ids(result)
    assert len(result) == len(catalog) - 1


def test_zero_age_is_a_real_filter(catalog) -> None:
    assert query(catalog, FilterState(max_age_days=0), now=NOW) == []


def test_text_search_is_case_insensitive_and_trimmed(catalog) -> None:
    assert ids(query(catalog, FilterState(query="  HIBERNATE "), now=NOW)) == ["j3"]
    assert ids(query(catalog, FilterState(query="entity mapping"), now=NOW)) == ["j3"]


def test_text_search_covers_source_name_and_tags(catalog) -> None:
    assert ids(query(catalog, FilterState(query="blog c"), now=NOW)) == ["j2", "j3"]
    assert "j4" in ids(query(catalog, FilterState(query="spring"), now=NOW))


def test_empty_query_matches_everything(catalog) -> None:
    assert len(query(catalog, FilterState(query="   "), now=NOW)) == len(catalog)


def test_sort_order_with_unknown_date() -> None:
    items = [
        make_item("jan", published_at="2024-01-01T00:00:00.000Z"),
        make_item("none", published_at=None),
        make_item("mar", published_at="2024-03-01T00:00:00.000Z"),
    ]
    assert ids(sort_items(items)) == ["mar", "jan", "none"]


def test_equal_timestamps_order_by_title_then_id() -> None:
    stamp = "2024-01-01T00:00:00.000Z"
    items = [
        make_item("3", title="beta", published_at=stamp),
        make_item("2", title="Alpha", published_at=stamp),
        make_item("1", title="alpha", published_at=stamp),
        make_item("0", title="zulu", published_at=None),
        make_item("4", title="able", published_at=None),
    ]
    assert ids(sort_items(items)) == ["1", "2", "3", "4", "0"]


def test_query_does_not_mutate_collection(catalog, favorites) -> None:
    before = list(catalog)
    query(catalog, FilterState(tech="Java", query="spring"), favorites, NOW)
    assert catalog == before


def test_stats_use_unfiltered_collection(catalog) -> None:
    stats = compute_stats(catalog, datetime(2024, 3, 5, tzinfo=timezone.utc))
    assert stats.total == 7
    assert stats.angular == 2
    assert stats.java == 4
    assert stats.other == 1
    assert stats.new_7d == 1


def test_filter_state_normalizes_inputs() -> None:
    state = FilterState(tech="java", max_age_days="7", query=None, source_id="")
    assert state.tech == "Java"
    assert state.max_age_days == 7
    assert state.query == ""
    assert state.source_id == "ALL"
    assert FilterState(max_age_days="all").max_age_days == "ALL"


@pytest.mark.parametrize("changes", [
    {"tech": "Python"},
    {"max_age_days": -1},
    {"max_age_days": "soon"},
    {"max_age_days": "nan"},
    {"max_age_days": float("inf")},
])
def test_filter_state_rejects_invalid_values(changes) -> None:
    with pytest.raises(ValidationError):
        FilterState().update(**changes)


def test_filter_state_update_returns_new_state() -> None:
    state = FilterState()
    updated = state.update(tech="Angular", favorites_only=True)
    assert state.tech == "ALL"
    assert (updated.tech, updated.favorites_only, updated.query) == ("Angular", True, "")
