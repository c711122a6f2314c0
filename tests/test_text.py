from __future__ import annotations

import math
import time
from datetime import datetime, timedelta, timezone

from veille_rss.core.text import days_since, normalize_date, sanitize, truncate


def test_sanitize_strips_all_tags() -> None:
    assert sanitize("<p>A <b>B</b></p>") == "A B"


def test_sanitize_drops_script_and_style_content() -> None:
    html = "<div>Hi<script type='text/javascript'>alert(1)</script><STYLE>p { color: red }</STYLE> there</div>"
    assert sanitize(html) == "Hi there"


def test_sanitize_handles_unterminated_tag() -> None:
    assert sanitize("Hello <b>world</b> <img src='x.png'") == "Hello world"


def test_sanitize_collapses_whitespace() -> None:
    assert sanitize("  one\n\n\ttwo   three ") == "one two three"


def test_sanitize_empty_inputs() -> None:
    assert sanitize(None) == ""
    assert sanitize("") == ""


def test_truncate_bounds_length() -> None:
    assert truncate("abcdef", 3) == "abc"
    assert truncate("ab", 3) == "ab"


def test_normalize_date_converts_to_utc() -> None:
    assert normalize_date("2024-03-01T10:00:00+02:00") == "2024-03-01T08:00:00.000Z"
    assert normalize_date("Mon, 01 Jan 2024 10:00:00 GMT") == "2024-01-01T10:00:00.000Z"


def test_normalize_date_honours_rfc822_zone_names() -> None:
    assert normalize_date("Mon, 01 Jan 2024 10:00:00 EST") == "2024-01-01T15:00:00.000Z"
    assert normalize_date("Tue, 02 Jul 2024 09:00:00 PDT") == "2024-07-02T16:00:00.000Z"
    assert normalize_date("Mon, 01 Jan 2024 23:30:00 EST") == "2024-01-02T04:30:00.000Z"
    assert normalize_date("Mon, 01 Jan 2024 10:00:00 UT") == "2024-01-01T10:00:00.000Z"


def test_normalize_date_fills_missing_parts_with_start_of_period() -> None:
    assert normalize_date("2024") == "2024-01-01T00:00:00.000Z"
    assert normalize_date("2024-06") == "2024-06-01T00:00:00.000Z"


def test_normalize_date_assumes_utc_for_naive_values() -> None:
    assert normalize_date("2024-01-01") == "2024-01-01T00:00:00.000Z"
    assert normalize_date(datetime(2024, 5, 6, 7, 8, 9, 123456)) == "2024-05-06T07:08:09.123Z"


def test_normalize_date_accepts_struct_time() -> None:
    parsed = time.strptime("2024-01-02 03:04:05", "%Y-%m-%d %H:%M:%S")
    assert normalize_date(parsed) == "2024-01-02T03:04:05.000Z"


def test_normalize_date_unknown_values() -> None:
    assert normalize_date(None) is None
    assert normalize_date("") is None
    assert normalize_date("   ") is None
    assert normalize_date("garbage") is None
    assert normalize_date(12345) is None


def test_canonical_timestamps_sort_chronologically() -> None:
    values = ["Fri, 01 Mar 2024 00:00:00 GMT", "2023-12-31T23:59:59Z", "2024-01-01T00:00:00.5Z"]
    canonical = [normalize_date(value) for value in values]
    assert sorted(canonical) == [canonical[1], canonical[2], canonical[0]]


def test_days_since() -> None:
    now = datetime(2024, 1, 11, tzinfo=timezone.utc)
    assert days_since("2024-01-01T00:00:00.000Z", now) == 10
    assert days_since("2024-01-10T12:00:00.000Z", now) == 0.5
    assert days_since(None, now) == math.inf
    assert days_since("not a timestamp", now) == math.inf


def test_days_since_defaults_to_current_time() -> None:
    yesterday = datetime.now(timezone.utc) - timedelta(days=1)
    assert 0.99 < days_since(normalize_date(yesterday)) < 1.01
