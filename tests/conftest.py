from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
import requests

from veille_rss.models import FeedSource, NormalizedItem


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Angular Blog</title>
    <link>https://blog.angular.example</link>
    <description>Angular news</description>
    <item>
      <title>What's new in Angular</title>
      <link>https://blog.angular.example/whats-new</link>
      <guid isPermaLink="false">angular-1</guid>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
      <description>&lt;p&gt;Using &lt;b&gt;RxJS&lt;/b&gt; operators&lt;/p&gt;</description>
      <category>Frontend</category>
      <category>Release</category>
    </item>
    <item>
      <title>Community roundup</title>
      <link>https://blog.angular.example/roundup</link>
      <pubDate>Fri, 01 Mar 2024 08:30:00 +0000</pubDate>
      <description>Links of the week</description>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Java Weekly</title>
  <id>urn:java-weekly</id>
  <updated>2024-03-01T00:00:00Z</updated>
  <entry>
    <title>Testing Spring Boot apps</title>
    <id>urn:java-weekly:1</id>
    <link rel="self" href="https://java.example/entries/1.atom"/>
    <link rel="alternate" href="https://java.example/spring-boot-testing"/>
    <updated>2024-03-01T00:00:00Z</updated>
    <summary>JUnit tips</summary>
    <category term="testing"/>
  </entry>
</feed>
"""


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("VEILLE_RSS_HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return home


def make_item(
    item_id: str,
    *,
    title: str = "",
    tech: str = "Other",
    source_id: str = "blog-a",
    published_at: Optional[str] = None,
    summary: str = "",
    tags: tuple = (),
    url: Optional[str] = None,
) -> NormalizedItem:
    return NormalizedItem(
        id=item_id,
        title=title,
        url=url if url is not None else f"https://example.com/{item_id}",
        summary=summary,
        published_at=published_at,
        source_id=source_id,
        source_name=source_id.replace("-", " ").title(),
        tags=tags,
        tech=tech,
    )


@pytest.fixture
def catalog() -> List[NormalizedItem]:
    """Items spanning both topics, three sources and mixed dates."""
    return [
        make_item("a1", title="Angular signals deep dive", tech="Angular",
                  source_id="blog-a", published_at="2024-03-01T00:00:00.000Z"),
        make_item("a2", title="RxJS spring cleaning", tech="Angular",
                  source_id="blog-b", published_at="2024-02-01T00:00:00.000Z"),
        make_item("j1", title="Spring Boot 3.2 released", tech="Java",
                  source_id="blog-b", published_at="2024-02-15T00:00:00.000Z"),
        make_item("j2", title="Spring Data tips", tech="Java",
                  source_id="blog-c", published_at="2024-01-10T00:00:00.000Z"),
        make_item("j3", title="Hibernate 6 migration", tech="Java", summary="Entity mapping changes",
                  source_id="blog-c", published_at="2024-01-05T00:00:00.000Z"),
        make_item("o1", title="Weekly spring links", tech="Other",
                  source_id="blog-a", published_at=None),
        make_item("j4", title="JDK 22", tech="Java", tags=("Spring",),
                  source_id="blog-a", published_at="2023-12-01T00:00:00.000Z"),
    ]


@pytest.fixture
def favorites() -> set:
    return {"a1", "a2", "j1", "j3", "o1", "j4"}


@pytest.fixture
def sources() -> List[FeedSource]:
    return [
        FeedSource(id="angular-blog", name="Angular Blog", url="https://blog.angular.example/rss"),
        FeedSource(id="java-weekly", name="Java Weekly", url="https://java.example/atom"),
    ]


class FakeResponse:
    def __init__(self, body: Union[str, bytes, None] = None, status_code: int = 200, payload=None):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.content = body or b""
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._payload is not None:
            return self._payload
        return json.loads(self.content.decode("utf-8"))


class FakeSession:
    """Stands in for requests.Session; maps URLs to responses or exceptions."""

    def __init__(self, routes: Dict[str, Union[FakeResponse, Exception]]):
        self.routes = routes
        self.requested: List[str] = []

    def get(self, url: str, timeout: Optional[float] = None) -> FakeResponse:
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"No route to {url}")
        if isinstance(route, Exception):
            raise route
        return route


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
