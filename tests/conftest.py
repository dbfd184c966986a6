"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from feedrelay.config import Settings

RSS_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/"'
    ' xmlns:dc="http://purl.org/dc/elements/1.1/">'
    "<channel><title>Tidal Endurance</title><link>https://tidalendurance.substack.com</link>"
    "<description>Training notes</description>"
)
RSS_FOOTER = "</channel></rss>"


def _make_item(
    title: str = "Post",
    link: str = "https://tidalendurance.substack.com/p/post",
    pub_date: str = "Mon, 06 Jan 2025 10:00:00 GMT",
    description: str = "<p>Summary</p>",
    content: str | None = None,
    creator: str = "",
) -> str:
    parts = [
        f"<title><![CDATA[{title}]]></title>",
        f"<link>{link}</link>",
        f"<pubDate>{pub_date}</pubDate>",
        f"<description><![CDATA[{description}]]></description>",
    ]
    if content is not None:
        parts.append(f"<content:encoded><![CDATA[{content}]]></content:encoded>")
    if creator:
        parts.append(f"<dc:creator><![CDATA[{creator}]]></dc:creator>")
    return "<item>" + "".join(parts) + "</item>"


def _make_rss(*items: str) -> str:
    return RSS_HEADER + "".join(items) + RSS_FOOTER


def _fake_response(status_code: int = 200, content: bytes = b"") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = content
    return resp


@pytest.fixture
def test_settings():
    """Settings with fast retries and no real network."""
    return Settings(
        environment="development",
        feed_url="https://tidalendurance.substack.com/feed",
        publication_url="https://tidalendurance.substack.com/",
        proxy_base_url="http://proxy.test",
        fetch_base_delay=0.5,
    )


@pytest.fixture
def rss_two_items():
    return _make_rss(
        _make_item(
            title="First Swim",
            link="https://tidalendurance.substack.com/p/first-swim",
            content="<p>The first open water swim of the season was colder than anyone expected, "
            "but the whole group finished the course together.</p>",
            creator="Jo Tide",
        ),
        _make_item(
            title="Second Ride",
            link="https://tidalendurance.substack.com/p/second-ride",
            description="<p>Long ride notes: eighty miles along the coast with a headwind on the way back home "
            "and a stop for coffee halfway.</p>",
        ),
    )


@pytest.fixture
def fake_session():
    """Mock requests session that never hits the network."""
    return MagicMock()


@pytest.fixture
def make_item():
    """Factory for RSS <item> XML snippets."""
    return _make_item


@pytest.fixture
def make_rss():
    """Factory wrapping <item> snippets into a full RSS document."""
    return _make_rss


@pytest.fixture
def fake_response():
    """Factory for mocked requests.Response objects."""
    return _fake_response
