"""RSS parsing into Article records."""

from __future__ import annotations

import logging
from email.utils import parsedate_to_datetime

import feedparser
from bs4 import BeautifulSoup
from dateutil.parser import parse as parse_date

from feedrelay.excerpt import EXCERPT_LENGTH, create_excerpt
from feedrelay.models import Article

logger = logging.getLogger("feedrelay.feed")

MAX_ARTICLES = 10

# feedparser flags these as bozo, but the document itself parsed fine.
_BENIGN_BOZO = (feedparser.CharacterEncodingOverride, feedparser.NonXMLContentType)


class FeedParseError(Exception):
    """The feed body is not well-formed XML."""


def clean_text(text: str) -> str:
    """Decode entities and drop tags, leaving plain text."""
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text().strip()


def format_date(date_string: str) -> str:
    """RFC 822, date-only or ISO dates -> 'January 5, 2025'; anything else is returned as-is."""
    if not date_string:
        return ""
    try:
        dt = parsedate_to_datetime(date_string)
    except (TypeError, ValueError):
        try:
            dt = parse_date(date_string.strip())
        except (ValueError, OverflowError):
            return date_string
    return f"{dt:%B} {dt.day}, {dt.year}"


def item_body(entry) -> str:
    """Full content (content:encoded) when present and non-empty, else the description."""
    for content in entry.get("content") or []:
        value = content.get("value", "")
        if value:
            return value
    return entry.get("summary", "") or ""


def parse_feed(data: bytes | str, max_articles: int = MAX_ARTICLES, excerpt_length: int = EXCERPT_LENGTH) -> list[Article]:
    """Parse RSS XML into at most *max_articles* articles, in document order."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data.strip():
        logger.warning("Feed body is empty")
        raise FeedParseError("Failed to parse RSS feed")

    parsed = feedparser.parse(data, sanitize_html=False, resolve_relative_uris=False)
    if parsed.get("bozo") and not isinstance(parsed.get("bozo_exception"), _BENIGN_BOZO):
        logger.warning(f"Feed XML did not parse: {parsed.get('bozo_exception')}")
        raise FeedParseError("Failed to parse RSS feed")

    articles = []
    for entry in parsed.entries[:max_articles]:
        body = item_body(entry)
        pub_date = entry.get("published", "") or ""
        articles.append(
            Article(
                title=clean_text(entry.get("title", "")) or "Untitled",
                link=(entry.get("link", "") or "#").strip(),
                pub_date=pub_date,
                date=format_date(pub_date),
                description=body,
                excerpt=create_excerpt(body, excerpt_length),
                creator=entry.get("author", "") or "",
            )
        )
    logger.info(f"Parsed {len(articles)} articles (feed had {len(parsed.entries)})")
    return articles
