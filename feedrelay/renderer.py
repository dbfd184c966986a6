"""Renders the latest feed articles into a container element of an HTML page.

The page is a BeautifulSoup document; ``FeedRenderer.load`` only touches the
subtree of the element whose id it is given. Content goes through three
states: a loading placeholder (set before any network call), then either the
article list or an error block linking to the publication.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote, urlsplit

import requests
from bs4 import BeautifulSoup, Tag
from jinja2 import Environment, FileSystemLoader, select_autoescape

from feedrelay.config import Settings
from feedrelay.feed import parse_feed
from feedrelay.models import Article, RenderState

logger = logging.getLogger("feedrelay.renderer")

TEMPLATES_DIR = Path(__file__).parent / "templates"
DEFAULT_CONTAINER_ID = "articles-content"


class RenderError(Exception):
    """The proxy answered with a non-2xx status."""


def safe_url(url: str) -> str:
    """Only http(s) links go into href attributes."""
    if not url:
        return "#"
    if urlsplit(url.strip()).scheme.lower() in ("http", "https"):
        return url.strip()
    return "#"


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["safe_url"] = safe_url
    return env


def build_proxy_url(settings: Settings) -> str:
    return f"{settings.proxy_base_url.rstrip('/')}{settings.proxy_path}?url={quote(settings.feed_url, safe='')}"


def replace_content(container: Tag, html: str) -> None:
    container.clear()
    for node in list(BeautifulSoup(html, "html.parser").contents):
        container.append(node.extract())


class FeedRenderer:
    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session
        self.state = RenderState.IDLE
        self.templates = _environment()

    def render_loading(self) -> str:
        return self.templates.get_template("loading.html").render()

    def render_articles(self, articles: list[Article]) -> str:
        return self.templates.get_template("articles.html").render(
            articles=articles,
            publication_url=self.settings.publication_url,
        )

    def render_error(self, error: Exception) -> str:
        return self.templates.get_template("error.html").render(
            message=str(error),
            publication_url=self.settings.publication_url,
        )

    def fetch_articles(self) -> list[Article]:
        """Fetch the feed through the proxy and parse it."""
        http = self.session or requests
        resp = http.get(build_proxy_url(self.settings), timeout=self.settings.renderer_timeout)
        if not 200 <= resp.status_code < 300:
            raise RenderError(f"HTTP error! status: {resp.status_code}")
        return parse_feed(
            resp.content,
            max_articles=self.settings.max_articles,
            excerpt_length=self.settings.excerpt_length,
        )

    def load(self, page: BeautifulSoup, container_id: str = DEFAULT_CONTAINER_ID) -> None:
        container = page.find(id=container_id)
        if container is None:
            logger.debug(f"No #{container_id} on this page, skipping articles")
            return

        replace_content(container, self.render_loading())
        self.state = RenderState.LOADING

        try:
            articles = self.fetch_articles()
            replace_content(container, self.render_articles(articles))
            self.state = RenderState.RENDERED
        except Exception as e:
            logger.warning(f"Failed to load articles: {e}")
            replace_content(container, self.render_error(e))
            self.state = RenderState.ERROR


def render_page(html: str, settings: Settings, container_id: str = DEFAULT_CONTAINER_ID, session=None) -> str:
    """Render articles into *html* and return the updated page."""
    page = BeautifulSoup(html, "html.parser")
    FeedRenderer(settings, session=session).load(page, container_id)
    return str(page)
