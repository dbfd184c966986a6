"""Plain-text excerpts from feed item HTML bodies."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

EXCERPT_LENGTH = 400
MIN_BLOCK_LENGTH = 20  # shorter blocks are buttons, captions, bylines
MIN_PARAGRAPH_TOTAL = 100
SENTENCE_CUTOFF = 0.7
ELLIPSIS = "..."

# Newsletter chrome that should never end up in an excerpt.
NON_CONTENT_SELECTORS = (
    "script",
    "style",
    "noscript",
    "form",
    "iframe",
    ".subscription-widget-wrap",
    ".subscription-widget-wrap-editor",
    ".subscription-widget",
    ".subscribe-widget",
    ".button-wrapper",
    ".captioned-button-wrap",
    ".poll-embed",
    ".poll",
    ".promo",
    ".footnote-anchor",
    "a.button",
    "a[href$='/subscribe']",
    "a[href*='/subscribe?']",
)

BLOCK_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "pre")
_SPACED_TAGS = BLOCK_TAGS + ("div", "br", "ul", "ol", "figure", "figcaption", "table", "tr", "td")
_SENTENCE_ENDS = ".?!"


def flatten(node: Tag) -> str:
    """Text content of *node* with whitespace collapsed."""
    return " ".join(node.get_text().split())


def strip_non_content(soup: BeautifulSoup) -> BeautifulSoup:
    for selector in NON_CONTENT_SELECTORS:
        for el in soup.select(selector):
            el.decompose()
    # Keep words in adjacent blocks apart once tags are gone.
    for el in soup.find_all(_SPACED_TAGS):
        el.insert_after(" ")
    return soup


def paragraph_text(soup: BeautifulSoup, length: int = EXCERPT_LENGTH) -> str:
    """Join top-level paragraph-like blocks until *length* characters are collected."""
    parts: list[str] = []
    total = 0
    for block in soup.find_all(BLOCK_TAGS):
        if block.find_parent(BLOCK_TAGS) is not None:
            continue
        text = flatten(block)
        if len(text) < MIN_BLOCK_LENGTH:
            continue
        parts.append(text)
        total += len(text) + (1 if len(parts) > 1 else 0)
        if total >= length:
            break
    return " ".join(parts)


def truncate(text: str, length: int = EXCERPT_LENGTH) -> str:
    """Cut *text* to *length*, preferring a sentence boundary past 70% of it."""
    if len(text) <= length:
        return text
    cut = text[:length]
    boundary = max(cut.rfind(ch) for ch in _SENTENCE_ENDS)
    if boundary > length * SENTENCE_CUTOFF:
        return cut[: boundary + 1]
    return cut.rstrip() + ELLIPSIS


def create_excerpt(html_body: str, length: int = EXCERPT_LENGTH) -> str:
    """Readable excerpt of an item's HTML body, at most *length* chars plus an ellipsis."""
    if not html_body:
        return ""
    soup = strip_non_content(BeautifulSoup(html_body, "html.parser"))

    text = paragraph_text(soup, length)
    if len(text) < MIN_PARAGRAPH_TOTAL:
        text = flatten(soup)

    return truncate(text, length)
