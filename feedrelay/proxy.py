"""Upstream feed fetching with bounded retry and exponential backoff."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import requests

logger = logging.getLogger("feedrelay.proxy")

# Sent upstream as-is; mimics a desktop browser.
UPSTREAM_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/xml, application/rss+xml, text/xml, application/atom+xml, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Connection": "close",
    "DNT": "1",
}


class FeedFetchError(Exception):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status_code: int):
        super().__init__(f"Feed host returned status {status_code}")
        self.status_code = status_code


def backoff_delay(attempt: int, base_delay: float = 0.5) -> float:
    """Seconds to wait after failed *attempt* (1-based): base, 2*base, 4*base, ..."""
    return base_delay * 2 ** (attempt - 1)


def is_allowed_feed_url(url: str, domain: str) -> bool:
    """Substring check against the publisher domain.

    Not an authority parse: ``https://evil.example/?x=substack.com`` passes.
    """
    return bool(url) and domain in url


def fetch_with_retry(
    url: str,
    *,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    timeout: float = 15.0,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """GET *url*, retrying network errors and non-2xx answers.

    The error from the final attempt is re-raised unchanged.
    """
    http = session or requests

    for attempt in range(1, max_attempts + 1):
        try:
            resp = http.get(url, headers=UPSTREAM_HEADERS, timeout=timeout)
            if not 200 <= resp.status_code < 300:
                raise FeedFetchError(resp.status_code)
            if attempt > 1:
                logger.info(f"Fetched {url} on attempt {attempt}/{max_attempts}")
            return resp
        except (requests.RequestException, FeedFetchError) as e:
            logger.warning(f"Attempt {attempt}/{max_attempts} failed: {e}")
            if attempt == max_attempts:
                raise
            sleep(backoff_delay(attempt, base_delay))

    raise RuntimeError("fetch_with_retry called with max_attempts < 1")
