"""Health checks for configuration and the upstream feed."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from feedrelay.config import Settings

logger = logging.getLogger("feedrelay.healthcheck")


@dataclass
class HealthResult:
    name: str
    ok: bool
    message: str


def check_config(settings: Settings) -> HealthResult:
    """Validate all configuration values."""
    errors = settings.validate()
    if errors:
        return HealthResult("config", False, "; ".join(errors))
    mode = "strict" if settings.strict_origins else "permissive"
    return HealthResult("config", True, f"All config values valid ({settings.environment}, {mode} CORS)")


def check_feed(settings: Settings, sleep: Callable[[float], None] = time.sleep) -> HealthResult:
    """Verify the configured feed can be fetched and parsed."""
    try:
        from feedrelay.feed import parse_feed
        from feedrelay.proxy import fetch_with_retry

        resp = fetch_with_retry(
            settings.feed_url,
            max_attempts=settings.fetch_max_attempts,
            base_delay=settings.fetch_base_delay,
            timeout=settings.fetch_timeout,
            sleep=sleep,
        )
        articles = parse_feed(resp.content, max_articles=settings.max_articles)
        return HealthResult("feed", True, f"{len(articles)} articles at {settings.feed_url}")
    except Exception as e:
        return HealthResult("feed", False, f"Feed error: {e}")


def run_all_checks(settings: Settings) -> list[HealthResult]:
    """Run every check, skipping the network when config is invalid."""
    results = [check_config(settings)]
    if results[0].ok:
        results.append(check_feed(settings))
    for r in results:
        logger.info(f"Health check {r.name}: {'ok' if r.ok else 'FAIL'} - {r.message}")
    return results
