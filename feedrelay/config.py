"""Configuration loaded from environment variables / .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from feedrelay.cors import DEFAULT_ALLOWED_ORIGINS, OriginPolicy
from feedrelay.proxy import backoff_delay

PRODUCTION = "production"


@dataclass
class Settings:
    # Deployment mode: production enables the strict origin policy
    environment: str = "development"

    # Feed
    feed_url: str = "https://tidalendurance.substack.com/feed"
    publication_url: str = "https://tidalendurance.substack.com/"
    feed_domain: str = "substack.com"

    # Proxy location, as seen by the renderer
    proxy_base_url: str = "http://127.0.0.1:8000"
    proxy_path: str = "/api/substack"

    # CORS
    origin_policy: OriginPolicy = field(default_factory=OriginPolicy)

    # Upstream fetch
    fetch_max_attempts: int = 3
    fetch_base_delay: float = 0.5  # seconds; doubles on every retry
    fetch_timeout: float = 15.0

    # Rendering
    # Renderer -> proxy timeout; None waits out the proxy's whole retry budget
    render_timeout: float | None = None
    max_articles: int = 10
    excerpt_length: int = 400

    # Downstream caching (s-maxage)
    cache_max_age: int = 300

    # Web server
    web_host: str = "127.0.0.1"
    web_port: int = 8000

    # Logging
    log_level: str = "INFO"

    @property
    def strict_origins(self) -> bool:
        return self.environment == PRODUCTION

    @property
    def renderer_timeout(self) -> float:
        if self.render_timeout is not None:
            return self.render_timeout
        waits = sum(backoff_delay(n, self.fetch_base_delay) for n in range(1, self.fetch_max_attempts))
        return self.fetch_max_attempts * self.fetch_timeout + waits

    @property
    def usage_hint(self) -> str:
        return f"{self.proxy_path}?url={self.feed_url}"

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of error strings (empty = valid)."""
        errors = []

        if not self.feed_url:
            errors.append("FEED_URL is not set")
        elif self.feed_domain not in self.feed_url:
            errors.append(f"FEED_URL must point at {self.feed_domain}, got {self.feed_url}")

        if not self.proxy_path.startswith("/"):
            errors.append(f"PROXY_PATH must start with '/', got {self.proxy_path}")

        if self.fetch_max_attempts < 1:
            errors.append(f"FETCH_MAX_ATTEMPTS must be >= 1, got {self.fetch_max_attempts}")

        if self.fetch_base_delay < 0:
            errors.append(f"FETCH_BASE_DELAY must be >= 0, got {self.fetch_base_delay}")

        if self.render_timeout is not None and self.render_timeout <= 0:
            errors.append(f"RENDER_TIMEOUT must be > 0, got {self.render_timeout}")

        if self.max_articles < 1:
            errors.append(f"MAX_ARTICLES must be >= 1, got {self.max_articles}")

        if self.excerpt_length < 1:
            errors.append(f"EXCERPT_LENGTH must be >= 1, got {self.excerpt_length}")

        if self.strict_origins and not self.origin_policy.canonical_origin:
            errors.append("CANONICAL_ORIGIN is required in production")

        return errors


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(v.strip() for v in value.split(",") if v.strip())


def load_settings() -> Settings:
    load_dotenv()

    allowed = os.environ.get("ALLOWED_ORIGINS")
    render_timeout = os.environ.get("RENDER_TIMEOUT")
    origin_policy = OriginPolicy(
        allowed_origins=_split_csv(allowed) if allowed else DEFAULT_ALLOWED_ORIGINS,
        canonical_origin=os.environ.get("CANONICAL_ORIGIN", "https://tidalendurance.com"),
    )

    return Settings(
        environment=os.environ.get("ENVIRONMENT", "development").strip().lower(),
        feed_url=os.environ.get("FEED_URL", "https://tidalendurance.substack.com/feed"),
        publication_url=os.environ.get("PUBLICATION_URL", "https://tidalendurance.substack.com/"),
        feed_domain=os.environ.get("FEED_DOMAIN", "substack.com"),
        proxy_base_url=os.environ.get("PROXY_BASE_URL", "http://127.0.0.1:8000"),
        proxy_path=os.environ.get("PROXY_PATH", "/api/substack"),
        origin_policy=origin_policy,
        fetch_max_attempts=int(os.environ.get("FETCH_MAX_ATTEMPTS", "3")),
        fetch_base_delay=float(os.environ.get("FETCH_BASE_DELAY", "0.5")),
        fetch_timeout=float(os.environ.get("FETCH_TIMEOUT", "15")),
        render_timeout=float(render_timeout) if render_timeout else None,
        max_articles=int(os.environ.get("MAX_ARTICLES", "10")),
        excerpt_length=int(os.environ.get("EXCERPT_LENGTH", "400")),
        cache_max_age=int(os.environ.get("CACHE_MAX_AGE", "300")),
        web_host=os.environ.get("WEB_HOST", "127.0.0.1"),
        web_port=int(os.environ.get("WEB_PORT", "8000")),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
