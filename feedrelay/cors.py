"""Origin policy for the feed proxy's CORS headers.

The proxy is deployed to local dev, preview builds and production. Outside
production any loopback or preview origin is echoed back (and everything else
gets ``*``); in production only allow-listed origins are echoed and all other
callers get the canonical site origin.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "https://tidalendurance.com",
    "https://www.tidalendurance.com",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)

LOOPBACK_MARKERS: tuple[str, ...] = ("localhost", "127.0.0.1")
PREVIEW_MARKERS: tuple[str, ...] = (".vercel.app",)

WILDCARD = "*"


@dataclass(frozen=True)
class OriginPolicy:
    """Allow-list and fallbacks used to pick ``Access-Control-Allow-Origin``."""

    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    canonical_origin: str = "https://tidalendurance.com"
    dev_markers: tuple[str, ...] = LOOPBACK_MARKERS + PREVIEW_MARKERS

    def allow_origin(self, origin: str | None, *, strict: bool) -> str:
        """Return the ``Access-Control-Allow-Origin`` value for *origin*."""
        if strict:
            if origin and origin in self.allowed_origins:
                return origin
            return self.canonical_origin

        if origin and any(marker in origin for marker in self.dev_markers):
            return origin
        return WILDCARD
