"""Feed proxy endpoint: fetch a remote RSS feed and re-serve it with CORS headers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from feedrelay.config import Settings
from feedrelay.proxy import fetch_with_retry, is_allowed_feed_url

logger = logging.getLogger("feedrelay.web.feed")

# Non-GET verbs reach handle() and get the JSON 405 body.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def handle(request: Request, url: str | None, settings: Settings) -> Response:
    """Validate, fetch with retry, and wrap the upstream body."""
    if request.method != "GET":
        return JSONResponse({"error": "Method not allowed"}, status_code=405)

    if not url:
        return JSONResponse(
            {"error": "Missing URL parameter", "usage": settings.usage_hint},
            status_code=400,
        )

    if not is_allowed_feed_url(url, settings.feed_domain):
        return JSONResponse({"error": "Invalid URL - must be a Substack URL"}, status_code=400)

    try:
        upstream = fetch_with_retry(
            url,
            max_attempts=settings.fetch_max_attempts,
            base_delay=settings.fetch_base_delay,
            timeout=settings.fetch_timeout,
            session=request.app.state.http,
            sleep=request.app.state.sleep,
        )
    except Exception as e:
        logger.error(f"Error fetching feed {url}: {e}")
        return JSONResponse({"error": "Failed to fetch feed", "message": str(e)}, status_code=500)

    origin = request.headers.get("origin")
    headers = {
        "Access-Control-Allow-Origin": settings.origin_policy.allow_origin(origin, strict=settings.strict_origins),
        "Access-Control-Allow-Methods": "GET",
        "Cache-Control": f"s-maxage={settings.cache_max_age}, stale-while-revalidate",
    }
    return Response(content=upstream.content, media_type="application/xml", headers=headers)


def feed_proxy(request: Request, url: str | None = None):
    """Proxy a feed URL. Sync route: retry backoff sleeps in the threadpool."""
    return handle(request, url, _settings(request))


def create_router(path: str = "/api/substack") -> APIRouter:
    router = APIRouter()
    router.add_api_route(path, feed_proxy, methods=_ALL_METHODS)
    return router
