"""FastAPI web application factory."""

from __future__ import annotations

import os
import time

from fastapi import FastAPI

from feedrelay.config import Settings, load_settings
from feedrelay.web.routes.feed import create_router


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(title="feedrelay", description="CORS proxy for publication RSS feeds")

    settings = settings or load_settings()
    app.state.settings = settings
    # Swappable in tests so retries don't really sleep.
    app.state.sleep = time.sleep
    app.state.http = None

    app.include_router(create_router(settings.proxy_path))

    @app.get("/health")
    async def health():
        """Liveness check; reports the deployment mode."""
        result: dict = {"status": "healthy", "environment": settings.environment}
        deploy_sha = os.environ.get("DEPLOY_SHA", "")
        if deploy_sha:
            result["sha"] = deploy_sha
        return result

    return app
