"""Tests for the feed proxy endpoint."""

from __future__ import annotations

import requests
from fastapi.testclient import TestClient

from feedrelay.config import Settings
from feedrelay.cors import OriginPolicy
from feedrelay.web.app import create_app

FEED = "https://tidalendurance.substack.com/feed"
XML = b'<?xml version="1.0"?><rss version="2.0"><channel><title>T</title></channel></rss>'


def _client(settings, session, sleeps=None):
    app = create_app(settings)
    app.state.http = session
    app.state.sleep = sleeps.append if sleeps is not None else (lambda _: None)
    return TestClient(app)


class TestValidation:
    def test_missing_url_returns_usage(self, test_settings, fake_session):
        client = _client(test_settings, fake_session)
        resp = client.get("/api/substack")
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Missing URL parameter"
        assert body["usage"] == f"/api/substack?url={FEED}"
        fake_session.get.assert_not_called()

    def test_empty_url_counts_as_missing(self, test_settings, fake_session):
        client = _client(test_settings, fake_session)
        resp = client.get("/api/substack", params={"url": ""})
        assert resp.status_code == 400
        assert "usage" in resp.json()
        fake_session.get.assert_not_called()

    def test_foreign_domain_rejected(self, test_settings, fake_session):
        client = _client(test_settings, fake_session)
        resp = client.get("/api/substack", params={"url": "https://example.com/feed"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid URL - must be a Substack URL"}
        fake_session.get.assert_not_called()

    def test_post_not_allowed(self, test_settings, fake_session):
        client = _client(test_settings, fake_session)
        resp = client.post("/api/substack", params={"url": FEED})
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed"}
        fake_session.get.assert_not_called()

    def test_delete_not_allowed(self, test_settings, fake_session):
        client = _client(test_settings, fake_session)
        resp = client.delete("/api/substack")
        assert resp.status_code == 405


class TestProxySuccess:
    def test_body_forwarded_verbatim(self, test_settings, fake_session, fake_response):
        fake_session.get.return_value = fake_response(200, XML)
        client = _client(test_settings, fake_session)

        resp = client.get("/api/substack", params={"url": FEED})

        assert resp.status_code == 200
        assert resp.content == XML
        assert resp.headers["content-type"].startswith("application/xml")
        assert fake_session.get.call_args.args[0] == FEED

    def test_cache_and_method_headers(self, test_settings, fake_session, fake_response):
        fake_session.get.return_value = fake_response(200, XML)
        client = _client(test_settings, fake_session)

        resp = client.get("/api/substack", params={"url": FEED})

        assert resp.headers["cache-control"] == "s-maxage=300, stale-while-revalidate"
        assert resp.headers["access-control-allow-methods"] == "GET"

    def test_dev_wildcard_without_origin(self, test_settings, fake_session, fake_response):
        fake_session.get.return_value = fake_response(200, XML)
        client = _client(test_settings, fake_session)

        resp = client.get("/api/substack", params={"url": FEED})

        assert resp.headers["access-control-allow-origin"] == "*"

    def test_dev_echoes_preview_origin(self, test_settings, fake_session, fake_response):
        fake_session.get.return_value = fake_response(200, XML)
        client = _client(test_settings, fake_session)

        resp = client.get(
            "/api/substack", params={"url": FEED}, headers={"Origin": "https://site-git-main.vercel.app"}
        )

        assert resp.headers["access-control-allow-origin"] == "https://site-git-main.vercel.app"

    def test_production_echoes_allowed_origin(self, fake_session, fake_response):
        settings = Settings(environment="production")
        fake_session.get.return_value = fake_response(200, XML)
        client = _client(settings, fake_session)

        resp = client.get("/api/substack", params={"url": FEED}, headers={"Origin": "https://www.tidalendurance.com"})

        assert resp.headers["access-control-allow-origin"] == "https://www.tidalendurance.com"

    def test_production_falls_back_to_canonical(self, fake_session, fake_response):
        settings = Settings(
            environment="production",
            origin_policy=OriginPolicy(allowed_origins=("https://a.example",), canonical_origin="https://a.example"),
        )
        fake_session.get.return_value = fake_response(200, XML)
        client = _client(settings, fake_session)

        resp = client.get("/api/substack", params={"url": FEED}, headers={"Origin": "http://localhost:3000"})

        assert resp.headers["access-control-allow-origin"] == "https://a.example"

    def test_custom_proxy_path(self, fake_session, fake_response):
        settings = Settings(proxy_path="/api/feed")
        fake_session.get.return_value = fake_response(200, XML)
        client = _client(settings, fake_session)

        assert client.get("/api/feed", params={"url": FEED}).status_code == 200
        assert client.get("/api/substack", params={"url": FEED}).status_code == 404


class TestProxyRetry:
    def test_recovers_after_two_failures(self, test_settings, fake_session, fake_response):
        fake_session.get.side_effect = [
            requests.ConnectionError("reset"),
            fake_response(500),
            fake_response(200, XML),
        ]
        sleeps = []
        client = _client(test_settings, fake_session, sleeps)

        resp = client.get("/api/substack", params={"url": FEED})

        assert resp.status_code == 200
        assert resp.content == XML
        assert sleeps == [0.5, 1.0]

    def test_exhausted_retries_return_500(self, test_settings, fake_session):
        fake_session.get.side_effect = requests.ConnectionError("upstream unreachable")
        sleeps = []
        client = _client(test_settings, fake_session, sleeps)

        resp = client.get("/api/substack", params={"url": FEED})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch feed", "message": "upstream unreachable"}
        assert fake_session.get.call_count == 3
        assert sleeps == [0.5, 1.0]

    def test_error_has_no_cors_headers(self, test_settings, fake_session, fake_response):
        fake_session.get.return_value = fake_response(404)
        client = _client(test_settings, fake_session)

        resp = client.get("/api/substack", params={"url": FEED})

        assert resp.status_code == 500
        assert "404" in resp.json()["message"]
        assert "access-control-allow-origin" not in resp.headers


class TestHealth:
    def test_health_reports_environment(self, test_settings, fake_session):
        client = _client(test_settings, fake_session)
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert resp.json()["environment"] == "development"
