"""
Credit API - Middleware & Health Tests
=======================================

What:  Rate limiting, request ID propagation and the /health and /hello probes.
How:   Middleware is mounted on a bare FastAPI app so no database is involved.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from credit_api.config import settings
from credit_api.middleware.rate_limit import RateLimitMiddleware
from credit_api.middleware.request_id import RequestIDMiddleware, request_id_var


def _bare_app() -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"request_id": request_id_var.get("")}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)
    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_blocks_after_limit(self, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 2)
        monkeypatch.setattr(settings, "rate_limit_window", 60)

        async with _client(_bare_app()) as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200
            blocked = await client.get("/ping")

        assert blocked.status_code == 429
        assert blocked.json()["error"] == "rate_limit_exceeded"
        assert blocked.json()["request_id"] == blocked.headers["X-Request-ID"]
        assert 1 <= int(blocked.headers["Retry-After"]) <= 61

    @pytest.mark.asyncio
    async def test_excluded_paths_are_not_counted(self, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 1)

        async with _client(_bare_app()) as client:
            for _ in range(5):
                assert (await client.get("/health")).status_code == 200
            assert (await client.get("/ping")).status_code == 200


class TestRequestID:

    @pytest.mark.asyncio
    async def test_generated_when_missing(self):
        async with _client(_bare_app()) as client:
            response = await client.get("/ping")

        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid

    @pytest.mark.asyncio
    async def test_client_value_is_reused(self):
        async with _client(_bare_app()) as client:
            response = await client.get("/ping", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"


class TestProbes:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_hello(self, test_client):
        response = await test_client.get("/hello")

        assert response.status_code == 200
        assert response.text == "Hello World!"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get("/Users/nobody", headers={"X-Request-ID": "abc12345"})

        assert response.status_code == 404
        assert response.json()["request_id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_unhandled_error_carries_request_id(self):
        from credit_api.main import create_app

        app = create_app()

        async def explode():
            raise RuntimeError("boom")

        app.add_api_route("/explode", explode)

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/explode", headers={"X-Request-ID": "trace-500"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "trace-500"
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "trace-500"
        assert "boom" not in body["message"]
