"""Middleware tests: request ID, CORS, error envelope, rate limiting."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from playhub.config import get_settings
from playhub.errors import NotFound
from playhub.main import create_app
from playhub.middleware.rate_limit import RateLimitMiddleware


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_rate_limit_skipped_without_redis(client: AsyncClient) -> None:
    response = await client.get("/version")
    assert response.status_code == 200
    assert "x-ratelimit-limit" not in response.headers


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    response = await client.options(
        "/health",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.mark.asyncio
async def test_cors_origin_regex(database: None, monkeypatch: pytest.MonkeyPatch) -> None:
    """LAN dev-server origins are allowed through the configured pattern."""
    monkeypatch.setenv("PLAYHUB_CORS_ORIGIN_REGEX", r"^http://192\.168\.\d+\.\d+:(8081|19006)$")
    get_settings.cache_clear()
    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        allowed = await ac.options(
            "/health",
            headers={"Origin": "http://192.168.1.20:8081", "Access-Control-Request-Method": "GET"},
        )
        refused = await ac.options(
            "/health",
            headers={"Origin": "http://evil.example", "Access-Control-Request-Method": "GET"},
        )

    assert allowed.headers["access-control-allow-origin"] == "http://192.168.1.20:8081"
    assert "access-control-allow-origin" not in refused.headers


@pytest.mark.asyncio
async def test_404_uses_message_envelope(client: AsyncClient) -> None:
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


@pytest.mark.asyncio
async def test_app_error_and_unhandled_exception(database: None) -> None:
    """Domain errors keep their status; anything else is a generic 500."""
    app = create_app()

    @app.get("/boom")
    async def boom() -> None:
        msg = "secret internals"
        raise RuntimeError(msg)

    @app.get("/missing")
    async def missing() -> None:
        msg = "Nothing here"
        raise NotFound(msg)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        boom_response = await ac.get("/boom")
        missing_response = await ac.get("/missing")

    assert boom_response.status_code == 500
    assert boom_response.json() == {"message": "Internal server error"}
    assert missing_response.status_code == 404
    assert missing_response.json() == {"message": "Nothing here"}


class FakePipeline:
    def __init__(self, store: dict[str, int]) -> None:
        self.store = store
        self.key = ""

    def incr(self, key: str) -> None:
        self.key = key

    def expire(self, key: str, seconds: int) -> None:
        pass

    async def execute(self) -> list[int]:
        self.store[self.key] = self.store.get(self.key, 0) + 1
        return [self.store[self.key], True]


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, int] = {}

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self.store)


@pytest.mark.asyncio
async def test_rate_limit_blocks_excess(database: None, monkeypatch: pytest.MonkeyPatch) -> None:
    """With Redis available the (limit+1)th request in a window is a 429."""
    fake = FakeRedis()
    monkeypatch.setattr("playhub.middleware.rate_limit.get_redis_or_none", lambda: fake)
    monkeypatch.setenv("PLAYHUB_RATE_LIMIT_REQUESTS", "3")
    get_settings.cache_clear()
    app = create_app()
    assert any(m.cls is RateLimitMiddleware for m in app.user_middleware)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        statuses = [(await ac.get("/version")).status_code for _ in range(4)]
        exempt = await ac.get("/health")

    assert statuses == [200, 200, 200, 429]
    assert exempt.status_code == 200
