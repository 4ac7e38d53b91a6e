"""Middleware tests: request ID, rate limiting, CORS, error rendering."""

from unittest.mock import AsyncMock, MagicMock

from httpx import AsyncClient

from ucp import messages
from ucp.middleware import rate_limit
from ucp.middleware.logging import REDACTED, redact_secrets
from ucp.redis_client import namespaced

API = "/internal-ucp-api/v1"


async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert len(response.headers["x-request-id"]) == 36


async def test_request_id_preserved(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


async def test_cors_preflight(client: AsyncClient) -> None:
    """CORS preflight allows the panel origin."""
    response = await client.options(
        f"{API}/login",
        headers={"Origin": "https://app.ro", "Access-Control-Request-Method": "POST"},
    )
    assert response.headers["access-control-allow-origin"] == "https://app.ro"


async def test_404_returns_json(client: AsyncClient) -> None:
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


async def test_validation_error_is_localized(client: AsyncClient) -> None:
    response = await client.post(f"{API}/update-password", json={"email": "alice@example.com"})
    assert response.status_code == 422
    data = response.json()
    assert data["detail"] == messages.MISSING_FIELDS
    assert {e["loc"][-1] for e in data["errors"]} == {"token", "timestamp", "new_password"}


async def test_rate_limit_passes_without_redis(client: AsyncClient) -> None:
    """Requests go through when Redis is unavailable."""
    response = await client.get(f"{API}/check-auth")
    assert response.status_code == 200
    assert "x-ratelimit-limit" not in response.headers


def _fake_redis(count: int) -> MagicMock:
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[count, True])
    redis = MagicMock()
    redis.pipeline.return_value = pipe
    return redis


async def test_rate_limit_headers(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setattr(rate_limit, "get_redis", lambda: _fake_redis(1))
    response = await client.get(f"{API}/check-auth")
    assert response.headers["x-ratelimit-limit"] == "500"
    assert response.headers["x-ratelimit-remaining"] == "499"


async def test_rate_limit_blocks_excess(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setattr(rate_limit, "get_redis", lambda: _fake_redis(501))
    response = await client.get(f"{API}/check-auth")
    assert response.status_code == 429
    assert response.headers["retry-after"] == "3600"
    assert response.json() == {"detail": rate_limit.RATE_LIMITED}


async def test_health_exempt_from_rate_limit(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setattr(rate_limit, "get_redis", lambda: _fake_redis(10_000))
    response = await client.get("/health")
    assert response.status_code == 200


async def test_client_ip_prefers_proxy_header(client: AsyncClient, seed_account, repository) -> None:
    await seed_account("alice", ip=None)
    await client.post(
        f"{API}/login",
        json={"username": "alice", "password": "Parola#123"},
        headers={"X-Real-IP": "203.0.113.7"},
    )
    assert await repository.get_account_ip("alice") == "203.0.113.7"


async def test_rate_limit_counts_per_real_ip(client: AsyncClient, monkeypatch) -> None:
    redis = _fake_redis(1)
    monkeypatch.setattr(rate_limit, "get_redis", lambda: redis)

    await client.get(f"{API}/check-auth", headers={"X-Real-IP": "203.0.113.7"})

    key = redis.pipeline.return_value.incr.call_args.args[0]
    assert key.startswith("ucp:ratelimit:203.0.113.7:")


async def test_cors_exposes_rate_limit_headers(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"Origin": "https://app.ro"})
    exposed = response.headers["access-control-expose-headers"]
    assert "X-RateLimit-Remaining" in exposed
    assert "X-Request-Id" in exposed


async def test_cors_ignores_foreign_origin(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"Origin": "https://evil.example"})
    assert "access-control-allow-origin" not in response.headers


def test_namespaced_keys() -> None:
    assert namespaced("ratelimit", "10.0.0.1", 42) == "ucp:ratelimit:10.0.0.1:42"


def test_secrets_redacted_from_log_events() -> None:
    event = {"event": "password_reset", "email": "alice@example.com", "token": "abc", "new_password": "x"}
    assert redact_secrets(None, "info", event) == {
        "event": "password_reset",
        "email": "alice@example.com",
        "token": REDACTED,
        "new_password": REDACTED,
    }
