"""
Redis connection for the per-IP rate limiter.

Redis holds nothing the panel cannot lose: counters only. Timeouts are short
so an unreachable server fails fast and the limiter lets traffic through.
"""

import redis.asyncio as redis

KEY_NAMESPACE = "ucp"
SOCKET_TIMEOUT_SECONDS = 0.5

_client: redis.Redis | None = None


def namespaced(*parts: object) -> str:
    """``ucp:<part>:<part>...``, keeping panel keys apart from the game server's."""
    return ":".join([KEY_NAMESPACE, *map(str, parts)])


async def init_redis(url: str) -> None:
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        decode_responses=True,
        max_connections=20,
        socket_timeout=SOCKET_TIMEOUT_SECONDS,
        socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
    _client = None


def get_redis() -> redis.Redis:
    if _client is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _client
