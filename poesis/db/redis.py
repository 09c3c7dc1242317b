"""Shared async Redis client backing the session store."""

from redis.asyncio import Redis as AsyncRedis

from poesis.config import get_settings

_client: AsyncRedis | None = None


def get_redis() -> AsyncRedis:
    """FastAPI dependency: return the shared client, creating it lazily if needed."""
    global _client
    if _client is None:
        _client = AsyncRedis.from_url(get_settings().redis_url, decode_responses=True)
    return _client


async def init_redis() -> None:
    """Open the shared client. Call during app startup."""
    global _client
    _client = AsyncRedis.from_url(get_settings().redis_url, decode_responses=True)


async def close_redis() -> None:
    """Close the shared client. Call during app shutdown."""
    global _client
    if _client:
        await _client.aclose()
        _client = None
