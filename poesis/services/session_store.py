"""Redis-backed session store — opaque session id to {user_id, is_authenticated}."""

import json
import logging
import secrets
from dataclasses import dataclass

from fastapi import Depends
from redis.asyncio import Redis as AsyncRedis

from poesis.config import get_settings
from poesis.constants import SESSION_KEY_PREFIX
from poesis.db.redis import get_redis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionData:
    user_id: int
    is_authenticated: bool = True


class SessionStore:
    """Sessions live in Redis under ``session:<id>`` with a fixed TTL set on creation."""

    def __init__(self, redis: AsyncRedis, ttl_seconds: int):
        self._redis = redis
        self._ttl = ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    async def create(self, user_id: int) -> str:
        session_id = secrets.token_urlsafe(32)
        payload = json.dumps({"user_id": user_id, "is_authenticated": True})
        await self._redis.setex(self._key(session_id), self._ttl, payload)
        return session_id

    async def get(self, session_id: str) -> SessionData | None:
        """Return the stored session, or None if missing, expired or unreadable."""
        raw = await self._redis.get(self._key(session_id))
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return SessionData(
                user_id=int(data["user_id"]),
                is_authenticated=bool(data.get("is_authenticated", False)),
            )
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding malformed session payload")
            return None

    async def destroy(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))


def get_session_store(redis: AsyncRedis = Depends(get_redis)) -> SessionStore:
    """FastAPI dependency wiring the shared Redis client into a SessionStore."""
    return SessionStore(redis, get_settings().session_ttl_seconds)
