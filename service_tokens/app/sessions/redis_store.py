"""
Redis-backed session store.
"""

from datetime import timedelta
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from ..tokens.errors import StoreUnavailableError
from .store import SessionStore


class RedisSessionStore(SessionStore):
    """Session records as plain Redis string keys with a PX expiry.

    Timeouts surface as ``StoreUnavailableError``; no call is retried here.
    """

    def __init__(self, redis_url: str, socket_timeout: float = 5.0, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self.logger = get_logger("tokens.sessions.redis")
        self.redis: Optional[redis.Redis] = client

    async def start(self):
        """Connect and verify the server answers."""
        if self.redis is None:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=self.socket_timeout,
                socket_timeout=self.socket_timeout,
                retry_on_timeout=False,
                health_check_interval=30
            )

        try:
            await self.redis.ping()
        except RedisError as e:
            self.logger.error("Failed to start Redis session store", error=str(e))
            raise StoreUnavailableError(f"Cannot reach Redis: {e}") from e

        self.logger.info("Redis session store started")

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis session store stopped")

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        # PX truncates to whole milliseconds so the record never outlives the token
        if int(ttl.total_seconds() * 1000) <= 0:
            raise ValueError(f"ttl must be at least 1ms, got {ttl!r}")
        try:
            await self._client().set(key, value, px=ttl)
        except RedisError as e:
            self.logger.error("Session write failed", key=key, error=str(e))
            raise StoreUnavailableError(f"Session write failed: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client().get(key)
        except RedisError as e:
            self.logger.error("Session read failed", key=key, error=str(e))
            raise StoreUnavailableError(f"Session read failed: {e}") from e

    async def delete(self, key: str) -> Optional[str]:
        try:
            return await self._client().getdel(key)
        except RedisError as e:
            self.logger.error("Session delete failed", key=key, error=str(e))
            raise StoreUnavailableError(f"Session delete failed: {e}") from e

    async def ping(self) -> bool:
        try:
            return bool(await self._client().ping())
        except (RedisError, StoreUnavailableError):
            return False

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise StoreUnavailableError("Redis session store not started")
        return self.redis
