# composition_service/adapters/outbound/cache/redis_client.py

"""
Async Redis client wrapper.

Keeps a single connection pool for the process and turns every operation
into a logged no-op when the server could not be reached at startup (or
when REDIS_ENABLED is false). Errors from an enabled server are raised as
SessionStoreUnavailableException.
"""

import logging
import math
from datetime import timedelta
from typing import Dict, Mapping, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from composition_service.adapters.configuration.config import Settings
from composition_service.domain.exceptions import SessionStoreUnavailableException

logger = logging.getLogger(__name__)


def _seconds(ttl: Optional[timedelta]) -> Optional[int]:
    if ttl is None:
        return None
    return max(1, math.ceil(ttl.total_seconds()))


class RedisClient:
    """Thin async key-value client with per-key TTL."""

    def __init__(
            self,
            host: str = "localhost",
            port: int = 6379,
            password: Optional[str] = None,
            db: int = 0,
            enabled: bool = True,
            connect_timeout: float = 5.0,
            client: Optional[aioredis.Redis] = None,
    ):
        self.host = host
        self.port = port
        self.password = password
        self.db = db
        self.connect_timeout = connect_timeout
        self._configured = enabled
        self._client = client
        self._enabled = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisClient":
        password = settings.REDIS_PASSWORD.get_secret_value() if settings.REDIS_PASSWORD else None
        return cls(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=password,
            db=settings.REDIS_DB,
            enabled=settings.REDIS_ENABLED,
            connect_timeout=settings.REDIS_CONNECT_TIMEOUT_SECONDS,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ──── LIFECYCLE ────

    async def connect(self) -> bool:
        """
        Ping the server once. On failure the client stays disabled.

        Returns:
            True when the server answered and the client is enabled
        """
        if not self._configured:
            logger.warning("Redis disabled by configuration. Sessions and token revocation are not tracked.")
            self._enabled = False
            return False

        if self._client is None:
            self._client = aioredis.Redis(
                host=self.host,
                port=self.port,
                password=self.password,
                db=self.db,
                decode_responses=True,
                socket_connect_timeout=self.connect_timeout,
            )

        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            logger.warning(
                f"Redis unavailable at {self.host}:{self.port} ({e}). "
                "Continuing without session store."
            )
            self._enabled = False
            return False

        self._enabled = True
        logger.info(f"Connected to Redis at {self.host}:{self.port} db={self.db}")
        return True

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except (RedisError, OSError) as e:
                logger.warning(f"Error closing Redis connection: {e}")
        self._enabled = False

    async def ping(self) -> bool:
        if not self._enabled:
            return False
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    # ──── KEY/VALUE ────

    def _unavailable(self, operation: str, key: str, error: Exception) -> SessionStoreUnavailableException:
        logger.error(f"Redis {operation} failed for key {key}: {error}")
        return SessionStoreUnavailableException(
            message="Session store unavailable.", original_error=error
        )

    async def set(self, key: str, value: str, ttl: Optional[timedelta] = None) -> None:
        if not self._enabled:
            logger.debug(f"Redis disabled, skipping SET {key}")
            return
        try:
            await self._client.set(key, value, ex=_seconds(ttl))
        except (RedisError, OSError) as e:
            raise self._unavailable("SET", key, e)

    async def get(self, key: str) -> Optional[str]:
        if not self._enabled:
            logger.debug(f"Redis disabled, skipping GET {key}")
            return None
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as e:
            raise self._unavailable("GET", key, e)

    async def delete(self, key: str) -> None:
        if not self._enabled:
            logger.debug(f"Redis disabled, skipping DEL {key}")
            return
        try:
            await self._client.delete(key)
        except (RedisError, OSError) as e:
            raise self._unavailable("DEL", key, e)

    async def exists(self, key: str) -> bool:
        if not self._enabled:
            return False
        try:
            return (await self._client.exists(key)) > 0
        except (RedisError, OSError) as e:
            raise self._unavailable("EXISTS", key, e)

    async def expire(self, key: str, ttl: timedelta) -> None:
        if not self._enabled:
            return
        try:
            await self._client.expire(key, _seconds(ttl))
        except (RedisError, OSError) as e:
            raise self._unavailable("EXPIRE", key, e)

    # ──── HASHES ────

    async def hset_mapping(self, key: str, mapping: Mapping[str, str], ttl: Optional[timedelta] = None) -> None:
        """HSET; with `ttl`, HSET and EXPIRE run in one MULTI/EXEC."""
        if not self._enabled:
            logger.debug(f"Redis disabled, skipping HSET {key}")
            return
        try:
            if ttl is None:
                await self._client.hset(key, mapping=dict(mapping))
                return
            async with self._client.pipeline(transaction=True) as pipe:
                await pipe.hset(key, mapping=dict(mapping)).expire(key, _seconds(ttl)).execute()
        except (RedisError, OSError) as e:
            raise self._unavailable("HSET", key, e)

    async def hgetall(self, key: str) -> Dict[str, str]:
        if not self._enabled:
            return {}
        try:
            return await self._client.hgetall(key) or {}
        except (RedisError, OSError) as e:
            raise self._unavailable("HGETALL", key, e)
