# composition_service/adapters/outbound/cache/session_store.py

import logging
from datetime import timedelta
from typing import Dict, Optional

from composition_service.adapters.outbound.cache.redis_client import RedisClient
from composition_service.application.ports.outbound.session_store_port import ISessionStore

logger = logging.getLogger(__name__)

BLACKLIST_PREFIX = "jwt:blacklist:"
SESSION_PREFIX = "user:session:"
REFRESH_PREFIX = "refresh:token:"
BLACKLIST_VALUE = "blacklisted"


class RedisSessionStore(ISessionStore):
    """
    Session store backed by Redis.

    Keys:
    - jwt:blacklist:<access token>  -> "blacklisted", TTL = remaining token lifetime
    - refresh:token:<user_id>       -> current refresh token, TTL = refresh lifetime
    - user:session:<user_id>        -> hash with login metadata, TTL = access lifetime
    """

    def __init__(self, client: RedisClient):
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client.enabled

    async def connect(self) -> bool:
        return await self.client.connect()

    async def close(self) -> None:
        await self.client.close()

    # ──── REVOCATION ────

    async def add_to_blacklist(self, token: str, ttl: timedelta) -> None:
        """
        Revoke `token` until it would have expired anyway.

        A token that has already expired needs no entry.
        """
        if ttl <= timedelta(0):
            logger.debug("Token already expired, not blacklisting")
            return
        await self.client.set(f"{BLACKLIST_PREFIX}{token}", BLACKLIST_VALUE, ttl)
        if self.enabled:
            logger.info(f"Token blacklisted for {int(ttl.total_seconds())}s")

    async def is_blacklisted(self, token: str) -> bool:
        return await self.client.exists(f"{BLACKLIST_PREFIX}{token}")

    # ──── REFRESH TOKENS ────

    async def save_refresh_token(self, user_id: int, token: str, ttl: timedelta) -> None:
        await self.client.set(f"{REFRESH_PREFIX}{user_id}", token, ttl)

    async def get_refresh_token(self, user_id: int) -> Optional[str]:
        return await self.client.get(f"{REFRESH_PREFIX}{user_id}")

    async def delete_refresh_token(self, user_id: int) -> None:
        await self.client.delete(f"{REFRESH_PREFIX}{user_id}")

    # ──── SESSIONS ────

    async def save_user_session(self, user_id: int, data: Dict[str, str], ttl: timedelta) -> None:
        key = f"{SESSION_PREFIX}{user_id}"
        mapping = {field: _as_text(value) for field, value in data.items()}
        await self.client.hset_mapping(key, mapping, ttl)

    async def get_user_session(self, user_id: int) -> Dict[str, str]:
        return await self.client.hgetall(f"{SESSION_PREFIX}{user_id}")

    async def delete_user_session(self, user_id: int) -> None:
        await self.client.delete(f"{SESSION_PREFIX}{user_id}")


def _as_text(value) -> str:
    # Redis só aceita str/bytes/números nos campos de hash
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)
