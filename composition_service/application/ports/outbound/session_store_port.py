# composition_service/application/ports/outbound/session_store_port.py

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Dict, Optional


class ISessionStore(ABC):
    """
    Server-side session state: token revocation, refresh-token custody
    and session metadata. Every entry expires on its own TTL.
    """

    @property
    @abstractmethod
    def enabled(self) -> bool:
        pass

    @abstractmethod
    async def connect(self) -> bool:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def add_to_blacklist(self, token: str, ttl: timedelta) -> None:
        pass

    @abstractmethod
    async def is_blacklisted(self, token: str) -> bool:
        pass

    @abstractmethod
    async def save_refresh_token(self, user_id: int, token: str, ttl: timedelta) -> None:
        pass

    @abstractmethod
    async def get_refresh_token(self, user_id: int) -> Optional[str]:
        pass

    @abstractmethod
    async def delete_refresh_token(self, user_id: int) -> None:
        pass

    @abstractmethod
    async def save_user_session(self, user_id: int, data: Dict[str, str], ttl: timedelta) -> None:
        pass

    @abstractmethod
    async def get_user_session(self, user_id: int) -> Dict[str, str]:
        pass

    @abstractmethod
    async def delete_user_session(self, user_id: int) -> None:
        pass
