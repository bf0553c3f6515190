# composition_service/application/use_cases/auth_use_cases.py

"""
Service for user authentication.

Registration, login, token refresh, logout and profile management.
Tokens come from TokenCodec; refresh-token custody, session records and
revocation live in the session store.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.models import User
from composition_service.adapters.outbound.persistence.repositories.user_repository import user_repository
from composition_service.adapters.outbound.security.token_codec import TokenCodec
from composition_service.application.dtos.user_dto import TokenData, UserCreate, UserLogin, UserUpdate
from composition_service.application.ports.outbound.session_store_port import ISessionStore
from composition_service.domain.exceptions import (
    InvalidCredentialsException,
    InvalidTokenException,
    ResourceNotFoundException,
    SessionStoreUnavailableException,
)
from composition_service.domain.models.identity import REFRESH_TOKEN, Identity
from composition_service.shared.utils.datetime_utils import DateTimeUtil

logger = logging.getLogger(__name__)


class AsyncAuthService:
    """
    Application service for authentication-related operations.

    Responsibilities:
    - Register new users
    - Authenticate users and issue access/refresh tokens
    - Rotate tokens from a stored refresh token
    - Revoke tokens at logout
    """

    def __init__(self, db_session: AsyncSession, token_codec: TokenCodec, session_store: ISessionStore):
        self.db = db_session
        self.token_codec = token_codec
        self.session_store = session_store

    # ────────────────────────────────
    # Helpers
    # ────────────────────────────────
    @staticmethod
    def _identity(user: User) -> Identity:
        return Identity(subject_id=user.id, display_name=user.login, is_moderator=user.is_moderator)

    def _token_data(self, user: User, access_token: str, refresh_token: str) -> TokenData:
        return TokenData(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="Bearer",
            expires_at=datetime.now(timezone.utc) + self.token_codec.access_ttl,
            user_id=user.id,
            login=user.login,
            is_moderator=user.is_moderator,
        )

    async def _store_refresh_token(self, user_id: int, refresh_token: str) -> None:
        try:
            await self.session_store.save_refresh_token(user_id, refresh_token, self.token_codec.refresh_ttl)
        except SessionStoreUnavailableException as e:
            logger.error(f"Could not save refresh token for user {user_id}: {e}")

    # ────────────────────────────────
    # Registration / login
    # ────────────────────────────────
    async def register_user(self, user_input: UserCreate) -> User:
        """
        Raises:
            ResourceAlreadyExistsException: login already registered.
        """
        user = await user_repository.create_with_password(self.db, obj_in=user_input)
        logger.info(f"User registered successfully: {user.login}")
        return user

    async def login_user(self, user_input: UserLogin, ip_address: Optional[str] = None) -> TokenData:
        """
        Authenticate and issue a token pair.

        Session-store failures are logged; the login still succeeds.

        Raises:
            InvalidCredentialsException: wrong login or password.
        """
        user = await user_repository.authenticate(
            self.db, login=user_input.login, password=user_input.password
        )
        if not user:
            logger.warning(f"Authentication failed for login: {user_input.login}")
            raise InvalidCredentialsException(message="Invalid login or password")

        access_token, refresh_token = self.token_codec.issue_pair(self._identity(user))

        await self._store_refresh_token(user.id, refresh_token)
        session_data = {
            "user_id": str(user.id),
            "login": user.login,
            "is_moderator": user.is_moderator,
            "login_time": DateTimeUtil.to_rfc3339(DateTimeUtil.utcnow()),
            "ip_address": ip_address or "",
        }
        try:
            await self.session_store.save_user_session(user.id, session_data, self.token_codec.access_ttl)
        except SessionStoreUnavailableException as e:
            logger.error(f"Could not save session for user {user.id}: {e}")

        logger.info(f"User logged in successfully: {user.login}")
        return self._token_data(user, access_token, refresh_token)

    # ────────────────────────────────
    # Refresh / logout
    # ────────────────────────────────
    async def refresh_token(self, refresh_token: str) -> TokenData:
        """
        Validate a refresh token and issue a new pair.

        The token must be the one currently stored for the user; the stored
        value is replaced, so the old refresh token stops working.

        Raises:
            InvalidTokenException: invalid, expired or superseded token.
            InvalidCredentialsException: user no longer exists.
        """
        claims = self.token_codec.verify(refresh_token, expected_type=REFRESH_TOKEN)

        if self.session_store.enabled:
            try:
                stored = await self.session_store.get_refresh_token(claims.subject_id)
            except SessionStoreUnavailableException as e:
                logger.error(f"Cannot check stored refresh token, skipping: {e}")
            else:
                if stored != refresh_token:
                    logger.warning(f"Refresh token mismatch for user {claims.subject_id}")
                    raise InvalidTokenException(message="Invalid refresh token")

        user = await user_repository.get(self.db, claims.subject_id)
        if not user:
            logger.warning(f"User not found during refresh: {claims.subject_id}")
            raise InvalidCredentialsException(message="User not found")

        access_token, new_refresh_token = self.token_codec.issue_pair(self._identity(user))
        await self._store_refresh_token(user.id, new_refresh_token)

        logger.info(f"Token refreshed successfully for user: {user.login}")
        return self._token_data(user, access_token, new_refresh_token)

    async def logout(self, identity: Identity, access_token: str) -> None:
        """
        Revoke the access token for the rest of its lifetime and drop the
        session record and refresh token.

        Raises:
            SessionStoreUnavailableException: the token could not be revoked.
        """
        claims = self.token_codec.verify(access_token)
        ttl = self.token_codec.remaining_lifetime(claims)

        await self.session_store.add_to_blacklist(access_token, ttl)

        try:
            await self.session_store.delete_user_session(identity.subject_id)
            await self.session_store.delete_refresh_token(identity.subject_id)
        except SessionStoreUnavailableException as e:
            logger.error(f"Could not clear session of user {identity.subject_id}: {e}")

        logger.info(f"User logged out: {identity.display_name}")

    # ────────────────────────────────
    # Profile
    # ────────────────────────────────
    async def get_profile(self, identity: Identity) -> User:
        user = await user_repository.get(self.db, identity.subject_id)
        if not user:
            raise ResourceNotFoundException(message="User not found", resource_id=identity.subject_id)
        return user

    async def update_profile(self, identity: Identity, user_update: UserUpdate) -> User:
        """
        Raises:
            ResourceNotFoundException: user deleted meanwhile.
            ResourceAlreadyExistsException: new login already taken.
        """
        user = await self.get_profile(identity)
        user = await user_repository.update_profile(self.db, db_obj=user, obj_in=user_update)
        logger.info(f"Profile updated for user {user.id}")
        return user

    async def get_session(self, identity: Identity) -> Dict[str, str]:
        try:
            return await self.session_store.get_user_session(identity.subject_id)
        except SessionStoreUnavailableException as e:
            logger.error(f"Could not read session of user {identity.subject_id}: {e}")
            return {}
