# composition_service/application/use_cases/auth_gate.py

"""
Request authentication.

Turns the raw Authorization header into an Identity:
no header / malformed header -> Unauthorized; Bearer token -> revocation
check -> signature, expiry and type check -> Identity.
"""

import logging
from typing import Optional, Tuple

from composition_service.adapters.outbound.security.token_codec import TokenCodec
from composition_service.application.ports.outbound.session_store_port import ISessionStore
from composition_service.domain.exceptions import (
    InvalidTokenException,
    PermissionDeniedException,
    SessionStoreUnavailableException,
    UnauthorizedException,
)
from composition_service.domain.models.identity import ACCESS_TOKEN, Identity, TokenClaims

logger = logging.getLogger(__name__)


class AuthGate:
    """
    Authenticates requests against the token codec and the session store.
    """

    def __init__(self, token_codec: TokenCodec, session_store: ISessionStore):
        self.token_codec = token_codec
        self.session_store = session_store

    @staticmethod
    def extract_token(authorization: Optional[str]) -> str:
        """
        Return the bearer token from an Authorization header value.

        Raises:
            UnauthorizedException: header missing, not Bearer, or empty token
        """
        if not authorization:
            raise UnauthorizedException(message="Authorization header required")

        parts = authorization.split(" ", 1)
        if len(parts) != 2 or parts[0] != "Bearer":
            raise UnauthorizedException(message="Bearer token required")

        token = parts[1].strip()
        if not token:
            raise UnauthorizedException(message="Token is empty")
        return token

    async def verify_token(self, token: str) -> TokenClaims:
        """
        Revocation first, then signature/expiry/type.

        A session store that cannot be reached does not reject the request;
        the token is then judged on its signature alone.
        """
        try:
            revoked = await self.session_store.is_blacklisted(token)
        except SessionStoreUnavailableException as e:
            logger.error(f"Cannot check token revocation, continuing: {e}")
            revoked = False

        if revoked:
            logger.warning("Revoked token used")
            raise InvalidTokenException(message="Token is invalidated")

        return self.token_codec.verify(token, expected_type=ACCESS_TOKEN)

    async def authenticate(self, authorization: Optional[str]) -> Tuple[Identity, str]:
        """
        Returns:
            (identity, raw token)

        Raises:
            UnauthorizedException / InvalidTokenException
        """
        token = self.extract_token(authorization)
        claims = await self.verify_token(token)
        return claims.to_identity(), token

    async def authenticate_optional(self, authorization: Optional[str]) -> Optional[Identity]:
        """Same pipeline, but any failure yields None (anonymous)."""
        if not authorization:
            return None
        try:
            identity, _ = await self.authenticate(authorization)
            return identity
        except UnauthorizedException as e:
            logger.debug(f"Optional auth ignored invalid credentials: {e}")
            return None

    @staticmethod
    def require_moderator(identity: Optional[Identity]) -> Identity:
        if identity is None or not identity.is_moderator:
            raise PermissionDeniedException(message="Moderator access required")
        return identity
