# composition_service/adapters/outbound/security/token_codec.py

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from composition_service.adapters.configuration.config import Settings
from composition_service.domain.exceptions import InvalidTokenException
from composition_service.domain.models.identity import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    Identity,
    TokenClaims,
)

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ("sub", "user_id", "login", "is_moderator", "iat", "exp", "type")


class TokenCodec:
    """
    Issue and verify signed identity tokens.

    Responsibilities:
    - Build the claim set (sub, user_id, login, is_moderator, iat, exp, iss, type, jti)
    - Sign with the shared HMAC secret
    - Verify signature, issuer, expiry and token type

    Revocation is not checked here; that belongs to the session store.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", issuer: str = "composition-service",
                 access_ttl: timedelta = timedelta(hours=24),
                 refresh_ttl: timedelta = timedelta(hours=168)):
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        if settings.uses_default_jwt_secret:
            logger.warning("JWT_SECRET is the development default. Set a real secret in production.")
        return cls(
            secret=settings.jwt_secret_value,
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
            access_ttl=timedelta(hours=settings.JWT_ACCESS_EXPIRE_HOURS),
            refresh_ttl=timedelta(hours=settings.JWT_REFRESH_EXPIRE_HOURS),
        )

    # ──── ISSUE ────

    def issue(self, identity: Identity, ttl: Optional[timedelta] = None, token_type: str = ACCESS_TOKEN) -> str:
        """
        Sign a token for `identity` valid for `ttl`.

        Args:
            identity: Principal the token speaks for
            ttl: Lifetime; defaults to the configured lifetime of `token_type`
            token_type: "access" or "refresh"

        Returns:
            Encoded JWT
        """
        if ttl is None:
            ttl = self.refresh_ttl if token_type == REFRESH_TOKEN else self.access_ttl

        now = datetime.now(timezone.utc)
        expire = now + ttl
        payload = {
            "sub": identity.display_name,
            "user_id": identity.subject_id,
            "login": identity.display_name,
            "is_moderator": identity.is_moderator,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
            "iss": self.issuer,
            "type": token_type,
            "jti": str(uuid.uuid4()),
        }
        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        logger.debug(f"{token_type.capitalize()} token issued for user_id={identity.subject_id}")
        return token

    def issue_pair(self, identity: Identity) -> tuple:
        """Access and refresh tokens with their configured lifetimes."""
        return (
            self.issue(identity, self.access_ttl, ACCESS_TOKEN),
            self.issue(identity, self.refresh_ttl, REFRESH_TOKEN),
        )

    # ──── VERIFY ────

    def verify(self, token: str, expected_type: Optional[str] = None) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            InvalidTokenException: bad signature, malformed token, missing claims,
                expired, wrong issuer or (when given) wrong type.
        """
        if not token:
            raise InvalidTokenException(message="Token is empty")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_aud": False},
            )
        except JWTError as e:
            logger.warning(f"Token rejected: {e}")
            raise InvalidTokenException(message="Invalid token")

        missing = [claim for claim in _REQUIRED_CLAIMS if claim not in payload]
        if missing:
            logger.warning(f"Token rejected: missing claims {missing}")
            raise InvalidTokenException(message="Invalid token")

        if expected_type is not None and payload.get("type") != expected_type:
            logger.warning(f"Token rejected: expected type {expected_type}, got {payload.get('type')}")
            raise InvalidTokenException(message="Invalid token type")

        try:
            return TokenClaims(
                subject_id=int(payload["user_id"]),
                display_name=str(payload["login"]),
                is_moderator=bool(payload["is_moderator"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_type=payload["type"],
                token_id=payload.get("jti", ""),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"Token rejected: malformed claims ({e})")
            raise InvalidTokenException(message="Invalid token")

    @staticmethod
    def remaining_lifetime(claims: TokenClaims, now: Optional[datetime] = None) -> timedelta:
        """Time left before `claims` expire; never negative."""
        now = now or datetime.now(timezone.utc)
        remaining = claims.expires_at - now
        return remaining if remaining > timedelta(0) else timedelta(0)
