# composition_service/adapters/outbound/security/password_manager.py

import logging
import re

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

BCRYPT_PATTERN = re.compile(r'^\$2[abxy]\$\d{2}\$[./A-Za-z0-9]{53}$')


class PasswordManager:
    """
    Password hashing and verification (bcrypt).
    """

    crypt_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    @classmethod
    async def hash_password(cls, password: str) -> str:
        """Hash a plain password."""
        return cls.crypt_context.hash(password)

    @classmethod
    async def verify_password(cls, plain_password: str, hashed_password: str) -> bool:
        """Verify a plain password against a stored hash."""
        try:
            return cls.crypt_context.verify(plain_password, hashed_password)
        except ValueError:
            # hash armazenado corrompido ou em formato desconhecido
            logger.warning("Stored password hash has an unknown format")
            return False

    @staticmethod
    def is_hashed(value: str) -> bool:
        return bool(value) and BCRYPT_PATTERN.match(value) is not None
